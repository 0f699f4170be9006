from bookstore.app import create_app

# uvicorn main:app
app = create_app()
