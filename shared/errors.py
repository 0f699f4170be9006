"""
Error taxonomy shared by every service.

Services raise these; ``register_exception_handlers`` turns them into JSON
responses of the form ``{"detail": "..."}`` with a stable status code.
Nothing is retried internally.
"""
import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = structlog.get_logger(__name__)


class BookstoreError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(BookstoreError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required."


class InvalidRequest(BookstoreError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request."


class NotFound(BookstoreError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found."


class Conflict(BookstoreError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists."


class InsufficientStock(BookstoreError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, book_title: str, available: int):
        self.book_title = book_title
        self.available = available
        super().__init__(f"Insufficient stock for book: {book_title}. Available: {available}")


class TransactionFailed(BookstoreError):
    default_message = "Transaction failed due to server or database error."


class Internal(BookstoreError):
    pass


async def bookstore_error_handler(request: Request, exc: BookstoreError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": InvalidRequest.default_message, "errors": errors},
    )


async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    # Never leak driver messages to the caller
    logger.error("storage_error", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=Internal.status_code,
        content={"detail": Internal.default_message},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_error", path=request.url.path, error=repr(exc))
    return JSONResponse(
        status_code=Internal.status_code,
        content={"detail": Internal.default_message},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BookstoreError, bookstore_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
