from .database import Base, Database, get_db
from .settings import Settings

__all__ = ["Base", "Database", "Settings", "get_db"]
