from .base import Base
from .connection import Database, get_db

__all__ = ["Base", "Database", "get_db"]
