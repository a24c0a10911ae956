from .database import Database, DATABASE_FILE, init_database

__all__ = ["Database", "DATABASE_FILE", "init_database"]
