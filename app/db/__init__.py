"""Database module for the link shortener application."""
from app.db.base import engine, get_engine, init_db, DatabaseHealthCheck
from app.db.session import get_db, db_transaction, SessionManager

__all__ = [
    "engine",
    "get_engine",
    "init_db",
    "DatabaseHealthCheck",
    "get_db",
    "db_transaction",
    "SessionManager",
]
