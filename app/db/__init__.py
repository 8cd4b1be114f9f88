"""
Database module - PostgreSQL and MongoDB connections.
"""
from app.db.postgres import get_db_session, init_schema, test_postgres_connection
from app.db.mongodb import get_mongo_db, test_mongo_connection

__all__ = [
    "get_db_session",
    "init_schema",
    "test_postgres_connection",
    "get_mongo_db",
    "test_mongo_connection"
]
