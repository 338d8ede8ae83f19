"""Database engine, sessions and schema bootstrap."""

from hostel_occupancy.db.session import SessionLocal, create_db_engine, engine, get_db, init_db

__all__ = ["SessionLocal", "create_db_engine", "engine", "get_db", "init_db"]
