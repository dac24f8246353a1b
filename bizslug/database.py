"""
Database schema and connection management.

Uses SQLite with SQLAlchemy for establishment storage. The UNIQUE
constraint on ``slug`` is the final word on slug ownership.
"""

import uuid
from datetime import datetime
from pathlib import Path
from sqlalchemy import create_engine, Column, String, DateTime
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class Establishment(Base):
    """Business establishment with its public slug."""

    __tablename__ = "establishments"

    id = Column(String, primary_key=True, default=_new_id)
    name = Column(String, nullable=False)
    slug = Column(String(120), unique=True, nullable=True, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)


def create_db_engine(db_path: Path):
    """SQLAlchemy engine for the SQLite file at db_path."""
    return create_engine(f"sqlite:///{db_path}")


def init_database(db_path: Path, engine=None) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
        engine: Engine to reuse; one is created and disposed if omitted
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    if engine is not None:
        Base.metadata.create_all(engine)
        return
    engine = create_db_engine(db_path)
    try:
        Base.metadata.create_all(engine)
    finally:
        engine.dispose()


def get_session(db_path: Path, engine=None):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file
        engine: Engine to bind to (default: a new engine for db_path)

    Returns:
        SQLAlchemy session
    """
    if engine is None:
        engine = create_db_engine(db_path)
    Session = sessionmaker(bind=engine)
    return Session()
