"""
Database connection and session management.
Provides SQLAlchemy engine and session factories, and the base class for models.

No engine is created at import time: the application factory builds one and
stores the session factory on ``app.state``, and ``get_db`` hands a session to
each request.
"""
import logging
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .exceptions import AppException, ConflictException

# Set up logging
logger = logging.getLogger(__name__)

# Create base class for declarative models
Base = declarative_base()


def create_db_engine(database_url: str, **kwargs) -> Engine:
    """
    Create the SQLAlchemy engine for a database URL.

    Args:
        database_url: SQLAlchemy connection string
        **kwargs: Extra arguments forwarded to ``create_engine``

    Returns:
        Engine: Database engine
    """
    if database_url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    else:
        kwargs.setdefault("pool_pre_ping", True)
    return create_engine(database_url, **kwargs)


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create the session factory bound to ``engine``."""
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db(request: Request) -> Iterator[Session]:
    """
    Database dependency - Creates and yields a database session.

    The session is automatically closed after the request is processed,
    even if an exception occurs during request handling.

    Yields:
        SQLAlchemy Session: Database session
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def commit_or_rollback(db: Session, action: str) -> None:
    """
    Commit the session, rolling back and logging on failure.

    Args:
        db: Database session
        action: What was being saved, used in logs and error messages

    Raises:
        ConflictException: On unique or foreign key violations
        AppException: On any other database error
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Integrity error while {action}: {str(e.orig)}")
        raise ConflictException(f"Conflict while {action}")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error while {action}: {str(e)}")
        raise AppException(f"An error occurred while {action}")
