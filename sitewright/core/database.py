"""
Database configuration and connection management.

This module provides:
- SQLAlchemy engine and session management
- Connection pooling with sane defaults (PostgreSQL) and SQLite support for tests
- Table definitions for users, templates and websites
"""
import logging
import os
from contextlib import contextmanager
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    create_engine,
    event,
    false,
    text,
    true,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import QueuePool
from sqlalchemy.sql import func

from sitewright.core.config import settings
from sitewright.core.errors import AppError, StorageError

logger = logging.getLogger("sitewright")

# SQLAlchemy metadata for table definitions
metadata = MetaData()

# Connection pooling configuration
POOL_SIZE = 10
MAX_OVERFLOW = 20
POOL_TIMEOUT = 30
POOL_RECYCLE = 3600  # Recycle connections after 1 hour

# Global engine and session factory
_engine = None
_SessionLocal = None

# JSONB on PostgreSQL, generic JSON elsewhere
ContentJSON = JSON().with_variant(JSONB(), "postgresql")


def get_database_url() -> Optional[str]:
    """
    Get the database URL from settings or environment.

    For testing, use TEST_DATABASE_URL if available.
    """
    test_url = os.getenv("TEST_DATABASE_URL")
    if test_url:
        return test_url

    return settings.DATABASE_URL


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def init_engine(database_url: Optional[str] = None):
    """
    Initialize the SQLAlchemy engine.

    Args:
        database_url: Optional override for DATABASE_URL
    """
    global _engine, _SessionLocal

    url = database_url or get_database_url()

    if not url:
        raise ValueError(
            "DATABASE_URL is not configured. "
            "Set DATABASE_URL in environment or .env file."
        )

    if _engine is not None:
        _engine.dispose()

    if url.startswith("sqlite"):
        _engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=False,
        )
        event.listen(_engine, "connect", _enable_sqlite_foreign_keys)
    else:
        # Create engine with connection pooling
        _engine = create_engine(
            url,
            poolclass=QueuePool,
            pool_size=POOL_SIZE,
            max_overflow=MAX_OVERFLOW,
            pool_timeout=POOL_TIMEOUT,
            pool_recycle=POOL_RECYCLE,
            pool_pre_ping=True,
            echo=False,  # Set to True for SQL query logging
        )

    # Create session factory
    _SessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=_engine
    )

    return _engine


def get_engine():
    """Get the current SQLAlchemy engine."""
    global _engine
    if _engine is None:
        init_engine()
    return _engine


def get_session_factory():
    """Get the session factory."""
    global _SessionLocal
    if _SessionLocal is None:
        init_engine()
    return _SessionLocal


@contextmanager
def get_db_session():
    """
    Context manager for database sessions.

    Usage:
        with get_db_session() as session:
            session.execute(...)

    Commits on success, rolls back on any exception.
    """
    SessionLocal = get_session_factory()
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@contextmanager
def storage_session(operation: str):
    """
    Session scope for gateway operations.

    Database failures are logged and surfaced as StorageError. AppErrors raised
    inside the block and IntegrityError (constraint violations the caller
    translates, e.g. into ConflictError) propagate unchanged.
    """
    try:
        with get_db_session() as session:
            yield session
    except (AppError, IntegrityError):
        raise
    except SQLAlchemyError as exc:
        logger.error("storage.error", exc_info=True, extra={"event_type": operation})
        raise StorageError() from exc


def create_all_tables():
    """
    Create all tables defined in metadata.

    This is idempotent - tables that already exist will not be recreated.
    """
    engine = get_engine()
    metadata.create_all(bind=engine)


def drop_all_tables():
    """
    Drop all tables defined in metadata.

    WARNING: This is destructive! Only use in tests or development.
    """
    engine = get_engine()
    metadata.drop_all(bind=engine)


def check_connection() -> bool:
    """
    Check if database connection is available.

    Returns:
        True if connection successful, False otherwise
    """
    try:
        engine = get_engine()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning(f"Database connection check failed: {e}")
        return False


# Users are keyed by the identity provider's subject claim
users = Table(
    'users',
    metadata,
    Column('id', String(100), primary_key=True),
    Column('email', String(255), nullable=True, unique=True),
    Column('first_name', String(255), nullable=True),
    Column('last_name', String(255), nullable=True),
    Column('profile_image_url', Text, nullable=True),
    Column('plan', String(32), nullable=False, server_default='free'),
    Column('ai_generations_used', Integer, nullable=False, server_default='0'),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    Column('updated_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    CheckConstraint("plan IN ('free', 'pro', 'done-for-you')", name='ck_users_plan'),
    CheckConstraint('ai_generations_used >= 0', name='ck_users_ai_generations_non_negative'),
)

# Platform-owned starter content
templates = Table(
    'templates',
    metadata,
    Column('id', String(36), primary_key=True),
    Column('name', String(255), nullable=False),
    Column('description', Text, nullable=True),
    Column('category', String(50), nullable=False, index=True),
    Column('preview_image', Text, nullable=True),
    Column('content', ContentJSON, nullable=False),
    Column('is_active', Boolean, nullable=False, server_default=true()),
    Column('view_count', Integer, nullable=False, server_default='0'),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    CheckConstraint('view_count >= 0', name='ck_templates_view_count_non_negative'),
    # Gallery listing: active templates by popularity
    Index('idx_templates_active_views', 'is_active', 'view_count'),
)

# User-owned site instances
websites = Table(
    'websites',
    metadata,
    Column('id', String(36), primary_key=True),
    Column('user_id', String(100), ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
    Column('name', String(255), nullable=False),
    Column('subdomain', String(63), nullable=False),
    Column('custom_domain', String(255), nullable=True),
    Column('template_id', String(36), ForeignKey('templates.id', ondelete='SET NULL'), nullable=True),
    Column('content', ContentJSON, nullable=False),
    Column('is_published', Boolean, nullable=False, server_default=false()),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    Column('updated_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    # Closes the race between the availability check and the insert
    UniqueConstraint('subdomain', name='uq_websites_subdomain'),
    # Dashboard listing: a user's websites, most recently updated first
    Index('idx_websites_user_updated', 'user_id', 'updated_at'),
)
