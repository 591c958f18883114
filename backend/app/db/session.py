from __future__ import annotations

import logging
import time
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool, NullPool
from sqlalchemy.exc import OperationalError, DisconnectionError

from app.core.config import settings
from app.db.models import Base

# Import all models to ensure they're registered with Base
from app.db.models import (  # noqa: F401
    HistoricalDataRecord,
    PricePrediction,
    CompetitorPrice,
)

logger = logging.getLogger(__name__)

DATABASE_URL = (settings.database_url or "").strip()


def _is_production() -> bool:
    """Check if running in production environment."""
    return settings.environment.lower() in ("production", "prod")


def _normalize_database_url(url: str) -> str:
    # Force psycopg3 driver for SQLAlchemy
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    return url


def _make_engine(database_url: str) -> Engine:
    # SQLite (local dev and tests)
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    normalized = _normalize_database_url(database_url)

    # Pooled Postgres (e.g. pgbouncer) can't keep prepared statements
    connect_args = {
        "sslmode": settings.database_sslmode,
        "prepare_threshold": 0,
        "connect_timeout": settings.database_connect_timeout,
        "options": f"-c statement_timeout={settings.database_statement_timeout_ms}",
    }

    return create_engine(
        normalized,
        connect_args=connect_args,
        poolclass=NullPool,
        pool_pre_ping=True,
        execution_options={"compiled_cache": None},
    )


engine: Engine = _make_engine(DATABASE_URL)


@event.listens_for(engine, "connect")
def set_prepare_threshold(dbapi_conn, connection_record):
    """Ensure prepared statements are disabled on each connection"""
    if hasattr(dbapi_conn, "prepare_threshold"):
        dbapi_conn.prepare_threshold = 0
        logger.debug("Set prepare_threshold=0 on new connection")


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """
    Initialize database tables.

    In production, this is a no-op. Use migrations instead.
    In development (SQLite), creates tables automatically.
    """
    if _is_production():
        logger.info("Production environment detected - skipping auto table creation")
        return

    if DATABASE_URL.startswith("sqlite"):
        logger.info("Development environment - creating tables automatically")
        Base.metadata.create_all(bind=engine)
    else:
        logger.info("Non-SQLite database in non-production - skipping auto table creation")


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency with cleanup and retry on connection timeouts.
    """
    max_retries = 3
    retry_delay = 0.5

    for attempt in range(max_retries):
        db = None
        yielded = False
        try:
            db = SessionLocal()
            # Acquire the connection up front so connect timeouts can be retried
            db.connection()
            yielded = True
            yield db
            db.commit()
            return
        except (OperationalError, DisconnectionError) as e:
            if db:
                try:
                    db.rollback()
                    db.close()
                except Exception:
                    logger.debug("Session cleanup after connection error failed", exc_info=True)

            error_str = str(e).lower()
            is_timeout = "timeout" in error_str or "connection" in error_str

            # A generator dependency can only yield once
            if is_timeout and not yielded and attempt < max_retries - 1:
                wait_time = retry_delay * (2 ** attempt)  # Exponential backoff
                logger.warning(
                    f"Database connection timeout (attempt {attempt + 1}/{max_retries}). "
                    f"Retrying in {wait_time:.2f}s..."
                )
                time.sleep(wait_time)
                continue
            logger.error(f"Database connection error after {attempt + 1} attempts: {e}", exc_info=True)
            raise
        except Exception as e:
            if db:
                try:
                    db.rollback()
                except Exception:
                    logger.debug("Rollback failed", exc_info=True)
            logger.error(f"Database session error: {e}", exc_info=True)
            raise
        finally:
            if db:
                try:
                    db.close()
                except Exception as close_error:
                    logger.error(f"Error closing database session: {close_error}")
