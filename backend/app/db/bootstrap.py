from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

import app.models  # noqa: F401
from app.db.base import Base
from app.db.session import engine

logger = logging.getLogger(__name__)


def ensure_runtime_schema() -> None:
    """Create any missing tables; existing tables are left as they are."""
    try:
        with engine.begin() as connection:
            existing = set(inspect(connection).get_table_names())
            Base.metadata.create_all(bind=connection)
        created = sorted(set(Base.metadata.tables) - existing)
        if created:
            logger.info("Created tables: %s", ", ".join(created))
    except SQLAlchemyError as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema bootstrap failed")
        raise RuntimeError("Runtime schema bootstrap failed") from exc
