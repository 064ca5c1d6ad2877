"""Repository contract, storage backends and their construction from settings."""

from __future__ import annotations

from slaguard.config import Settings
from slaguard.database import build_engine, init_db

from .base import (
    AlreadyExistsError,
    NotFoundError,
    Repository,
    RepositoryError,
    ValidationError,
)
from .memory import MemoryRepository
from .sql import SqlRepository
from .validating import ValidatingRepository


def build_repository(settings: Settings) -> Repository:
    """Create the configured backend wrapped in validation."""

    kind = settings.repository.lower()
    if kind == "memory":
        backend: Repository = MemoryRepository()
    elif kind == "sql":
        engine = build_engine(settings.database_url)
        init_db(engine)
        backend = SqlRepository(engine)
    else:
        raise ValueError(f"Unknown repository backend '{settings.repository}'")
    return ValidatingRepository(backend, external_ids=settings.external_ids)


__all__ = [
    "AlreadyExistsError",
    "MemoryRepository",
    "NotFoundError",
    "Repository",
    "RepositoryError",
    "SqlRepository",
    "ValidatingRepository",
    "ValidationError",
    "build_repository",
]
