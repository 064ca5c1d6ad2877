from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from slaguard.tables import metadata


def build_engine(database_url: str) -> Engine:
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(
        database_url,
        pool_pre_ping=True,
        future=True,
        connect_args=connect_args,
    )


def init_db(engine: Engine) -> None:
    """Create the repository schema."""
    metadata.create_all(engine)
