"""Engine construction and schema initialisation"""

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

import mdsite.crud.models  # noqa: F401  registers tables on SQLModel.metadata


def make_engine(db_url: str) -> Engine:
    return create_engine(db_url, echo=False)


def init_db(engine: Engine) -> None:
    """Create all tables if they do not exist."""
    SQLModel.metadata.create_all(engine)
