from __future__ import annotations

import os
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

_DEFAULT_DATABASE_URL = "sqlite:///./insight_validation.db"


def get_database_url() -> str:
    url = os.getenv("INSIGHT_VALIDATION_DATABASE_URL", _DEFAULT_DATABASE_URL).strip()
    if not url:
        raise ValueError("INSIGHT_VALIDATION_DATABASE_URL cannot be empty")
    return url


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


DATABASE_URL = get_database_url()

engine = create_engine(DATABASE_URL, connect_args=_connect_args(DATABASE_URL), future=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

Base = declarative_base()


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables() -> None:
    from insight_validation import models  # noqa: F401  registers the mapped tables

    Base.metadata.create_all(bind=engine)
