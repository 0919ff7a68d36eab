# backend/db.py
import logging
import re

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

logger = logging.getLogger("db")

Base = declarative_base()


def _mask(url: str) -> str:
    return re.sub(r"://([^:]+):([^@]+)@", r"://\1:***@", url)


def make_engine(database_url: str | None) -> Engine:
    if not database_url:
        # clear, actionable error
        raise RuntimeError(
            "DATABASE_URL is not set. Expected it in backend/.env or OS envs.\n"
            "Hint: ensure the key is named exactly DATABASE_URL"
        )

    logger.info("[db] Using DATABASE_URL=%s", _mask(database_url))

    kwargs = {}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        # in-memory databases live inside one connection; share it
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool

    return create_engine(database_url, echo=False, future=True, **kwargs)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)


def get_db(request: Request):
    """
    One session per request, taken from the factory the app was built with
    (see main.create_app).
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
