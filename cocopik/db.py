# cocopik/db.py
# Инициализация SQLAlchemy: движок, сессии, Base и явные импорты моделей.

from __future__ import annotations

import os
from dotenv import load_dotenv
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

load_dotenv()
DATABASE_URL = os.getenv("DATABASE_URL") or "sqlite:///./cocopik.db"


def _enable_sqlite_fk(dbapi_connection, connection_record) -> None:
    # без этого SQLite игнорирует ON DELETE CASCADE
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(url: str) -> Engine:
    """
    Создаёт движок под конкретный URL:
      • PostgreSQL - пул соединений как в проде;
      • SQLite - без проверки потока, in-memory живёт в одном соединении (StaticPool),
        внешние ключи включаются на каждом соединении.
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url.rstrip("/") == "sqlite:":
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_fk)
        return engine

    return create_engine(
        url,
        pool_size=20,
        max_overflow=20,
        pool_timeout=60,
        pool_recycle=1800,
        pool_pre_ping=True,
    )


engine = make_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

from cocopik.models import (  # noqa: E402,F401
    user,
    group,
    group_member,
)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
