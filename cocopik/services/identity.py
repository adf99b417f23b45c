# cocopik/services/identity.py
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cocopik.models.user import User

log = logging.getLogger(__name__)

_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def find_user(db: Session, device_token: str) -> Optional[User]:
    return db.scalar(select(User).where(User.device_token == device_token))


def ensure_user(db: Session, device_token: str) -> User:
    """
    Находит пользователя по device_token или создаёт нового (без имени).

    Одной атомарной вставкой: INSERT ... ON CONFLICT (device_token) DO NOTHING,
    затем чтение по токену. Два параллельных первых запроса с одним токеном
    дают ровно одну строку. Не делает commit.
    """
    if not device_token:
        raise ValueError("missing_device_token")

    dialect = db.get_bind().dialect.name
    insert = _UPSERT_INSERTS.get(dialect)

    if insert is not None:
        stmt = (
            insert(User.__table__)
            .values(device_token=device_token)
            .on_conflict_do_nothing(index_elements=["device_token"])
        )
        res = db.execute(stmt)
        if res.rowcount:
            log.info("identity: new user for device token %s…", device_token[:8])
        return find_user(db, device_token)  # type: ignore[return-value]

    # прочие диалекты: обычная ORM-вставка, гонку ловим по UNIQUE
    user = find_user(db, device_token)
    if user:
        return user
    try:
        with db.begin_nested():
            db.add(User(device_token=device_token))
    except IntegrityError:
        log.info("identity: concurrent insert for device token %s…, re-reading", device_token[:8])
    return find_user(db, device_token)  # type: ignore[return-value]
