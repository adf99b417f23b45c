# cocopik/services/invite_code.py

from __future__ import annotations

import secrets
import string

from sqlalchemy import select
from sqlalchemy.orm import Session

from cocopik.models.group import Group

INVITE_CODE_ALPHABET = string.ascii_lowercase + string.digits
INVITE_CODE_LENGTH = 8


def generate_invite_code(length: int = INVITE_CODE_LENGTH) -> str:
    """Случайный код из a-z0-9 (36 символов, 36^8 ≈ 2.8e12 вариантов)."""
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(length))


def is_code_taken(db: Session, code: str) -> bool:
    return db.scalar(select(Group.id).where(Group.invite_code == code)) is not None


def allocate_invite_code(db: Session) -> str:
    """
    Подбирает код, которого сейчас нет в таблице groups.
    Это только быстрая проверка: окончательно уникальность держит UNIQUE(invite_code),
    конфликт при вставке обрабатывает create_group.
    """
    while True:
        code = generate_invite_code()
        if not is_code_taken(db, code):
            return code
