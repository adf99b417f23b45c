# cocopik/services/groups.py
# ЖИЗНЕННЫЙ ЦИКЛ ГРУПП: создание, вступление по коду, чтение, списки пользователя.
# -----------------------------------------------------------------------------
# Ошибки - ValueError с кодом причины; роутеры переводят их в HTTP-статусы:
#   missing_fields / missing_device_token → 400
#   group_not_found / user_not_found      → 404
#   group_expired                         → 410
#   already_member                        → 400

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from cocopik.models.group import Group
from cocopik.models.group_member import GroupMember
from cocopik.services.identity import ensure_user, find_user
from cocopik.services.invite_code import allocate_invite_code, is_code_taken
from cocopik.utils.dates import as_utc, utc_now

log = logging.getLogger(__name__)

# сколько раз пробуем вставить группу, если код успели занять между проверкой и INSERT
INVITE_CODE_MAX_ATTEMPTS = 5


def _utc_now() -> datetime:
    return utc_now()


def is_group_expired(expires_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """
    Группа истекла, если expires_at задан и строго меньше текущего момента.
    Без expires_at - бессрочная. Считается на каждый запрос, не кешируется.
    """
    if expires_at is None:
        return False
    return as_utc(expires_at) < as_utc(now or _utc_now())


def _load_group_by_code(db: Session, invite_code: str) -> Optional[Group]:
    stmt = (
        select(Group)
        .where(Group.invite_code == invite_code)
        .options(
            selectinload(Group.creator),
            selectinload(Group.members).selectinload(GroupMember.user),
        )
    )
    return db.scalar(stmt)


def _require_active_group(db: Session, invite_code: str) -> Group:
    group = _load_group_by_code(db, invite_code)
    if not group:
        raise ValueError("group_not_found")
    if is_group_expired(group.expires_at):
        raise ValueError("group_expired")
    return group


def count_members(db: Session, group_id: str) -> int:
    return db.scalar(
        select(func.count()).select_from(GroupMember).where(GroupMember.group_id == group_id)
    ) or 0


def is_member(db: Session, group_id: str, user_id: str) -> bool:
    return (
        db.scalar(
            select(GroupMember.id).where(
                GroupMember.group_id == group_id,
                GroupMember.user_id == user_id,
            )
        )
        is not None
    )


def create_group(
    db: Session,
    *,
    device_token: Optional[str],
    model_id: Optional[str],
    title: Optional[str] = None,
    description: Optional[str] = None,
    expiration_hours: Optional[float] = None,
) -> Group:
    """
    Создаёт группу и сразу записывает создателя первым участником.

    Группа и членство создателя коммитятся одной транзакцией - «пустых» групп не бывает.
    Если код заняли между проверкой и вставкой (UNIQUE invite_code), откатываемся
    и берём новый код, максимум INVITE_CODE_MAX_ATTEMPTS раз.
    """
    if not device_token or not model_id:
        raise ValueError("missing_fields")

    user = ensure_user(db, device_token)
    user_id = user.id
    db.commit()

    expires_at = (
        _utc_now() + timedelta(hours=float(expiration_hours))
        if expiration_hours
        else None
    )

    for attempt in range(1, INVITE_CODE_MAX_ATTEMPTS + 1):
        invite_code = allocate_invite_code(db)
        group = Group(
            invite_code=invite_code,
            model_id=model_id,
            creator_id=user_id,
            title=title,
            description=description,
            expires_at=expires_at,
        )
        try:
            db.add(group)
            db.flush()
            db.add(GroupMember(user_id=user_id, group_id=group.id))
            db.commit()
        except IntegrityError:
            db.rollback()
            # повторяем только конфликт по invite_code, остальные нарушения (FK и т.п.) пробрасываем
            if attempt == INVITE_CODE_MAX_ATTEMPTS or not is_code_taken(db, invite_code):
                raise
            log.warning("create_group: invite code %s taken concurrently, retry %s", invite_code, attempt)
            continue

        log.info("create_group: group %s (code %s) created by user %s", group.id, invite_code, user_id)
        return _load_group_by_code(db, invite_code)  # type: ignore[return-value]


def join_group(db: Session, *, invite_code: str, device_token: Optional[str]) -> Tuple[Group, int]:
    """
    Вступление по коду приглашения.

    Порядок проверок: нет группы → group_not_found, истекла → group_expired,
    уже участник → already_member. Предварительная проверка членства - быстрый путь,
    окончательный ответ даёт UNIQUE (user_id, group_id) при commit.
    Возвращает (группа, число участников после вставки).
    """
    if not device_token:
        raise ValueError("missing_device_token")

    user = ensure_user(db, device_token)
    user_id = user.id
    db.commit()

    group = _require_active_group(db, invite_code)
    group_id = group.id

    if is_member(db, group_id, user_id):
        raise ValueError("already_member")

    db.add(GroupMember(user_id=user_id, group_id=group_id))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValueError("already_member")

    # пересчитываем после вставки, а не «было + 1»
    member_count = count_members(db, group_id)
    log.info("join_group: user %s joined group %s, members=%s", user_id, group_id, member_count)

    return _load_group_by_code(db, invite_code), member_count  # type: ignore[return-value]


def get_group_by_code(db: Session, invite_code: str) -> Group:
    return _require_active_group(db, invite_code)


def list_joined_groups(db: Session, device_token: str) -> List[GroupMember]:
    """
    Членства пользователя (вместе с группами) в порядке вступления.
    На чтении пользователя не создаём: неизвестный токен → user_not_found.
    """
    user = find_user(db, device_token)
    if not user:
        raise ValueError("user_not_found")

    stmt = (
        select(GroupMember)
        .where(GroupMember.user_id == user.id)
        .options(
            selectinload(GroupMember.group).selectinload(Group.creator),
            selectinload(GroupMember.group)
            .selectinload(Group.members)
            .selectinload(GroupMember.user),
        )
        .order_by(GroupMember.joined_at.asc())
    )
    return list(db.scalars(stmt).all())


def list_created_groups(db: Session, device_token: str) -> List[Group]:
    """Группы, где creator_id = пользователь; свежие сверху."""
    user = find_user(db, device_token)
    if not user:
        raise ValueError("user_not_found")

    stmt = (
        select(Group)
        .where(Group.creator_id == user.id)
        .options(
            selectinload(Group.creator),
            selectinload(Group.members).selectinload(GroupMember.user),
        )
        .order_by(Group.created_at.desc())
    )
    return list(db.scalars(stmt).all())
