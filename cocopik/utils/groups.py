# cocopik/utils/groups.py
# ОБЩИЕ ХЕЛПЕРЫ: проекции групп в ответы API и ссылки-приглашения.

from __future__ import annotations

import os
from typing import Optional

from fastapi import Request

from ..models.group import Group
from ..models.group_member import GroupMember
from ..schemas.group import GroupOut, JoinedGroupOut
from ..schemas.user import UserBrief
from .dates import as_utc

PUBLIC_BASE_URL = (os.environ.get("PUBLIC_BASE_URL") or "").strip().rstrip("/")


def build_invite_url(request: Optional[Request], invite_code: str) -> Optional[str]:
    """
    Ссылка для шаринга: <PUBLIC_BASE_URL>/g/<code>.
    Если PUBLIC_BASE_URL не задан - берём хост из входящего запроса.
    """
    if PUBLIC_BASE_URL:
        return f"{PUBLIC_BASE_URL}/g/{invite_code}"
    if request is None:
        return None
    return f"{str(request.base_url).rstrip('/')}/g/{invite_code}"


def group_projection(
    group: Group,
    *,
    request: Optional[Request] = None,
    member_count: Optional[int] = None,
) -> dict:
    members = [UserBrief.model_validate(m.user) for m in group.members]
    return dict(
        group_id=group.id,
        invite_code=group.invite_code,
        invite_url=build_invite_url(request, group.invite_code),
        model_id=group.model_id,
        title=group.title,
        description=group.description,
        creator=UserBrief.model_validate(group.creator) if group.creator else None,
        expires_at=as_utc(group.expires_at),
        created_at=as_utc(group.created_at),
        member_count=member_count if member_count is not None else len(members),
        members=members,
    )


def to_group_out(group: Group, *, request: Optional[Request] = None) -> GroupOut:
    return GroupOut(**group_projection(group, request=request))


def to_joined_group_out(membership: GroupMember, *, request: Optional[Request] = None) -> JoinedGroupOut:
    return JoinedGroupOut(
        **group_projection(membership.group, request=request),
        joined_at=as_utc(membership.joined_at),
    )
