# cocopik/routers/groups.py
# -----------------------------------------------------------------------------
# РОУТЕР: Группы (создание, вступление по коду, детали)
# -----------------------------------------------------------------------------

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Request
from starlette import status
from sqlalchemy.orm import Session

from cocopik.db import get_db
from cocopik.schemas.group import GroupCreate, GroupJoin, GroupJoinOut, GroupOut
from cocopik.services import groups as group_service
from cocopik.utils.errors import http_error
from cocopik.utils.groups import group_projection, to_group_out

router = APIRouter()


@router.post("", response_model=GroupOut, status_code=status.HTTP_201_CREATED)
def create_group(
    payload: GroupCreate,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Создать группу с приглашением.
    Создатель (по deviceToken) становится первым участником: memberCount = 1.
    """
    try:
        group = group_service.create_group(
            db,
            device_token=payload.device_token,
            model_id=payload.model_id,
            title=payload.title,
            description=payload.description,
            expiration_hours=payload.expiration_hours,
        )
    except ValueError as e:
        raise http_error(e)
    return to_group_out(group, request=request)


@router.post("/{code}/join", response_model=GroupJoinOut)
def join_group(
    payload: GroupJoin,
    request: Request,
    code: str = Path(..., min_length=1),
    db: Session = Depends(get_db),
):
    """
    Вступить в группу по коду приглашения:
      • 404 - группы нет;
      • 410 - приглашение истекло;
      • 400 - уже участник (повторное вступление ничего не меняет).
    """
    try:
        group, member_count = group_service.join_group(
            db, invite_code=code, device_token=payload.device_token
        )
    except ValueError as e:
        raise http_error(e)
    return GroupJoinOut(**group_projection(group, request=request, member_count=member_count))


@router.get("/{code}", response_model=GroupOut)
def get_group(
    request: Request,
    code: str = Path(..., min_length=1),
    db: Session = Depends(get_db),
):
    """Детали группы по коду: состав, создатель, срок действия."""
    try:
        group = group_service.get_group_by_code(db, code)
    except ValueError as e:
        raise http_error(e)
    return to_group_out(group, request=request)
