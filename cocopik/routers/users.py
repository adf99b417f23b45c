# cocopik/routers/users.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from cocopik.db import get_db
from cocopik.schemas.group import CreatedGroupList, JoinedGroupList
from cocopik.services import groups as group_service
from cocopik.utils.errors import http_error
from cocopik.utils.groups import to_group_out, to_joined_group_out

router = APIRouter()


@router.get("/{device_token}/groups", response_model=JoinedGroupList)
def get_user_groups(device_token: str, request: Request, db: Session = Depends(get_db)):
    """
    Группы, в которых пользователь состоит (включая созданные им).
    Истёкшие группы тоже возвращаются - это история пользователя.
    """
    try:
        memberships = group_service.list_joined_groups(db, device_token)
    except ValueError as e:
        raise http_error(e)
    return JoinedGroupList(groups=[to_joined_group_out(m, request=request) for m in memberships])


@router.get("/{device_token}/created-groups", response_model=CreatedGroupList)
def get_user_created_groups(device_token: str, request: Request, db: Session = Depends(get_db)):
    """Группы, созданные пользователем."""
    try:
        groups = group_service.list_created_groups(db, device_token)
    except ValueError as e:
        raise http_error(e)
    return CreatedGroupList(groups=[to_group_out(g, request=request) for g in groups])
