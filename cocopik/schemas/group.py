# cocopik/schemas/group.py
# -----------------------------------------------------------------------------
# СХЕМЫ Pydantic: Group
# -----------------------------------------------------------------------------
# Снаружи всё в camelCase (deviceToken, inviteCode, memberCount ...),
# внутри - snake_case; алиасы генерируются автоматически.

from __future__ import annotations

from typing import Optional, List
from datetime import datetime

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from .user import UserBrief


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        protected_namespaces = ()


class GroupCreate(CamelModel):
    # обязательность deviceToken/modelId проверяет сервис: ответ должен быть 400, а не 422
    device_token: Optional[str] = Field(None, description="Токен устройства создателя")
    model_id: Optional[str] = Field(None, description="Внешний идентификатор модели")
    title: Optional[str] = Field(None, description="Название группы (свободный текст)")
    description: Optional[str] = Field(None, description="Описание группы (свободный текст)")
    expiration_hours: Optional[float] = Field(
        None,
        description="Через сколько часов приглашение истечёт; пусто/0 - бессрочно",
        allow_inf_nan=False,
    )


class GroupJoin(CamelModel):
    device_token: Optional[str] = Field(None, description="Токен устройства вступающего")


class GroupOut(CamelModel):
    group_id: str = Field(..., description="ID группы")
    invite_code: str = Field(..., description="Код приглашения")
    invite_url: Optional[str] = Field(None, description="Ссылка для шаринга: <host>/g/<code>")
    model_id: str = Field(..., description="Внешний идентификатор модели")
    title: Optional[str] = None
    description: Optional[str] = None
    creator: Optional[UserBrief] = Field(None, description="Создатель группы")
    expires_at: Optional[datetime] = Field(None, description="Когда приглашение истекает (UTC)")
    created_at: Optional[datetime] = None
    member_count: int = Field(..., description="Число участников")
    members: List[UserBrief] = Field(default_factory=list, description="Состав группы")


class GroupJoinOut(GroupOut):
    success: bool = True
    message: str = "Successfully joined the group"


class JoinedGroupOut(GroupOut):
    joined_at: Optional[datetime] = Field(None, description="Когда пользователь вступил")


class JoinedGroupList(BaseModel):
    groups: List[JoinedGroupOut] = Field(default_factory=list)


class CreatedGroupList(BaseModel):
    groups: List[GroupOut] = Field(default_factory=list)
