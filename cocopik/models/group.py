# cocopik/models/group.py
# -----------------------------------------------------------------------------
# МОДЕЛЬ: Group (SQLAlchemy)
# -----------------------------------------------------------------------------

from __future__ import annotations

import uuid

from sqlalchemy import (
    Column,
    String,
    ForeignKey,
    DateTime,
)
from sqlalchemy.orm import relationship

from ..db import Base
from ..utils.dates import utc_now


class Group(Base):
    __tablename__ = "groups"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    invite_code = Column(
        String(16),
        unique=True,
        index=True,
        nullable=False,
        comment="Короткий код приглашения (8 символов a-z0-9)",
    )
    model_id = Column(
        String,
        nullable=False,
        comment="Внешний идентификатор модели, вокруг которой собрана группа",
    )

    creator_id = Column(
        String,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    creator = relationship("User", back_populates="created_groups")

    title = Column(String, nullable=True)
    description = Column(String, nullable=True)

    expires_at = Column(
        DateTime(timezone=True),
        nullable=True,
        comment="Когда приглашение истекает (UTC); NULL - бессрочно",
    )

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    members = relationship(
        "GroupMember",
        back_populates="group",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="GroupMember.joined_at",
    )

    def __repr__(self):
        return f"<Group(id={self.id}, invite_code={self.invite_code}, model_id={self.model_id})>"
