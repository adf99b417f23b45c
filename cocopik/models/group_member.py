# cocopik/models/group_member.py
# Модель участника группы + уникальность (user_id, group_id)

import uuid

from sqlalchemy import Column, String, ForeignKey, UniqueConstraint, DateTime
from sqlalchemy.orm import relationship
from ..db import Base
from ..utils.dates import utc_now


class GroupMember(Base):
    __tablename__ = "group_members"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    group_id = Column(String, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    joined_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    __table_args__ = (
        UniqueConstraint("user_id", "group_id", name="uq_group_members_user_group"),
    )

    group = relationship("Group", back_populates="members")
    user = relationship("User", back_populates="memberships")
