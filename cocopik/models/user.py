# cocopik/models/user.py

import uuid

from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from cocopik.db import Base
from cocopik.utils.dates import utc_now


class User(Base):
    """
    Пользователь = устройство. Логина нет: личность определяется непрозрачным device_token,
    запись создаётся лениво при первом запросе с новым токеном.
    """
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    device_token = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)  # Отображаемое имя (пока никем не заполняется)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    created_groups = relationship(
        "Group",
        back_populates="creator",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    memberships = relationship(
        "GroupMember",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<User(id={self.id}, device_token={self.device_token}, name={self.name})>"
