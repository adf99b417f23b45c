# cocopik/schemas/user.py

from pydantic import BaseModel
from typing import Optional


class UserBrief(BaseModel):
    """Краткая карточка пользователя внутри проекции группы."""
    id: str
    name: Optional[str] = None

    class Config:
        from_attributes = True
