"""
Схемы аутентификации.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from app.schemas.base import CamelModel


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=6)


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)


class UserOut(CamelModel):
    """Данные пользователя (без пароля)."""

    id: uuid.UUID
    name: str
    email: str
    role: str
    last_login: Optional[datetime] = None
