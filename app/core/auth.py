"""
Модуль аутентификации и авторизации.

Содержит функции для работы с JWT токенами, хеширования паролей
и проверки прав доступа пользователей.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import ForbiddenError, InvalidCredentialsError, UnauthorizedError
from app.db.database import get_db
from app.db.models.user import User

logger = logging.getLogger(__name__)

# Настройка хеширования паролей
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# HTTP Bearer схема (отсутствие заголовка обрабатываем сами)
security = HTTPBearer(auto_error=False)


class AuthService:
    """Сервис для работы с аутентификацией."""

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Проверка пароля."""
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def get_password_hash(password: str) -> str:
        """Хеширование пароля."""
        return pwd_context.hash(password)

    @staticmethod
    def create_access_token(
        user_id: uuid.UUID, expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        Создание JWT токена.

        Args:
            user_id: ID пользователя (поле sub)
            expires_delta: Время жизни (по умолчанию ACCESS_TOKEN_EXPIRE_MINUTES)
        """
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
        payload = {"sub": str(user_id), "type": "access", "iat": now, "exp": expire}
        return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def decode_token(token: str) -> dict:
        """
        Проверка JWT токена.

        Raises:
            UnauthorizedError: Токен истек, поврежден или подписан другим ключом
        """
        try:
            return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        except jwt.ExpiredSignatureError as exc:
            raise UnauthorizedError("توکن منقضی شده است") from exc
        except jwt.PyJWTError as exc:
            raise UnauthorizedError("توکن نامعتبر است") from exc

    @classmethod
    def login(cls, db: Session, email: str, password: str) -> User:
        """
        Вход по email и паролю. Для неизвестного email, неактивной
        учетной записи и неверного пароля ошибка одна и та же.

        Raises:
            InvalidCredentialsError: Неверные учетные данные
        """
        user = db.scalar(select(User).where(User.email == email.strip().lower()))
        if user is None:
            # Выравниваем время ответа для неизвестного email
            pwd_context.dummy_verify()
            logger.info("Login failed: unknown email")
            raise InvalidCredentialsError()
        if not cls.verify_password(password, user.hashed_password) or not user.is_active:
            logger.info("Login failed for user %s", user.id)
            raise InvalidCredentialsError()

        user.last_login = datetime.now(timezone.utc)
        db.commit()
        db.refresh(user)
        return user

    @classmethod
    def change_password(cls, db: Session, user: User, current: str, new: str) -> None:
        """
        Смена пароля.

        Raises:
            InvalidCredentialsError: Текущий пароль неверен
        """
        if not cls.verify_password(current, user.hashed_password):
            raise InvalidCredentialsError("رمز عبور فعلی اشتباه است")
        user.hashed_password = cls.get_password_hash(new)
        db.commit()
        logger.info("Password changed for user %s", user.id)


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    Получение текущего пользователя из токена.

    Пользователь также сохраняется в request.state.user.

    Raises:
        UnauthorizedError: Нет токена, токен недействителен,
            пользователь не найден или неактивен
    """
    if credentials is None:
        raise UnauthorizedError("توکن احراز هویت یافت نشد")

    payload = AuthService.decode_token(credentials.credentials)
    try:
        user_id = uuid.UUID(str(payload.get("sub")))
    except ValueError as exc:
        raise UnauthorizedError("توکن نامعتبر است") from exc

    user = db.get(User, user_id)
    if user is None or not user.is_active:
        raise UnauthorizedError("کاربر یافت نشد")

    request.state.user = user
    return user


def require_role(role: str) -> Callable[..., User]:
    """
    Фабрика dependency для проверки роли.

    super_admin удовлетворяет любой роли.
    """

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if not current_user.has_role(role):
            raise ForbiddenError()
        return current_user

    return dependency


require_admin = require_role("admin")
require_super_admin = require_role("super_admin")

# Экспорт сервиса
auth_service = AuthService()
