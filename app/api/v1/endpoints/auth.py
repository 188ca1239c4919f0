"""
API endpoints аутентификации администраторов.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.responses import success
from app.core.auth import AuthService, get_current_user
from app.db.database import get_db
from app.db.models.user import User
from app.schemas.auth import ChangePasswordRequest, LoginRequest, UserOut

router = APIRouter()


@router.post("/login")
def login(login_data: LoginRequest, db: Session = Depends(get_db)):
    """
    Вход в административную панель.

    Args:
        login_data: Email и пароль
        db: Сессия базы данных

    Returns:
        dict: JWT токен и данные пользователя

    Raises:
        InvalidCredentialsError: Неизвестный email, неактивная учетная
            запись или неверный пароль
    """
    user = AuthService.login(db, login_data.email, login_data.password)
    token = AuthService.create_access_token(user.id)
    return success(
        {"token": token, "user": UserOut.model_validate(user).dump()},
        message="ورود موفق",
    )


@router.get("/me")
def me(current_user: User = Depends(get_current_user)):
    """Данные текущего пользователя."""
    return success({"user": UserOut.model_validate(current_user).dump()})


@router.post("/change-password")
def change_password(
    password_data: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Смена пароля текущего пользователя.

    Raises:
        InvalidCredentialsError: Текущий пароль неверен
    """
    AuthService.change_password(
        db, current_user, password_data.current_password, password_data.new_password
    )
    return success(message="رمز عبور با موفقیت تغییر کرد")
