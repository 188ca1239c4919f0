#!/usr/bin/env python3
"""
Скрипт для создания администратора в базе данных.

Email, имя и пароль берутся из настроек (ADMIN_EMAIL, ADMIN_NAME,
ADMIN_PASSWORD). Если пользователь уже есть, его пароль и роль
обновляются.
"""

import sys
from pathlib import Path

# Добавляем путь к модулю app
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from app.core.auth import AuthService
from app.core.config import settings
from app.db.database import SessionLocal
from app.db.models.user import User


def create_admin() -> bool:
    """Создает или обновляет супер-администратора."""
    print("🔑 Создание администратора...")
    print("=" * 50)

    email = settings.ADMIN_EMAIL.strip().lower()
    db = SessionLocal()
    try:
        admin = db.scalar(select(User).where(User.email == email))
        if admin:
            print(f"✅ Администратор уже существует: {admin.email} (ID: {admin.id})")
            admin.hashed_password = AuthService.get_password_hash(settings.ADMIN_PASSWORD)
            admin.role = "super_admin"
            admin.is_active = True
            db.commit()
            print("✅ Пароль и роль обновлены")
        else:
            admin = User(
                name=settings.ADMIN_NAME,
                email=email,
                hashed_password=AuthService.get_password_hash(settings.ADMIN_PASSWORD),
                role="super_admin",
                is_active=True,
            )
            db.add(admin)
            db.commit()
            db.refresh(admin)
            print("✅ Администратор создан успешно!")
            print(f"   Email: {admin.email}")
            print(f"   ID: {admin.id}")

        print("⚠️ Смените пароль после первого входа!")
        return True
    except SQLAlchemyError as e:
        db.rollback()
        print(f"❌ Ошибка: {e}")
        return False
    finally:
        db.close()


if __name__ == "__main__":
    if not create_admin():
        sys.exit(1)
