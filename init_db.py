#!/usr/bin/env python3
"""
Скрипт для инициализации базы данных каталога.
"""

import sys
from pathlib import Path

# Добавляем путь к модулю app
sys.path.insert(0, str(Path(__file__).parent))

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from app.db.database import engine
from app.db.models import Base


def init_database() -> bool:
    """Создает все таблицы в базе данных."""
    print("🗄️ Инициализация базы данных...")

    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        print(f"❌ Ошибка создания таблиц: {e}")
        return False

    tables = inspect(engine).get_table_names()
    print(f"✅ Таблиц в базе: {len(tables)}")
    for table in tables:
        print(f"  - {table}")
    return True


if __name__ == "__main__":
    if not init_database():
        sys.exit(1)
