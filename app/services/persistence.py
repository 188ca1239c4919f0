"""
Фиксация изменений каталога с компенсацией загруженных файлов.

Файлы записываются на диск до коммита. Если коммит не удался,
файлы этого запроса удаляются, а нарушение уникальности превращается
в ConflictError с сообщением по конкретному полю.
"""

import logging
import re
from typing import Mapping, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError
from app.services.image_service import ImageService, StoredImage

logger = logging.getLogger(__name__)

CATEGORY_CONFLICT_MESSAGES = {
    "slug": "slug وارد شده قبلاً استفاده شده است",
    "name": "دسته‌بندی با این نام قبلاً وجود دارد",
}

PRODUCT_CONFLICT_MESSAGES = {
    "slug": "slug وارد شده قبلاً استفاده شده است",
}

# SQLite: "UNIQUE constraint failed: categories.name"
_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: ([\w.]+)")
# PostgreSQL: duplicate key value violates unique constraint "ix_categories_name"
_POSTGRES_UNIQUE = re.compile(r'unique constraint "([^"]+)"')


def violated_constraint(exc: IntegrityError) -> Optional[str]:
    """
    Имя нарушенного ограничения или колонки ("ix_categories_name",
    "categories.name"). Значения из DETAIL сообщения не учитываются.
    """
    diag = getattr(exc.orig, "diag", None)
    name = getattr(diag, "constraint_name", None)
    if name:
        return name
    lines = str(exc.orig).splitlines()
    first_line = lines[0] if lines else ""
    for pattern in (_SQLITE_UNIQUE, _POSTGRES_UNIQUE):
        match = pattern.search(first_line)
        if match:
            return match.group(1)
    return None


def conflict_from_integrity(
    exc: IntegrityError, messages: Mapping[str, str]
) -> ConflictError:
    """Сопоставить ошибку уникальности БД с полем."""
    constraint = violated_constraint(exc)
    if constraint:
        for field, message in messages.items():
            if constraint.endswith((f"_{field}", f".{field}")):
                return ConflictError(message)
    return ConflictError()


def commit_or_cleanup(
    db: Session,
    images: ImageService,
    stored: Sequence[StoredImage],
    conflict_messages: Mapping[str, str],
) -> None:
    """
    Зафиксировать транзакцию или откатить ее и удалить файлы.

    Raises:
        ConflictError: При нарушении уникальности
    """
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        images.discard(stored)
        logger.warning("Integrity error on commit: %s", exc.orig)
        raise conflict_from_integrity(exc, conflict_messages) from exc
    except Exception:
        db.rollback()
        images.discard(stored)
        raise
