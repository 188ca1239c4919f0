"""
Генерация slug для категорий и товаров.

Slug содержит только буквы персидского/арабского блока Unicode
(U+0600-U+06FF), латинские буквы, цифры и дефисы.
"""

import re
import time
from typing import Optional, Type

from sqlalchemy import select
from sqlalchemy.orm import Session

SOURCE_SCRIPT = "؀-ۿ"

_INVALID_RUN_RE = re.compile(f"[^{SOURCE_SCRIPT}A-Za-z0-9]+")
_SLUG_RE = re.compile(f"^[{SOURCE_SCRIPT}a-z0-9]+(?:-[{SOURCE_SCRIPT}a-z0-9]+)*$")

CATEGORY_SLUG_PREFIX = "دسته-بندی"
PRODUCT_SLUG_PREFIX = "محصول"


def slugify(text: Optional[str], fallback_prefix: str) -> str:
    """
    Построить slug из отображаемого названия.

    Последовательности пробелов и недопустимых символов сворачиваются
    в один дефис, дефисы по краям убираются. Если ничего не осталось,
    возвращается префикс с текущей меткой времени.

    Args:
        text: Отображаемое название
        fallback_prefix: Префикс для пустого результата

    Returns:
        str: Непустой slug
    """
    slug = _INVALID_RUN_RE.sub("-", (text or "").strip()).strip("-").lower()
    return slug or f"{fallback_prefix}-{int(time.time() * 1000)}"


def is_valid_slug(value: str) -> bool:
    """Проверить, что явно переданный slug соответствует формату."""
    return bool(_SLUG_RE.match(value))


def slug_exists(
    db: Session, model: Type, slug: str, exclude_id: Optional[int] = None
) -> bool:
    stmt = select(model.id).where(model.slug == slug)
    if exclude_id is not None:
        stmt = stmt.where(model.id != exclude_id)
    return db.scalar(stmt.limit(1)) is not None


def unique_slug(
    db: Session, model: Type, base_slug: str, exclude_id: Optional[int] = None
) -> str:
    """
    Подобрать свободный slug, добавляя -1, -2, ... к базовому.

    Проверка и вставка не защищены блокировкой: при гонке двух
    одновременных запросов уникальный индекс в БД отклонит второй,
    и он получит ConflictError.
    """
    candidate = base_slug
    counter = 1
    while slug_exists(db, model, candidate, exclude_id):
        candidate = f"{base_slug}-{counter}"
        counter += 1
    return candidate
