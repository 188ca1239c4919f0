"""
Схемы категорий.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from app.schemas.base import MAX_INT, CamelModel
from app.services.slug import is_valid_slug

SLUG_PATTERN_MESSAGE = "slug فقط می‌تواند شامل حروف، اعداد و خط تیره باشد"


def check_slug_format(value: Optional[str]) -> Optional[str]:
    if value is not None and not is_valid_slug(value):
        raise ValueError(SLUG_PATTERN_MESSAGE)
    return value


class CategoryCreate(CamelModel):
    """Схема для создания категории."""

    name: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=500)
    is_active: bool = True
    sort_order: int = Field(0, ge=0, le=MAX_INT)
    meta_title: Optional[str] = Field(None, max_length=60)
    meta_description: Optional[str] = Field(None, max_length=160)

    @field_validator("slug")
    @classmethod
    def check_slug(cls, value: Optional[str]) -> Optional[str]:
        return check_slug_format(value)


class CategoryUpdate(CamelModel):
    """Схема для частичного обновления категории."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=500)
    is_active: Optional[bool] = None
    sort_order: Optional[int] = Field(None, ge=0, le=MAX_INT)
    meta_title: Optional[str] = Field(None, max_length=60)
    meta_description: Optional[str] = Field(None, max_length=160)

    @field_validator("slug")
    @classmethod
    def check_slug(cls, value: Optional[str]) -> Optional[str]:
        return check_slug_format(value)


class CategorySummary(CamelModel):
    """Краткие данные категории в карточке товара."""

    id: int
    name: str
    slug: str


class CategoryOut(CamelModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    image: Optional[str] = None
    is_active: bool
    sort_order: int
    products_count: int
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
