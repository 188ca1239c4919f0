"""
Схемы товаров и их изображений.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from app.core.config import settings
from app.schemas.base import MAX_INT, CamelModel
from app.schemas.category import CategorySummary, check_slug_format

DESCRIPTION_MAX_LENGTH = settings.PRODUCT_DESCRIPTION_MAX_LENGTH


class ProductCreate(CamelModel):
    """
    Схема для создания товара.

    Поле category принимает ID категории (в форме приходит строкой).
    """

    name: str = Field(..., min_length=1, max_length=200)
    slug: Optional[str] = Field(None, max_length=255)
    description: str = Field(..., min_length=1, max_length=DESCRIPTION_MAX_LENGTH)
    short_description: Optional[str] = Field(None, max_length=300)
    category_id: int = Field(..., alias="category", gt=0, le=MAX_INT)
    part_number: str = Field(..., min_length=1, max_length=255)
    brand: str = Field(..., min_length=1, max_length=255)
    car_type: str = Field(..., min_length=1, max_length=255)
    sort_order: int = Field(0, ge=0, le=MAX_INT)
    is_featured: bool = False
    is_active: bool = True

    @field_validator("slug")
    @classmethod
    def check_slug(cls, value: Optional[str]) -> Optional[str]:
        return check_slug_format(value)


class ProductUpdate(CamelModel):
    """
    Схема для частичного обновления товара.

    replace_images=True удаляет текущие изображения перед добавлением новых.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    slug: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, min_length=1, max_length=DESCRIPTION_MAX_LENGTH)
    short_description: Optional[str] = Field(None, max_length=300)
    category_id: Optional[int] = Field(None, alias="category", gt=0, le=MAX_INT)
    part_number: Optional[str] = Field(None, min_length=1, max_length=255)
    brand: Optional[str] = Field(None, min_length=1, max_length=255)
    car_type: Optional[str] = Field(None, min_length=1, max_length=255)
    sort_order: Optional[int] = Field(None, ge=0, le=MAX_INT)
    is_featured: Optional[bool] = None
    is_active: Optional[bool] = None
    replace_images: bool = False

    @field_validator("slug")
    @classmethod
    def check_slug(cls, value: Optional[str]) -> Optional[str]:
        return check_slug_format(value)


class ProductImageOut(CamelModel):
    """Изображение товара."""

    url: str
    alt: str = ""
    is_main: bool = False


class ProductOut(CamelModel):
    id: int
    name: str
    slug: str
    description: str
    short_description: Optional[str] = None
    category: Optional[CategorySummary] = None
    part_number: str
    brand: str
    car_type: str
    images: List[ProductImageOut] = []
    sort_order: int
    views_count: int
    is_featured: bool
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
