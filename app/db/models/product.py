"""
Модель товара.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base
from .product_image import ProductImage


class Product(Base):
    """
    Модель товара (автозапчасти).

    Attributes:
        id: Уникальный идентификатор товара
        category_id: ID категории товара
        name: Название товара
        slug: URL-friendly идентификатор
        description: Полное описание (rich text)
        short_description: Краткое описание
        part_number: Артикул
        brand: Бренд
        car_type: Модель автомобиля
        views_count: Количество просмотров карточки
        images: Упорядоченный список изображений
    """

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("categories.id", ondelete="RESTRICT"), index=True
    )
    name: Mapped[str] = mapped_column(String(200))
    slug: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    description: Mapped[str] = mapped_column(Text)
    short_description: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)

    part_number: Mapped[str] = mapped_column(String(255))
    brand: Mapped[str] = mapped_column(String(255))
    car_type: Mapped[str] = mapped_column(String(255))

    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    views_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    # Связи с другими моделями
    category: Mapped["Category"] = relationship(back_populates="products", lazy="selectin")
    images: Mapped[List[ProductImage]] = relationship(
        back_populates="product",
        order_by=ProductImage.position,
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def main_image(self) -> Optional[ProductImage]:
        """Главное изображение, либо первое по порядку."""
        if not self.images:
            return None
        for image in self.images:
            if image.is_main:
                return image
        return self.images[0]

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, slug='{self.slug}')>"
