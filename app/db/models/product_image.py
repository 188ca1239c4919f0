"""
Модель изображения товара.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class ProductImage(Base):
    """
    Модель изображения товара.

    Порядок изображений задается полем position (0..n-1), которое
    поддерживает ordering_list на стороне Product.images.

    Attributes:
        id: Уникальный идентификатор изображения
        product_id: ID товара
        position: Позиция в списке изображений товара
        url: Публичный URL файла (/uploads/products/...)
        alt: Альтернативный текст
        is_main: Флаг главного изображения
        file_size: Размер файла в байтах
        mime_type: MIME тип файла
    """

    __tablename__ = "product_images"

    __table_args__ = (Index("ix_product_images_product_id", "product_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    product_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("products.id", ondelete="CASCADE")
    )
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    url: Mapped[str] = mapped_column(Text)
    alt: Mapped[str] = mapped_column(String(255), default="")
    is_main: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Метаданные файла
    file_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    mime_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Связь с товаром
    product: Mapped["Product"] = relationship(back_populates="images")
