"""
Модель информации о компании (единственная запись).
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class CompanyInfo(Base):
    """
    Профиль компании для страниц «О нас» и «Контакты».

    Attributes:
        contact: phones/emails/address/workingHours
        social_media: Ссылки на соцсети
        texts: Тексты сайта (заголовки, примечания)
    """

    __tablename__ = "company_info"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200))
    slogan: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    contact: Mapped[dict] = mapped_column(JSON, default=dict)
    social_media: Mapped[dict] = mapped_column(JSON, default=dict)
    texts: Mapped[dict] = mapped_column(JSON, default=dict)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
