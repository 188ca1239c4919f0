"""
Сервис информации о компании (единственная запись).
"""

import logging
from typing import Any, Mapping

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.models import CompanyInfo
from app.schemas.company import CompanyInfoOut, CompanyInfoUpdate, ContactInfo, SiteTexts
from app.services.validation import parse_model, require_present

logger = logging.getLogger(__name__)

DEFAULT_COMPANY = {
    "name": "نام شرکت شما",
    "slogan": "شعار شرکت",
    "description": "توضیحات شرکت در اینجا قرار می‌گیرد",
}


class CompanyService:
    def __init__(self, db: Session):
        self.db = db

    def get(self) -> CompanyInfo:
        """Получить запись, при первом обращении создать ее со значениями по умолчанию."""
        info = self.db.scalar(select(CompanyInfo).order_by(CompanyInfo.id).limit(1))
        if info is None:
            info = CompanyInfo(**DEFAULT_COMPANY, contact={}, social_media={}, texts={})
            self.db.add(info)
            self.db.commit()
            self.db.refresh(info)
            logger.info("Created default company info")
        return info

    def update(self, raw: Mapping[str, Any]) -> CompanyInfo:
        """
        Обновить информацию о компании.

        Raises:
            ValidationError: Некорректные поля
        """
        data = parse_model(CompanyInfoUpdate, raw)
        changes = data.model_dump(exclude_unset=True)
        require_present(changes, {"name": "name"})

        info = self.get()
        # Разделы проверяются схемой после слияния
        if "contact" in changes:
            merged = {**(info.contact or {}), **(changes.pop("contact") or {})}
            info.contact = parse_model(ContactInfo, merged).dump()
        if "social_media" in changes:
            info.social_media = {**(info.social_media or {}), **(changes.pop("social_media") or {})}
        if "texts" in changes:
            merged = {**(info.texts or {}), **(changes.pop("texts") or {})}
            info.texts = parse_model(SiteTexts, merged).dump()

        for key, value in changes.items():
            setattr(info, key, value)
        self.db.commit()
        self.db.refresh(info)
        logger.info("Updated company info")
        return info

    @staticmethod
    def to_out(info: CompanyInfo) -> CompanyInfoOut:
        return CompanyInfoOut(
            name=info.name,
            slogan=info.slogan,
            description=info.description,
            contact=ContactInfo.model_validate(info.contact or {}),
            social_media=info.social_media or {},
            texts=SiteTexts.model_validate(info.texts or {}),
        )
