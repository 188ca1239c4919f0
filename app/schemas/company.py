"""
Схемы информации о компании.
"""

from typing import Dict, List, Optional

from pydantic import Field

from app.schemas.base import CamelModel


class Phone(CamelModel):
    title: Optional[str] = None
    number: str
    is_main: bool = False


class Email(CamelModel):
    title: Optional[str] = None
    address: str
    is_main: bool = False


class Address(CamelModel):
    full: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None


class WorkingHours(CamelModel):
    days: str
    hours: str


class ContactInfo(CamelModel):
    phones: List[Phone] = []
    emails: List[Email] = []
    address: Address = Address()
    working_hours: List[WorkingHours] = []


class SiteTexts(CamelModel):
    hero_title: Optional[str] = None
    hero_subtitle: Optional[str] = None
    about_title: Optional[str] = None
    about_text: Optional[str] = None
    products_title: str = "محصولات ما"
    products_subtitle: Optional[str] = None
    contact_note: str = "برای استعلام قیمت و سفارش با ما تماس بگیرید"


class CompanyInfoOut(CamelModel):
    name: str
    slogan: Optional[str] = None
    description: Optional[str] = None
    contact: ContactInfo = ContactInfo()
    social_media: Dict[str, Optional[str]] = {}
    texts: SiteTexts = SiteTexts()


class CompanyInfoUpdate(CamelModel):
    """
    Частичное обновление: ключи переданных разделов (contact, socialMedia,
    texts) сливаются с сохраненными, остальные поля заменяются целиком.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    slogan: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    contact: Optional[Dict] = None
    social_media: Optional[Dict[str, Optional[str]]] = None
    texts: Optional[Dict[str, Optional[str]]] = None
