"""
Модели базы данных.

Импортирует все модели для корректной работы SQLAlchemy.
"""

from .base import Base
from .category import Category
from .company_info import CompanyInfo
from .product import Product
from .product_image import ProductImage
from .user import User

__all__ = [
    "Base",
    "Category",
    "CompanyInfo",
    "Product",
    "ProductImage",
    "User",
]
