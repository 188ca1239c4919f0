"""
Общие зависимости API.

Сервисы создаются на каждый запрос из сессии БД и провайдера
хранилища, чтобы тесты могли подменить оба через dependency_overrides.
"""

import json
from typing import Any, Dict, List, Tuple

from fastapi import Depends, Request
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from app.core.config import settings
from app.core.errors import ValidationError
from app.db.database import get_db
from app.services.category_service import CategoryService
from app.services.company_service import CompanyService
from app.services.image_service import (
    CATEGORIES_FOLDER,
    PRODUCTS_FOLDER,
    ImageService,
    IncomingFile,
)
from app.services.product_service import ProductService
from app.services.storage_service import LocalStorageProvider, StorageProvider

_storage = None


def get_storage() -> StorageProvider:
    """Провайдер локального хранилища (один на процесс)."""
    global _storage
    if _storage is None:
        _storage = LocalStorageProvider()
    return _storage


def get_category_service(
    db: Session = Depends(get_db), storage: StorageProvider = Depends(get_storage)
) -> CategoryService:
    images = ImageService(
        storage,
        CATEGORIES_FOLDER,
        max_files=settings.MAX_CATEGORY_IMAGES,
        name_prefix="category",
    )
    return CategoryService(db, images)


def get_product_service(
    db: Session = Depends(get_db), storage: StorageProvider = Depends(get_storage)
) -> ProductService:
    images = ImageService(
        storage,
        PRODUCTS_FOLDER,
        max_files=settings.MAX_PRODUCT_IMAGES,
        name_prefix="product",
    )
    return ProductService(db, images)


def get_company_service(db: Session = Depends(get_db)) -> CompanyService:
    return CompanyService(db)


async def read_payload(request: Request) -> Tuple[Dict[str, Any], List[IncomingFile]]:
    """
    Прочитать тело запроса: JSON или multipart/form-data.

    Файлы читаются целиком в память (размер ограничен MAX_IMAGE_SIZE
    при проверке). Поля вида images[] приводятся к images.

    Returns:
        Tuple[Dict[str, Any], List[IncomingFile]]: Поля и файлы в порядке отправки
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except json.JSONDecodeError as exc:
            raise ValidationError("بدنه درخواست JSON معتبر نیست") from exc
        if not isinstance(body, dict):
            raise ValidationError("بدنه درخواست JSON معتبر نیست")
        return body, []

    if not content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        return {}, []

    form = await request.form()
    fields: Dict[str, Any] = {}
    files: List[IncomingFile] = []
    for key, value in form.multi_items():
        key = key[:-2] if key.endswith("[]") else key
        if isinstance(value, UploadFile):
            if not value.filename:
                continue
            files.append(
                IncomingFile(
                    filename=value.filename,
                    content_type=value.content_type,
                    data=await value.read(),
                )
            )
        else:
            fields[key] = value
    return fields, files
