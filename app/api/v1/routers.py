"""
Основной роутер API.

Подключает все endpoint'ы приложения.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import auth, categories, company, products

# Создание основного роутера API
api_router = APIRouter()

# Подключение роутеров для различных ресурсов
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(categories.router, prefix="/categories", tags=["categories"])
api_router.include_router(products.router, prefix="/products", tags=["products"])
api_router.include_router(company.router, prefix="/company-info", tags=["company"])
