"""
API endpoints для работы с категориями товаров.

Публичные маршруты отдают только активные категории, маршруты
/admin/* требуют роль администратора.
"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Path, Query, Request

from app.api.deps import get_category_service, read_payload
from app.api.responses import success
from app.core.auth import require_admin
from app.schemas.base import MAX_INT
from app.schemas.category import CategoryOut
from app.schemas.pagination import MAX_PAGE, PageMeta
from app.services.category_service import CategoryService

router = APIRouter()


@router.get("")
def list_categories(service: CategoryService = Depends(get_category_service)):
    """
    Получить список активных категорий.

    Каждая категория содержит актуальное число активных товаров.
    Сортировка: sortOrder, затем имя.
    """
    categories = service.list_public()
    return success(
        {
            "categories": [CategoryOut.model_validate(c).dump() for c in categories],
            "total": len(categories),
        }
    )


@router.get("/admin/all", dependencies=[Depends(require_admin)])
def list_categories_admin(
    page: int = Query(1, ge=1, le=MAX_PAGE, description="Номер страницы"),
    limit: int = Query(10, ge=1, le=100, description="Размер страницы"),
    search: Optional[str] = Query(None, description="Поиск по названию"),
    status: Optional[Literal["active", "inactive", "all"]] = Query(None),
    service: CategoryService = Depends(get_category_service),
):
    """
    Все категории с пагинацией (для админ-панели).

    Returns:
        dict: categories и pagination
    """
    items, total = service.list_admin(page, limit, search, status)
    return success(
        {
            "categories": [CategoryOut.model_validate(c).dump() for c in items],
            "pagination": PageMeta.create(page, limit, total).dump(),
        }
    )


@router.post("/admin", status_code=201, dependencies=[Depends(require_admin)])
async def create_category(
    request: Request, service: CategoryService = Depends(get_category_service)
):
    """
    Создать категорию (multipart/form-data с необязательным полем image, или JSON).
    """
    fields, files = await read_payload(request)
    category = service.create(fields, files)
    return success(
        {"category": CategoryOut.model_validate(category).dump()},
        message="دسته‌بندی با موفقیت ایجاد شد",
    )


@router.put("/admin/{category_id}", dependencies=[Depends(require_admin)])
async def update_category(
    request: Request,
    category_id: int = Path(..., le=MAX_INT),
    service: CategoryService = Depends(get_category_service),
):
    """Обновить категорию. Новое изображение заменяет старое."""
    fields, files = await read_payload(request)
    category = service.update(category_id, fields, files)
    return success(
        {"category": CategoryOut.model_validate(category).dump()},
        message="دسته‌بندی با موفقیت به‌روزرسانی شد",
    )


@router.delete("/admin/{category_id}", dependencies=[Depends(require_admin)])
def delete_category(
    category_id: int = Path(..., le=MAX_INT),
    service: CategoryService = Depends(get_category_service),
):
    """
    Удалить категорию.

    Raises:
        ConflictError: В категории есть товары
    """
    service.delete(category_id)
    return success(message="دسته‌بندی با موفقیت حذف شد")


@router.get("/{slug}")
def get_category(slug: str, service: CategoryService = Depends(get_category_service)):
    """
    Получить активную категорию по slug.

    Raises:
        NotFoundError: Категория не найдена или неактивна
    """
    category = service.get_by_slug(slug)
    return success({"category": CategoryOut.model_validate(category).dump()})
