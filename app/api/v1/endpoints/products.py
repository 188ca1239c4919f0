"""
API endpoints для работы с товарами.

Содержит публичные выборки (фильтрация, сортировка, пагинация,
рекомендуемые и похожие товары) и административные CRUD операции
с управлением изображениями.
"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Path, Query, Request

from app.api.deps import get_product_service, read_payload
from app.api.responses import success
from app.core.auth import require_admin
from app.schemas.base import MAX_INT
from app.schemas.pagination import MAX_PAGE, PageMeta
from app.schemas.product import ProductOut
from app.services.product_service import DEFAULT_SORT, ProductService

router = APIRouter()


def _product(product) -> dict:
    return ProductOut.model_validate(product).dump()


@router.get("")
def list_products(
    page: int = Query(1, ge=1, le=MAX_PAGE, description="Номер страницы"),
    limit: int = Query(12, ge=1, le=100, description="Размер страницы"),
    category: Optional[str] = Query(None, description="ID или slug категории"),
    search: Optional[str] = Query(None, description="Поиск по названию, бренду, артикулу"),
    featured: Optional[bool] = Query(None, description="Только рекомендуемые"),
    sort: str = Query(DEFAULT_SORT, description="Поле сортировки"),
    service: ProductService = Depends(get_product_service),
):
    """
    Получить список активных товаров с фильтрацией, сортировкой и пагинацией.

    Args:
        page: Номер страницы (начиная с 1)
        limit: Размер страницы (1-100)
        category: ID или slug категории
        search: Поисковый запрос (регистронезависимый)
        featured: true - только рекомендуемые
        sort: -createdAt, createdAt, name, -name, sortOrder, -sortOrder,
            viewsCount, -viewsCount

    Returns:
        dict: products и pagination
    """
    items, total = service.list_public(page, limit, category, search, featured, sort)
    return success(
        {
            "products": [_product(p) for p in items],
            "pagination": PageMeta.create(page, limit, total).dump(),
        }
    )


@router.get("/featured/list")
def list_featured(
    limit: int = Query(8, ge=1, le=50),
    service: ProductService = Depends(get_product_service),
):
    """Рекомендуемые товары для главной страницы."""
    return success({"products": [_product(p) for p in service.list_featured(limit)]})


@router.get("/admin", dependencies=[Depends(require_admin)])
def list_products_admin(
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    status: Optional[Literal["active", "inactive", "all"]] = Query(None),
    featured: Optional[Literal["true", "false", "all"]] = Query(None),
    service: ProductService = Depends(get_product_service),
):
    """
    Все товары для админ-панели (включая неактивные).

    Поиск дополнительно учитывает тип автомобиля.
    """
    items, total = service.list_admin(page, limit, search, category, status, featured)
    return success(
        {
            "products": [_product(p) for p in items],
            "pagination": PageMeta.create(page, limit, total).dump(),
        }
    )


@router.post("/admin", status_code=201, dependencies=[Depends(require_admin)])
async def create_product(
    request: Request, service: ProductService = Depends(get_product_service)
):
    """
    Создать товар (multipart/form-data, изображения в поле images[]).

    Первое изображение становится главным.
    """
    fields, files = await read_payload(request)
    product = service.create(fields, files)
    return success({"product": _product(product)}, message="محصول با موفقیت ایجاد شد")


@router.get("/admin/{product_id}", dependencies=[Depends(require_admin)])
def get_product_admin(
    product_id: int = Path(..., le=MAX_INT),
    service: ProductService = Depends(get_product_service),
):
    """Товар по ID (для формы редактирования)."""
    return success({"product": _product(service.get(product_id))})


@router.put("/admin/{product_id}", dependencies=[Depends(require_admin)])
async def update_product(
    request: Request,
    product_id: int = Path(..., le=MAX_INT),
    service: ProductService = Depends(get_product_service),
):
    """
    Обновить товар. Новые изображения добавляются к существующим,
    replaceImages=true заменяет их.
    """
    fields, files = await read_payload(request)
    product = service.update(product_id, fields, files)
    return success({"product": _product(product)}, message="محصول با موفقیت به‌روزرسانی شد")


@router.delete("/admin/{product_id}", dependencies=[Depends(require_admin)])
def delete_product(
    product_id: int = Path(..., le=MAX_INT),
    service: ProductService = Depends(get_product_service),
):
    """Удалить товар вместе с файлами изображений."""
    service.delete(product_id)
    return success(message="محصول حذف شد")


@router.delete("/admin/{product_id}/image/{index}", dependencies=[Depends(require_admin)])
def delete_product_image(
    product_id: int = Path(..., le=MAX_INT),
    index: int = Path(...),
    service: ProductService = Depends(get_product_service),
):
    """
    Удалить изображение товара по индексу.

    Raises:
        BoundsError: Индекс вне диапазона
    """
    product = service.delete_image(product_id, index)
    return success({"product": _product(product)}, message="تصویر حذف شد")


@router.put("/admin/{product_id}/image/{index}/main", dependencies=[Depends(require_admin)])
def set_main_image(
    product_id: int = Path(..., le=MAX_INT),
    index: int = Path(...),
    service: ProductService = Depends(get_product_service),
):
    """Сделать изображение главным."""
    product = service.set_main_image(product_id, index)
    return success({"product": _product(product)}, message="تصویر اصلی تغییر کرد")


@router.get("/{slug}/related")
def related_products(
    slug: str,
    limit: int = Query(4, ge=1, le=20),
    service: ProductService = Depends(get_product_service),
):
    """Похожие товары (та же категория). Счетчик просмотров не меняется."""
    product = service.get_public(slug)
    return success({"products": [_product(p) for p in service.get_related(product, limit)]})


@router.get("/{slug}")
def get_product(slug: str, service: ProductService = Depends(get_product_service)):
    """
    Получить активный товар по slug. Увеличивает счетчик просмотров.

    Raises:
        NotFoundError: Товар не найден или неактивен
    """
    return success({"product": _product(service.get_by_slug(slug))})
