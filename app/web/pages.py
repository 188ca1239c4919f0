"""
Серверные страницы витрины (Jinja2).

Страницы используют те же сервисы, что и REST API. Админ-панель -
одна страница, работа с данными идет через REST API из admin.js.
"""

import math
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.templating import Jinja2Templates

from app.api.deps import get_category_service, get_company_service, get_product_service
from app.core.config import settings
from app.core.errors import NotFoundError
from app.schemas.pagination import MAX_PAGE
from app.services.category_service import CategoryService
from app.services.company_service import CompanyService
from app.services.product_service import ProductService

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

PAGE_SIZE = 12

router = APIRouter(include_in_schema=False)


def render_not_found(request: Request, company=None):
    return templates.TemplateResponse(
        request,
        "not_found.html",
        {"company": company},
        status_code=404,
    )


@router.get("/")
def home(
    request: Request,
    categories: CategoryService = Depends(get_category_service),
    products: ProductService = Depends(get_product_service),
    company: CompanyService = Depends(get_company_service),
):
    """Главная: категории и рекомендуемые товары."""
    return templates.TemplateResponse(
        request,
        "home.html",
        {
            "company": company.to_out(company.get()),
            "categories": categories.list_public(),
            "products": products.list_featured(8),
        },
    )


@router.get("/products")
def products_page(
    request: Request,
    page: int = Query(1, ge=1, le=MAX_PAGE),
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    categories: CategoryService = Depends(get_category_service),
    products: ProductService = Depends(get_product_service),
    company: CompanyService = Depends(get_company_service),
):
    """Список товаров с фильтром по категории и поиском."""
    items, total = products.list_public(page, PAGE_SIZE, category, search)
    return templates.TemplateResponse(
        request,
        "products.html",
        {
            "company": company.to_out(company.get()),
            "categories": categories.list_public(),
            "products": items,
            "total": total,
            "page": page,
            "total_pages": math.ceil(total / PAGE_SIZE),
            "category": category or "",
            "search": search or "",
        },
    )


@router.get("/products/{slug}")
def product_page(
    slug: str,
    request: Request,
    products: ProductService = Depends(get_product_service),
    company: CompanyService = Depends(get_company_service),
):
    """Карточка товара с похожими товарами. Увеличивает счетчик просмотров."""
    info = company.to_out(company.get())
    try:
        product = products.get_by_slug(slug)
    except NotFoundError:
        return render_not_found(request, info)
    return templates.TemplateResponse(
        request,
        "product_detail.html",
        {
            "company": info,
            "product": product,
            "related": products.get_related(product, 4),
        },
    )


@router.get("/about")
def about_page(request: Request, company: CompanyService = Depends(get_company_service)):
    return templates.TemplateResponse(
        request, "about.html", {"company": company.to_out(company.get())}
    )


@router.get("/contact")
def contact_page(request: Request, company: CompanyService = Depends(get_company_service)):
    return templates.TemplateResponse(
        request, "contact.html", {"company": company.to_out(company.get())}
    )


@router.get("/admin")
def admin_page(request: Request):
    """Админ-панель (вход и управление категориями и товарами)."""
    return templates.TemplateResponse(
        request, "admin.html", {"api_prefix": settings.API_PREFIX}
    )
