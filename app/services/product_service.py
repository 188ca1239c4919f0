"""
Сервис товаров.

Создание, изменение и удаление товаров вместе с их изображениями,
публичные и административные выборки, счетчик просмотров.
"""

import logging
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from app.core.errors import BoundsError, CategoryNotFoundError, ConflictError, NotFoundError
from app.db.models import Category, Product, ProductImage
from app.schemas.base import MAX_INT
from app.schemas.product import ProductCreate, ProductUpdate
from app.services.category_service import escape_like
from app.services.image_service import ImageService, IncomingFile, StoredImage
from app.services.normalize import (
    PRODUCT_BOOLEAN_FIELDS,
    PRODUCT_INTEGER_FIELDS,
    drop_empty,
    normalize_fields,
)
from app.services.persistence import PRODUCT_CONFLICT_MESSAGES, commit_or_cleanup
from app.services.slug import PRODUCT_SLUG_PREFIX, slug_exists, slugify, unique_slug
from app.services.validation import parse_model, require_present

logger = logging.getLogger(__name__)

PRODUCT_NOT_FOUND = "محصول یافت نشد"

# Допустимые значения параметра sort
SORT_OPTIONS = {
    "-createdAt": Product.created_at.desc(),
    "createdAt": Product.created_at.asc(),
    "name": Product.name.asc(),
    "-name": Product.name.desc(),
    "sortOrder": Product.sort_order.asc(),
    "-sortOrder": Product.sort_order.desc(),
    "viewsCount": Product.views_count.asc(),
    "-viewsCount": Product.views_count.desc(),
}
DEFAULT_SORT = "-createdAt"

# Обязательные поля: атрибут модели -> поле API
REQUIRED_FIELDS = {
    "name": "name",
    "description": "description",
    "category_id": "category",
    "part_number": "partNumber",
    "brand": "brand",
    "car_type": "carType",
    "is_active": "isActive",
    "is_featured": "isFeatured",
    "sort_order": "sortOrder",
}


class ProductService:
    """
    Сервис товаров.

    Args:
        db: Сессия базы данных
        images: Сервис изображений товаров
    """

    def __init__(self, db: Session, images: ImageService):
        self.db = db
        self.images = images

    # ---------------------------------------------------------------- выборки

    def _paginate(self, stmt, page: int, limit: int, order_by) -> Tuple[List[Product], int]:
        total = self.db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
        items = self.db.scalars(
            stmt.order_by(*order_by, Product.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).all()
        return list(items), total

    def _search(self, stmt, search: Optional[str], *columns):
        if not search:
            return stmt
        pattern = f"%{escape_like(search)}%"
        return stmt.where(or_(*(column.ilike(pattern, escape="\\") for column in columns)))

    def _resolve_category(self, category: Union[int, str, None]) -> Optional[int]:
        """
        ID категории по slug или ID; -1 если категория не найдена.

        Сначала ищется slug: у категорий вроде "206" slug состоит из цифр.
        """
        if category is None or category == "":
            return None
        if isinstance(category, int):
            return category
        category_id = self.db.scalar(select(Category.id).where(Category.slug == category))
        if category_id is not None:
            return category_id
        if category.isascii() and category.isdigit() and int(category) <= MAX_INT:
            return int(category)
        return -1

    def list_public(
        self,
        page: int = 1,
        limit: int = 12,
        category: Union[int, str, None] = None,
        search: Optional[str] = None,
        featured: Optional[bool] = None,
        sort: str = DEFAULT_SORT,
    ) -> Tuple[List[Product], int]:
        """
        Активные товары с фильтрами и пагинацией.

        Args:
            page: Номер страницы (с 1)
            limit: Размер страницы
            category: ID или slug категории
            search: Подстрока названия, бренда или артикула
            featured: True - только рекомендуемые
            sort: Ключ сортировки (см. SORT_OPTIONS)

        Returns:
            Tuple[List[Product], int]: Товары страницы и общее количество
        """
        stmt = select(Product).where(Product.is_active.is_(True))
        category_id = self._resolve_category(category)
        if category_id is not None:
            stmt = stmt.where(Product.category_id == category_id)
        if featured is True:
            stmt = stmt.where(Product.is_featured.is_(True))
        stmt = self._search(stmt, search, Product.name, Product.brand, Product.part_number)

        order = SORT_OPTIONS.get(sort, SORT_OPTIONS[DEFAULT_SORT])
        return self._paginate(stmt, page, limit, [order])

    def list_admin(
        self,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        category: Union[int, str, None] = None,
        status: Optional[str] = None,
        featured: Optional[str] = None,
    ) -> Tuple[List[Product], int]:
        """
        Все товары для админ-панели.

        Args:
            status: "active", "inactive" или "all"/None
            featured: "true", "false" или "all"/None
        """
        stmt = select(Product)
        category_id = self._resolve_category(category)
        if category_id is not None:
            stmt = stmt.where(Product.category_id == category_id)
        if status == "active":
            stmt = stmt.where(Product.is_active.is_(True))
        elif status == "inactive":
            stmt = stmt.where(Product.is_active.is_(False))
        if featured == "true":
            stmt = stmt.where(Product.is_featured.is_(True))
        elif featured == "false":
            stmt = stmt.where(Product.is_featured.is_(False))
        stmt = self._search(
            stmt, search, Product.name, Product.brand, Product.part_number, Product.car_type
        )
        return self._paginate(stmt, page, limit, [Product.created_at.desc()])

    def list_featured(self, limit: int = 8) -> List[Product]:
        """Активные рекомендуемые товары для главной страницы."""
        return list(
            self.db.scalars(
                select(Product)
                .where(Product.is_active.is_(True), Product.is_featured.is_(True))
                .order_by(Product.sort_order, Product.created_at.desc(), Product.id.desc())
                .limit(limit)
            ).all()
        )

    def get(self, product_id: int) -> Product:
        product = self.db.get(Product, product_id)
        if product is None:
            raise NotFoundError(PRODUCT_NOT_FOUND)
        return product

    def get_public(self, slug: str) -> Product:
        """
        Активный товар по slug без изменения счетчика просмотров.

        Raises:
            NotFoundError: Товара нет или он неактивен
        """
        product = self.db.scalar(
            select(Product).where(Product.slug == slug, Product.is_active.is_(True))
        )
        if product is None:
            raise NotFoundError(PRODUCT_NOT_FOUND)
        return product

    def get_by_slug(self, slug: str) -> Product:
        """
        Активный товар по slug. Счетчик просмотров увеличивается на 1
        одним UPDATE на стороне БД.
        """
        product = self.get_public(slug)

        self.db.execute(
            update(Product)
            .where(Product.id == product.id)
            .values(views_count=Product.views_count + 1)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        self.db.refresh(product)
        return product

    def get_related(self, product: Product, limit: int = 4) -> List[Product]:
        """Активные товары той же категории, кроме самого товара."""
        return list(
            self.db.scalars(
                select(Product)
                .where(
                    Product.category_id == product.category_id,
                    Product.id != product.id,
                    Product.is_active.is_(True),
                )
                .order_by(Product.created_at.desc(), Product.id.desc())
                .limit(limit)
            ).all()
        )

    # ---------------------------------------------------------------- запись

    def _check_category(self, category_id: int) -> None:
        if self.db.get(Category, category_id) is None:
            raise CategoryNotFoundError(errors=[{"field": "category", "message": "دسته‌بندی یافت نشد"}])

    def _append_images(self, product: Product, stored: Sequence[StoredImage]) -> None:
        make_main = product.main_image is None
        for offset, image in enumerate(stored):
            product.images.append(
                ProductImage(
                    position=len(product.images),
                    url=image.url,
                    alt=product.name,
                    is_main=make_main and offset == 0,
                    file_size=image.size,
                    mime_type=image.mime_type,
                )
            )

    def create(self, raw: Mapping[str, Any], files: Sequence[IncomingFile] = ()) -> Product:
        """
        Создать товар с изображениями. Первое изображение становится главным.

        Raises:
            ValidationError: Некорректные или отсутствующие поля
            CategoryNotFoundError: Категория не существует
            UploadError: Недопустимые файлы
            ConflictError: slug уже занят
        """
        fields = drop_empty(normalize_fields(raw, PRODUCT_BOOLEAN_FIELDS, PRODUCT_INTEGER_FIELDS))
        fields.pop("replaceImages", None)
        data = parse_model(ProductCreate, fields)
        self.images.validate(files)
        self._check_category(data.category_id)

        if data.slug and slug_exists(self.db, Product, data.slug):
            raise ConflictError(PRODUCT_CONFLICT_MESSAGES["slug"])
        slug = data.slug or unique_slug(self.db, Product, slugify(data.name, PRODUCT_SLUG_PREFIX))

        stored = self.images.store(files)
        product = Product(**data.model_dump(exclude={"slug"}), slug=slug, images=[])
        self._append_images(product, stored)
        self.db.add(product)
        commit_or_cleanup(self.db, self.images, stored, PRODUCT_CONFLICT_MESSAGES)
        self.db.refresh(product)
        logger.info("Created product %s (%s) with %d images", product.id, product.slug, len(stored))
        return product

    def update(
        self, product_id: int, raw: Mapping[str, Any], files: Sequence[IncomingFile] = ()
    ) -> Product:
        """
        Частично обновить товар.

        Новые изображения добавляются в конец списка. Если передан
        replaceImages=true, текущие изображения удаляются (файлы - после
        фиксации). Если у товара не было главного изображения, им
        становится первое новое.

        Raises:
            NotFoundError: Товар не найден
            ValidationError: Некорректные поля
            CategoryNotFoundError: Категория не существует
        """
        product = self.get(product_id)
        fields = normalize_fields(raw, PRODUCT_BOOLEAN_FIELDS, PRODUCT_INTEGER_FIELDS)
        if fields.get("replaceImages") is None:
            fields.pop("replaceImages", None)
        data = parse_model(ProductUpdate, fields)
        changes = data.model_dump(exclude_unset=True, exclude={"replace_images"})
        require_present(changes, REQUIRED_FIELDS)
        self.images.validate(files)

        if "category_id" in changes:
            self._check_category(changes["category_id"])
        if "slug" in changes:
            if changes["slug"] is None:
                name = changes.get("name") or product.name
                changes["slug"] = unique_slug(
                    self.db, Product, slugify(name, PRODUCT_SLUG_PREFIX), exclude_id=product.id
                )
            elif slug_exists(self.db, Product, changes["slug"], exclude_id=product.id):
                raise ConflictError(PRODUCT_CONFLICT_MESSAGES["slug"])

        stored = self.images.store(files)
        for key, value in changes.items():
            setattr(product, key, value)

        removed_urls: List[str] = []
        if data.replace_images:
            removed_urls = [image.url for image in product.images]
            product.images.clear()
        self._append_images(product, stored)

        commit_or_cleanup(self.db, self.images, stored, PRODUCT_CONFLICT_MESSAGES)
        for url in removed_urls:
            self.images.delete_url(url)
        self.db.refresh(product)
        logger.info("Updated product %s (+%d images)", product.id, len(stored))
        return product

    def delete(self, product_id: int) -> None:
        """Удалить товар: сначала файлы изображений, затем запись."""
        product = self.get(product_id)
        for image in product.images:
            self.images.delete_url(image.url)
        self.db.delete(product)
        self.db.commit()
        logger.info("Deleted product %s", product_id)

    def _image_at(self, product: Product, index: int) -> ProductImage:
        if index < 0 or index >= len(product.images):
            raise BoundsError()
        return product.images[index]

    def delete_image(self, product_id: int, index: int) -> Product:
        """
        Удалить изображение по индексу. Если удалено главное изображение,
        главным становится первое оставшееся.

        Raises:
            NotFoundError: Товар не найден
            BoundsError: Индекс вне [0, len)
        """
        product = self.get(product_id)
        image = self._image_at(product, index)
        was_main = image.is_main
        url = image.url

        product.images.pop(index)
        product.images.reorder()
        if was_main and product.images:
            product.images[0].is_main = True
        self.db.commit()

        self.images.delete_url(url)
        self.db.refresh(product)
        return product

    def set_main_image(self, product_id: int, index: int) -> Product:
        """
        Сделать изображение главным (у остальных флаг снимается).

        Raises:
            NotFoundError: Товар не найден
            BoundsError: Индекс вне [0, len)
        """
        product = self.get(product_id)
        self._image_at(product, index)
        for position, image in enumerate(product.images):
            image.is_main = position == index
        self.db.commit()
        self.db.refresh(product)
        return product
