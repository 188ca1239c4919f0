"""
Сервис категорий.

Создание, изменение и удаление категорий, а также публичные выборки
с живым подсчетом активных товаров.
"""

import logging
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, NotFoundError
from app.db.models import Category, Product
from app.schemas.category import CategoryCreate, CategoryUpdate
from app.services.image_service import ImageService, IncomingFile
from app.services.normalize import (
    CATEGORY_BOOLEAN_FIELDS,
    CATEGORY_INTEGER_FIELDS,
    drop_empty,
    normalize_fields,
)
from app.services.persistence import CATEGORY_CONFLICT_MESSAGES, commit_or_cleanup
from app.services.slug import CATEGORY_SLUG_PREFIX, slug_exists, slugify, unique_slug
from app.services.validation import parse_model, require_present

logger = logging.getLogger(__name__)

CATEGORY_NOT_FOUND = "دسته‌بندی یافت نشد"


def escape_like(value: str) -> str:
    """Экранировать спецсимволы LIKE, чтобы поиск шел по подстроке как есть."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def active_products_count():
    """Подзапрос: число активных товаров по категориям."""
    return (
        select(Product.category_id, func.count(Product.id).label("cnt"))
        .where(Product.is_active.is_(True))
        .group_by(Product.category_id)
        .subquery()
    )


class CategoryService:
    """
    Сервис категорий.

    Args:
        db: Сессия базы данных
        images: Сервис изображений категорий
    """

    def __init__(self, db: Session, images: ImageService):
        self.db = db
        self.images = images

    def list_public(self) -> List[Category]:
        """
        Активные категории с актуальным числом активных товаров,
        отсортированные по sort_order и имени.
        """
        counts = active_products_count()
        rows = self.db.execute(
            select(Category, func.coalesce(counts.c.cnt, 0))
            .outerjoin(counts, counts.c.category_id == Category.id)
            .where(Category.is_active.is_(True))
            .order_by(Category.sort_order, Category.name)
        ).all()

        categories = []
        for category, count in rows:
            category.products_count = count
            categories.append(category)
        return categories

    def list_admin(
        self,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Tuple[List[Category], int]:
        """
        Все категории с пагинацией.

        Args:
            page: Номер страницы (с 1)
            limit: Размер страницы
            search: Подстрока имени (без учета регистра)
            status: "active", "inactive" или None для всех

        Returns:
            Tuple[List[Category], int]: Категории страницы и общее количество
        """
        stmt = select(Category)
        if search:
            stmt = stmt.where(Category.name.ilike(f"%{escape_like(search)}%", escape="\\"))
        if status == "active":
            stmt = stmt.where(Category.is_active.is_(True))
        elif status == "inactive":
            stmt = stmt.where(Category.is_active.is_(False))

        total = self.db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
        items = self.db.scalars(
            stmt.order_by(Category.sort_order, Category.name, Category.id)
            .offset((page - 1) * limit)
            .limit(limit)
        ).all()
        return list(items), total

    def get(self, category_id: int) -> Category:
        category = self.db.get(Category, category_id)
        if category is None:
            raise NotFoundError(CATEGORY_NOT_FOUND)
        return category

    def get_by_slug(self, slug: str) -> Category:
        """
        Активная категория по slug. Сохраненный счетчик товаров
        пересчитывается и записывается.

        Raises:
            NotFoundError: Категории нет или она неактивна
        """
        category = self.db.scalar(
            select(Category).where(Category.slug == slug, Category.is_active.is_(True))
        )
        if category is None:
            raise NotFoundError(CATEGORY_NOT_FOUND)

        count = self.db.scalar(
            select(func.count(Product.id)).where(
                Product.category_id == category.id, Product.is_active.is_(True)
            )
        ) or 0
        if category.products_count != count:
            category.products_count = count
            self.db.commit()
        return category

    def _check_unique(self, name: Optional[str], slug: Optional[str], exclude_id: Optional[int] = None) -> None:
        if name is not None:
            stmt = select(Category.id).where(Category.name == name)
            if exclude_id is not None:
                stmt = stmt.where(Category.id != exclude_id)
            if self.db.scalar(stmt.limit(1)) is not None:
                raise ConflictError(CATEGORY_CONFLICT_MESSAGES["name"])
        if slug is not None and slug_exists(self.db, Category, slug, exclude_id):
            raise ConflictError(CATEGORY_CONFLICT_MESSAGES["slug"])

    def create(self, raw: Mapping[str, Any], files: Sequence[IncomingFile] = ()) -> Category:
        """
        Создать категорию.

        Args:
            raw: Поля запроса (camelCase или snake_case, строки формы)
            files: Необязательное изображение

        Raises:
            ValidationError: Некорректные поля
            ConflictError: Имя или slug уже заняты
            UploadError: Недопустимый файл
        """
        fields = drop_empty(
            normalize_fields(raw, CATEGORY_BOOLEAN_FIELDS, CATEGORY_INTEGER_FIELDS)
        )
        data = parse_model(CategoryCreate, fields)
        self.images.validate(files)

        explicit_slug = data.slug
        self._check_unique(data.name, explicit_slug)
        slug = explicit_slug or unique_slug(
            self.db, Category, slugify(data.name, CATEGORY_SLUG_PREFIX)
        )

        stored = self.images.store(files)
        category = Category(**data.model_dump(exclude={"slug"}), slug=slug)
        if stored:
            category.image = stored[0].url
        self.db.add(category)
        commit_or_cleanup(self.db, self.images, stored, CATEGORY_CONFLICT_MESSAGES)
        self.db.refresh(category)
        logger.info("Created category %s (%s)", category.id, category.slug)
        return category

    def update(
        self, category_id: int, raw: Mapping[str, Any], files: Sequence[IncomingFile] = ()
    ) -> Category:
        """
        Частично обновить категорию. Новое изображение заменяет старое,
        старый файл удаляется после фиксации.

        Raises:
            NotFoundError: Категория не найдена
            ValidationError: Некорректные поля
            ConflictError: Имя или slug заняты другой категорией
        """
        category = self.get(category_id)
        fields = normalize_fields(raw, CATEGORY_BOOLEAN_FIELDS, CATEGORY_INTEGER_FIELDS)
        data = parse_model(CategoryUpdate, fields)
        changes = data.model_dump(exclude_unset=True)
        require_present(changes, {"name": "name", "is_active": "isActive", "sort_order": "sortOrder"})
        self.images.validate(files)

        self._check_unique(changes.get("name"), changes.get("slug"), exclude_id=category.id)
        if "slug" in changes and changes["slug"] is None:
            # Пустой slug - сгенерировать заново из имени
            name = changes.get("name") or category.name
            changes["slug"] = unique_slug(
                self.db, Category, slugify(name, CATEGORY_SLUG_PREFIX), exclude_id=category.id
            )

        stored = self.images.store(files)
        old_image = category.image
        for key, value in changes.items():
            setattr(category, key, value)
        if stored:
            category.image = stored[0].url
        commit_or_cleanup(self.db, self.images, stored, CATEGORY_CONFLICT_MESSAGES)

        if stored and old_image:
            self.images.delete_url(old_image)
        self.db.refresh(category)
        logger.info("Updated category %s", category.id)
        return category

    def delete(self, category_id: int) -> None:
        """
        Удалить категорию и ее изображение.

        Raises:
            NotFoundError: Категория не найдена
            ConflictError: В категории есть товары
        """
        category = self.get(category_id)
        count = self.db.scalar(
            select(func.count(Product.id)).where(Product.category_id == category.id)
        ) or 0
        if count:
            raise ConflictError(
                f"نمی‌توان دسته‌بندی را حذف کرد. {count} محصول در این دسته وجود دارد"
            )

        image = category.image
        self.db.delete(category)
        self.db.commit()
        self.images.delete_url(image)
        logger.info("Deleted category %s", category_id)
