"""
Схемы для пагинации.
"""

from app.schemas.base import CamelModel

# Верхняя граница номера страницы
MAX_PAGE = 100_000


class PageMeta(CamelModel):
    """
    Метаданные пагинации.

    Attributes:
        total: Общее количество записей
        total_pages: Общее количество страниц (0 для пустого результата)
        current_page: Номер текущей страницы
        limit: Размер страницы
        has_next: Есть ли следующая страница
        has_prev: Есть ли предыдущая страница
    """

    total: int
    total_pages: int
    current_page: int
    limit: int
    has_next: bool
    has_prev: bool

    @classmethod
    def create(cls, page: int, limit: int, total: int) -> "PageMeta":
        """
        Создает экземпляр PageMeta с автоматическим расчетом total_pages.

        Args:
            page: Номер текущей страницы
            limit: Размер страницы
            total: Общее количество записей

        Returns:
            PageMeta: Экземпляр с рассчитанными метаданными
        """
        total_pages = (total + limit - 1) // limit if total > 0 else 0
        return cls(
            total=total,
            total_pages=total_pages,
            current_page=page,
            limit=limit,
            has_next=page < total_pages,
            has_prev=page > 1,
        )
