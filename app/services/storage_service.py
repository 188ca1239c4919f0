"""
Сервис для работы с хранилищем файлов.

Обеспечивает единый интерфейс для записи, удаления и построения
публичных URL загруженных файлов. Файлы хранятся на локальном диске
и раздаются приложением через StaticFiles (см. app.main).
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from app.core.config import settings

logger = logging.getLogger(__name__)


class StorageProvider(ABC):
    """
    Абстрактный базовый класс для провайдеров хранилища.

    Пути файлов относительные (например, products/abc.jpg).
    """

    @abstractmethod
    def save_file(self, file_path: str, file_data: bytes) -> None:
        pass

    @abstractmethod
    def delete_file(self, file_path: str) -> bool:
        pass

    @abstractmethod
    def file_exists(self, file_path: str) -> bool:
        pass

    @abstractmethod
    def get_file_url(self, file_path: str) -> str:
        pass

    @abstractmethod
    def path_from_url(self, url: str) -> Optional[str]:
        pass


class LocalStorageProvider(StorageProvider):
    """
    Локальное хранилище файлов.

    Args:
        base_path: Корневой каталог (по умолчанию settings.STORAGE_PATH)
        url_prefix: Публичный префикс URL (по умолчанию settings.UPLOADS_URL_PREFIX)
    """

    def __init__(self, base_path: Optional[str] = None, url_prefix: Optional[str] = None):
        self.base_path = Path(base_path or settings.STORAGE_PATH).resolve()
        self.url_prefix = (url_prefix or settings.UPLOADS_URL_PREFIX).rstrip("/")
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _full_path(self, file_path: str) -> Path:
        full_path = (self.base_path / file_path.lstrip("/")).resolve()
        if self.base_path not in full_path.parents:
            raise ValueError(f"Path escapes storage root: {file_path}")
        return full_path

    def save_file(self, file_path: str, file_data: bytes) -> None:
        """
        Сохранить файл.

        Файл открывается в режиме "xb": существующий файл не перезаписывается.

        Raises:
            FileExistsError: Файл с таким именем уже существует
            OSError: Ошибка записи на диск
        """
        full_path = self._full_path(file_path)
        full_path.parent.mkdir(parents=True, exist_ok=True)
        with open(full_path, "xb") as f:
            f.write(file_data)
        logger.info("Stored file %s (%d bytes)", file_path, len(file_data))

    def delete_file(self, file_path: str) -> bool:
        """
        Удалить файл. Повторное удаление не является ошибкой.

        Returns:
            bool: True если файл был удален, False если его не было
        """
        try:
            self._full_path(file_path).unlink()
        except FileNotFoundError:
            return False
        logger.info("Deleted file %s", file_path)
        return True

    def file_exists(self, file_path: str) -> bool:
        return self._full_path(file_path).is_file()

    def get_file_url(self, file_path: str) -> str:
        return f"{self.url_prefix}/{file_path.lstrip('/')}"

    def path_from_url(self, url: str) -> Optional[str]:
        """Получить относительный путь по публичному URL (None для чужих URL)."""
        prefix = f"{self.url_prefix}/"
        if not url or not url.startswith(prefix):
            return None
        return url[len(prefix):]
