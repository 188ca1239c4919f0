"""
Сервис для работы с загружаемыми изображениями.

Проверяет тип, размер и количество файлов, сохраняет их в хранилище
и удаляет по URL. Пакет файлов проверяется целиком до записи первого
файла: отклоненный пакет не оставляет файлов на диске.
"""

import io
import logging
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from PIL import Image, UnidentifiedImageError

from app.core.config import settings
from app.core.errors import UploadError
from app.services.storage_service import StorageProvider

logger = logging.getLogger(__name__)

PRODUCTS_FOLDER = "products"
CATEGORIES_FOLDER = "categories"


@dataclass
class IncomingFile:
    """Файл из multipart-запроса, полностью прочитанный в память."""

    filename: str
    content_type: Optional[str]
    data: bytes


@dataclass
class StoredImage:
    """Сохраненный файл."""

    url: str
    path: str
    size: int
    mime_type: str


class ImageService:
    """
    Сервис для работы с изображениями.

    Args:
        storage: Провайдер хранилища
        folder: Подкаталог (products/categories)
        max_files: Максимальное число файлов в одном запросе
        max_size: Максимальный размер файла в байтах
        name_prefix: Префикс имени файла
    """

    # Поддерживаемые форматы
    SUPPORTED_FORMATS = {
        ".jpg": "image/jpeg",
        ".jpeg": "image/jpeg",
        ".png": "image/png",
        ".webp": "image/webp",
    }
    # Объявленный тип -> канонический MIME
    DECLARED_MIME_TYPES = {
        "image/jpeg": "image/jpeg",
        "image/jpg": "image/jpeg",
        "image/pjpeg": "image/jpeg",
        "image/png": "image/png",
        "image/webp": "image/webp",
    }

    # Форматы Pillow -> MIME тип
    PILLOW_FORMATS = {
        "JPEG": "image/jpeg",
        "MPO": "image/jpeg",
        "PNG": "image/png",
        "WEBP": "image/webp",
    }

    def __init__(
        self,
        storage: StorageProvider,
        folder: str,
        max_files: int,
        max_size: Optional[int] = None,
        name_prefix: str = "image",
    ):
        self.storage = storage
        self.folder = folder
        self.max_files = max_files
        self.max_size = max_size or settings.MAX_IMAGE_SIZE
        self.name_prefix = name_prefix

    def _size_message(self) -> str:
        megabytes = self.max_size / (1024 * 1024)
        if megabytes == int(megabytes):
            megabytes = int(megabytes)
        return f"حجم فایل بیش از حد مجاز است (حداکثر {megabytes} مگابایت)"

    @staticmethod
    def _type_message() -> str:
        return "فقط فایل‌های تصویری با فرمت JPG, JPEG, PNG, WEBP مجاز هستند"

    def _sniff(self, data: bytes) -> Optional[str]:
        """Определить MIME тип по содержимому файла."""
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.verify()
                return self.PILLOW_FORMATS.get(img.format or "")
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError, Image.DecompressionBombError):
            return None

    def validate(self, files: Sequence[IncomingFile]) -> List[str]:
        """
        Проверить пакет файлов.

        Args:
            files: Файлы запроса

        Returns:
            List[str]: MIME типы файлов (по содержимому)

        Raises:
            UploadError: Слишком много файлов, слишком большой файл
                или неподдерживаемый тип
        """
        if len(files) > self.max_files:
            raise UploadError(
                f"تعداد فایل‌ها بیش از حد مجاز است (حداکثر {self.max_files} فایل)"
            )

        mime_types = []
        for incoming in files:
            if len(incoming.data) > self.max_size:
                raise UploadError(self._size_message())

            ext = Path(incoming.filename or "").suffix.lower()
            declared = (incoming.content_type or "").lower()
            expected = self.SUPPORTED_FORMATS.get(ext)
            if expected is None or self.DECLARED_MIME_TYPES.get(declared) != expected:
                raise UploadError(self._type_message())

            # Содержимое должно соответствовать расширению
            if self._sniff(incoming.data) != expected:
                raise UploadError(self._type_message())
            mime_types.append(expected)

        return mime_types

    def generate_filename(self, original_name: str) -> str:
        """
        Сгенерировать уникальное имя файла: префикс, время в мс и случайный суффикс.
        """
        ext = Path(original_name).suffix.lower()
        return f"{self.name_prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}{ext}"

    def store(self, files: Sequence[IncomingFile]) -> List[StoredImage]:
        """
        Проверить и сохранить файлы.

        Если запись одного из файлов не удалась, уже записанные файлы
        этого пакета удаляются.

        Returns:
            List[StoredImage]: Сохраненные файлы в исходном порядке
        """
        mime_types = self.validate(files)
        stored: List[StoredImage] = []
        try:
            for incoming, mime_type in zip(files, mime_types):
                path = f"{self.folder}/{self.generate_filename(incoming.filename)}"
                self.storage.save_file(path, incoming.data)
                stored.append(
                    StoredImage(
                        url=self.storage.get_file_url(path),
                        path=path,
                        size=len(incoming.data),
                        mime_type=mime_type,
                    )
                )
        except Exception:
            self.discard(stored)
            raise
        return stored

    def discard(self, stored: Sequence[StoredImage]) -> None:
        """Удалить файлы, сохраненные в рамках неудачного запроса."""
        for image in stored:
            try:
                self.storage.delete_file(image.path)
            except OSError:
                logger.exception("Failed to remove orphaned file %s", image.path)

    def delete_url(self, url: Optional[str]) -> bool:
        """
        Удалить файл по публичному URL. Отсутствующий файл не является ошибкой.
        """
        if not url:
            return False
        path = self.storage.path_from_url(url)
        if path is None:
            logger.warning("Refusing to delete file outside storage: %s", url)
            return False
        try:
            return self.storage.delete_file(path)
        except (OSError, ValueError):
            logger.exception("Failed to delete file %s", url)
            return False
