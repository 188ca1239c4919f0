"""
Иерархия ошибок приложения.

Каждая ошибка знает свой HTTP статус и сообщение для пользователя
(на языке сайта). Обработчики в app.main превращают их в ответ
вида {"success": false, "message": ..., "errors": [...]}.
"""

from typing import Any, Dict, List, Optional


class AppError(Exception):
    """Базовая ошибка приложения."""

    status_code = 500
    default_message = "خطای سرور"

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
    ):
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": False, "message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationError(AppError):
    """Некорректные или отсутствующие входные данные."""

    status_code = 400
    default_message = "اطلاعات وارد شده صحیح نیست"


class CategoryNotFoundError(ValidationError):
    """Товар ссылается на несуществующую категорию."""

    default_message = "دسته‌بندی یافت نشد"


class BoundsError(ValidationError):
    """Индекс изображения вне диапазона."""

    default_message = "تصویر یافت نشد"


class UploadError(AppError):
    """Нарушение ограничений на тип, размер или количество файлов."""

    status_code = 400
    default_message = "خطا در بارگذاری فایل"


class ConflictError(AppError):
    """Нарушение уникальности или блокирующая ссылка."""

    status_code = 409
    default_message = "اطلاعات تکراری است"


class NotFoundError(AppError):
    status_code = 404
    default_message = "موردی یافت نشد"


class UnauthorizedError(AppError):
    status_code = 401
    default_message = "دسترسی غیرمجاز"


class InvalidCredentialsError(UnauthorizedError):
    """Неверный email или пароль (одно сообщение для всех случаев)."""

    default_message = "ایمیل یا رمز عبور اشتباه است"


class ForbiddenError(AppError):
    status_code = 403
    default_message = "دسترسی محدود - سطح دسترسی کافی نیست"


class InternalError(AppError):
    status_code = 500
    default_message = "خطای سرور"
