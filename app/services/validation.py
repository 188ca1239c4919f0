"""
Валидация входных данных через pydantic-схемы с сообщениями на фарси.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.core.errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

# Названия полей для сообщений пользователю
FIELD_LABELS = {
    "name": "نام",
    "slug": "slug",
    "description": "توضیحات",
    "shortDescription": "توضیحات کوتاه",
    "category": "دسته‌بندی",
    "brand": "برند",
    "carType": "نوع خودرو",
    "partNumber": "شماره قطعه",
    "sortOrder": "ترتیب نمایش",
    "isActive": "وضعیت",
    "isFeatured": "محصول ویژه",
    "metaTitle": "عنوان متا",
    "metaDescription": "توضیحات متا",
    "email": "ایمیل",
    "password": "رمز عبور",
    "currentPassword": "رمز عبور فعلی",
    "newPassword": "رمز عبور جدید",
    "page": "شماره صفحه",
    "limit": "تعداد در صفحه",
}


def _field_name(loc: Sequence[Any]) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path", "form")]
    return parts[-1] if parts else ""


def _message(error: Mapping[str, Any], field: str) -> str:
    label = FIELD_LABELS.get(field, field)
    error_type = error.get("type", "")
    ctx = error.get("ctx") or {}

    if error_type == "string_too_short" and (ctx.get("min_length") or 0) > 1:
        return f"{label} باید حداقل {ctx['min_length']} کاراکتر باشد"
    if error_type == "missing" or error_type == "string_too_short":
        return f"{label} الزامی است"
    if error_type == "string_type" and error.get("input") is None:
        return f"{label} الزامی است"
    if error_type == "string_too_long":
        return f"{label} نباید بیشتر از {ctx.get('max_length')} کاراکتر باشد"
    if error_type == "greater_than_equal":
        return f"{label} باید عدد صحیح مثبت باشد"
    if error_type in ("less_than_equal", "greater_than", "less_than"):
        return f"{label} خارج از محدوده مجاز است"
    if error_type.startswith("value_error") and field == "email":
        return "فرمت ایمیل صحیح نیست"
    if error_type == "value_error" and ctx.get("error"):
        return str(ctx["error"])
    return f"{label} نامعتبر است"


def translate_errors(errors: Sequence[Mapping[str, Any]]) -> List[Dict[str, str]]:
    """Перевести ошибки pydantic в список {field, message}."""
    translated = []
    for error in errors:
        field = _field_name(error.get("loc", ()))
        translated.append({"field": field, "message": _message(error, field)})
    return translated


def parse_model(
    schema: Type[ModelT], data: Mapping[str, Any], message: Optional[str] = None
) -> ModelT:
    """
    Провалидировать данные схемой.

    Raises:
        ValidationError: Со списком ошибок по полям
    """
    try:
        return schema.model_validate(dict(data))
    except PydanticValidationError as exc:
        raise ValidationError(message, errors=translate_errors(exc.errors())) from exc


def require_present(
    changes: Mapping[str, Any], required: Mapping[str, str]
) -> None:
    """
    Запретить обнуление обязательных полей при частичном обновлении.

    Args:
        changes: Изменения (по именам атрибутов модели)
        required: Атрибут модели -> имя поля API
    """
    errors = [
        {"field": api_name, "message": f"{FIELD_LABELS.get(api_name, api_name)} الزامی است"}
        for attr, api_name in required.items()
        if attr in changes and changes[attr] is None
    ]
    if errors:
        raise ValidationError(errors=errors)
