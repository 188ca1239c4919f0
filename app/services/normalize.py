"""
Нормализация полей, пришедших из формы или JSON.

multipart/form-data передает все значения строками ("true", "12"),
JSON - типизированными. Здесь значения приводятся к одному виду до
валидации, чтобы сервисы не разбирались с транспортом.
"""

from typing import Any, Dict, Iterable, Mapping

from pydantic.alias_generators import to_camel

from app.core.errors import ValidationError

# Значения, которые фронтенд отправляет вместо отсутствующего поля
_EMPTY_MARKERS = {"", "null", "undefined"}

CATEGORY_BOOLEAN_FIELDS = {"isActive"}
CATEGORY_INTEGER_FIELDS = {"sortOrder"}

PRODUCT_BOOLEAN_FIELDS = {"isActive", "isFeatured", "replaceImages"}
PRODUCT_INTEGER_FIELDS = {"sortOrder"}


def to_bool(value: Any, field: str) -> bool:
    """Привести значение к bool: принимает bool и строки "true"/"false"."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    raise ValidationError(
        errors=[{"field": field, "message": f"مقدار {field} باید true یا false باشد"}]
    )


def to_int(value: Any) -> int:
    """Привести значение к int; нечисловой ввод превращается в 0."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        pass
    try:
        return int(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        return 0


def normalize_fields(
    raw: Mapping[str, Any],
    boolean_fields: Iterable[str] = (),
    integer_fields: Iterable[str] = (),
) -> Dict[str, Any]:
    """
    Нормализовать входные поля.

    - ключи snake_case переводятся в camelCase (формат API);
    - строки обрезаются, пустые значения становятся None;
    - булевы и целочисленные поля приводятся к типам.

    Args:
        raw: Поля запроса
        boolean_fields: Имена булевых полей (camelCase)
        integer_fields: Имена целочисленных полей (camelCase)

    Returns:
        Dict[str, Any]: Нормализованные поля
    """
    boolean_fields = set(boolean_fields)
    integer_fields = set(integer_fields)
    result: Dict[str, Any] = {}

    for key, value in raw.items():
        key = to_camel(key) if "_" in key else key
        if isinstance(value, str):
            value = value.strip()
            if value.lower() in _EMPTY_MARKERS:
                value = None
        if value is None:
            result[key] = None
            continue
        if key in boolean_fields:
            value = to_bool(value, key)
        elif key in integer_fields:
            value = to_int(value)
        result[key] = value

    return result


def drop_empty(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Убрать незаполненные поля (для создания записи)."""
    return {key: value for key, value in fields.items() if value is not None}
