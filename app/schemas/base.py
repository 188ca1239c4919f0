"""
Базовая схема API.

Поля в Python называются в snake_case, в JSON - в camelCase.
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# Верхняя граница колонок Integer
MAX_INT = 2**31 - 1


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def dump(self) -> Dict[str, Any]:
        """Сериализовать в JSON-совместимый dict с camelCase ключами."""
        return self.model_dump(by_alias=True, mode="json")
