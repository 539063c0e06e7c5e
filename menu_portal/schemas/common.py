"""Shared schema building blocks: camelCase models and the response envelope."""

from typing import Annotated, Any, Generic, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """Model that reads snake_case attributes and speaks camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ApiResponse(CamelModel, Generic[DataT]):
    """Success envelope returned by every JSON endpoint."""

    success: bool = True
    data: DataT | None = None
    message: str | None = None


def coerce_to_str(value: Any) -> Any:
    """Accept numeric identifiers where a string id is expected."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return value


LooseStr = Annotated[str, BeforeValidator(coerce_to_str)]
