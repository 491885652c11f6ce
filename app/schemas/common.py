"""
Shared schema building blocks.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel
from typing import Any, Dict, Type, TypeVar

from app.utils.exceptions import ValidationError

SchemaType = TypeVar("SchemaType", bound=BaseModel)


class CamelModel(BaseModel):
    """
    Base schema: snake_case attributes, camelCase on the wire.
    Input is accepted under either name.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PaginationMeta(CamelModel):
    page: int = Field(..., ge=1, examples=[1])
    limit: int = Field(..., ge=1, examples=[10])
    total: int = Field(..., ge=0, examples=[42])
    pages: int = Field(..., ge=1, examples=[5])


class MessageResponse(CamelModel):
    message: str


def format_validation_errors(exc: PydanticValidationError) -> list:
    details = []
    for error in exc.errors():
        details.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        })
    return details


def parse_payload(schema: Type[SchemaType], data: Dict[str, Any]) -> SchemaType:
    """
    Validate raw form or JSON data against ``schema``.

    Raises:
        ValidationError: With one entry per invalid field
    """
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        details = format_validation_errors(e)
        first = details[0]
        message = f"{first['field']}: {first['message']}" if first["field"] else first["message"]
        raise ValidationError(message, field_errors=details)
