"""
Shared Pydantic building blocks: the camelCase base model and the response envelope.
"""
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """
    Base schema for API payloads.

    Serialises with camelCase keys and accepts either camelCase or snake_case
    on input. ORM objects can be validated directly.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(CamelModel, Generic[T]):
    """
    Response envelope wrapping every successful payload.

    Fields:
    - success: Always true for successful responses
    - data: The payload
    - message: Optional human readable message
    """
    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None


class MessageResponse(CamelModel):
    message: str


def ok(data=None, message: Optional[str] = None) -> dict:
    """Build a success envelope."""
    return {"success": True, "data": data, "message": message}
