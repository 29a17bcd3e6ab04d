"""
Shared Response Schemas

Every endpoint answers with the same envelope:

    {"success": true, "message": "...", "data": {...}}

Routes are registered with response_model_exclude_none=True, so keys without
a value (for example message on a plain read) are left out of the JSON.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """
    Base for API payloads.

    Attributes are snake_case in Python and camelCase in JSON
    (created_at <-> createdAt). Both spellings are accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Envelope(BaseModel, Generic[T]):
    """Uniform success envelope."""

    success: bool = Field(default=True, description="Whether the call succeeded")
    message: str | None = Field(default=None, description="Human-readable outcome")
    data: T | None = Field(default=None, description="Response payload")


class ErrorDetail(BaseModel):
    """A field-level validation message."""

    field: str
    message: str


class ErrorEnvelope(BaseModel):
    """
    Error envelope, published in the OpenAPI responses of every router.

    The exception handlers in main.py build these bodies directly; stack is
    present outside production.
    """

    success: bool = False
    message: str
    errors: list[ErrorDetail] | None = None
    stack: str | None = None
