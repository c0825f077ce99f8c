"""
Inbound payload validation for entity operations.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import ValidationFailure

M = TypeVar("M", bound=BaseModel)


def validate(schema: type[M], payload: Any) -> M:
    """
    Parse `payload` with `schema`, or raise ValidationFailure listing every
    violated field.
    """
    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        raise ValidationFailure.from_pydantic(exc) from exc


def require_id(value: str | None, field: str = "id") -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationFailure.missing(field)
    return cleaned


def reject_null(value: Any) -> Any:
    # Partial updates may omit a field but not clear a required one.
    if value is None:
        raise ValueError("Field may not be null.")
    return value
