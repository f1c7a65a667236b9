"""Default validation of working copies through Pydantic.

Pydantic models and dataclasses are re-validated from their current field
values with a TypeAdapter, so assignments that bypassed validation while the
user edited the working copy are caught before Save. Types Pydantic cannot
build a schema for (e.g. dataclasses holding arbitrary classes) get no
default validation.
"""

from __future__ import annotations

import dataclasses
import logging
from functools import cache
from typing import Any

from pydantic import PydanticUserError, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from crudflow.session.models import ValidationError

logger = logging.getLogger(__name__)


@cache
def _adapter(cls: type) -> TypeAdapter[Any] | None:
    try:
        return TypeAdapter(cls)
    except PydanticUserError as e:
        # Includes PydanticSchemaGenerationError
        logger.debug("No default validation for %s: %s", cls.__name__, e)
        return None


def _field_values(obj: Any) -> dict[str, Any] | None:
    if hasattr(obj, "model_dump") and hasattr(type(obj), "model_fields"):
        return {name: getattr(obj, name) for name in type(obj).model_fields}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
    return None


def _location(loc: tuple[int | str, ...]) -> str:
    return ".".join(str(part) for part in loc)


def validate_model(obj: Any) -> list[ValidationError]:
    """Validate a Pydantic model or dataclass instance.

    Args:
        obj: Working copy to validate.

    Returns:
        One ValidationError per failing field location. Empty if valid, or if
        the object is neither a Pydantic model nor a dataclass Pydantic can
        build a schema for.
    """
    values = _field_values(obj)
    if values is None:
        return []

    adapter = _adapter(type(obj))
    if adapter is None:
        return []

    try:
        adapter.validate_python(values)
    except PydanticValidationError as e:
        grouped: dict[str, list[str]] = {}
        for detail in e.errors():
            grouped.setdefault(_location(detail["loc"]), []).append(detail["msg"])
        return [ValidationError(prop, tuple(msgs)) for prop, msgs in grouped.items()]
    return []
