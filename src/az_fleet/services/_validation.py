"""Shared helpers used by every builder.

Contains the config coercion step and the small precondition checks that
each builder runs in its documented order.  Pure functions, no I/O.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from az_fleet.errors import (
    InvalidRangeError,
    InvalidTypeError,
    MissingFieldError,
    from_validation_error,
)

_ConfigT = TypeVar("_ConfigT", bound=BaseModel)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# ISO-8601 durations as used by autoscale settings (PT1M, PT5M, P1D, ...).
ISO_DURATION_RE = re.compile(r"^P(?!$)(\d+D)?(T(?=\d)(\d+H)?(\d+M)?(\d+S)?)?$")


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def parse_config(
    model: type[_ConfigT],
    config: _ConfigT | Mapping[str, Any] | BaseModel | None,
    context: str,
) -> _ConfigT:
    """Return *config* as an instance of *model*.

    Mappings (and other pydantic models, e.g. a previously built entity) are
    validated into a new instance; the caller's object is never modified.
    """
    if isinstance(config, model):
        return config
    if isinstance(config, BaseModel):
        config = config.model_dump()
    try:
        return model.model_validate(config if config is not None else {})
    except ValidationError as exc:
        raise from_validation_error(exc, context) from exc


def require(value: Any, message: str, field: str) -> None:
    """Raise :class:`MissingFieldError` when *value* is empty, blank or absent."""
    if isinstance(value, str):
        value = value.strip()
    if value is None or (hasattr(value, "__len__") and len(value) == 0):
        raise MissingFieldError(message, field=field)


def is_number(value: Any) -> bool:
    """Return True for real numbers (``bool`` is not a number here)."""
    return isinstance(value, int | float) and not isinstance(value, bool)


def check_range(
    value: int | float,
    field: str,
    message: str,
    *,
    minimum: int | float | None = None,
    maximum: int | float | None = None,
) -> None:
    """Raise :class:`InvalidRangeError` when *value* lies outside the bounds."""
    if (minimum is not None and value < minimum) or (maximum is not None and value > maximum):
        raise InvalidRangeError(message, field=field)


def check_duration(value: str, field: str, context: str) -> str:
    """Return *value* if it is an ISO-8601 duration, else raise."""
    if not ISO_DURATION_RE.match(value):
        raise InvalidTypeError(
            f"{context} field '{field}' must be an ISO-8601 duration (got {value!r})",
            field=field,
        )
    return value
