"""Validation error taxonomy shared by every builder.

All failures are deterministic and local: a builder raises the first
violated precondition it checks and never returns a partial entity.
"""

from __future__ import annotations

from pydantic import ValidationError


class FleetValidationError(ValueError):
    """Base class for every domain validation failure."""

    category = "ValidationError"

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field


class MissingFieldError(FleetValidationError):
    """A required string or collection field was empty or absent."""

    category = "MissingField"


class InvalidRangeError(FleetValidationError):
    """A numeric field fell outside its legal bound."""

    category = "InvalidRange"


class InvalidTypeError(FleetValidationError):
    """A field was present but not of the expected kind."""

    category = "InvalidType"


class CardinalityViolationError(FleetValidationError):
    """A collection had the wrong size or broke an exactly-one constraint."""

    category = "CardinalityViolation"


_ERROR_BY_PYDANTIC_TYPE: dict[str, type[FleetValidationError]] = {
    "missing": MissingFieldError,
    "greater_than": InvalidRangeError,
    "greater_than_equal": InvalidRangeError,
    "less_than": InvalidRangeError,
    "less_than_equal": InvalidRangeError,
    "too_short": CardinalityViolationError,
    "too_long": CardinalityViolationError,
}


# Member labels pydantic appends to the location of a failed union branch.
_UNION_MEMBER_LABELS = frozenset({"int", "float", "bool", "str"})


def _format_loc(loc: tuple[int | str, ...]) -> str:
    parts: list[str] = []
    for item in loc:
        if item in _UNION_MEMBER_LABELS:
            continue
        if isinstance(item, int):
            parts.append(f"[{item}]")
        elif parts:
            parts.append(f".{item}")
        else:
            parts.append(item)
    return "".join(parts)


def from_validation_error(exc: ValidationError, context: str) -> FleetValidationError:
    """Translate the first pydantic error into the domain taxonomy.

    *context* names the entity being built (e.g. ``"Metric scale rule"``)
    and prefixes the message.
    """
    first = exc.errors()[0]
    error_cls = _ERROR_BY_PYDANTIC_TYPE.get(first["type"], InvalidTypeError)
    field = _format_loc(tuple(first["loc"])) or None
    if field:
        message = f"{context} field '{field}': {first['msg']}"
    else:
        message = f"{context}: {first['msg']}"
    return error_cls(message, field=field)
