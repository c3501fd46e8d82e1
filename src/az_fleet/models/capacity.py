"""Pydantic models for fleet capacity triples."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictInt


class CapacityProfileConfig(BaseModel):
    """Caller-supplied capacity bounds.

    ``min`` / ``max`` are accepted as shorthand for ``minimum`` / ``maximum``.
    """

    minimum: StrictInt | None = Field(default=None, validation_alias=AliasChoices("minimum", "min"))
    maximum: StrictInt | None = Field(default=None, validation_alias=AliasChoices("maximum", "max"))
    default: StrictInt | None = None


class CapacityProfile(BaseModel):
    """Validated capacity triple: ``minimum <= default <= maximum``."""

    model_config = ConfigDict(frozen=True)

    minimum: int
    maximum: int
    default: int
