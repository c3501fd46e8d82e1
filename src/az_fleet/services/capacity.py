"""Capacity profile builder – pure validation of a (minimum, maximum, default) triple."""

import logging
from collections.abc import Mapping
from typing import Any

from az_fleet.errors import InvalidRangeError, MissingFieldError
from az_fleet.models.capacity import CapacityProfile, CapacityProfileConfig
from az_fleet.services._validation import parse_config

logger = logging.getLogger(__name__)


def build_capacity_profile(
    config: CapacityProfileConfig | Mapping[str, Any] | None,
    context: str = "Capacity profile",
) -> CapacityProfile:
    """Build a capacity triple.

    Rules:
    - ``minimum`` and ``maximum`` are required
    - ``default`` falls back to ``minimum``
    - ``0 <= minimum <= default <= maximum``

    *context* prefixes error messages so that nested capacities (e.g. inside
    an autoscale profile) report where they came from.
    """
    cfg = parse_config(CapacityProfileConfig, config, context)

    if cfg.minimum is None:
        raise MissingFieldError(f"{context} requires a minimum", field="minimum")
    if cfg.maximum is None:
        raise MissingFieldError(f"{context} requires a maximum", field="maximum")
    default = cfg.default if cfg.default is not None else cfg.minimum

    if cfg.minimum < 0:
        raise InvalidRangeError(
            f"{context} minimum must be zero or greater (got {cfg.minimum})",
            field="minimum",
        )
    if cfg.minimum > cfg.maximum:
        raise InvalidRangeError(
            f"{context} minimum ({cfg.minimum}) must not exceed maximum ({cfg.maximum})",
            field="maximum",
        )
    if not cfg.minimum <= default <= cfg.maximum:
        raise InvalidRangeError(
            f"{context} default ({default}) must lie between "
            f"minimum ({cfg.minimum}) and maximum ({cfg.maximum})",
            field="default",
        )

    profile = CapacityProfile(minimum=cfg.minimum, maximum=cfg.maximum, default=default)
    logger.debug(
        "Built %s: %d..%d (default %d)", context, profile.minimum, profile.maximum, profile.default
    )
    return profile
