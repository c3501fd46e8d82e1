"""Autoscale builders – metric rules, schedule profiles and policies.

Every builder is a pure function of its config: no I/O, no shared state.
The two composers (:func:`build_cpu_scaling_policy` and
:func:`build_business_hours_schedule`) produce the canonical shapes other
policies are compared against.
"""

import logging
from collections.abc import Mapping
from typing import Any

from az_fleet.errors import (
    CardinalityViolationError,
    InvalidRangeError,
    InvalidTypeError,
    MissingFieldError,
)
from az_fleet.models.autoscale import (
    ALL_DAYS,
    KNOWN_METRICS,
    AutoScalePolicy,
    AutoScalePolicyConfig,
    AutoScaleProfile,
    AutoScaleProfileConfig,
    BusinessHoursScheduleConfig,
    CpuScalingPolicyConfig,
    FixedDate,
    MetricScaleRule,
    MetricScaleRuleConfig,
    Recurrence,
    ScheduleProfileConfig,
)
from az_fleet.services._validation import (
    check_duration,
    check_range,
    is_number,
    parse_config,
    require,
)
from az_fleet.services.capacity import build_capacity_profile

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_TIME_GRAIN = "PT1M"
DEFAULT_TIME_WINDOW = "PT5M"
DEFAULT_COOLDOWN = "PT5M"

CPU_METRIC = "Percentage CPU"
DEFAULT_PROFILE_NAME = "Default Profile"
BUSINESS_HOURS_PROFILE_NAME = "Business Hours Profile"
OFF_HOURS_PROFILE_NAME = "Off Hours Profile"
SCHEDULE_MINIMUM_MESSAGE = "Schedule profile requires capacity with minimum value"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _check_fixed_date(fixed_date: FixedDate | None, context: str) -> FixedDate | None:
    if fixed_date is None:
        return None
    if (fixed_date.start.tzinfo is None) != (fixed_date.end.tzinfo is None):
        raise InvalidTypeError(
            f"{context} fixedDate start and end must both carry a UTC offset or neither",
            field="fixedDate",
        )
    if fixed_date.end < fixed_date.start:
        raise InvalidRangeError(
            f"{context} fixedDate end must not precede start", field="fixedDate"
        )
    return fixed_date


def _check_recurrence(recurrence: Recurrence | None, context: str) -> Recurrence | None:
    if recurrence is None:
        return None
    for hour in recurrence.hours:
        check_range(
            hour,
            "recurrence.hours",
            f"{context} recurrence hours must be 0-23",
            minimum=0,
            maximum=23,
        )
    for minute in recurrence.minutes:
        check_range(
            minute,
            "recurrence.minutes",
            f"{context} recurrence minutes must be 0-59",
            minimum=0,
            maximum=59,
        )
    return recurrence


def _hour_span(start: int, end: int) -> list[int]:
    return list(range(start, end))


# ---------------------------------------------------------------------------
# Rule and profile builders
# ---------------------------------------------------------------------------


def build_metric_scale_rule(config: MetricScaleRuleConfig | Mapping[str, Any]) -> MetricScaleRule:
    """Build one metric-triggered scale rule.

    Fails on a missing ``metricName`` first, then on a threshold that is
    not a number (``0`` is valid, ``"75"`` and ``None`` are not).
    """
    cfg = parse_config(MetricScaleRuleConfig, config, "Metric scale rule")

    require(cfg.metricName, "Metric scale rule requires a metricName", "metricName")
    if not is_number(cfg.threshold):
        raise InvalidTypeError("Metric scale rule requires a numeric threshold", field="threshold")
    require(cfg.direction, "Metric scale rule requires a direction", "direction")
    if cfg.metricName not in KNOWN_METRICS:
        logger.debug("Metric scale rule uses custom metric %r", cfg.metricName)

    context = "Metric scale rule"
    return MetricScaleRule(
        metricName=cfg.metricName,
        metricResourceUri=cfg.metricResourceUri or None,
        timeGrain=check_duration(cfg.timeGrain or DEFAULT_TIME_GRAIN, "timeGrain", context),
        statistic=cfg.statistic or "Average",
        timeWindow=check_duration(cfg.timeWindow or DEFAULT_TIME_WINDOW, "timeWindow", context),
        timeAggregation=cfg.timeAggregation or "Average",
        operator=cfg.operator or "GreaterThan",
        threshold=cfg.threshold,
        direction=cfg.direction,
        cooldown=check_duration(cfg.cooldown or DEFAULT_COOLDOWN, "cooldown", context),
        changeType=cfg.changeType or "ChangeCount",
        value=cfg.value if cfg.value is not None else 1,
    )


def build_schedule_profile(config: ScheduleProfileConfig | Mapping[str, Any]) -> AutoScaleProfile:
    """Build a schedule-driven profile (no metric rules).

    A ``capacity.minimum`` that is absent or not a number is reported as a
    missing field.
    """
    try:
        cfg = parse_config(ScheduleProfileConfig, config, "Schedule profile")
    except InvalidTypeError as exc:
        if exc.field in ("capacity.minimum", "capacity.min"):
            raise MissingFieldError(SCHEDULE_MINIMUM_MESSAGE, field="capacity.minimum") from exc
        raise

    require(cfg.name, "Schedule profile requires a name", "name")
    if cfg.capacity is None or cfg.capacity.minimum is None:
        raise MissingFieldError(SCHEDULE_MINIMUM_MESSAGE, field="capacity.minimum")

    context = f"Schedule profile '{cfg.name}'"
    return AutoScaleProfile(
        name=cfg.name,
        capacity=build_capacity_profile(cfg.capacity, context=f"{context} capacity"),
        rules=[],
        fixedDate=_check_fixed_date(cfg.fixedDate, context),
        recurrence=_check_recurrence(cfg.recurrence, context),
    )


def _build_profile(cfg: AutoScaleProfileConfig, index: int) -> AutoScaleProfile:
    require(cfg.name, f"Auto-scale profile #{index} requires a name", f"profiles[{index}].name")
    context = f"Auto-scale profile '{cfg.name}'"
    if cfg.capacity is None:
        raise MissingFieldError(
            f"{context} requires a capacity", field=f"profiles[{index}].capacity"
        )
    return AutoScaleProfile(
        name=cfg.name,
        capacity=build_capacity_profile(cfg.capacity, context=f"{context} capacity"),
        rules=[build_metric_scale_rule(rule) for rule in cfg.rules],
        fixedDate=_check_fixed_date(cfg.fixedDate, context),
        recurrence=_check_recurrence(cfg.recurrence, context),
    )


# ---------------------------------------------------------------------------
# Policy builders
# ---------------------------------------------------------------------------


def build_autoscale_policy(config: AutoScalePolicyConfig | Mapping[str, Any]) -> AutoScalePolicy:
    """Build an autoscale policy bound to one scalable target.

    Checks, in order: ``name``, ``targetResourceUri``, at least one profile.
    An explicitly empty ``profiles`` list fails before the other checks.
    """
    cfg = parse_config(AutoScalePolicyConfig, config, "Auto-scale policy")

    if cfg.profiles is not None and not cfg.profiles:
        raise CardinalityViolationError(
            "Auto-scale policy requires at least one profile", field="profiles"
        )
    require(cfg.name, "Auto-scale policy requires a name", "name")
    require(
        cfg.targetResourceUri,
        "Auto-scale policy requires a targetResourceUri",
        "targetResourceUri",
    )
    if not cfg.profiles:
        raise CardinalityViolationError(
            "Auto-scale policy requires at least one profile", field="profiles"
        )

    policy = AutoScalePolicy(
        name=cfg.name,
        targetResourceUri=cfg.targetResourceUri,
        enabled=cfg.enabled,
        profiles=[_build_profile(profile, i) for i, profile in enumerate(cfg.profiles)],
        notifications=list(cfg.notifications or []),
        tags=dict(cfg.tags or {}),
    )
    logger.debug(
        "Built auto-scale policy %s with %d profile(s)", policy.name, len(policy.profiles)
    )
    return policy


def build_cpu_scaling_policy(config: CpuScalingPolicyConfig | Mapping[str, Any]) -> AutoScalePolicy:
    """Build the canonical single-profile CPU policy.

    Scale out by one instance when average CPU exceeds ``scaleOutThreshold``
    (default 75) and scale in by one when it drops below
    ``scaleInThreshold`` (default 25), with 5-minute windows and cooldowns.
    """
    cfg = parse_config(CpuScalingPolicyConfig, config, "CPU scaling policy")

    if cfg.scaleInThreshold >= cfg.scaleOutThreshold:
        logger.warning(
            "CPU scaling policy %s: scale-in threshold %s is not below scale-out threshold %s",
            cfg.name,
            cfg.scaleInThreshold,
            cfg.scaleOutThreshold,
        )

    common = {
        "metricName": CPU_METRIC,
        "timeGrain": DEFAULT_TIME_GRAIN,
        "statistic": "Average",
        "timeWindow": DEFAULT_TIME_WINDOW,
        "timeAggregation": "Average",
        "cooldown": DEFAULT_COOLDOWN,
        "changeType": "ChangeCount",
        "value": 1,
    }
    return build_autoscale_policy(
        {
            "name": cfg.name,
            "targetResourceUri": cfg.targetResourceUri,
            "profiles": [
                {
                    "name": DEFAULT_PROFILE_NAME,
                    "capacity": {
                        "minimum": cfg.minInstances,
                        "maximum": cfg.maxInstances,
                        "default": cfg.defaultInstances,
                    },
                    "rules": [
                        {
                            **common,
                            "operator": "GreaterThan",
                            "threshold": cfg.scaleOutThreshold,
                            "direction": "Increase",
                        },
                        {
                            **common,
                            "operator": "LessThan",
                            "threshold": cfg.scaleInThreshold,
                            "direction": "Decrease",
                        },
                    ],
                }
            ],
        }
    )


def build_business_hours_schedule(
    config: BusinessHoursScheduleConfig | Mapping[str, Any],
) -> list[AutoScaleProfile]:
    """Build the business-hours / off-hours profile pair.

    The business profile covers ``businessDays`` over ``[start, end)``;
    the off-hours profile covers all seven days over the complementary
    hours ``[0, start) ∪ [end, 24)``.  Overlap with other custom profiles
    is not detected.
    """
    cfg = parse_config(BusinessHoursScheduleConfig, config, "Business hours schedule")

    if cfg.businessHoursCapacity is None:
        raise MissingFieldError(
            "Business hours schedule requires a businessHoursCapacity",
            field="businessHoursCapacity",
        )
    if cfg.offHoursCapacity is None:
        raise MissingFieldError(
            "Business hours schedule requires an offHoursCapacity", field="offHoursCapacity"
        )

    start, end = cfg.businessHours.start, cfg.businessHours.end
    if not 0 <= start < end <= 24:
        raise InvalidRangeError(
            f"Business hours must satisfy 0 <= start < end <= 24 (got {start}-{end})",
            field="businessHours",
        )

    business_days = list(cfg.businessDays)
    require(
        business_days,
        "Business hours schedule requires at least one business day",
        "businessDays",
    )

    return [
        build_schedule_profile(
            {
                "name": BUSINESS_HOURS_PROFILE_NAME,
                "capacity": cfg.businessHoursCapacity.model_dump(),
                "recurrence": {
                    "frequency": "Week",
                    "timeZone": cfg.timeZone,
                    "days": business_days,
                    "hours": _hour_span(start, end),
                    "minutes": [0],
                },
            }
        ),
        build_schedule_profile(
            {
                "name": OFF_HOURS_PROFILE_NAME,
                "capacity": cfg.offHoursCapacity.model_dump(),
                "recurrence": {
                    "frequency": "Week",
                    "timeZone": cfg.timeZone,
                    "days": list(ALL_DAYS),
                    "hours": _hour_span(0, start) + _hour_span(end, 24),
                    "minutes": [0],
                },
            }
        ),
    ]
