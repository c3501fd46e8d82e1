"""Pydantic models for autoscale settings.

Request models mirror the loosely-typed records supplied by the templating
layer; every field that a builder validates itself is optional here so the
builder can report the documented error category.  Built entities are
frozen and carry numeric capacity; string coercion is a renderer concern.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    model_validator,
)

from az_fleet.models.capacity import CapacityProfile, CapacityProfileConfig

ScaleDirection = Literal["Increase", "Decrease"]
TimeAggregationType = Literal["Average", "Minimum", "Maximum", "Total", "Count", "Last"]
ComparisonOperator = Literal[
    "Equals",
    "NotEquals",
    "GreaterThan",
    "GreaterThanOrEqual",
    "LessThan",
    "LessThanOrEqual",
]
ScaleChangeType = Literal["ChangeCount", "PercentChangeCount", "ExactCount"]
RecurrenceFrequency = Literal["Week", "Month"]

# Platform metrics exposed by every scale set; custom metrics are allowed too.
KNOWN_METRICS: tuple[str, ...] = (
    "Percentage CPU",
    "Available Memory Bytes",
    "Network In Total",
    "Network Out Total",
    "Disk Read Bytes/Sec",
    "Disk Write Bytes/Sec",
    "Data Disk Read Bytes/Sec",
    "Data Disk Write Bytes/Sec",
)

WEEKDAYS: tuple[str, ...] = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")
ALL_DAYS: tuple[str, ...] = WEEKDAYS + ("Saturday", "Sunday")

# ---------------------------------------------------------------------------
# Schedule sub-models (shared by request and entity)
# ---------------------------------------------------------------------------


class Recurrence(BaseModel):
    """Weekly/monthly recurrence window.

    Accepts the nested ARM shape ``{frequency, schedule: {...}}`` as well as
    the flat one and always stores the flat form.
    """

    model_config = ConfigDict(frozen=True)

    frequency: RecurrenceFrequency = "Week"
    timeZone: str = "UTC"
    days: list[str] = Field(default_factory=list)
    hours: list[StrictInt] = Field(default_factory=list)
    minutes: list[StrictInt] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _flatten_schedule(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("schedule"), dict):
            flat = {k: v for k, v in data.items() if k != "schedule"}
            for key, value in data["schedule"].items():
                flat.setdefault(key, value)
            return flat
        return data


class FixedDate(BaseModel):
    model_config = ConfigDict(frozen=True)

    timeZone: str = "UTC"
    start: datetime
    end: datetime


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class MetricScaleRuleConfig(BaseModel):
    metricName: str | None = None
    metricResourceUri: str | None = None
    timeGrain: str | None = None
    statistic: TimeAggregationType | None = None
    timeWindow: str | None = None
    timeAggregation: TimeAggregationType | None = None
    operator: ComparisonOperator | None = None
    # Checked by the builder: any non-numeric value is a type error.
    threshold: Any = None
    direction: ScaleDirection | None = None
    cooldown: str | None = None
    changeType: ScaleChangeType | None = Field(
        default=None, validation_alias=AliasChoices("changeType", "type")
    )
    value: StrictInt | StrictFloat | None = None


class ScheduleProfileConfig(BaseModel):
    name: str | None = None
    capacity: CapacityProfileConfig | None = None
    recurrence: Recurrence | None = None
    fixedDate: FixedDate | None = None


class AutoScaleProfileConfig(BaseModel):
    name: str | None = None
    capacity: CapacityProfileConfig | None = None
    rules: list[MetricScaleRuleConfig] = Field(default_factory=list)
    fixedDate: FixedDate | None = None
    recurrence: Recurrence | None = None


class EmailNotification(BaseModel):
    model_config = ConfigDict(frozen=True)

    sendToSubscriptionAdministrator: bool = False
    sendToSubscriptionCoAdministrators: bool = False
    customEmails: list[str] = Field(default_factory=list)


class WebhookNotification(BaseModel):
    model_config = ConfigDict(frozen=True)

    serviceUri: str
    properties: dict[str, str] = Field(default_factory=dict)


class AutoScaleNotification(BaseModel):
    model_config = ConfigDict(frozen=True)

    operation: Literal["Scale"] = "Scale"
    email: EmailNotification | None = None
    webhooks: list[WebhookNotification] = Field(default_factory=list)


class AutoScalePolicyConfig(BaseModel):
    name: str | None = None
    targetResourceUri: str | None = None
    enabled: StrictBool = True
    profiles: list[AutoScaleProfileConfig] | None = None
    notifications: list[AutoScaleNotification] | None = None
    tags: dict[str, str] | None = None


class CpuScalingPolicyConfig(BaseModel):
    name: str | None = None
    targetResourceUri: str | None = None
    scaleOutThreshold: StrictInt | StrictFloat = 75
    scaleInThreshold: StrictInt | StrictFloat = 25
    minInstances: StrictInt = 2
    maxInstances: StrictInt = 10
    defaultInstances: StrictInt = 2


class BusinessHours(BaseModel):
    start: StrictInt = 9
    end: StrictInt = 17


class BusinessHoursScheduleConfig(BaseModel):
    name: str | None = None
    businessHoursCapacity: CapacityProfileConfig | None = None
    offHoursCapacity: CapacityProfileConfig | None = None
    timeZone: str = "UTC"
    businessDays: list[str] = Field(default_factory=lambda: list(WEEKDAYS))
    businessHours: BusinessHours = Field(default_factory=BusinessHours)


# ---------------------------------------------------------------------------
# Built entities
# ---------------------------------------------------------------------------


class MetricScaleRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    metricName: str
    metricResourceUri: str | None = None
    timeGrain: str
    statistic: TimeAggregationType
    timeWindow: str
    timeAggregation: TimeAggregationType
    operator: ComparisonOperator
    threshold: int | float
    direction: ScaleDirection
    cooldown: str
    changeType: ScaleChangeType
    value: int | float


class AutoScaleProfile(BaseModel):
    """Named capacity range plus the rules active while it is in effect."""

    model_config = ConfigDict(frozen=True)

    name: str
    capacity: CapacityProfile
    rules: list[MetricScaleRule] = Field(default_factory=list)
    fixedDate: FixedDate | None = None
    recurrence: Recurrence | None = None


class AutoScalePolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    targetResourceUri: str
    enabled: bool = True
    profiles: list[AutoScaleProfile]
    notifications: list[AutoScaleNotification] = Field(default_factory=list)
    tags: dict[str, str] = Field(default_factory=dict)
