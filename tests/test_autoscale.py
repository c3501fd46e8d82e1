"""Tests for autoscale builders.

Covers:
- build_metric_scale_rule (required fields, numeric threshold, defaults)
- build_schedule_profile (fixed date / recurrence, validation)
- build_autoscale_policy (ordered checks, nested rule validation)
- build_cpu_scaling_policy and build_business_hours_schedule composers
"""

from datetime import UTC, datetime

import pytest

from az_fleet.errors import (
    CardinalityViolationError,
    InvalidRangeError,
    InvalidTypeError,
    MissingFieldError,
)
from az_fleet.services.autoscale import (
    build_autoscale_policy,
    build_business_hours_schedule,
    build_cpu_scaling_policy,
    build_metric_scale_rule,
    build_schedule_profile,
)


def _make_policy(**overrides) -> dict:
    config: dict = {
        "name": "webApp-autoscale",
        "targetResourceUri": "/subscriptions/000/vmss/webApp-vmss",
        "profiles": [
            {
                "name": "Default Profile",
                "capacity": {"minimum": 2, "maximum": 10, "default": 3},
                "rules": [
                    {
                        "metricName": "Percentage CPU",
                        "threshold": 75,
                        "direction": "Increase",
                    }
                ],
            }
        ],
    }
    config.update(overrides)
    return config


# ---------------------------------------------------------------------------
# Metric rules
# ---------------------------------------------------------------------------


class TestMetricScaleRule:
    def test_full_rule(self, cpu_rule_config: dict) -> None:
        rule = build_metric_scale_rule(cpu_rule_config)
        assert rule.metricName == "Percentage CPU"
        assert rule.threshold == 80
        assert rule.direction == "Increase"
        assert rule.changeType == "ChangeCount"
        assert rule.value == 2
        assert rule.timeWindow == "PT10M"

    def test_defaults(self) -> None:
        rule = build_metric_scale_rule(
            {
                "metricName": "Available Memory Bytes",
                "threshold": 1073741824,
                "direction": "Increase",
            }
        )
        assert rule.timeGrain == "PT1M"
        assert rule.timeWindow == "PT5M"
        assert rule.cooldown == "PT5M"
        assert rule.statistic == "Average"
        assert rule.timeAggregation == "Average"
        assert rule.operator == "GreaterThan"
        assert rule.changeType == "ChangeCount"
        assert rule.value == 1
        assert rule.metricResourceUri is None

    def test_missing_metric_name(self) -> None:
        with pytest.raises(MissingFieldError, match="requires a metricName"):
            build_metric_scale_rule({})

    def test_missing_threshold(self) -> None:
        with pytest.raises(InvalidTypeError, match="numeric threshold"):
            build_metric_scale_rule({"metricName": "Percentage CPU", "direction": "Increase"})

    @pytest.mark.parametrize("threshold", ["75", None, True, [75], {"v": 75}])
    def test_non_numeric_threshold(self, cpu_rule_config: dict, threshold: object) -> None:
        cpu_rule_config["threshold"] = threshold
        with pytest.raises(InvalidTypeError):
            build_metric_scale_rule(cpu_rule_config)

    @pytest.mark.parametrize("threshold", [0, 0.5, -10])
    def test_zero_and_fractional_thresholds_accepted(
        self, cpu_rule_config: dict, threshold: float
    ) -> None:
        cpu_rule_config["threshold"] = threshold
        assert build_metric_scale_rule(cpu_rule_config).threshold == threshold

    def test_missing_direction(self) -> None:
        with pytest.raises(MissingFieldError, match="direction"):
            build_metric_scale_rule({"metricName": "Percentage CPU", "threshold": 50})

    def test_invalid_duration(self, cpu_rule_config: dict) -> None:
        cpu_rule_config["cooldown"] = "5 minutes"
        with pytest.raises(InvalidTypeError, match="ISO-8601"):
            build_metric_scale_rule(cpu_rule_config)

    def test_invalid_operator(self, cpu_rule_config: dict) -> None:
        cpu_rule_config["operator"] = "Around"
        with pytest.raises(InvalidTypeError):
            build_metric_scale_rule(cpu_rule_config)

    def test_rebuild_from_output_is_identical(self, cpu_rule_config: dict) -> None:
        first = build_metric_scale_rule(cpu_rule_config)
        assert build_metric_scale_rule(first.model_dump()) == first


# ---------------------------------------------------------------------------
# Schedule profiles
# ---------------------------------------------------------------------------


class TestScheduleProfile:
    def test_fixed_date_profile(self) -> None:
        profile = build_schedule_profile(
            {
                "name": "Black Friday Profile",
                "capacity": {"minimum": 10, "maximum": 50, "default": 15},
                "fixedDate": {
                    "timeZone": "UTC",
                    "start": "2025-11-29T00:00:00.000Z",
                    "end": "2025-11-30T23:59:59.000Z",
                },
            }
        )
        assert profile.name == "Black Friday Profile"
        assert profile.capacity.minimum == 10
        assert profile.fixedDate is not None
        assert profile.fixedDate.start == datetime(2025, 11, 29, tzinfo=UTC)
        assert profile.rules == []
        assert profile.recurrence is None

    def test_nested_recurrence_is_flattened(self) -> None:
        profile = build_schedule_profile(
            {
                "name": "Weekend",
                "capacity": {"minimum": 1, "maximum": 2, "default": 1},
                "recurrence": {
                    "frequency": "Week",
                    "schedule": {
                        "timeZone": "Pacific Standard Time",
                        "days": ["Saturday", "Sunday"],
                        "hours": [0],
                        "minutes": [0],
                    },
                },
            }
        )
        assert profile.recurrence is not None
        assert profile.recurrence.timeZone == "Pacific Standard Time"
        assert profile.recurrence.days == ["Saturday", "Sunday"]

    def test_recurrence_time_zone_defaults_to_utc(self) -> None:
        profile = build_schedule_profile(
            {
                "name": "Nightly",
                "capacity": {"minimum": 1, "maximum": 1},
                "recurrence": {"frequency": "Week", "days": ["Monday"], "hours": [2]},
            }
        )
        assert profile.recurrence.timeZone == "UTC"

    def test_missing_name(self) -> None:
        with pytest.raises(MissingFieldError, match="requires a name"):
            build_schedule_profile({})

    def test_missing_capacity(self) -> None:
        with pytest.raises(MissingFieldError, match="capacity with minimum value"):
            build_schedule_profile({"name": "test"})

    def test_capacity_without_minimum(self) -> None:
        with pytest.raises(MissingFieldError):
            build_schedule_profile({"name": "test", "capacity": {"maximum": 3}})

    def test_end_before_start(self) -> None:
        with pytest.raises(InvalidRangeError, match="fixedDate"):
            build_schedule_profile(
                {
                    "name": "Backwards",
                    "capacity": {"minimum": 1, "maximum": 2},
                    "fixedDate": {
                        "start": "2025-12-02T00:00:00Z",
                        "end": "2025-12-01T00:00:00Z",
                    },
                }
            )

    def test_hour_out_of_range(self) -> None:
        with pytest.raises(InvalidRangeError):
            build_schedule_profile(
                {
                    "name": "Bad hours",
                    "capacity": {"minimum": 1, "maximum": 2},
                    "recurrence": {"days": ["Monday"], "hours": [24], "minutes": [0]},
                }
            )


# ---------------------------------------------------------------------------
# Policies
# ---------------------------------------------------------------------------


class TestAutoScalePolicy:
    def test_basic_policy(self) -> None:
        policy = build_autoscale_policy(_make_policy())
        assert policy.name == "webApp-autoscale"
        assert policy.enabled is True
        assert len(policy.profiles) == 1
        assert len(policy.profiles[0].rules) == 1
        assert policy.profiles[0].rules[0].cooldown == "PT5M"

    def test_disabled_policy(self) -> None:
        assert build_autoscale_policy(_make_policy(enabled=False)).enabled is False

    def test_missing_name_checked_first(self) -> None:
        with pytest.raises(MissingFieldError, match="requires a name"):
            build_autoscale_policy({})

    def test_missing_target_checked_second(self) -> None:
        with pytest.raises(MissingFieldError, match="targetResourceUri"):
            build_autoscale_policy({"name": "test"})

    def test_absent_profiles(self) -> None:
        with pytest.raises(CardinalityViolationError, match="at least one profile"):
            build_autoscale_policy({"name": "test", "targetResourceUri": "test"})

    @pytest.mark.parametrize(
        ("name", "target"),
        [("test", "test"), ("", "test"), ("test", ""), ("", "")],
    )
    def test_empty_profiles_always_cardinality(self, name: str, target: str) -> None:
        with pytest.raises(CardinalityViolationError):
            build_autoscale_policy({"name": name, "targetResourceUri": target, "profiles": []})

    def test_invalid_nested_rule(self) -> None:
        config = _make_policy()
        config["profiles"][0]["rules"][0]["threshold"] = "high"
        with pytest.raises(InvalidTypeError):
            build_autoscale_policy(config)

    def test_invalid_profile_capacity(self) -> None:
        config = _make_policy()
        config["profiles"][0]["capacity"] = {"minimum": 2, "maximum": 10, "default": 15}
        with pytest.raises(InvalidRangeError, match="Default Profile"):
            build_autoscale_policy(config)

    def test_profile_requires_name(self) -> None:
        config = _make_policy()
        del config["profiles"][0]["name"]
        with pytest.raises(MissingFieldError):
            build_autoscale_policy(config)

    def test_notifications_and_tags(self) -> None:
        policy = build_autoscale_policy(
            _make_policy(
                notifications=[
                    {
                        "operation": "Scale",
                        "email": {"customEmails": ["ops@example.com"]},
                        "webhooks": [{"serviceUri": "https://hooks.example.com/scale"}],
                    }
                ],
                tags={"env": "prod"},
            )
        )
        assert policy.notifications[0].email.customEmails == ["ops@example.com"]
        assert policy.notifications[0].webhooks[0].serviceUri == "https://hooks.example.com/scale"
        assert policy.tags == {"env": "prod"}

    def test_input_not_mutated(self) -> None:
        config = _make_policy()
        snapshot = repr(config)
        build_autoscale_policy(config)
        assert repr(config) == snapshot

    def test_rebuild_from_output_is_identical(self) -> None:
        config = _make_policy()
        config["profiles"].append(
            {
                "name": "Holiday",
                "capacity": {"minimum": 4, "maximum": 12, "default": 6},
                "fixedDate": {
                    "start": "2025-12-24T00:00:00Z",
                    "end": "2025-12-26T00:00:00Z",
                },
            }
        )
        first = build_autoscale_policy(config)
        assert build_autoscale_policy(first.model_dump()) == first


class TestCpuScalingPolicy:
    def test_defaults(self, vmss_uri: str) -> None:
        policy = build_cpu_scaling_policy({"name": "cpu-autoscale", "targetResourceUri": vmss_uri})
        assert len(policy.profiles) == 1
        profile = policy.profiles[0]
        assert profile.name == "Default Profile"
        assert profile.capacity.model_dump() == {"minimum": 2, "maximum": 10, "default": 2}
        assert len(profile.rules) == 2
        scale_out, scale_in = profile.rules
        assert (scale_out.direction, scale_out.threshold, scale_out.operator) == (
            "Increase",
            75,
            "GreaterThan",
        )
        assert (scale_in.direction, scale_in.threshold, scale_in.operator) == (
            "Decrease",
            25,
            "LessThan",
        )
        for rule in profile.rules:
            assert rule.metricName == "Percentage CPU"
            assert rule.timeWindow == "PT5M"
            assert rule.cooldown == "PT5M"
            assert rule.changeType == "ChangeCount"
            assert rule.value == 1

    def test_custom_thresholds(self, vmss_uri: str) -> None:
        policy = build_cpu_scaling_policy(
            {
                "name": "cpu",
                "targetResourceUri": vmss_uri,
                "scaleOutThreshold": 60,
                "scaleInThreshold": 20,
                "minInstances": 1,
                "maxInstances": 4,
                "defaultInstances": 1,
            }
        )
        thresholds = [rule.threshold for rule in policy.profiles[0].rules]
        assert thresholds == [60, 20]
        assert policy.profiles[0].capacity.maximum == 4

    def test_missing_name(self, vmss_uri: str) -> None:
        with pytest.raises(MissingFieldError):
            build_cpu_scaling_policy({"targetResourceUri": vmss_uri})

    def test_inverted_thresholds_logged(self, vmss_uri: str, caplog) -> None:
        with caplog.at_level("WARNING", logger="az_fleet"):
            build_cpu_scaling_policy(
                {
                    "name": "odd",
                    "targetResourceUri": vmss_uri,
                    "scaleOutThreshold": 20,
                    "scaleInThreshold": 80,
                }
            )
        assert "not below scale-out threshold" in caplog.text


class TestBusinessHoursSchedule:
    def _build(self, **overrides) -> list:
        config: dict = {
            "name": "Business Schedule",
            "businessHoursCapacity": {"min": 5, "max": 20, "default": 8},
            "offHoursCapacity": {"min": 2, "max": 5, "default": 2},
            "timeZone": "Eastern Standard Time",
            "businessDays": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"],
            "businessHours": {"start": 8, "end": 18},
        }
        config.update(overrides)
        return build_business_hours_schedule(config)

    def test_two_profiles(self) -> None:
        business, off = self._build()
        assert business.name == "Business Hours Profile"
        assert business.capacity.minimum == 5
        assert off.name == "Off Hours Profile"
        assert off.capacity.minimum == 2

    def test_business_hours_range(self) -> None:
        business, _ = self._build()
        assert business.recurrence.hours == list(range(8, 18))
        assert business.recurrence.days == [
            "Monday",
            "Tuesday",
            "Wednesday",
            "Thursday",
            "Friday",
        ]
        assert business.recurrence.timeZone == "Eastern Standard Time"
        assert business.recurrence.minutes == [0]

    def test_off_hours_complement_all_days(self) -> None:
        _, off = self._build()
        assert set(off.recurrence.hours) == set(range(0, 8)) | set(range(18, 24))
        assert len(off.recurrence.days) == 7

    def test_defaults(self) -> None:
        business, off = build_business_hours_schedule(
            {
                "businessHoursCapacity": {"minimum": 3, "maximum": 6, "default": 3},
                "offHoursCapacity": {"minimum": 1, "maximum": 2, "default": 1},
            }
        )
        assert business.recurrence.timeZone == "UTC"
        assert business.recurrence.hours == list(range(9, 17))
        assert business.recurrence.days[0] == "Monday"
        assert len(business.recurrence.days) == 5
        assert off.recurrence.hours == [*range(0, 9), *range(17, 24)]

    @pytest.mark.parametrize(("start", "end"), [(18, 8), (8, 8), (-1, 5), (5, 25)])
    def test_invalid_hours(self, start: int, end: int) -> None:
        with pytest.raises(InvalidRangeError):
            self._build(businessHours={"start": start, "end": end})

    def test_missing_capacity(self) -> None:
        with pytest.raises(MissingFieldError):
            build_business_hours_schedule({"offHoursCapacity": {"min": 1, "max": 2}})

    def test_invalid_off_hours_capacity(self) -> None:
        with pytest.raises(InvalidRangeError):
            self._build(offHoursCapacity={"min": 5, "max": 2})

    def test_profiles_usable_in_policy(self) -> None:
        profiles = self._build()
        policy = build_autoscale_policy(
            {
                "name": "scheduled",
                "targetResourceUri": "/subscriptions/000/vmss/app",
                "profiles": [p.model_dump() for p in profiles],
            }
        )
        assert [p.name for p in policy.profiles] == [
            "Business Hours Profile",
            "Off Hours Profile",
        ]


class TestStrictNumbers:
    @pytest.mark.parametrize("minimum", ["2", True, 2.5])
    def test_schedule_minimum_not_a_number(self, minimum: object) -> None:
        with pytest.raises(MissingFieldError, match="capacity with minimum value"):
            build_schedule_profile(
                {"name": "x", "capacity": {"minimum": minimum, "maximum": 5}}
            )

    def test_schedule_minimum_alias_not_a_number(self) -> None:
        with pytest.raises(MissingFieldError) as exc_info:
            build_schedule_profile({"name": "x", "capacity": {"min": "2", "max": 5}})
        assert exc_info.value.field == "capacity.minimum"

    @pytest.mark.parametrize("maximum", ["5", True, 5.5])
    def test_schedule_maximum_not_an_integer(self, maximum: object) -> None:
        with pytest.raises(InvalidTypeError):
            build_schedule_profile({"name": "x", "capacity": {"minimum": 1, "maximum": maximum}})

    @pytest.mark.parametrize("field", ["scaleOutThreshold", "scaleInThreshold"])
    @pytest.mark.parametrize("value", ["90", True, None])
    def test_cpu_threshold_not_a_number(self, field: str, value: object) -> None:
        with pytest.raises(InvalidTypeError) as exc_info:
            build_cpu_scaling_policy({"name": "cpu", "targetResourceUri": "uri", field: value})
        assert exc_info.value.field == field

    def test_cpu_fractional_threshold_is_allowed(self) -> None:
        policy = build_cpu_scaling_policy(
            {"name": "cpu", "targetResourceUri": "uri", "scaleOutThreshold": 82.5}
        )
        assert policy.profiles[0].rules[0].threshold == 82.5

    @pytest.mark.parametrize("field", ["minInstances", "maxInstances", "defaultInstances"])
    @pytest.mark.parametrize("value", ["2", True, 2.5])
    def test_cpu_instance_count_not_an_integer(self, field: str, value: object) -> None:
        with pytest.raises(InvalidTypeError):
            build_cpu_scaling_policy({"name": "cpu", "targetResourceUri": "uri", field: value})

    @pytest.mark.parametrize("value", ["2", True])
    def test_rule_value_not_a_number(self, cpu_rule_config: dict, value: object) -> None:
        cpu_rule_config["value"] = value
        with pytest.raises(InvalidTypeError):
            build_metric_scale_rule(cpu_rule_config)

    @pytest.mark.parametrize("hours", [{"start": "9", "end": 17}, {"start": 9, "end": True}])
    def test_business_hours_not_integers(self, hours: dict) -> None:
        with pytest.raises(InvalidTypeError):
            build_business_hours_schedule(
                {
                    "businessHoursCapacity": {"minimum": 2, "maximum": 4},
                    "offHoursCapacity": {"minimum": 1, "maximum": 1},
                    "businessHours": hours,
                }
            )

    def test_recurrence_hour_not_an_integer(self) -> None:
        with pytest.raises(InvalidTypeError):
            build_schedule_profile(
                {
                    "name": "x",
                    "capacity": {"minimum": 1, "maximum": 2},
                    "recurrence": {"days": ["Monday"], "hours": ["8"], "minutes": [0]},
                }
            )


class TestCustomMetrics:
    def test_custom_metric_is_logged(self, cpu_rule_config: dict, caplog) -> None:
        cpu_rule_config["metricName"] = "Requests Per Second"
        with caplog.at_level("DEBUG", logger="az_fleet"):
            rule = build_metric_scale_rule(cpu_rule_config)
        assert rule.metricName == "Requests Per Second"
        assert "custom metric" in caplog.text

    def test_platform_metric_is_not_logged(self, cpu_rule_config: dict, caplog) -> None:
        with caplog.at_level("DEBUG", logger="az_fleet"):
            build_metric_scale_rule(cpu_rule_config)
        assert "custom metric" not in caplog.text


class TestBlankNames:
    @pytest.mark.parametrize("name", ["   ", "\t"])
    def test_blank_policy_name(self, name: str) -> None:
        with pytest.raises(MissingFieldError, match="requires a name"):
            build_autoscale_policy(_make_policy(name=name))

    def test_blank_metric_name(self, cpu_rule_config: dict) -> None:
        cpu_rule_config["metricName"] = "  "
        with pytest.raises(MissingFieldError, match="metricName"):
            build_metric_scale_rule(cpu_rule_config)
