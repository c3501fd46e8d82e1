"""Builder registry – named builders paired with their renderers.

A registry is always constructed explicitly (see :func:`create_registry`)
and handed to whoever needs it, such as the CLI; there is no process-wide
table populated at import time.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from functools import partial
from typing import Any

from az_fleet.renderers import arm
from az_fleet.services.autoscale import (
    build_autoscale_policy,
    build_business_hours_schedule,
    build_cpu_scaling_policy,
    build_metric_scale_rule,
    build_schedule_profile,
)
from az_fleet.services.multiregion import build_failover_plan, build_multi_region_deployment_plan
from az_fleet.services.traffic_manager import (
    build_traffic_manager_endpoint,
    build_traffic_manager_profile,
)
from az_fleet.services.vmss import build_vmss_topology
from az_fleet.settings import FleetSettings

logger = logging.getLogger(__name__)

Builder = Callable[[Mapping[str, Any]], Any]
Renderer = Callable[[Any], Any]


@dataclass(frozen=True)
class BuilderEntry:
    """One named builder and the renderer for what it returns."""

    name: str
    builder: Builder
    renderer: Renderer
    summary: str = ""


@dataclass
class BuilderRegistry:
    """Named builders available to the templating and CLI layers."""

    entries: dict[str, BuilderEntry] = field(default_factory=dict)

    def register(self, entry: BuilderEntry) -> None:
        """Add *entry*; a name collision raises ``ValueError``."""
        if entry.name in self.entries:
            logger.error("Builder name collision: '%s' already registered", entry.name)
            raise ValueError(f"Builder '{entry.name}' is already registered")
        self.entries[entry.name] = entry

    def names(self) -> list[str]:
        return sorted(self.entries)

    def get(self, name: str) -> BuilderEntry:
        try:
            return self.entries[name]
        except KeyError:
            raise KeyError(f"Unknown builder '{name}'") from None

    def build(self, name: str, config: Mapping[str, Any]) -> Any:
        """Run the named builder and return the domain entity."""
        return self.get(name).builder(config)

    def render(self, name: str, config: Mapping[str, Any]) -> Any:
        """Run the named builder and render its result."""
        entry = self.get(name)
        return entry.renderer(entry.builder(config))


def create_registry(settings: FleetSettings | None = None) -> BuilderRegistry:
    """Return a new registry holding every fleet builder."""
    settings = settings or FleetSettings()
    registry = BuilderRegistry()
    for entry in (
        BuilderEntry(
            "scale:vmss.definition",
            build_vmss_topology,
            partial(arm.render_vmss, settings=settings),
            "Virtual Machine Scale Set topology",
        ),
        BuilderEntry(
            "scale:autoscale.policy",
            build_autoscale_policy,
            partial(arm.render_autoscale_policy, settings=settings),
            "Autoscale settings with one or more profiles",
        ),
        BuilderEntry(
            "scale:autoscale.metric",
            build_metric_scale_rule,
            arm.render_metric_rule,
            "Single metric-triggered scale rule",
        ),
        BuilderEntry(
            "scale:autoscale.schedule",
            build_schedule_profile,
            arm.render_autoscale_profile,
            "Schedule-driven autoscale profile",
        ),
        BuilderEntry(
            "scale:autoscale.cpu",
            build_cpu_scaling_policy,
            partial(arm.render_autoscale_policy, settings=settings),
            "Canonical CPU scale-out/scale-in policy",
        ),
        BuilderEntry(
            "scale:autoscale.businessHours",
            build_business_hours_schedule,
            arm.render_autoscale_profiles,
            "Business-hours / off-hours profile pair",
        ),
        BuilderEntry(
            "scale:multiregion.profile",
            build_traffic_manager_profile,
            arm.render_traffic_manager_profile,
            "Traffic Manager profile with endpoints",
        ),
        BuilderEntry(
            "scale:multiregion.endpoint",
            build_traffic_manager_endpoint,
            arm.render_traffic_manager_endpoint,
            "Traffic Manager endpoint",
        ),
        BuilderEntry(
            "scale:multiregion.deployment",
            build_multi_region_deployment_plan,
            arm.render_deployment_plan,
            "Multi-region deployment plan",
        ),
        BuilderEntry(
            "scale:multiregion.failover",
            build_failover_plan,
            arm.render_failover_plan,
            "Ordered failover runbook",
        ),
    ):
        registry.register(entry)
    return registry
