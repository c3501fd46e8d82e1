"""ARM template rendering of built fleet entities.

Renderers only reshape already-validated entities: they never validate,
and they own every target-schema concern (resource types, API versions,
string-typed capacity fields, nested recurrence schedules).
"""

from __future__ import annotations

import logging
from typing import Any

from az_fleet.models.autoscale import (
    AutoScalePolicy,
    AutoScaleProfile,
    FixedDate,
    MetricScaleRule,
    Recurrence,
)
from az_fleet.models.capacity import CapacityProfile
from az_fleet.models.multiregion import (
    FailoverPlan,
    MultiRegionDeploymentPlan,
    TrafficManagerEndpoint,
    TrafficManagerProfile,
)
from az_fleet.models.vmss import VmssTopology
from az_fleet.settings import FleetSettings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Resource types and API versions
# ---------------------------------------------------------------------------

VMSS_RESOURCE_TYPE = "Microsoft.Compute/virtualMachineScaleSets"
AUTOSCALE_RESOURCE_TYPE = "Microsoft.Insights/autoscalesettings"
TRAFFIC_MANAGER_RESOURCE_TYPE = "Microsoft.Network/trafficManagerProfiles"

API_VERSIONS: dict[str, str] = {
    VMSS_RESOURCE_TYPE: "2023-09-01",
    AUTOSCALE_RESOURCE_TYPE: "2022-10-01",
    TRAFFIC_MANAGER_RESOURCE_TYPE: "2018-04-01",
}

DEFAULT_METRIC_RESOURCE_URI = (
    "[resourceId('Microsoft.Compute/virtualMachineScaleSets', parameters('vmssName'))]"
)


def _location(location: str | None, settings: FleetSettings | None) -> str:
    if location:
        return location
    default = (settings or FleetSettings()).default_location
    logger.debug("No location set, rendering %s", default)
    return default


# ---------------------------------------------------------------------------
# Scale sets
# ---------------------------------------------------------------------------


def render_vmss(topology: VmssTopology, settings: FleetSettings | None = None) -> dict[str, Any]:
    """Render a scale set resource; the default capacity becomes the SKU capacity."""
    properties: dict[str, Any] = {
        "orchestrationMode": topology.orchestrationMode,
        "singlePlacementGroup": topology.singlePlacementGroup,
        "platformFaultDomainCount": topology.platformFaultDomainCount,
        "virtualMachineProfile": {
            "osProfile": {},
            "storageProfile": {},
            "networkProfile": {},
        },
    }
    if topology.orchestrationMode == "Uniform":
        properties["overprovision"] = topology.overprovision
    if topology.upgradePolicy is not None:
        properties["upgradePolicy"] = topology.upgradePolicy.model_dump(exclude_none=True)

    resource: dict[str, Any] = {
        "type": VMSS_RESOURCE_TYPE,
        "apiVersion": API_VERSIONS[VMSS_RESOURCE_TYPE],
        "name": topology.name,
        "location": _location(topology.location, settings),
        "sku": {
            "name": topology.vmSize,
            "tier": "Standard",
            "capacity": topology.capacity.default,
        },
        "properties": properties,
    }
    if topology.zones:
        resource["zones"] = list(topology.zones)
    if topology.tags:
        resource["tags"] = dict(topology.tags)
    return resource


# ---------------------------------------------------------------------------
# Autoscale
# ---------------------------------------------------------------------------


def render_capacity(capacity: CapacityProfile) -> dict[str, str]:
    """Autoscale settings expect string-typed capacity fields."""
    return {
        "minimum": str(capacity.minimum),
        "maximum": str(capacity.maximum),
        "default": str(capacity.default),
    }


def render_fixed_date(fixed_date: FixedDate) -> dict[str, str]:
    return {
        "timeZone": fixed_date.timeZone,
        "start": fixed_date.start.isoformat(),
        "end": fixed_date.end.isoformat(),
    }


def render_recurrence(recurrence: Recurrence) -> dict[str, Any]:
    return {
        "frequency": recurrence.frequency,
        "schedule": {
            "timeZone": recurrence.timeZone,
            "days": list(recurrence.days),
            "hours": list(recurrence.hours),
            "minutes": list(recurrence.minutes),
        },
    }


def render_metric_rule(rule: MetricScaleRule) -> dict[str, Any]:
    return {
        "metricTrigger": {
            "metricName": rule.metricName,
            "metricNamespace": "",
            "metricResourceUri": rule.metricResourceUri or DEFAULT_METRIC_RESOURCE_URI,
            "timeGrain": rule.timeGrain,
            "statistic": rule.statistic,
            "timeWindow": rule.timeWindow,
            "timeAggregation": rule.timeAggregation,
            "operator": rule.operator,
            "threshold": rule.threshold,
            "dimensions": [],
            "dividePerInstance": False,
        },
        "scaleAction": {
            "direction": rule.direction,
            "type": rule.changeType,
            "value": str(rule.value),
            "cooldown": rule.cooldown,
        },
    }


def render_autoscale_profile(profile: AutoScaleProfile) -> dict[str, Any]:
    rendered: dict[str, Any] = {
        "name": profile.name,
        "capacity": render_capacity(profile.capacity),
        "rules": [render_metric_rule(rule) for rule in profile.rules],
    }
    if profile.fixedDate is not None:
        rendered["fixedDate"] = render_fixed_date(profile.fixedDate)
    if profile.recurrence is not None:
        rendered["recurrence"] = render_recurrence(profile.recurrence)
    return rendered


def render_autoscale_profiles(profiles: list[AutoScaleProfile]) -> list[dict[str, Any]]:
    return [render_autoscale_profile(profile) for profile in profiles]


def render_autoscale_policy(
    policy: AutoScalePolicy, settings: FleetSettings | None = None
) -> dict[str, Any]:
    resource: dict[str, Any] = {
        "type": AUTOSCALE_RESOURCE_TYPE,
        "apiVersion": API_VERSIONS[AUTOSCALE_RESOURCE_TYPE],
        "name": policy.name,
        "location": _location(None, settings),
        "properties": {
            "name": policy.name,
            "enabled": policy.enabled,
            "targetResourceUri": policy.targetResourceUri,
            "profiles": render_autoscale_profiles(policy.profiles),
        },
    }
    if policy.notifications:
        resource["properties"]["notifications"] = [
            n.model_dump(exclude_none=True) for n in policy.notifications
        ]
    if policy.tags:
        resource["tags"] = dict(policy.tags)
    return resource


# ---------------------------------------------------------------------------
# Traffic Manager
# ---------------------------------------------------------------------------


def render_traffic_manager_endpoint(endpoint: TrafficManagerEndpoint) -> dict[str, Any]:
    properties: dict[str, Any] = {
        "endpointStatus": endpoint.endpointStatus,
        "priority": endpoint.priority,
        "weight": endpoint.weight,
    }
    if endpoint.targetResourceId:
        properties["targetResourceId"] = endpoint.targetResourceId
    if endpoint.target and endpoint.type != "AzureEndpoint":
        properties["target"] = endpoint.target
    if endpoint.location:
        properties["endpointLocation"] = endpoint.location
    if endpoint.geoMapping:
        properties["geoMapping"] = list(endpoint.geoMapping)
    if endpoint.minChildEndpoints is not None:
        properties["minChildEndpoints"] = endpoint.minChildEndpoints
    return {
        "name": endpoint.name,
        "type": f"{TRAFFIC_MANAGER_RESOURCE_TYPE}/{endpoint.type}",
        "properties": properties,
    }


def render_traffic_manager_profile(profile: TrafficManagerProfile) -> dict[str, Any]:
    resource: dict[str, Any] = {
        "type": TRAFFIC_MANAGER_RESOURCE_TYPE,
        "apiVersion": API_VERSIONS[TRAFFIC_MANAGER_RESOURCE_TYPE],
        "name": profile.name,
        "location": "global",
        "properties": {
            "profileStatus": profile.profileStatus,
            "trafficRoutingMethod": profile.routingMethod,
            "trafficViewEnrollmentStatus": "Enabled" if profile.trafficViewEnabled else "Disabled",
            "dnsConfig": {"relativeName": profile.dnsName, "ttl": profile.ttl},
            "monitorConfig": profile.monitor.model_dump(),
            "endpoints": [render_traffic_manager_endpoint(e) for e in profile.endpoints],
        },
    }
    if profile.tags:
        resource["tags"] = dict(profile.tags)
    return resource


# ---------------------------------------------------------------------------
# Plans
# ---------------------------------------------------------------------------


def render_deployment_plan(plan: MultiRegionDeploymentPlan) -> dict[str, Any]:
    return plan.model_dump(mode="json")


def render_failover_plan(plan: FailoverPlan) -> dict[str, Any]:
    """Render the runbook; steps stay in execution order."""
    return plan.model_dump(mode="json")
