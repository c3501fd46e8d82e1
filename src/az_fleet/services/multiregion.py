"""Multi-region deployment plan and failover runbook builders.

The plan enforces the cross-collection invariants (at least two regions,
exactly one Primary, unique region names); individual region entries know
nothing about the plan that contains them.
"""

import logging
from collections import Counter
from collections.abc import Mapping
from typing import Any

from az_fleet.errors import CardinalityViolationError
from az_fleet.models.multiregion import (
    FailoverPlan,
    FailoverPlanConfig,
    FailoverStep,
    FailoverStepConfig,
    MultiRegionDeploymentPlan,
    MultiRegionDeploymentPlanConfig,
    RegionDeployment,
    RegionDeploymentConfig,
)
from az_fleet.services._validation import check_range, parse_config, require

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_BASELINE_CAPACITY = 2
PRIMARY_FAILOVER_PRIORITY = 1
SECONDARY_FAILOVER_PRIORITY = 100
DEFAULT_DETECTION_THRESHOLD_MINUTES = 5


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _build_region(cfg: RegionDeploymentConfig, index: int) -> RegionDeployment:
    require(cfg.region, f"Region deployment #{index} requires a region", f"regions[{index}].region")
    require(cfg.role, f"Region deployment {cfg.region} requires a role", f"regions[{index}].role")

    baseline = (
        cfg.baselineCapacity if cfg.baselineCapacity is not None else DEFAULT_BASELINE_CAPACITY
    )
    max_capacity = cfg.maxCapacity if cfg.maxCapacity is not None else baseline
    check_range(
        baseline,
        f"regions[{index}].baselineCapacity",
        f"Region deployment {cfg.region} baselineCapacity must be >= 0",
        minimum=0,
    )
    check_range(
        max_capacity,
        f"regions[{index}].maxCapacity",
        f"Region deployment {cfg.region} maxCapacity ({max_capacity}) "
        f"must not be below baselineCapacity ({baseline})",
        minimum=baseline,
    )

    if cfg.failoverPriority is not None:
        priority = cfg.failoverPriority
    elif cfg.role == "Primary":
        priority = PRIMARY_FAILOVER_PRIORITY
    else:
        priority = SECONDARY_FAILOVER_PRIORITY

    return RegionDeployment(
        region=cfg.region,
        role=cfg.role,
        vmssName=cfg.vmssName or None,
        trafficManagerEndpointName=cfg.trafficManagerEndpointName or None,
        baselineCapacity=baseline,
        maxCapacity=max_capacity,
        failoverPriority=priority,
    )


def _build_step(cfg: FailoverStepConfig, index: int) -> FailoverStep:
    require(cfg.name, f"Failover step #{index} requires a name", f"steps[{index}].name")
    return FailoverStep(
        name=cfg.name,
        description=cfg.description,
        automation=cfg.automation,
        validation=list(cfg.validation or []),
    )


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def build_multi_region_deployment_plan(
    config: MultiRegionDeploymentPlanConfig | Mapping[str, Any],
) -> MultiRegionDeploymentPlan:
    """Build a multi-region deployment plan.

    Checks, in order: ``applicationName``, ``trafficManagerProfile``, at
    least two regions, exactly one Primary region, then each region entry.
    """
    cfg = parse_config(MultiRegionDeploymentPlanConfig, config, "Multi-region deployment plan")

    require(
        cfg.applicationName,
        "Multi-region deployment plan requires an applicationName",
        "applicationName",
    )
    require(
        cfg.trafficManagerProfile,
        "Multi-region deployment plan requires a trafficManagerProfile",
        "trafficManagerProfile",
    )
    if len(cfg.regions) < 2:
        raise CardinalityViolationError(
            "Multi-region deployment plan requires at least two regions", field="regions"
        )
    primaries = [r for r in cfg.regions if r.role == "Primary"]
    if len(primaries) != 1:
        raise CardinalityViolationError(
            "Multi-region deployment plan must have exactly one primary region", field="regions"
        )

    regions = [_build_region(region, i) for i, region in enumerate(cfg.regions)]

    duplicates = sorted(name for name, n in Counter(r.region for r in regions).items() if n > 1)
    if duplicates:
        raise CardinalityViolationError(
            f"Multi-region deployment plan lists regions more than once: {', '.join(duplicates)}",
            field="regions",
        )

    plan = MultiRegionDeploymentPlan(
        applicationName=cfg.applicationName,
        trafficManagerProfile=cfg.trafficManagerProfile,
        regions=regions,
        replication=cfg.replication,
        monitoring=cfg.monitoring,
    )
    logger.debug(
        "Built multi-region plan %s: primary=%s, %d region(s)",
        plan.applicationName,
        plan.primary.region,
        len(plan.regions),
    )
    return plan


def build_failover_plan(config: FailoverPlanConfig | Mapping[str, Any]) -> FailoverPlan:
    """Build an ordered failover runbook.

    Step order is the execution order and is kept as supplied.
    """
    cfg = parse_config(FailoverPlanConfig, config, "Failover plan")

    require(cfg.name, "Failover plan requires a name", "name")
    require(cfg.primaryRegion, "Failover plan requires a primaryRegion", "primaryRegion")
    require(cfg.secondaryRegion, "Failover plan requires a secondaryRegion", "secondaryRegion")
    if not cfg.steps:
        raise CardinalityViolationError("Failover plan requires one or more steps", field="steps")

    threshold = (
        cfg.detectionThresholdMinutes
        if cfg.detectionThresholdMinutes is not None
        else DEFAULT_DETECTION_THRESHOLD_MINUTES
    )
    check_range(
        threshold,
        "detectionThresholdMinutes",
        "Failover plan detectionThresholdMinutes must be >= 1",
        minimum=1,
    )

    plan = FailoverPlan(
        name=cfg.name,
        primaryRegion=cfg.primaryRegion,
        secondaryRegion=cfg.secondaryRegion,
        detectionThresholdMinutes=threshold,
        steps=[_build_step(step, i) for i, step in enumerate(cfg.steps)],
    )
    logger.debug(
        "Built failover plan %s (%s -> %s, %d step(s))",
        plan.name,
        plan.primaryRegion,
        plan.secondaryRegion,
        len(plan.steps),
    )
    return plan
