"""Scale set topology builder.

Selects the orchestration-mode specific branch:

- Uniform:  platformFaultDomainCount in [1, 3], upgrade policy always
            attached, fixed rolling sub-policy when upgradeMode=Rolling.
- Flexible: platformFaultDomainCount in [1, 5], never an upgrade policy,
            singlePlacementGroup defaults to False.
"""

import logging
from collections.abc import Mapping
from typing import Any

from az_fleet.models.capacity import CapacityProfile
from az_fleet.models.vmss import (
    RollingUpgradePolicy,
    UpgradePolicy,
    VmssTopology,
    VmssTopologyConfig,
)
from az_fleet.services._validation import check_range, parse_config, require
from az_fleet.services.capacity import build_capacity_profile

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_INSTANCE_COUNT = 2
DEFAULT_FAULT_DOMAIN_COUNT = 2

FAULT_DOMAIN_BOUNDS: dict[str, tuple[int, int]] = {
    "Uniform": (1, 3),
    "Flexible": (1, 5),
}


def _resolve_capacity(cfg: VmssTopologyConfig) -> CapacityProfile:
    if cfg.capacity is not None:
        return build_capacity_profile(cfg.capacity, context="VMSS capacity")
    count = cfg.instanceCount if cfg.instanceCount is not None else DEFAULT_INSTANCE_COUNT
    return build_capacity_profile(
        {"minimum": count, "maximum": count, "default": count},
        context="VMSS capacity",
    )


def build_vmss_topology(config: VmssTopologyConfig | Mapping[str, Any]) -> VmssTopology:
    """Build a validated scale set topology from *config*."""
    cfg = parse_config(VmssTopologyConfig, config, "VMSS topology")

    require(cfg.name, "VMSS topology requires a name", "name")
    require(cfg.vmSize, "VMSS topology requires a vmSize", "vmSize")

    mode = cfg.orchestrationMode
    fault_domains = (
        cfg.platformFaultDomainCount
        if cfg.platformFaultDomainCount is not None
        else DEFAULT_FAULT_DOMAIN_COUNT
    )
    low, high = FAULT_DOMAIN_BOUNDS[mode]
    check_range(
        fault_domains,
        "platformFaultDomainCount",
        f"{mode} VMSS platformFaultDomainCount must be between {low} and {high}",
        minimum=low,
        maximum=high,
    )

    capacity = _resolve_capacity(cfg)

    upgrade_policy: UpgradePolicy | None = None
    if mode == "Uniform":
        overprovision = cfg.overprovision if cfg.overprovision is not None else True
        single_placement_group = (
            cfg.singlePlacementGroup if cfg.singlePlacementGroup is not None else True
        )
        rolling = RollingUpgradePolicy() if cfg.upgradeMode == "Rolling" else None
        upgrade_policy = UpgradePolicy(mode=cfg.upgradeMode, rollingUpgradePolicy=rolling)
    else:
        overprovision = cfg.overprovision if cfg.overprovision is not None else False
        single_placement_group = (
            cfg.singlePlacementGroup if cfg.singlePlacementGroup is not None else False
        )

    topology = VmssTopology(
        name=cfg.name,
        vmSize=cfg.vmSize,
        location=cfg.location or None,
        capacity=capacity,
        orchestrationMode=mode,
        upgradeMode=cfg.upgradeMode,
        overprovision=overprovision,
        singlePlacementGroup=single_placement_group,
        platformFaultDomainCount=fault_domains,
        zones=list(cfg.zones or []),
        tags=dict(cfg.tags or {}),
        upgradePolicy=upgrade_policy,
    )
    logger.debug(
        "Built VMSS topology %s (mode=%s, faultDomains=%d)", topology.name, mode, fault_domains
    )
    return topology
