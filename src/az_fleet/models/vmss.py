"""Pydantic models for Virtual Machine Scale Set topologies."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt

from az_fleet.models.capacity import CapacityProfile, CapacityProfileConfig

OrchestrationMode = Literal["Uniform", "Flexible"]
UpgradeMode = Literal["Manual", "Automatic", "Rolling"]

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class VmssTopologyConfig(BaseModel):
    name: str | None = None
    vmSize: str | None = None
    location: str | None = None
    capacity: CapacityProfileConfig | None = None
    instanceCount: StrictInt | None = None
    orchestrationMode: OrchestrationMode = "Uniform"
    upgradeMode: UpgradeMode = "Manual"
    overprovision: StrictBool | None = None
    singlePlacementGroup: StrictBool | None = None
    platformFaultDomainCount: StrictInt | None = None
    zones: list[str] | None = None
    tags: dict[str, str] | None = None


# ---------------------------------------------------------------------------
# Built entities
# ---------------------------------------------------------------------------


class RollingUpgradePolicy(BaseModel):
    """Fixed rolling-upgrade batch policy attached to Uniform/Rolling sets."""

    model_config = ConfigDict(frozen=True)

    maxBatchInstancePercent: int = 20
    maxUnhealthyInstancePercent: int = 20
    maxUnhealthyUpgradedInstancePercent: int = 20
    pauseTimeBetweenBatches: str = "PT0S"


class UpgradePolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: UpgradeMode
    rollingUpgradePolicy: RollingUpgradePolicy | None = None


class VmssTopology(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    vmSize: str
    location: str | None = None
    capacity: CapacityProfile
    orchestrationMode: OrchestrationMode
    upgradeMode: UpgradeMode
    overprovision: bool
    singlePlacementGroup: bool
    platformFaultDomainCount: int
    zones: list[str] = Field(default_factory=list)
    tags: dict[str, str] = Field(default_factory=dict)
    upgradePolicy: UpgradePolicy | None = None
