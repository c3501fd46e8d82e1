"""Pydantic models for global routing, multi-region plans and failover runbooks."""

from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictBool, StrictInt

EndpointType = Literal["AzureEndpoint", "ExternalEndpoint", "NestedEndpoints"]
EndpointStatus = Literal["Enabled", "Disabled"]
TrafficRoutingMethod = Literal[
    "Priority",
    "Performance",
    "Weighted",
    "Geographic",
    "MultiValue",
    "Subnet",
]
MonitorProtocol = Literal["HTTP", "HTTPS", "TCP"]
RegionRole = Literal["Primary", "Secondary", "Tertiary"]

# ---------------------------------------------------------------------------
# Traffic Manager
# ---------------------------------------------------------------------------


class TrafficManagerEndpointConfig(BaseModel):
    name: str | None = None
    type: EndpointType | None = None
    targetResourceId: str | None = None
    target: str | None = None
    endpointStatus: EndpointStatus = "Enabled"
    priority: StrictInt | None = None
    weight: StrictInt | None = None
    location: str | None = Field(
        default=None, validation_alias=AliasChoices("location", "endpointLocation")
    )
    geoMapping: list[str] | None = None
    minChildEndpoints: StrictInt | None = None


class MonitorConfig(BaseModel):
    """Endpoint health probing settings."""

    model_config = ConfigDict(frozen=True)

    protocol: MonitorProtocol = "HTTPS"
    port: StrictInt = 443
    path: str = "/"
    intervalInSeconds: StrictInt = 30
    timeoutInSeconds: StrictInt = 10
    toleratedNumberOfFailures: StrictInt = 3


class TrafficManagerProfileConfig(BaseModel):
    name: str | None = None
    dnsName: str | None = None
    routingMethod: TrafficRoutingMethod = "Priority"
    ttl: StrictInt = 30
    monitor: MonitorConfig | None = None
    endpoints: list[TrafficManagerEndpointConfig] = Field(default_factory=list)
    trafficViewEnabled: StrictBool = False
    profileStatus: EndpointStatus = "Enabled"
    tags: dict[str, str] | None = None


class TrafficManagerEndpoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: EndpointType
    targetResourceId: str | None = None
    target: str | None = None
    endpointStatus: EndpointStatus = "Enabled"
    priority: int = 1
    weight: int = 1
    location: str | None = None
    geoMapping: list[str] = Field(default_factory=list)
    minChildEndpoints: int | None = None


class TrafficManagerProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    dnsName: str
    routingMethod: TrafficRoutingMethod = "Priority"
    ttl: int = 30
    monitor: MonitorConfig = Field(default_factory=MonitorConfig)
    endpoints: list[TrafficManagerEndpoint] = Field(default_factory=list)
    trafficViewEnabled: bool = False
    profileStatus: EndpointStatus = "Enabled"
    tags: dict[str, str] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Multi-region deployment plan
# ---------------------------------------------------------------------------


class RegionDeploymentConfig(BaseModel):
    region: str | None = None
    role: RegionRole | None = None
    vmssName: str | None = None
    trafficManagerEndpointName: str | None = None
    baselineCapacity: StrictInt | None = None
    maxCapacity: StrictInt | None = None
    failoverPriority: StrictInt | None = None


class ReplicationSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    enabled: StrictBool = False
    recoveryVaultName: str | None = None
    replicationPolicyName: str | None = None


class MonitoringSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    applicationInsightsResourceId: str | None = None
    actionGroupIds: list[str] = Field(default_factory=list)


class MultiRegionDeploymentPlanConfig(BaseModel):
    applicationName: str | None = None
    trafficManagerProfile: str | None = None
    regions: list[RegionDeploymentConfig] = Field(default_factory=list)
    replication: ReplicationSettings = Field(default_factory=ReplicationSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)


class RegionDeployment(BaseModel):
    model_config = ConfigDict(frozen=True)

    region: str
    role: RegionRole
    vmssName: str | None = None
    trafficManagerEndpointName: str | None = None
    baselineCapacity: int
    maxCapacity: int
    failoverPriority: int


class MultiRegionDeploymentPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    applicationName: str
    trafficManagerProfile: str
    regions: list[RegionDeployment]
    replication: ReplicationSettings
    monitoring: MonitoringSettings

    @property
    def primary(self) -> RegionDeployment:
        """The single region holding the Primary role."""
        return next(r for r in self.regions if r.role == "Primary")


# ---------------------------------------------------------------------------
# Failover runbook
# ---------------------------------------------------------------------------


class FailoverAutomation(BaseModel):
    model_config = ConfigDict(frozen=True)

    runbookName: str | None = None
    logicAppResourceId: str | None = None


class FailoverStepConfig(BaseModel):
    name: str | None = None
    description: str = ""
    automation: FailoverAutomation | None = None
    validation: list[str] | None = None


class FailoverPlanConfig(BaseModel):
    name: str | None = None
    primaryRegion: str | None = None
    secondaryRegion: str | None = None
    detectionThresholdMinutes: StrictInt | None = None
    steps: list[FailoverStepConfig] = Field(default_factory=list)


class FailoverStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    automation: FailoverAutomation | None = None
    validation: list[str] = Field(default_factory=list)


class FailoverPlan(BaseModel):
    """Ordered runbook; ``steps`` order is the execution order."""

    model_config = ConfigDict(frozen=True)

    name: str
    primaryRegion: str
    secondaryRegion: str
    detectionThresholdMinutes: int = 5
    steps: list[FailoverStep]
