"""Traffic Manager builders – global DNS routing profiles and their endpoints."""

import logging
from collections.abc import Mapping
from typing import Any

from az_fleet.models.multiregion import (
    MonitorConfig,
    TrafficManagerEndpoint,
    TrafficManagerEndpointConfig,
    TrafficManagerProfile,
    TrafficManagerProfileConfig,
)
from az_fleet.services._validation import check_range, parse_config, require

logger = logging.getLogger(__name__)


def build_traffic_manager_endpoint(
    config: TrafficManagerEndpointConfig | Mapping[str, Any],
) -> TrafficManagerEndpoint:
    """Build one routable endpoint.

    Azure endpoints must reference a ``targetResourceId``; external and
    nested endpoints are expected to carry a DNS/IP ``target``.
    """
    cfg = parse_config(TrafficManagerEndpointConfig, config, "Traffic Manager endpoint")

    require(cfg.name, "Traffic Manager endpoint requires a name", "name")
    require(cfg.type, "Traffic Manager endpoint requires a type", "type")
    if cfg.type == "AzureEndpoint":
        require(
            cfg.targetResourceId,
            "Azure endpoints require a targetResourceId",
            "targetResourceId",
        )
    elif not cfg.target and not cfg.targetResourceId:
        logger.warning("Traffic Manager endpoint %s (%s) has no target", cfg.name, cfg.type)

    priority = cfg.priority if cfg.priority is not None else 1
    weight = cfg.weight if cfg.weight is not None else 1
    check_range(priority, "priority", "Traffic Manager endpoint priority must be >= 1", minimum=1)
    check_range(weight, "weight", "Traffic Manager endpoint weight must be >= 1", minimum=1)

    return TrafficManagerEndpoint(
        name=cfg.name,
        type=cfg.type,
        targetResourceId=cfg.targetResourceId or None,
        target=cfg.target or None,
        endpointStatus=cfg.endpointStatus,
        priority=priority,
        weight=weight,
        location=cfg.location or None,
        geoMapping=list(cfg.geoMapping or []),
        minChildEndpoints=cfg.minChildEndpoints,
    )


def build_traffic_manager_profile(
    config: TrafficManagerProfileConfig | Mapping[str, Any],
) -> TrafficManagerProfile:
    """Build a Traffic Manager profile with monitor defaults applied.

    Endpoint order is preserved exactly as supplied.
    """
    cfg = parse_config(TrafficManagerProfileConfig, config, "Traffic Manager profile")

    require(cfg.name, "Traffic Manager profile requires a name", "name")
    require(cfg.dnsName, "Traffic Manager profile requires a dnsName", "dnsName")
    check_range(cfg.ttl, "ttl", "Traffic Manager profile ttl must be >= 0", minimum=0)

    profile = TrafficManagerProfile(
        name=cfg.name,
        dnsName=cfg.dnsName,
        routingMethod=cfg.routingMethod,
        ttl=cfg.ttl,
        monitor=cfg.monitor or MonitorConfig(),
        endpoints=[build_traffic_manager_endpoint(endpoint) for endpoint in cfg.endpoints],
        trafficViewEnabled=cfg.trafficViewEnabled,
        profileStatus=cfg.profileStatus,
        tags=dict(cfg.tags or {}),
    )
    logger.debug(
        "Built Traffic Manager profile %s (%s routing, %d endpoint(s))",
        profile.name,
        profile.routingMethod,
        len(profile.endpoints),
    )
    return profile
