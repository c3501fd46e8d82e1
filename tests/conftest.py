"""Shared test fixtures for az-fleet tests."""

from __future__ import annotations

import logging
import os

import pytest

VMSS_URI = "[resourceId('Microsoft.Compute/virtualMachineScaleSets', 'app-vmss')]"


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Keep AZ_FLEET_* variables and any local .env out of every test."""
    for key in list(os.environ):
        if key.upper().startswith("AZ_FLEET_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def vmss_uri() -> str:
    return VMSS_URI


@pytest.fixture()
def cpu_rule_config() -> dict:
    return {
        "metricName": "Percentage CPU",
        "timeGrain": "PT1M",
        "statistic": "Average",
        "timeWindow": "PT10M",
        "timeAggregation": "Average",
        "operator": "GreaterThan",
        "threshold": 80,
        "direction": "Increase",
        "cooldown": "PT10M",
        "type": "ChangeCount",
        "value": 2,
    }


@pytest.fixture()
def plan_config() -> dict:
    return {
        "applicationName": "globalApp",
        "trafficManagerProfile": "global-profile",
        "regions": [
            {
                "region": "eastus",
                "role": "Primary",
                "vmssName": "app-eastus",
                "trafficManagerEndpointName": "primary-endpoint",
                "baselineCapacity": 4,
                "maxCapacity": 20,
            },
            {
                "region": "westus",
                "role": "Secondary",
                "vmssName": "app-westus",
                "trafficManagerEndpointName": "secondary-endpoint",
                "baselineCapacity": 2,
                "maxCapacity": 15,
                "failoverPriority": 2,
            },
        ],
        "replication": {
            "enabled": True,
            "recoveryVaultName": "globalVault",
            "replicationPolicyName": "globalPolicy",
        },
        "monitoring": {
            "applicationInsightsResourceId": (
                "/subscriptions/000/resourceGroups/rg/providers/"
                "Microsoft.Insights/components/app-insights"
            ),
        },
    }


@pytest.fixture()
def failover_config() -> dict:
    return {
        "name": "global-failover",
        "primaryRegion": "eastus",
        "secondaryRegion": "westus",
        "detectionThresholdMinutes": 7,
        "steps": [
            {
                "name": "Notify stakeholders",
                "description": "Send outage notification",
                "automation": {
                    "logicAppResourceId": (
                        "/subscriptions/000/resourceGroups/rg/providers/"
                        "Microsoft.Logic/workflows/notify"
                    )
                },
            },
            {
                "name": "Promote secondary",
                "description": "Scale up secondary region capacity",
                "validation": [
                    "Verify application availability",
                    "Confirm Traffic Manager routing",
                ],
            },
        ],
    }


@pytest.fixture(autouse=True)
def _reset_fleet_logger():
    """Undo CLI logging setup so caplog sees ``az_fleet`` records."""
    yield
    fleet_logger = logging.getLogger("az_fleet")
    fleet_logger.handlers = []
    fleet_logger.propagate = True
    fleet_logger.setLevel(logging.NOTSET)
