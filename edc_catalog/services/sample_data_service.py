"""
Sample data service.

Registers demonstration metadata at startup so a fresh connector can be
exercised immediately, without creating anything through the API first:

1. Assets: a public weather API and a quarterly market data feed.
2. Policies: an allow-all policy and a financial research policy. Both
   bodies are empty, so neither places restrictions.
3. Contract definitions linking each asset with its policy.

Registration is idempotent: an id that is already stored is skipped.
"""

from typing import List

from edc_catalog.core.errors import DuplicateIdError
from edc_catalog.db.client import CatalogStores
from edc_catalog.db.store import InMemoryStore
from edc_catalog.models.asset import Asset, DataAddress
from edc_catalog.models.contract import ContractDefinition
from edc_catalog.models.criterion import Criterion
from edc_catalog.models.policy import Policy, PolicyDefinition
from edc_catalog.util.edc_helpers import EDC_ID
from edc_catalog.util.monitor import Monitor


def sample_assets() -> List[Asset]:
    return [
        Asset(
            id="weather-api-asset",
            properties={
                "name": "Public Weather API",
                "description": "Provides current weather data for cities worldwide",
                "contenttype": "application/json",
                "type": "API",
                "category": "weather",
            },
            dataAddress=DataAddress(
                type="HttpData",
                baseUrl="https://api.weatherapi.com/v1/current.json",
                method="GET",
            ),
        ),
        Asset(
            id="market-data-2025-q1",
            properties={
                "name": "Market Data 2025 Q1",
                "description": "Quarterly equity market prices for research and portfolio analytics",
                "contenttype": "text/csv",
                "type": "Dataset",
                "category": "finance",
            },
            dataAddress=DataAddress(
                type="HttpData",
                baseUrl="https://data.example.com/market/2025/q1.csv",
                method="GET",
            ),
        ),
    ]


def sample_policies() -> List[PolicyDefinition]:
    return [
        PolicyDefinition(id="allow-all-policy", policy=Policy()),
        PolicyDefinition(id="financial-research-policy", policy=Policy()),
    ]


def sample_contract_definitions() -> List[ContractDefinition]:
    return [
        ContractDefinition(
            id="weather-contract-def",
            accessPolicyId="allow-all-policy",
            contractPolicyId="allow-all-policy",
            assetsSelector=[Criterion(operandLeft=EDC_ID, operator="=", operandRight="weather-api-asset")],
        ),
        ContractDefinition(
            id="market-data-contract-def",
            accessPolicyId="financial-research-policy",
            contractPolicyId="financial-research-policy",
            assetsSelector=[Criterion(operandLeft=EDC_ID, operator="=", operandRight="market-data-2025-q1")],
        ),
    ]


def _register(store: InMemoryStore, entities: list, label: str, monitor: Monitor) -> int:
    registered = 0
    for entity in entities:
        try:
            store.create(entity)
        except DuplicateIdError:
            monitor.info(f"{label} already registered, skipping: {entity.id}")
            continue
        registered += 1
        monitor.info(f"✓ {label} registered: {entity.id}")
    return registered


def register_sample_data(stores: CatalogStores, management_path: str = "/api/management") -> int:
    """
    Registers the sample assets, policies, and contract definitions.

    Args:
        stores (CatalogStores): Stores to populate.
        management_path (str): Base path of the management API, used in
            the log messages pointing at the new resources.

    Returns:
        int: Number of entities newly registered.
    """

    monitor = stores.monitor
    monitor.info("Sample data: initializing")

    registered = _register(stores.assets, sample_assets(), "Asset", monitor)
    registered += _register(stores.policies, sample_policies(), "Policy", monitor)
    registered += _register(stores.contracts, sample_contract_definitions(), "Contract definition", monitor)

    for asset in sample_assets():
        monitor.info(f"  - Access via Management API: {management_path}/v3/assets/{asset.id}")
    monitor.info(f"Sample data: initialization complete ({registered} registered)")
    return registered
