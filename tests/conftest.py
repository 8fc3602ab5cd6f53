"""Shared fixtures for the catalog tests."""

import logging
from typing import List, Tuple

import pytest
from fastapi.testclient import TestClient

from edc_catalog.core.config import Settings
from edc_catalog.db.client import init_stores
from edc_catalog.main import create_app
from edc_catalog.models.asset import Asset, DataAddress
from edc_catalog.models.contract import ContractDefinition
from edc_catalog.models.criterion import Criterion
from edc_catalog.models.policy import PolicyDefinition
from edc_catalog.util.edc_helpers import EDC_ID
from edc_catalog.util.monitor import Monitor


class RecordingMonitor(Monitor):
    """Monitor keeping every message for assertions."""

    def __init__(self):
        super().__init__("edc_catalog.tests")
        self.messages: List[Tuple[int, str, object]] = []

    def _log(self, level, message, error):
        self.messages.append((level, message, error))

    def warnings(self) -> List[str]:
        return [message for level, message, _ in self.messages if level == logging.WARNING]


def make_asset(asset_id: str, **properties) -> Asset:
    return Asset(
        id=asset_id,
        properties={"name": asset_id, "contenttype": "application/json", **properties},
        dataAddress=DataAddress(type="HttpData", baseUrl=f"https://data.example.com/{asset_id}"),
    )


def make_definition(definition_id: str, policy_id: str = "allow-all-policy", selector=None) -> ContractDefinition:
    return ContractDefinition(
        id=definition_id,
        accessPolicyId=policy_id,
        contractPolicyId=policy_id,
        assetsSelector=selector or [],
    )


def id_selector(asset_id: str) -> List[Criterion]:
    return [Criterion(operandLeft=EDC_ID, operator="=", operandRight=asset_id)]


@pytest.fixture
def monitor():
    return RecordingMonitor()


@pytest.fixture
def stores(monitor):
    return init_stores(monitor)


@pytest.fixture
def allow_all(stores):
    policy = PolicyDefinition(id="allow-all-policy")
    stores.policies.create(policy)
    return policy


@pytest.fixture
def settings():
    return Settings(seed_sample_data=False)


@pytest.fixture
def client(settings, stores):
    """Test client over empty stores."""
    app = create_app(settings=settings, stores=stores)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def seeded_client(stores):
    """Test client with the sample data registered at startup."""
    app = create_app(settings=Settings(seed_sample_data=True), stores=stores)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def anyio_backend():
    return "asyncio"
