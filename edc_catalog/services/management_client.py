"""
Management API client.

Asynchronous client for the management API of a running connector, built
on httpx. It covers asset, policy definition, and contract definition
management plus catalog requests, using the EDC JSON-LD payloads.

Conventions:
    - `get_*` returns None when the connector answers 404.
    - Any other HTTP error propagates as `httpx.HTTPStatusError`;
      connection failures propagate as `httpx.RequestError`.
    - Entity ids are percent-encoded into a single path segment.
    - The optional API key is sent in the `x-api-key` header.

Usage example:
    >>> client = ManagementApiClient("http://localhost:8181/api/management")
    >>> asset = await client.get_asset("weather-api-asset")
    >>> print(asset["properties"]["name"])
    Public Weather API
"""

from typing import List, Optional
from urllib.parse import quote

import httpx

from edc_catalog.util.edc_helpers import EDC_NAMESPACE, get_api_headers, get_base_url


ASSETS_PATH = "/v3/assets"
POLICIES_PATH = "/v3/policydefinitions"
CONTRACTS_PATH = "/v3/contractdefinitions"
CATALOG_PATH = "/v3/catalog/request"


def _entity_path(collection: str, entity_id: str) -> str:
    # one path segment, whatever characters the id holds
    return f"{collection}/{quote(entity_id, safe='')}"


class ManagementApiClient:
    """
    Client for one connector's management API.

    Args:
        management_url (str): Base URL of the management API
            (e.g. "http://localhost:8181/api/management").
        api_key (Optional[str]): Connector API key, if the API is protected.
        timeout (float): Per-request timeout in seconds.
        transport (Optional[httpx.AsyncBaseTransport]): Custom transport,
            e.g. `httpx.ASGITransport` to talk to an in-process app.
    """

    def __init__(
        self,
        management_url: str,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.management_url = management_url
        self.headers = {"Accept": "application/json", **get_api_headers(api_key)}
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(headers=self.headers, timeout=self.timeout, transport=self.transport)

    # --------------------------------------------------------------------------
    # Generic requests
    # --------------------------------------------------------------------------

    async def _get(self, path: str) -> Optional[dict]:
        async with self._client() as client:
            response = await client.get(get_base_url(self.management_url, path))
            if response.status_code == 404:
                return None
            response.raise_for_status()
            return response.json()

    async def _post(self, path: str, payload: dict):
        async with self._client() as client:
            response = await client.post(get_base_url(self.management_url, path), json=payload)
            response.raise_for_status()
            return response.json()

    async def _put(self, path: str, payload: dict) -> None:
        async with self._client() as client:
            response = await client.put(get_base_url(self.management_url, path), json=payload)
            response.raise_for_status()

    async def _delete(self, path: str) -> None:
        async with self._client() as client:
            response = await client.delete(get_base_url(self.management_url, path))
            response.raise_for_status()

    async def _query(self, path: str, query_spec: Optional[dict]) -> List[dict]:
        payload = {"@context": {"@vocab": EDC_NAMESPACE}, "@type": "QuerySpec", **(query_spec or {})}
        items = await self._post(f"{path}/request", payload)
        if isinstance(items, dict):
            items = [items]
        return items

    # --------------------------------------------------------------------------
    # Assets
    # --------------------------------------------------------------------------

    async def get_asset(self, asset_id: str) -> Optional[dict]:
        return await self._get(_entity_path(ASSETS_PATH, asset_id))

    async def create_asset(self, asset: dict) -> dict:
        """Registers an asset and returns the connector's `IdResponse`."""
        return await self._post(ASSETS_PATH, asset)

    async def update_asset(self, asset_id: str, asset: dict) -> None:
        await self._put(_entity_path(ASSETS_PATH, asset_id), asset)

    async def delete_asset(self, asset_id: str) -> None:
        await self._delete(_entity_path(ASSETS_PATH, asset_id))

    async def query_assets(self, query_spec: Optional[dict] = None) -> List[dict]:
        return await self._query(ASSETS_PATH, query_spec)

    async def get_asset_offers(self, asset_id: str) -> Optional[List[dict]]:
        """Offers resolved for an asset, or None if the asset does not exist."""
        return await self._get(f"{_entity_path(ASSETS_PATH, asset_id)}/offers")

    # --------------------------------------------------------------------------
    # Policy definitions
    # --------------------------------------------------------------------------

    async def get_policy_definition(self, policy_id: str) -> Optional[dict]:
        return await self._get(_entity_path(POLICIES_PATH, policy_id))

    async def create_policy_definition(self, policy_definition: dict) -> dict:
        return await self._post(POLICIES_PATH, policy_definition)

    async def update_policy_definition(self, policy_id: str, policy_definition: dict) -> None:
        await self._put(_entity_path(POLICIES_PATH, policy_id), policy_definition)

    async def delete_policy_definition(self, policy_id: str) -> None:
        await self._delete(_entity_path(POLICIES_PATH, policy_id))

    async def query_policy_definitions(self, query_spec: Optional[dict] = None) -> List[dict]:
        return await self._query(POLICIES_PATH, query_spec)

    # --------------------------------------------------------------------------
    # Contract definitions
    # --------------------------------------------------------------------------

    async def get_contract_definition(self, contract_id: str) -> Optional[dict]:
        return await self._get(_entity_path(CONTRACTS_PATH, contract_id))

    async def create_contract_definition(self, contract_definition: dict) -> dict:
        return await self._post(CONTRACTS_PATH, contract_definition)

    async def update_contract_definition(self, contract_id: str, contract_definition: dict) -> None:
        await self._put(_entity_path(CONTRACTS_PATH, contract_id), contract_definition)

    async def delete_contract_definition(self, contract_id: str) -> None:
        await self._delete(_entity_path(CONTRACTS_PATH, contract_id))

    async def query_contract_definitions(self, query_spec: Optional[dict] = None) -> List[dict]:
        return await self._query(CONTRACTS_PATH, query_spec)

    # --------------------------------------------------------------------------
    # Catalog
    # --------------------------------------------------------------------------

    async def request_catalog(self, query_spec: Optional[dict] = None) -> dict:
        """Requests the connector's catalog, optionally filtered by a QuerySpec."""

        payload = {"@context": {"@vocab": EDC_NAMESPACE}, "@type": "CatalogRequest"}
        if query_spec is not None:
            payload["querySpec"] = query_spec
        return await self._post(CATALOG_PATH, payload)
