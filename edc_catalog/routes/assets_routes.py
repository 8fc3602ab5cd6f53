"""
Asset routes.

This module defines the management API endpoints for assets. Assets
represent data resources that can be offered through the catalog.

Each route creates, retrieves, replaces, deletes, or queries assets
through the service layer (`edc_catalog.services.assets_service`), and
exposes the offers resolved for a single asset.
"""

from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, Response

from edc_catalog.db.client import CatalogStores, get_stores
from edc_catalog.services.assets_service import (
    create_asset,
    delete_asset,
    get_asset,
    query_assets,
    update_asset,
)
from edc_catalog.services.catalog_service import get_asset_offers

router = APIRouter()


@router.post("", status_code=201)
async def create_asset_route(payload: Any = Body(...), stores: CatalogStores = Depends(get_stores)):
    """
    Create a new asset.

    Args:
        payload (dict): The asset in EDC JSON-LD format.

    Returns:
        dict: `IdResponse` with the asset id and creation timestamp.

    Example:
        >>> POST /api/management/v3/assets
        {
            "@context": {"@vocab": "https://w3id.org/edc/v0.0.1/ns/"},
            "@id": "asset-001",
            "properties": {"name": "Weather Dataset", "contenttype": "application/json"},
            "dataAddress": {"type": "HttpData", "baseUrl": "https://data.server.com/weather"}
        }
    """

    return create_asset(stores, payload)


@router.post("/request", response_model=List[dict])
async def query_assets_route(payload: Optional[Any] = Body(default=None), stores: CatalogStores = Depends(get_stores)):
    """
    Query assets with an optional QuerySpec.

    Example:
        >>> POST /api/management/v3/assets/request
        {
            "@type": "QuerySpec",
            "filterExpression": [{"operandLeft": "category", "operator": "=", "operandRight": "weather"}],
            "limit": 10
        }
    """

    return query_assets(stores, payload)


@router.get("/{asset_id}")
async def get_asset_route(asset_id: str, stores: CatalogStores = Depends(get_stores)):
    """
    Retrieve a specific asset by its ID.

    Example:
        >>> GET /api/management/v3/assets/asset-001
    """

    return get_asset(stores, asset_id)


@router.put("/{asset_id}", status_code=204)
async def update_asset_route(asset_id: str, payload: Any = Body(...), stores: CatalogStores = Depends(get_stores)):
    """
    Replace an existing asset. The `@id` of the body must equal `asset_id`.

    Example:
        >>> PUT /api/management/v3/assets/asset-001
        {
            "@id": "asset-001",
            "properties": {"name": "Updated Weather Dataset"},
            ...
        }
    """

    update_asset(stores, asset_id, payload)
    return Response(status_code=204)


@router.delete("/{asset_id}", status_code=204)
async def delete_asset_route(asset_id: str, stores: CatalogStores = Depends(get_stores)):
    """
    Delete an asset.

    Example:
        >>> DELETE /api/management/v3/assets/asset-001
    """

    delete_asset(stores, asset_id)
    return Response(status_code=204)


@router.get("/{asset_id}/offers", response_model=List[dict])
async def get_asset_offers_route(asset_id: str, stores: CatalogStores = Depends(get_stores)):
    """
    List the contract offers that govern access to an asset.

    Example:
        >>> GET /api/management/v3/assets/weather-api-asset/offers
    """

    return get_asset_offers(stores, asset_id)
