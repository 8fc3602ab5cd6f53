"""
Assets service.

This module defines the business logic for managing `Asset` entities
through the management API. It converts between the EDC JSON-LD
representation and the internal model, calls the asset index, and maps
store errors to HTTP errors.
"""

from typing import List, Optional

from fastapi import HTTPException

from edc_catalog.core.errors import CatalogError
from edc_catalog.db.client import CatalogStores
from edc_catalog.models.asset import Asset
from edc_catalog.schemas.response import IdResponse
from edc_catalog.services.common import http_error, parse_model, parse_query_spec, replace_entity, run_query
from edc_catalog.util.edc_helpers import EDC_CONTEXT, EDC_NAMESPACE, EDC_PREFIX, compact_keys


def convert_asset_from_edc_format(payload: dict) -> Asset:
    """
    Converts an EDC JSON-LD asset into the internal `Asset` model.

    Expanded (`https://w3id.org/edc/v0.0.1/ns/name`) and prefixed
    (`edc:name`) keys are compacted; JSON-LD keywords inside `properties`
    and `dataAddress` are dropped.

    Args:
        payload (dict): Asset in EDC JSON-LD format.

    Returns:
        Asset: The validated asset.

    Raises:
        HTTPException: 400 if the payload is not a valid asset.
    """

    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Invalid asset: body must be a JSON object")

    item = compact_keys(payload, (EDC_NAMESPACE, EDC_PREFIX))
    data = {
        "id": item.get("@id", item.get("id")),
        "properties": _without_keywords(item.get("properties")),
        "dataAddress": _without_keywords(item.get("dataAddress")) or None,
    }
    return parse_model(Asset, data, "asset")


def convert_asset_to_edc_format(asset: Asset) -> dict:
    """
    Converts an internal asset into the EDC JSON-LD representation.

    Args:
        asset (Asset): Stored asset.

    Returns:
        dict: Asset formatted according to the EDC Management API schema.
    """

    return {
        "@context": EDC_CONTEXT,
        "@id": asset.id,
        "@type": "Asset",
        "properties": dict(asset.properties),
        "dataAddress": {"@type": "DataAddress", **asset.dataAddress.model_dump()},
        "createdAt": asset.createdAt,
    }


def _without_keywords(value) -> dict:
    if not isinstance(value, dict):
        return {}
    return {key: item for key, item in value.items() if not key.startswith("@")}


def create_asset(stores: CatalogStores, payload: dict) -> dict:
    """
    Registers a new asset in the asset index.

    Args:
        stores (CatalogStores): Application stores.
        payload (dict): Asset in EDC JSON-LD format.

    Returns:
        dict: `IdResponse` carrying the asset id and creation time.

    Raises:
        HTTPException: 400 if the payload is invalid, 409 if the id exists.
    """

    asset = convert_asset_from_edc_format(payload)
    try:
        stores.assets.create(asset)
    except CatalogError as e:
        raise http_error(e)

    stores.monitor.debug(f"Asset created: {asset.id}")
    return IdResponse(id=asset.id, createdAt=asset.createdAt).model_dump(by_alias=True)


def get_asset(stores: CatalogStores, asset_id: str) -> dict:
    """
    Retrieves an asset by its id.

    Raises:
        HTTPException: 404 if the asset does not exist.
    """

    asset = stores.assets.get(asset_id)
    if asset is None:
        raise HTTPException(status_code=404, detail=f"Asset with id '{asset_id}' not found")
    return convert_asset_to_edc_format(asset)


def update_asset(stores: CatalogStores, asset_id: str, payload: dict) -> None:
    """
    Replaces an existing asset.

    Raises:
        HTTPException: 404 if the asset does not exist, 400 if the payload is
        invalid or its id differs from `asset_id`.
    """

    asset = convert_asset_from_edc_format(payload)
    replace_entity(stores.assets, asset_id, asset)

    stores.monitor.debug(f"Asset updated: {asset_id}")


def delete_asset(stores: CatalogStores, asset_id: str) -> None:
    """
    Removes an asset from the asset index.

    Raises:
        HTTPException: 404 if the asset does not exist.
    """

    try:
        stores.assets.delete(asset_id)
    except CatalogError as e:
        raise http_error(e)

    stores.monitor.debug(f"Asset deleted: {asset_id}")


def query_assets(stores: CatalogStores, payload: Optional[dict]) -> List[dict]:
    """
    Returns the assets selected by a QuerySpec.

    Args:
        stores (CatalogStores): Application stores.
        payload (Optional[dict]): QuerySpec body; all assets when empty.

    Returns:
        List[dict]: Matching assets in EDC JSON-LD format.
    """

    spec = parse_query_spec(payload)
    return [convert_asset_to_edc_format(asset) for asset in run_query(stores.assets, spec)]
