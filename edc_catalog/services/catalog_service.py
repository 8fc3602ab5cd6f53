"""
Catalog service.

Exposes the catalog matcher through the management API:

- the offers that apply to a single asset,
- the catalog of every asset (optionally filtered) that carries at least
  one offer, shaped as a DCAT catalog.

Offer ids follow the `<contract definition id>:<asset id>` pattern and each
offer carries the body of the contract policy that would be negotiated.
"""

from typing import List, Optional

from fastapi import HTTPException

from edc_catalog.core.errors import CatalogError
from edc_catalog.db.client import CatalogStores
from edc_catalog.models.asset import Asset
from edc_catalog.schemas.query import CatalogRequest
from edc_catalog.services.catalog_matcher import ContractOffer
from edc_catalog.services.common import page, parse_model, select
from edc_catalog.services.policies_service import convert_policy_body
from edc_catalog.util.edc_helpers import EDC_CONTEXT, EDC_NAMESPACE, EDC_PREFIX, compact_keys


CATALOG_CONTEXT = {
    **EDC_CONTEXT,
    "dcat": "http://www.w3.org/ns/dcat#",
    "dct": "http://purl.org/dc/terms/",
}


def convert_offer_to_edc_format(offer: ContractOffer, asset_id: str) -> dict:
    """
    Converts a resolved offer into its JSON-LD representation.

    Args:
        offer (ContractOffer): Matching definition with both policies resolved.
        asset_id (str): Asset the offer targets.

    Returns:
        dict: ODRL offer carrying the contract policy body.
    """

    return {
        "@id": f"{offer.definition.id}:{asset_id}",
        "@type": "odrl:Offer",
        "odrl:target": asset_id,
        "contractDefinitionId": offer.definition.id,
        "accessPolicyId": offer.access_policy.id,
        "contractPolicyId": offer.contract_policy.id,
        "policy": convert_policy_body(offer.contract_policy.policy),
    }


def _convert_dataset(asset: Asset, offers: List[ContractOffer]) -> dict:
    return {
        "@id": asset.id,
        "@type": "dcat:Dataset",
        **asset.properties,
        "odrl:hasPolicy": [convert_offer_to_edc_format(offer, asset.id) for offer in offers],
    }


def get_asset_offers(stores: CatalogStores, asset_id: str) -> List[dict]:
    """
    Returns the offers that govern access to one asset.

    Raises:
        HTTPException: 404 if the asset does not exist, 500 if a stored
        selector uses an unsupported operator.
    """

    asset = stores.assets.get(asset_id)
    if asset is None:
        raise HTTPException(status_code=404, detail=f"Asset with id '{asset_id}' not found")

    try:
        offers = stores.matcher.definitions_for(asset, sort_by_id=True)
    except CatalogError as e:
        stores.monitor.severe(f"Catalog resolution failed for asset {asset_id}: {e}", e)
        raise HTTPException(status_code=500, detail=str(e))

    return [convert_offer_to_edc_format(offer, asset_id) for offer in offers]


def request_catalog(stores: CatalogStores, participant_id: str, payload: Optional[dict]) -> dict:
    """
    Generates the catalog of offered assets.

    The optional `querySpec` filters and sorts the candidate assets. Only
    assets with at least one resolvable offer become datasets, and the
    offset and limit (50 by default) page those datasets.

    Args:
        stores (CatalogStores): Application stores.
        participant_id (str): Id of this connector, used as the catalog id.
        payload (Optional[dict]): Catalog request body.

    Returns:
        dict: DCAT catalog with one dataset per offered asset.

    Raises:
        HTTPException: 400 for an invalid request, 500 if a stored selector
        uses an unsupported operator.
    """

    if payload is not None and not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Invalid catalog request: body must be a JSON object")

    request = parse_model(
        CatalogRequest, compact_keys(payload or {}, (EDC_NAMESPACE, EDC_PREFIX)), "catalog request"
    )
    candidates = select(stores.assets, request.querySpec)

    try:
        entries = page(stores.matcher.catalog(candidates), request.querySpec)
        datasets = [_convert_dataset(asset, offers) for asset, offers in entries]
    except CatalogError as e:
        stores.monitor.severe(f"Catalog generation failed: {e}", e)
        raise HTTPException(status_code=500, detail=str(e))

    stores.monitor.debug(f"Catalog generated with {len(datasets)} dataset(s)")
    return {
        "@context": CATALOG_CONTEXT,
        "@id": participant_id,
        "@type": "dcat:Catalog",
        "participantId": participant_id,
        "dcat:dataset": datasets,
    }
