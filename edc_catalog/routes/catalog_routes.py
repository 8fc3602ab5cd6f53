"""
Catalog routes.

Catalog generation: the datasets this connector offers, each with the
contract offers resolved by the catalog matcher.
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Request

from edc_catalog.db.client import CatalogStores, get_stores
from edc_catalog.services.catalog_service import request_catalog

router = APIRouter()


@router.post("/request")
async def request_catalog_route(
    request: Request,
    payload: Optional[Any] = Body(default=None),
    stores: CatalogStores = Depends(get_stores),
):
    """
    Generate the catalog of offered assets.

    Only assets with at least one offer become datasets; the `querySpec`
    offset and limit (50 by default) page those datasets.

    Example:
        >>> POST /api/management/v3/catalog/request
        {
            "@type": "CatalogRequest",
            "querySpec": {
                "filterExpression": [{"operandLeft": "category", "operator": "=", "operandRight": "weather"}]
            }
        }
    """

    return request_catalog(stores, request.app.state.settings.participant_id, payload)
