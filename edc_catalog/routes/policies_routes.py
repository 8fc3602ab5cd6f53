"""
Policy definition routes.

This module defines the management API endpoints for policy definitions.
Policies follow the ODRL (Open Digital Rights Language) model and describe
permissions, prohibitions, and obligations for data usage between
connectors.

All endpoints delegate to the service layer
(`edc_catalog.services.policies_service`).
"""

from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, Response

from edc_catalog.db.client import CatalogStores, get_stores
from edc_catalog.services.policies_service import (
    create_policy,
    delete_policy,
    get_policy,
    query_policies,
    update_policy,
)

router = APIRouter()


@router.post("", status_code=201)
async def create_policy_route(payload: Any = Body(...), stores: CatalogStores = Depends(get_stores)):
    """
    Create a new policy definition.

    Example:
        >>> POST /api/management/v3/policydefinitions
        {
            "@context": {"@vocab": "https://w3id.org/edc/v0.0.1/ns/"},
            "@id": "policy-001",
            "policy": {
                "@context": "http://www.w3.org/ns/odrl.jsonld",
                "@type": "Set",
                "permission": [{"action": "use"}]
            }
        }
    """

    return create_policy(stores, payload)


@router.post("/request", response_model=List[dict])
async def query_policies_route(payload: Optional[Any] = Body(default=None), stores: CatalogStores = Depends(get_stores)):
    """Query policy definitions with an optional QuerySpec."""

    return query_policies(stores, payload)


@router.get("/{policy_id}")
async def get_policy_route(policy_id: str, stores: CatalogStores = Depends(get_stores)):
    """
    Retrieve a specific policy definition by its ID.

    Example:
        >>> GET /api/management/v3/policydefinitions/allow-all-policy
    """

    return get_policy(stores, policy_id)


@router.put("/{policy_id}", status_code=204)
async def update_policy_route(policy_id: str, payload: Any = Body(...), stores: CatalogStores = Depends(get_stores)):
    """Replace an existing policy definition."""

    update_policy(stores, policy_id, payload)
    return Response(status_code=204)


@router.delete("/{policy_id}", status_code=204)
async def delete_policy_route(policy_id: str, stores: CatalogStores = Depends(get_stores)):
    """
    Delete a policy definition. Contract definitions naming it are kept.

    Example:
        >>> DELETE /api/management/v3/policydefinitions/policy-001
    """

    delete_policy(stores, policy_id)
    return Response(status_code=204)
