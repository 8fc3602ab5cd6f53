"""
Contract definition routes.

This module defines the management API endpoints for contract
definitions. A contract definition links the assets chosen by its selector
with an access policy and a contract policy.

All endpoints in this module delegate to the service layer
(`edc_catalog.services.contracts_service`).
"""

from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, Response

from edc_catalog.db.client import CatalogStores, get_stores
from edc_catalog.services.contracts_service import (
    create_contract,
    delete_contract,
    get_contract,
    query_contracts,
    update_contract,
)

router = APIRouter()


@router.post("", status_code=201)
async def create_contract_route(payload: Any = Body(...), stores: CatalogStores = Depends(get_stores)):
    """
    Create a new contract definition.

    The referenced policies may be created later.

    Example:
        >>> POST /api/management/v3/contractdefinitions
        {
            "@id": "contract-001",
            "accessPolicyId": "policy-access-01",
            "contractPolicyId": "policy-contract-01",
            "assetsSelector": [
                {
                    "@type": "Criterion",
                    "operandLeft": "https://w3id.org/edc/v0.0.1/ns/id",
                    "operator": "=",
                    "operandRight": "asset-001"
                }
            ]
        }
    """

    return create_contract(stores, payload)


@router.post("/request", response_model=List[dict])
async def query_contracts_route(payload: Optional[Any] = Body(default=None), stores: CatalogStores = Depends(get_stores)):
    """Query contract definitions with an optional QuerySpec."""

    return query_contracts(stores, payload)


@router.get("/{contract_id}")
async def get_contract_route(contract_id: str, stores: CatalogStores = Depends(get_stores)):
    """
    Retrieve a specific contract definition by its identifier.

    Example:
        >>> GET /api/management/v3/contractdefinitions/weather-contract-def
    """

    return get_contract(stores, contract_id)


@router.put("/{contract_id}", status_code=204)
async def update_contract_route(contract_id: str, payload: Any = Body(...), stores: CatalogStores = Depends(get_stores)):
    """
    Replace an existing contract definition.

    Raises:
        HTTPException: 404 if the contract definition does not exist.
    """

    update_contract(stores, contract_id, payload)
    return Response(status_code=204)


@router.delete("/{contract_id}", status_code=204)
async def delete_contract_route(contract_id: str, stores: CatalogStores = Depends(get_stores)):
    """Delete a contract definition."""

    delete_contract(stores, contract_id)
    return Response(status_code=204)
