"""
Contracts service.

This module implements the business logic for managing contract
definitions through the management API: creating, reading, updating,
deleting, and querying them.

Contract definitions link assets with access and usage policies to define
the conditions under which data can be exchanged between connectors. The
policy ids they carry are plain references: they are not checked for
existence here, only when the catalog is generated.
"""

from typing import List, Optional

from fastapi import HTTPException

from edc_catalog.core.errors import CatalogError
from edc_catalog.db.client import CatalogStores
from edc_catalog.models.contract import ContractDefinition
from edc_catalog.models.criterion import Criterion
from edc_catalog.schemas.response import IdResponse
from edc_catalog.services.common import http_error, parse_model, parse_query_spec, replace_entity, run_query
from edc_catalog.services.criterion_evaluator import check_operator
from edc_catalog.util.edc_helpers import EDC_CONTEXT, EDC_NAMESPACE, EDC_PREFIX, compact_keys


def _parse_contract_item(payload: dict) -> ContractDefinition:
    """
    Parses a raw JSON-LD contract definition into a `ContractDefinition`.

    The asset selector may be sent as a single criterion object or as a list.

    Raises:
        HTTPException: 400 if the payload is invalid or a selector uses an
        unsupported operator.
    """

    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Invalid contract definition: body must be a JSON object")

    item = compact_keys(payload, (EDC_NAMESPACE, EDC_PREFIX))
    data = {
        "id": item.get("@id", item.get("id")),
        "accessPolicyId": item.get("accessPolicyId"),
        "contractPolicyId": item.get("contractPolicyId"),
        "assetsSelector": item.get("assetsSelector"),
    }
    definition = parse_model(ContractDefinition, data, "contract definition")

    try:
        for criterion in definition.assetsSelector:
            check_operator(criterion)
    except CatalogError as e:
        raise http_error(e)

    return definition


def _convert_criterion_to_edc_format(criterion: Criterion) -> dict:
    return {
        "@type": "Criterion",
        "operandLeft": criterion.operandLeft,
        "operator": criterion.operator,
        "operandRight": criterion.operandRight,
    }


def _convert_contract_to_edc_format(definition: ContractDefinition) -> dict:
    """
    Converts a contract definition from the internal format to the EDC API format.

    Args:
        definition (ContractDefinition): Stored contract definition.

    Returns:
        dict: Contract definition formatted according to the EDC Management API schema.
    """

    return {
        "@context": EDC_CONTEXT,
        "@id": definition.id,
        "@type": "ContractDefinition",
        "accessPolicyId": definition.accessPolicyId,
        "contractPolicyId": definition.contractPolicyId,
        "assetsSelector": [_convert_criterion_to_edc_format(c) for c in definition.assetsSelector],
        "createdAt": definition.createdAt,
    }


def create_contract(stores: CatalogStores, payload: dict) -> dict:
    """
    Creates a new contract definition.

    The referenced policies do not need to exist yet.

    Args:
        stores (CatalogStores): Application stores.
        payload (dict): Contract definition in EDC JSON-LD format.

    Returns:
        dict: `IdResponse` carrying the definition id and creation time.

    Raises:
        HTTPException: 400 if the payload is invalid, 409 if the id exists.
    """

    definition = _parse_contract_item(payload)
    try:
        stores.contracts.create(definition)
    except CatalogError as e:
        raise http_error(e)

    for policy_id in {definition.accessPolicyId, definition.contractPolicyId}:
        if policy_id not in stores.policies:
            stores.monitor.info(
                f"Contract definition {definition.id} references policy {policy_id}, which does not exist yet"
            )

    stores.monitor.debug(f"Contract definition created: {definition.id}")
    return IdResponse(id=definition.id, createdAt=definition.createdAt).model_dump(by_alias=True)


def get_contract(stores: CatalogStores, contract_id: str) -> dict:
    """
    Retrieves a single contract definition by its ID.

    Raises:
        HTTPException: 404 if the contract definition does not exist.
    """

    definition = stores.contracts.get(contract_id)
    if definition is None:
        raise HTTPException(status_code=404, detail=f"ContractDefinition with id '{contract_id}' not found")
    return _convert_contract_to_edc_format(definition)


def update_contract(stores: CatalogStores, contract_id: str, payload: dict) -> None:
    """
    Replaces an existing contract definition.

    Raises:
        HTTPException: 404 if absent, 400 if invalid or the ids differ.
    """

    definition = _parse_contract_item(payload)
    replace_entity(stores.contracts, contract_id, definition)

    stores.monitor.debug(f"Contract definition updated: {contract_id}")


def delete_contract(stores: CatalogStores, contract_id: str) -> None:
    """
    Deletes a contract definition.

    Raises:
        HTTPException: 404 if the contract definition does not exist.
    """

    try:
        stores.contracts.delete(contract_id)
    except CatalogError as e:
        raise http_error(e)

    stores.monitor.debug(f"Contract definition deleted: {contract_id}")


def query_contracts(stores: CatalogStores, payload: Optional[dict]) -> List[dict]:
    """Returns the contract definitions selected by a QuerySpec."""

    spec = parse_query_spec(payload)
    return [_convert_contract_to_edc_format(definition) for definition in run_query(stores.contracts, spec)]
