"""
Policies Service.

This module provides functionality to manage policy definitions through
the management API: creation, retrieval, replacement, deletion, and
queries.

Policies define permissions, prohibitions, and obligations according to
the ODRL (Open Digital Rights Language) model. The catalog does not
enforce them; it stores each policy body whole and hands it back.

Handled responsibilities:
    - Conversion between EDC-compatible JSON-LD and internal models
    - Policy definition CRUD against the policy store
    - Policy definition queries
"""

from typing import List, Optional

from fastapi import HTTPException

from edc_catalog.core.errors import CatalogError
from edc_catalog.db.client import CatalogStores
from edc_catalog.models.policy import Policy, PolicyDefinition
from edc_catalog.schemas.response import IdResponse
from edc_catalog.services.common import http_error, parse_model, parse_query_spec, replace_entity, run_query
from edc_catalog.util.edc_helpers import (
    EDC_CONTEXT,
    EDC_NAMESPACE,
    EDC_PREFIX,
    ODRL_CONTEXT,
    ODRL_NAMESPACE,
    ODRL_PREFIX,
    compact_key,
    compact_keys,
    normalize_list,
    unwrap_id,
)


_ODRL_PREFIXES = (ODRL_NAMESPACE, ODRL_PREFIX, EDC_NAMESPACE, EDC_PREFIX)


def convert_policy_from_edc_format(payload: dict) -> PolicyDefinition:
    """
    Converts an EDC JSON-LD policy definition into the internal model.

    Args:
        payload (dict): Policy definition in EDC JSON-LD format.

    Returns:
        PolicyDefinition: The validated policy definition.

    Raises:
        HTTPException: 400 if the payload is not a valid policy definition.
    """

    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Invalid policy definition: body must be a JSON object")

    item = compact_keys(payload, (EDC_NAMESPACE, EDC_PREFIX))
    data = {
        "id": item.get("@id", item.get("id")),
        "policy": _parse_policy(item.get("policy") or {}),
    }
    return parse_model(PolicyDefinition, data, "policy definition")


_LOGICAL_OPERATORS = ("and", "or", "xone", "andSequence")


def _parse_policy(raw) -> dict:
    if not isinstance(raw, dict):
        return raw
    body = compact_keys({key: value for key, value in raw.items() if not key.startswith("@")}, _ODRL_PREFIXES)
    # JSON-LD keywords are kept exactly as sent
    policy = {key: value for key, value in raw.items() if key.startswith("@") and key not in ("@context", "@type")}
    policy.update(body)
    if "@type" in raw:
        policy["type"] = _compact_reference(raw["@type"])
    if "@context" in raw:
        policy["context"] = raw["@context"]
    for rule_type in ("permission", "prohibition", "obligation"):
        policy[rule_type] = _convert_rules_get(normalize_list(policy.get(rule_type)))
    return policy


def _convert_rules_get(rules: list) -> list:
    """
    Normalizes ODRL rules read from a request.

    Action and operator references (`odrl:use`, `{"@id": "odrl:eq"}`) are
    reduced to their compact names; everything else is kept.
    """

    result = []
    for rule in rules:
        if not isinstance(rule, dict):
            result.append(rule)
            continue
        converted = dict(rule)
        if "action" in converted:
            converted["action"] = _compact_reference(converted["action"])
        if converted.get("constraint") is not None:
            converted["constraint"] = [_convert_constraint(c) for c in normalize_list(converted["constraint"])]
        result.append(converted)
    return result


def _convert_constraint(constraint):
    if not isinstance(constraint, dict):
        return constraint
    converted = dict(constraint)
    for key in ("leftOperand", "operator"):
        if key in converted:
            converted[key] = _compact_reference(converted[key])
    for key in _LOGICAL_OPERATORS:
        if converted.get(key) is not None:
            converted[key] = [_convert_constraint(c) for c in normalize_list(converted[key])]
    return converted


def _compact_reference(value):
    value = unwrap_id(value)
    if isinstance(value, str):
        return compact_key(value, _ODRL_PREFIXES)
    if isinstance(value, list):
        return [_compact_reference(item) for item in value]
    return value


def convert_policy_to_edc_format(policy_definition: PolicyDefinition) -> dict:
    """
    Converts an internal policy definition into EDC-compatible JSON-LD.

    Args:
        policy_definition (PolicyDefinition): Stored policy definition.

    Returns:
        dict: Policy definition formatted according to the EDC Management API schema.
    """

    return {
        "@context": EDC_CONTEXT,
        "@id": policy_definition.id,
        "@type": "PolicyDefinition",
        "policy": convert_policy_body(policy_definition.policy),
        "createdAt": policy_definition.createdAt,
    }


def convert_policy_body(policy: Policy) -> dict:
    """Serializes an ODRL policy body, keeping any extra keys it carries."""

    body = policy.model_dump(exclude_none=True, by_alias=True)
    context = body.pop("context", ODRL_CONTEXT)
    policy_type = body.pop("type", "Set")
    return {"@context": context, "@type": policy_type, **body}


def create_policy(stores: CatalogStores, payload: dict) -> dict:
    """
    Creates a policy definition in the policy store.

    Raises:
        HTTPException: 400 if the payload is invalid, 409 if the id exists.

    Returns:
        dict: `IdResponse` carrying the policy id and creation time.
    """

    policy_definition = convert_policy_from_edc_format(payload)
    try:
        stores.policies.create(policy_definition)
    except CatalogError as e:
        raise http_error(e)

    stores.monitor.debug(f"Policy definition created: {policy_definition.id}")
    return IdResponse(id=policy_definition.id, createdAt=policy_definition.createdAt).model_dump(by_alias=True)


def get_policy(stores: CatalogStores, policy_id: str) -> dict:
    """
    Retrieves a single policy definition by its ID.

    Raises:
        HTTPException: 404 if the policy definition does not exist.
    """

    policy_definition = stores.policies.get(policy_id)
    if policy_definition is None:
        raise HTTPException(status_code=404, detail=f"PolicyDefinition with id '{policy_id}' not found")
    return convert_policy_to_edc_format(policy_definition)


def update_policy(stores: CatalogStores, policy_id: str, payload: dict) -> None:
    """
    Replaces an existing policy definition.

    Raises:
        HTTPException: 404 if absent, 400 if invalid or the ids differ.
    """

    policy_definition = convert_policy_from_edc_format(payload)
    replace_entity(stores.policies, policy_id, policy_definition)

    stores.monitor.debug(f"Policy definition updated: {policy_id}")


def delete_policy(stores: CatalogStores, policy_id: str) -> None:
    """
    Deletes a policy definition.

    Contract definitions still naming the policy are left untouched; they
    drop out of the catalog until the policy exists again.

    Raises:
        HTTPException: 404 if the policy definition does not exist.
    """

    try:
        stores.policies.delete(policy_id)
    except CatalogError as e:
        raise http_error(e)

    referencing = [definition.id for definition in stores.contracts.referencing(policy_id)]
    if referencing:
        stores.monitor.warning(
            f"Policy definition {policy_id} deleted while referenced by contract definitions: "
            f"{', '.join(referencing)}"
        )
    else:
        stores.monitor.debug(f"Policy definition deleted: {policy_id}")


def query_policies(stores: CatalogStores, payload: Optional[dict]) -> List[dict]:
    """Returns the policy definitions selected by a QuerySpec."""

    spec = parse_query_spec(payload)
    return [convert_policy_to_edc_format(policy) for policy in run_query(stores.policies, spec)]
