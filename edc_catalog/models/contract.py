"""
Contract definition model.

This module defines the `ContractDefinition` data model. A contract
definition links a set of assets, chosen dynamically by its asset
selector, with an access policy and a contract policy:

- The access policy decides who may see the offer in the catalog.
- The contract policy holds the usage terms negotiated for the data.

Both policies are referenced by id only. The ids are not checked for
existence when the definition is stored; they are resolved when a
catalog is generated.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, Field, field_validator

from edc_catalog.models.asset import now_millis
from edc_catalog.models.criterion import Criterion
from edc_catalog.util.edc_helpers import ENTITY_ID_KEY


class ContractDefinition(BaseModel):
    """
    Represents a contract definition.

    Example:
        >>> contract = ContractDefinition(
        ...     id="weather-contract-def",
        ...     accessPolicyId="allow-all-policy",
        ...     contractPolicyId="allow-all-policy",
        ...     assetsSelector=[Criterion(operandLeft="id", operator="=", operandRight="weather-api-asset")]
        ... )
        >>> print(contract.id)
        weather-contract-def
    """

    id: str
    """Unique identifier of the contract definition."""

    accessPolicyId: str
    """Identifier of the access policy that regulates catalog visibility."""

    contractPolicyId: str
    """Identifier of the contract policy that defines usage conditions."""

    assetsSelector: List[Criterion] = Field(default_factory=list)
    """Criteria an asset must all satisfy; empty selects every asset."""

    createdAt: int = Field(default_factory=now_millis)
    """Creation timestamp in epoch milliseconds."""

    @field_validator("id", "accessPolicyId", "contractPolicyId")
    @classmethod
    def not_blank(cls, v, info):
        if not v.strip():
            raise ValueError(f"{info.field_name} must not be empty")
        return v

    @field_validator("assetsSelector", mode="before")
    @classmethod
    def selector_as_list(cls, v):
        if v is None:
            return []
        if isinstance(v, dict):
            return [v]
        return v

    def attributes(self) -> Dict[str, Any]:
        return {
            ENTITY_ID_KEY: self.id,
            "accessPolicyId": self.accessPolicyId,
            "contractPolicyId": self.contractPolicyId,
        }
