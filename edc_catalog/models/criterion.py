"""
Criterion model definition.

A criterion is a single comparison predicate (left operand, operator,
right operand). Lists of criteria are used as asset selectors on contract
definitions and as filter expressions in queries; a list is satisfied
when every criterion in it is satisfied.
"""

from typing import Any

from pydantic import BaseModel, field_validator

from edc_catalog.util.edc_helpers import unwrap_id


class Criterion(BaseModel):
    """
    Represents a selection predicate.

    Example:
        >>> criterion = Criterion(
        ...     operandLeft="https://w3id.org/edc/v0.0.1/ns/id",
        ...     operator="=",
        ...     operandRight="weather-api-asset"
        ... )
    """

    operandLeft: str
    """Attribute path: the entity id constant or a property key."""

    operator: str
    """Comparison operator (e.g. '=', 'in', 'like')."""

    operandRight: Any = None
    """Literal value, or a list of literals for 'in'."""

    @field_validator("operandLeft", mode="before")
    @classmethod
    def unwrap_left(cls, v):
        return unwrap_id(v)

    @field_validator("operator", mode="before")
    @classmethod
    def normalize_operator(cls, v):
        # admits '=', ' LIKE ', {'@id': 'in'}
        v = unwrap_id(v)
        if isinstance(v, str):
            v = v.strip().lower()
        return v
