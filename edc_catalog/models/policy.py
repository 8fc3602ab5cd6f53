"""
Policy model definition.

This module defines the data models that represent access and usage
policies. Policies follow the ODRL (Open Digital Rights Language) shape
and describe permissions, prohibitions, and obligations that regulate
how data can be used and shared between connectors.

The catalog engine treats a policy body as opaque: it is validated for
shape, stored whole, and returned whole. Unknown ODRL keys (assigner,
target, duty, ...) are kept as given.

The models follow a hierarchical structure:
- Constraint: an atomic (leftOperand, operator, rightOperand) or logical
  (and, or, xone, andSequence) condition.
- Rule: represents a single permission, prohibition, or obligation.
- Policy: groups rules into a complete ODRL policy.
- PolicyDefinition: a stored, named policy.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from edc_catalog.models.asset import now_millis
from edc_catalog.util.edc_helpers import ENTITY_ID_KEY, ODRL_CONTEXT, unwrap_id


class Constraint(BaseModel):
    """
    Defines a constraint that applies to a policy rule.

    A constraint is either atomic (leftOperand, operator, rightOperand) or
    logical, combining other constraints with `and`, `or`, `xone` or
    `andSequence`.

    Example:
        >>> constraint = Constraint(
        ...     leftOperand="purpose",
        ...     operator="eq",
        ...     rightOperand="research"
        ... )
        >>> either = Constraint.model_validate({"or": [{"leftOperand": "region", "operator": "eq", "rightOperand": "EU"}]})
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    leftOperand: Optional[str] = None
    """Left operand of an atomic constraint (e.g. 'purpose', 'spatial')."""

    operator: Optional[str] = None
    """Operator defining the relationship between operands."""

    rightOperand: Any = None
    """Right operand or value of the constraint."""

    and_: Optional[List["Constraint"]] = Field(default=None, alias="and")
    """All of these constraints must hold."""

    or_: Optional[List["Constraint"]] = Field(default=None, alias="or")
    """At least one of these constraints must hold."""

    xone: Optional[List["Constraint"]] = None
    """Exactly one of these constraints must hold."""

    andSequence: Optional[List["Constraint"]] = None
    """All of these constraints must hold, evaluated in order."""

    @field_validator("leftOperand", "operator", mode="before")
    @classmethod
    def unwrap_reference(cls, v):
        # admits 'eq' as well as {'@id': 'odrl:eq'}
        return unwrap_id(v)

    @field_validator("and_", "or_", "xone", "andSequence", mode="before")
    @classmethod
    def operands_as_list(cls, v):
        if isinstance(v, dict):
            return [v]
        return v


Constraint.model_rebuild()


class Rule(BaseModel):
    """
    Defines a single rule in a policy (permission, prohibition, or obligation).

    Example:
        >>> rule = Rule(action="use", constraint=[Constraint(leftOperand="purpose", operator="eq", rightOperand="research")])
    """

    model_config = ConfigDict(extra="allow")

    action: str
    """Action that the rule allows, forbids, or obliges."""

    constraint: Optional[List[Constraint]] = None
    """Optional list of constraints associated with this rule."""

    @field_validator("action", mode="before")
    @classmethod
    def unwrap_action(cls, v):
        return unwrap_id(v)

    @field_validator("constraint", mode="before")
    @classmethod
    def constraint_as_list(cls, v):
        if isinstance(v, dict):
            return [v]
        return v


class Policy(BaseModel):
    """
    Defines the complete structure of an ODRL policy.

    An empty policy (no rules) places no restrictions.

    Example:
        >>> policy = Policy(permission=[Rule(action="use")])
    """

    model_config = ConfigDict(extra="allow")

    permission: List[Rule] = Field(default_factory=list)
    """List of allowed actions under this policy."""

    prohibition: List[Rule] = Field(default_factory=list)
    """List of forbidden actions under this policy."""

    obligation: List[Rule] = Field(default_factory=list)
    """List of required actions under this policy."""

    context: Any = Field(default=ODRL_CONTEXT)
    """JSON-LD context of the policy: an IRI, a context object, or a list of both."""

    type: Union[str, List[str]] = Field(default="Set")
    """Type of policy according to ODRL ('Set' by default)."""

    @field_validator("permission", "prohibition", "obligation", mode="before")
    @classmethod
    def rules_as_list(cls, v):
        if v is None:
            return []
        if isinstance(v, dict):
            return [v]
        return v


class PolicyDefinition(BaseModel):
    """
    A named, storable policy.

    Example:
        >>> policy_def = PolicyDefinition(id="allow-all-policy", policy=Policy())
        >>> print(policy_def.id)
        allow-all-policy
    """

    id: str
    """Unique identifier of the policy definition."""

    policy: Policy = Field(default_factory=Policy)
    """Full policy containing permissions, prohibitions, and obligations."""

    createdAt: int = Field(default_factory=now_millis)
    """Creation timestamp in epoch milliseconds."""

    @field_validator("id")
    @classmethod
    def id_not_blank(cls, v):
        if not v.strip():
            raise ValueError("policy definition id must not be empty")
        return v

    def attributes(self) -> Dict[str, Any]:
        return {ENTITY_ID_KEY: self.id, "policy.type": self.policy.type}
