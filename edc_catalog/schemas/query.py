"""
Query schemas.

This module defines the Pydantic schemas used to read query requests sent
to the `.../request` endpoints of the management API.

Schemas:
    - QuerySpec: Filter, paging, and sorting of a collection query.
    - CatalogRequest: Body of a catalog request, wrapping a QuerySpec.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from edc_catalog.models.criterion import Criterion


class QuerySpec(BaseModel):
    """
    Describes which entities of a collection to return.

    The filter expression is evaluated by the store (AND semantics); sorting
    and paging are applied on top of the filtered result.

    Example:
        >>> spec = QuerySpec(
        ...     filterExpression=[Criterion(operandLeft="category", operator="=", operandRight="weather")],
        ...     offset=0,
        ...     limit=10,
        ...     sortField="name"
        ... )
    """

    filterExpression: List[Criterion] = Field(default_factory=list)
    """Criteria every returned entity must satisfy."""

    offset: int = Field(default=0, ge=0)
    """Number of matching entities to skip."""

    limit: int = Field(default=50, ge=1)
    """Maximum number of entities to return."""

    sortField: Optional[str] = None
    """Attribute to sort by; insertion order when omitted."""

    sortOrder: Literal["ASC", "DESC"] = "ASC"
    """Sort direction."""

    @field_validator("filterExpression", mode="before")
    @classmethod
    def filter_as_list(cls, v):
        if v is None:
            return []
        if isinstance(v, dict):
            return [v]
        return v

    @field_validator("sortOrder", mode="before")
    @classmethod
    def normalize_sort_order(cls, v):
        if isinstance(v, str):
            v = v.upper()
        return v


class CatalogRequest(BaseModel):
    """Body of a catalog request."""

    querySpec: QuerySpec = Field(default_factory=QuerySpec)
