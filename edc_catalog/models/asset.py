"""
Asset model definition.

This module defines the `Asset` data model. An asset is any data resource
or service (an HTTP API, a file, a stream) that a connector can offer in
its catalog. Its `dataAddress` tells a data plane how to reach the data;
the catalog engine stores it and hands it back, never interpreting it.

The model is implemented using Pydantic for data validation and type
hinting, ensuring consistency across the API and the metadata stores.
"""

import time
from typing import Any, Dict, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from edc_catalog.util.edc_helpers import ENTITY_ID_KEY


PropertyValue = Union[str, bool, int, float]


def now_millis() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


class DataAddress(BaseModel):
    """
    Describes how to physically reach the data behind an asset.

    Only `type` is declared; every other key (baseUrl, method, proxyPath...)
    is kept as given.

    Example:
        >>> address = DataAddress(
        ...     type="HttpData",
        ...     baseUrl="https://api.weatherapi.com/v1/current.json",
        ...     method="GET"
        ... )
    """

    model_config = ConfigDict(extra="allow")

    type: str
    """Discriminator of the data source (e.g. `HttpData`, `File`)."""


class Asset(BaseModel):
    """
    Represents an asset registered in the catalog.

    Example:
        >>> asset = Asset(
        ...     id="weather-api-asset",
        ...     properties={"name": "Public Weather API", "contenttype": "application/json"},
        ...     dataAddress=DataAddress(type="HttpData", baseUrl="https://api.weatherapi.com/v1")
        ... )
        >>> print(asset.properties["name"])
        Public Weather API
    """

    id: str
    """Unique identifier of the asset, assigned by the caller."""

    properties: Dict[str, PropertyValue] = Field(default_factory=dict)
    """Public metadata (conventionally `name` and `contenttype`)."""

    dataAddress: DataAddress
    """Physical access descriptor; opaque to the catalog engine."""

    createdAt: int = Field(default_factory=now_millis)
    """Creation timestamp in epoch milliseconds."""

    @field_validator("id")
    @classmethod
    def id_not_blank(cls, v):
        if not v.strip():
            raise ValueError("asset id must not be empty")
        return v

    def attributes(self) -> Dict[str, Any]:
        """Attributes a criterion may address: the id plus every property."""
        return {**self.properties, ENTITY_ID_KEY: self.id}
