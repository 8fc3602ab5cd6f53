"""
Response schemas.

`IdResponse` is returned by every creation endpoint of the management API.
"""

from pydantic import BaseModel, ConfigDict, Field


class IdResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="@id")
    type: str = Field(default="IdResponse", alias="@type")
    createdAt: int
