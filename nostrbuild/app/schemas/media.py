"""
Response schemas for the nostr.build media API.

One naming convention is used: snake_case Python attributes, with wire
aliases where the service uses camelCase. Everything except an asset's
URL is opaque pass-through metadata; unknown fields are preserved so
that verbose output shows exactly what the service returned.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Dimensions(BaseModel):
    model_config = ConfigDict(extra="allow")

    width: Optional[int] = None
    height: Optional[int] = None


class MediaAsset(BaseModel):
    """
    A single uploaded media object and its derived variants.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    url: str = Field(..., min_length=1)

    sha256: Optional[str] = None
    original_sha256: Optional[str] = None
    size: Optional[int] = None
    mime: Optional[str] = None
    type: Optional[str] = None
    name: Optional[str] = None
    input_name: Optional[str] = None
    blurhash: Optional[str] = None
    dimensions: Optional[Dimensions] = None
    dimensions_string: Optional[str] = Field(
        None,
        alias="dimensionsString",
    )
    thumbnail: Optional[str] = None
    responsive: Dict[str, str] = Field(default_factory=dict)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class UploadResult(BaseModel):
    """
    Parsed success response of an upload.

    The service always returns at least one asset for an upload; an
    empty list is a schema violation, not a degraded success.
    """

    model_config = ConfigDict(extra="allow")

    status: str
    message: str
    data: List[MediaAsset] = Field(..., min_length=1)

    @property
    def primary_url(self) -> str:
        return self.data[0].url


class DeleteResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    status: str
    message: str
    data: List[MediaAsset] = Field(default_factory=list)

    @field_validator("data", mode="before")
    @classmethod
    def null_data_is_empty(cls, v: Any) -> Any:
        # Deletes may answer "data": null; there are no assets either way.
        return [] if v is None else v
