"""Overpass API response models."""

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import DecodeFailure

logger = logging.getLogger(__name__)


class OverpassCenter(BaseModel):
    """Centroid reported for ways and relations with ``out center``."""

    lat: float
    lon: float


class RawGeoRecord(BaseModel):
    """A single element of an Overpass JSON response."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: str = Field(alias="type")  # node / way / relation
    element_id: int = Field(alias="id")
    lat: Optional[float] = None
    lon: Optional[float] = None
    center: Optional[OverpassCenter] = None
    tags: Optional[dict[str, str]] = None


class OverpassResponse(BaseModel):
    """Top-level Overpass JSON document."""

    elements: list[RawGeoRecord]


def decode_response(payload: bytes | str) -> list[RawGeoRecord]:
    """
    Decode an Overpass JSON body into raw records.

    Args:
        payload: Response body

    Returns:
        Elements in the order the server returned them

    Raises:
        DecodeFailure: If the body is not JSON or lacks the expected shape
    """
    try:
        response = OverpassResponse.model_validate_json(payload)
    except ValidationError as e:
        raise DecodeFailure(f"{e.error_count()} validation error(s): {e.errors()[0]['msg']}") from e

    logger.debug(f"Decoded {len(response.elements)} Overpass element(s)")
    return response.elements
