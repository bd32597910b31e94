"""Pydantic models for stored project records."""

import math
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_TITLE = "Project"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProjectRecord(BaseModel):
    """Normalized project, one per external project id."""
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1, description="External project id")
    title: str = DEFAULT_TITLE
    category: Optional[str] = None
    labels: List[str] = Field(default_factory=list)
    published: bool = False
    lat: Optional[float] = None
    lng: Optional[float] = None
    thumb_url: Optional[str] = None
    url: Optional[str] = None
    updated_at: datetime = Field(default_factory=_utcnow, description="Ingestion time of the last write")
    missing_coords: bool = False

    @field_validator("lat", "lng", mode="after")
    @classmethod
    def finite_or_none(cls, v: Optional[float]) -> Optional[float]:
        if v is None or not math.isfinite(v):
            return None
        return v

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lng is not None

    @property
    def is_mappable(self) -> bool:
        """Published and geolocated, i.e. eligible for the public feed."""
        return self.published and self.has_coordinates
