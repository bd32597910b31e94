"""GeoJSON models for the published project feed."""

import json
from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, Field

from .project import ProjectRecord


class FeatureProperties(BaseModel):
    """Public-safe subset of a project record."""

    id: str
    title: str
    category: Optional[str] = None
    labels: List[str] = Field(default_factory=list)
    thumb_url: Optional[str] = None
    url: Optional[str] = None


class PointGeometry(BaseModel):
    type: Literal["Point"] = "Point"
    # GeoJSON order: longitude first
    coordinates: Tuple[float, float]


class Feature(BaseModel):
    type: Literal["Feature"] = "Feature"
    geometry: PointGeometry
    properties: FeatureProperties

    @classmethod
    def from_record(cls, record: ProjectRecord) -> "Feature":
        return cls(
            geometry=PointGeometry(coordinates=(record.lng, record.lat)),
            properties=FeatureProperties(
                id=record.id,
                title=record.title,
                category=record.category,
                labels=list(record.labels),
                thumb_url=record.thumb_url,
                url=record.url,
            ),
        )


class ProjectFeed(BaseModel):
    """FeatureCollection served at /projects.geojson."""

    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: List[Feature] = Field(default_factory=list)

    @classmethod
    def empty(cls) -> "ProjectFeed":
        return cls()

    def to_json(self) -> str:
        """Compact, stable serialization; identical feeds give identical bytes."""
        return json.dumps(self.model_dump(mode="json"), separators=(",", ":"), ensure_ascii=False)
