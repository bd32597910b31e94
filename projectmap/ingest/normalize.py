"""Extract a canonical project record from heterogeneous webhook payloads.

Senders nest the project object differently depending on the event type.
Extraction is driven by ordered rule lists: each rule either returns a value
or ``None`` ("not applicable"), and the first applicable rule wins.
"""

import math
from datetime import datetime, timezone
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

from ..models import DEFAULT_TITLE, ProjectRecord

SourceRule = Tuple[str, Callable[[Any], Optional[Mapping[str, Any]]]]


def _mapping(value: Any) -> Optional[Mapping[str, Any]]:
    return value if isinstance(value, Mapping) else None


def _path(*keys: str) -> Callable[[Any], Optional[Mapping[str, Any]]]:
    def rule(payload: Any) -> Optional[Mapping[str, Any]]:
        node = _mapping(payload)
        for key in keys:
            if node is None:
                return None
            node = _mapping(node.get(key))
        return node
    return rule


# Where the project object may live, most specific first
SOURCE_RULES: List[SourceRule] = [
    ("project", _path("project")),
    ("data.project", _path("data", "project")),
    ("data", _path("data")),
    ("root", _path()),
]

# Field names accepted as the project id, in precedence order
ID_FIELDS: Sequence[str] = ("id", "project_id", "uuid")

LAT_FIELDS: Sequence[str] = ("lat", "latitude")
LNG_FIELDS: Sequence[str] = ("lng", "longitude", "lon")
TITLE_FIELDS: Sequence[str] = ("title", "name")
THUMB_FIELDS: Sequence[str] = ("thumb_url", "thumbnail_url", "cover_photo_url")
URL_FIELDS: Sequence[str] = ("url", "public_url")


def _clean_text(value: Any) -> Optional[str]:
    """Trimmed non-empty string, or None; strings that cannot be encoded as UTF-8
    (lone surrogates from JSON escapes) are treated as absent."""
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return None
    return text


def _id_value(value: Any) -> Optional[str]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (str, int, float)):
        return _clean_text(str(value))
    return None


def resolve_project(payload: Any) -> Optional[Tuple[str, Mapping[str, Any]]]:
    """Return ``(id, source mapping)`` for the first rule that yields an id."""
    for _name, rule in SOURCE_RULES:
        source = rule(payload)
        if source is None:
            continue
        for field_name in ID_FIELDS:
            project_id = _id_value(source.get(field_name))
            if project_id is not None:
                return project_id, source
    return None


def resolve_project_id(payload: Any) -> Optional[str]:
    resolved = resolve_project(payload)
    return resolved[0] if resolved else None


def to_number(value: Any) -> Optional[float]:
    """Coerce numbers and numeric strings to a finite float; anything else is None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def normalize_labels(labels: Any) -> List[str]:
    """Accept strings or ``{"name": ...}`` entries; trim and drop everything else."""
    if not isinstance(labels, list):
        return []

    result = []
    for entry in labels:
        if isinstance(entry, Mapping):
            entry = entry.get("name")
        entry = _clean_text(entry)
        if entry:
            result.append(entry)
    return result


def _first_text(source: Mapping[str, Any], fields: Sequence[str]) -> Optional[str]:
    for field_name in fields:
        value = _clean_text(source.get(field_name))
        if value:
            return value
    return None


def _first_number(source: Mapping[str, Any], fields: Sequence[str]) -> Optional[float]:
    for field_name in fields:
        if source.get(field_name) is not None:
            return to_number(source.get(field_name))
    return None


def is_publishable(labels: Sequence[str], required_label: Optional[str]) -> bool:
    """Publication policy: the required label must be present, if one is configured."""
    required = (required_label or "").strip()
    if not required:
        return True
    return required in labels


def extract_project(payload: Any, required_label: Optional[str] = None,
                    now: Optional[datetime] = None) -> Optional[ProjectRecord]:
    """Build a ``ProjectRecord`` from a parsed payload, or None when no id resolves.

    Coordinates that cannot be derived leave ``lat``/``lng`` unset and set
    ``missing_coords``. Jitter is applied later by the ingest pipeline.
    """
    resolved = resolve_project(payload)
    if resolved is None:
        return None
    project_id, source = resolved

    labels = normalize_labels(source.get("labels"))
    lat = _first_number(source, LAT_FIELDS)
    lng = _first_number(source, LNG_FIELDS)
    missing_coords = lat is None or lng is None

    return ProjectRecord(
        id=project_id,
        title=_first_text(source, TITLE_FIELDS) or DEFAULT_TITLE,
        category=_first_text(source, ("category",)),
        labels=labels,
        published=is_publishable(labels, required_label),
        lat=None if missing_coords else lat,
        lng=None if missing_coords else lng,
        thumb_url=_first_text(source, THUMB_FIELDS),
        url=_first_text(source, URL_FIELDS),
        updated_at=now or datetime.now(timezone.utc),
        missing_coords=missing_coords,
    )
