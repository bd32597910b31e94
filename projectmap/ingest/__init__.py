"""Webhook ingestion.

This module handles:
- Validating webhook signatures
- Normalizing heterogeneous project payloads
- Applying publication policy and privacy jitter
- Persisting project records
"""

from .normalize import (
    extract_project,
    is_publishable,
    normalize_labels,
    resolve_project_id,
    to_number,
)
from .pipeline import IngestResult, WebhookIngestor

__all__ = [
    "IngestResult",
    "WebhookIngestor",
    "extract_project",
    "is_publishable",
    "normalize_labels",
    "resolve_project_id",
    "to_number",
]
