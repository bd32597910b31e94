"""Webhook ingestion pipeline.

Takes a raw webhook body through signature verification, parsing,
normalization, publication policy and privacy jitter, then persists the
record. Feed regeneration is left to the caller, which schedules it after the
acknowledgment has been sent.
"""

import json
import logging
from dataclasses import dataclass
from typing import Optional

from starlette.concurrency import run_in_threadpool

from ..common import SignatureVerifier, jitter_lat_lng, log_webhook_request
from ..config import ProjectMapConfig
from ..exceptions import AuthError, PayloadParseError
from ..models import ProjectRecord, RecordStore, project_key
from .normalize import extract_project

logger = logging.getLogger(__name__)

OUTCOME_STORED = "stored"
OUTCOME_MISSING_COORDS = "missing_coords"
OUTCOME_NO_PROJECT_ID = "no_project_id"


@dataclass
class IngestResult:
    """Terminal outcome of one accepted webhook delivery."""
    outcome: str
    message: str
    record: Optional[ProjectRecord] = None

    @property
    def should_regenerate(self) -> bool:
        return self.record is not None


class WebhookIngestor:
    """Runs a webhook delivery through to a stored ``ProjectRecord``."""

    def __init__(self, config: ProjectMapConfig, store: RecordStore) -> None:
        self.config = config
        self.store = store
        self.verifier = SignatureVerifier(
            config.webhook_secret,
            algorithm=config.signature_algorithm,
            encoding=config.signature_encoding,
        )

    def check_signature(self, raw_body: bytes, signature: Optional[str]) -> None:
        """Raise ``AuthError`` for a bad signature, or a missing one when required."""
        if signature is None:
            if self.config.require_signature:
                raise AuthError("Missing signature header")
            return
        if not self.verifier.verify(signature, raw_body):
            raise AuthError("Invalid signature")

    @staticmethod
    def parse_body(raw_body: bytes):
        try:
            return json.loads(raw_body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise PayloadParseError(f"Invalid JSON payload: {e}") from e
        except RecursionError as e:
            raise PayloadParseError("Invalid JSON payload: nesting too deep") from e

    async def _record_payload(self, payload, project_id: Optional[str], outcome: str) -> None:
        if self.config.log_payloads:
            await run_in_threadpool(log_webhook_request, payload, project_id, outcome, self.config.log_dir)

    async def ingest(self, raw_body: bytes, signature: Optional[str] = None) -> IngestResult:
        """Process one delivery.

        Raises ``AuthError``, ``PayloadParseError`` or ``StorageError``; every
        other branch returns an ``IngestResult`` to be acknowledged with 200.
        """
        self.check_signature(raw_body, signature)
        payload = self.parse_body(raw_body)

        record = extract_project(payload, required_label=self.config.map_label)
        if record is None:
            logger.info("Webhook has no resolvable project id; acknowledged without storing")
            await self._record_payload(payload, None, OUTCOME_NO_PROJECT_ID)
            return IngestResult(OUTCOME_NO_PROJECT_ID, "No project id in payload (acknowledged)")

        if record.missing_coords:
            await self.store.put(project_key(record.id), record.model_dump_json())
            logger.info(f"Project {record.id} stored without coordinates (published={record.published})")
            await self._record_payload(payload, record.id, OUTCOME_MISSING_COORDS)
            return IngestResult(OUTCOME_MISSING_COORDS, "Missing coordinates (stored, not mapped)", record)

        if self.config.jitter_meters > 0:
            lat, lng = jitter_lat_lng(record.lat, record.lng, self.config.jitter_meters, record.id)
            record = record.model_copy(update={"lat": lat, "lng": lng})

        await self.store.put(project_key(record.id), record.model_dump_json())
        logger.info(f"Project {record.id} stored (published={record.published})")
        await self._record_payload(payload, record.id, OUTCOME_STORED)
        return IngestResult(OUTCOME_STORED, "OK", record)
