"""Logging utilities for consistent logging across modules."""

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


def _log_path(log_dir: Optional[str] = None) -> Path:
    log_path = Path(log_dir or os.getenv("PROJECTMAP_LOG_DIR", "logs"))
    log_path.mkdir(parents=True, exist_ok=True)
    return log_path


def setup_logging(log_dir: Optional[str] = None) -> None:
    """Setup logging configuration."""
    log_path = _log_path(log_dir)

    # Configure logging
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_path / "projectmap.log"),
            logging.StreamHandler()
        ]
    )


def log_server_message(message: str) -> None:
    """Log server-related messages."""
    logging.info(f"[SERVER] {message}")


def log_webhook_request(webhook_data: Any, project_id: Optional[str], outcome: str,
                        log_dir: Optional[str] = None) -> Optional[Path]:
    """Write an accepted delivery to ``webhook-<project id>-<timestamp>.json``.

    The file records the resolved project id and ingest outcome next to the
    raw payload, so a pin that is missing from the feed can be traced back to
    the delivery that produced it.
    """
    try:
        log_path = _log_path(log_dir)

        received_at = datetime.now(timezone.utc)
        safe_id = "".join(c if c.isalnum() or c in "-_" else "_" for c in (project_id or "unresolved"))
        webhook_file = log_path / f"webhook-{safe_id[:64]}-{received_at.strftime('%Y%m%dT%H%M%S%f')}.json"

        entry = {
            "received_at": received_at.isoformat(),
            "project_id": project_id,
            "outcome": outcome,
            "payload": webhook_data,
        }
        webhook_file.write_text(json.dumps(entry, indent=2), encoding="utf-8")

        logger.info(f"Delivery for project {project_id} ({outcome}) logged to: {webhook_file}")
        return webhook_file

    except (OSError, TypeError, ValueError, RecursionError) as e:
        logger.error(f"Failed to log webhook request: {e}")
        return None


def log_error(error_message: str, error_data: str = "", log_dir: Optional[str] = None) -> None:
    """Log error messages with optional error data.

    Callers must not pass request bodies for authentication failures.
    """
    try:
        log_path = _log_path(log_dir)

        timestamp = datetime.now().strftime("%Y%m%dT%H%M%S%f")
        error_file = log_path / f"error-{timestamp}.log"

        with open(error_file, "w", encoding="utf-8") as f:
            f.write(f"Error occurred at: {datetime.now().isoformat()}\n")
            f.write(f"Error message: {error_message}\n")
            if error_data:
                f.write(f"Error data:\n{error_data}\n")

        logging.error(f"Error logged to: {error_file}")

    except Exception as e:
        logging.error(f"Failed to log error: {e}")
