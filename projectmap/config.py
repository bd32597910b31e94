"""Configuration for the project map service."""

import math
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .exceptions import ConfigError

# Load environment variables from .env file
load_dotenv()

SIGNATURE_ALGORITHMS = ("sha1", "sha256")
SIGNATURE_ENCODINGS = ("base64", "hex")
STORE_BACKENDS = ("redis", "memory")


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str, default: str) -> float:
    raw = os.getenv(name, default).strip() or default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")
    if not math.isfinite(value):
        raise ConfigError(f"{name} must be a finite number, got {raw!r}")
    return value


@dataclass
class ProjectMapConfig:
    """Configuration for webhook ingestion and feed publishing."""

    # Webhook settings
    webhook_secret: str = ""
    webhook_endpoint: str = "/webhook"
    signature_header: str = "X-CompanyCam-Signature"
    signature_algorithm: str = "sha1"
    signature_encoding: str = "base64"
    require_signature: bool = False

    # Publishing policy
    map_label: str = ""
    jitter_meters: float = 0.0
    feed_max_age: int = 60

    # Storage
    store_backend: str = "redis"
    redis_url: str = "redis://localhost:6379"

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8080

    # Logging
    log_dir: Optional[str] = None
    log_payloads: bool = False

    @classmethod
    def from_env(cls) -> "ProjectMapConfig":
        """Create configuration from environment variables."""
        return cls(
            webhook_secret=os.getenv("COMPANYCAM_WEBHOOK_TOKEN", ""),
            webhook_endpoint=os.getenv("PROJECTMAP_WEBHOOK_ENDPOINT", "/webhook"),
            signature_header=os.getenv("PROJECTMAP_SIGNATURE_HEADER", "X-CompanyCam-Signature"),
            signature_algorithm=os.getenv("PROJECTMAP_SIGNATURE_ALGORITHM", "sha1").strip().lower(),
            signature_encoding=os.getenv("PROJECTMAP_SIGNATURE_ENCODING", "base64").strip().lower(),
            require_signature=_env_bool("PROJECTMAP_REQUIRE_SIGNATURE"),
            map_label=os.getenv("MAP_LABEL", "").strip(),
            jitter_meters=_env_float("JITTER_METERS", "0"),
            feed_max_age=int(_env_float("PROJECTMAP_FEED_MAX_AGE", "60")),
            store_backend=os.getenv("PROJECTMAP_STORE", "redis").strip().lower(),
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379"),
            host=os.getenv("PROJECTMAP_HOST", "0.0.0.0"),
            port=int(os.getenv("PROJECTMAP_PORT", "8080")),
            log_dir=os.getenv("PROJECTMAP_LOG_DIR", "logs"),
            log_payloads=_env_bool("PROJECTMAP_LOG_PAYLOADS"),
        )

    def validate(self) -> "ProjectMapConfig":
        """Check value ranges and enumerations; raise ConfigError on the first problem."""
        if self.signature_algorithm not in SIGNATURE_ALGORITHMS:
            raise ConfigError(
                f"Unsupported signature algorithm {self.signature_algorithm!r}; "
                f"expected one of {SIGNATURE_ALGORITHMS}"
            )
        if self.signature_encoding not in SIGNATURE_ENCODINGS:
            raise ConfigError(
                f"Unsupported signature encoding {self.signature_encoding!r}; "
                f"expected one of {SIGNATURE_ENCODINGS}"
            )
        if self.store_backend not in STORE_BACKENDS:
            raise ConfigError(
                f"Unsupported store backend {self.store_backend!r}; expected one of {STORE_BACKENDS}"
            )
        if not math.isfinite(self.jitter_meters):
            raise ConfigError("JITTER_METERS must be a finite number")
        if not math.isfinite(self.feed_max_age):
            raise ConfigError("PROJECTMAP_FEED_MAX_AGE must be a finite number")
        if self.jitter_meters < 0:
            raise ConfigError("JITTER_METERS must not be negative")
        if self.feed_max_age < 0:
            raise ConfigError("PROJECTMAP_FEED_MAX_AGE must not be negative")
        if not self.webhook_endpoint.startswith("/"):
            raise ConfigError("PROJECTMAP_WEBHOOK_ENDPOINT must start with '/'")
        return self
