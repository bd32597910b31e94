"""Common utilities and shared functionality."""

from .hmac_utils import (
    SignatureVerifier,
    compute_signature,
    verify_signature,
)

from .jitter import (
    hash_string,
    jitter_lat_lng,
    mulberry32,
)

from .logging_utils import (
    setup_logging,
    log_server_message,
    log_webhook_request,
    log_error,
)

__all__ = [
    # HMAC utilities
    "SignatureVerifier",
    "compute_signature",
    "verify_signature",
    # Privacy jitter
    "hash_string",
    "jitter_lat_lng",
    "mulberry32",
    # Logging utilities
    "setup_logging",
    "log_server_message",
    "log_webhook_request",
    "log_error",
]
