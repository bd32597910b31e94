"""HMAC utilities for webhook signature validation."""

import base64
import hashlib
import hmac
import logging
from typing import Optional

logger = logging.getLogger(__name__)

_DIGESTS = {
    "sha1": hashlib.sha1,
    "sha256": hashlib.sha256,
}


def compute_signature(data: bytes, secret: str, algorithm: str = "sha1", encoding: str = "base64") -> str:
    """Compute an HMAC signature for given data and secret.

    ``algorithm`` selects the hash (``sha1`` or ``sha256``) and ``encoding`` how
    the digest is rendered (``base64`` or ``hex``).
    """
    digestmod = _DIGESTS.get(algorithm)
    if digestmod is None:
        raise ValueError(f"Unsupported HMAC algorithm: {algorithm}")

    mac = hmac.new(secret.encode("utf-8"), data, digestmod)
    if encoding == "hex":
        return mac.hexdigest()
    if encoding == "base64":
        return base64.b64encode(mac.digest()).decode("ascii")
    raise ValueError(f"Unsupported signature encoding: {encoding}")


def _strip_prefix(signature: str, algorithm: str) -> str:
    # GitHub/Jira style headers carry "sha256=<digest>"
    prefix = f"{algorithm}="
    if signature.lower().startswith(prefix):
        return signature[len(prefix):]
    return signature


def verify_signature(
    signature_header: Optional[str],
    data: bytes,
    secret: str,
    algorithm: str = "sha1",
    encoding: str = "base64",
) -> bool:
    """Verify an HMAC signature header against the raw request body.

    Never raises: an empty secret, an empty header or an unknown
    algorithm/encoding all verify as False.
    """
    if not secret or not signature_header:
        return False

    try:
        expected_signature = compute_signature(data, secret, algorithm, encoding)
    except ValueError as e:
        logger.error(f"Cannot verify signature: {e}")
        return False

    received_signature = _strip_prefix(signature_header.strip(), algorithm)

    # Compare signatures (constant-time comparison)
    return hmac.compare_digest(
        received_signature.encode("utf-8"),
        expected_signature.strip().encode("utf-8"),
    )


class SignatureVerifier:
    """Signature check bound to a secret and an algorithm/encoding pair."""

    def __init__(self, secret: str, algorithm: str = "sha1", encoding: str = "base64") -> None:
        self.secret = secret
        self.algorithm = algorithm
        self.encoding = encoding

    def sign(self, data: bytes) -> str:
        return compute_signature(data, self.secret, self.algorithm, self.encoding)

    def verify(self, signature_header: Optional[str], data: bytes) -> bool:
        return verify_signature(signature_header, data, self.secret, self.algorithm, self.encoding)
