"""Identifier hashing for logs.

Session identifiers and message text are never written to logs in the
clear. Services log a keyed hash (HMAC-SHA256) of the session id and an
unkeyed fingerprint of the message text.

Server processes configure the key at import time. Client processes may
not, so logging on failure paths goes through ``hash_pii_if_configured``.
"""
import hashlib
import hmac
import logging
from typing import Optional

logger = logging.getLogger(__name__)


MIN_SALT_LENGTH = 32

_salt_key: Optional[bytes] = None


def configure_pii_salt(salt: str) -> None:
    """Set the HMAC key used by ``hash_pii``.

    Raises:
        ValueError: If salt is shorter than MIN_SALT_LENGTH
    """
    global _salt_key
    if not salt or len(salt) < MIN_SALT_LENGTH:
        logger.critical(
            "PII_SALT_REJECTED",
            extra={"salt_length": len(salt or ""), "min_length": MIN_SALT_LENGTH}
        )
        raise ValueError(f"PII salt must be at least {MIN_SALT_LENGTH} characters")

    _salt_key = salt.encode()
    logger.info("PII_SALT_CONFIGURED", extra={"salt_length": len(salt)})


def is_pii_salt_configured() -> bool:
    return _salt_key is not None


def hash_pii(value: str) -> str:
    """Keyed 64-char hex digest of ``value``; stable within a deployment.

    Raises:
        RuntimeError: If configure_pii_salt() has not been called
    """
    if _salt_key is None:
        logger.critical("PII_HASH_WITHOUT_SALT", extra={"action": "call configure_pii_salt()"})
        raise RuntimeError("PII salt not configured. Call configure_pii_salt() first.")
    return hmac.new(_salt_key, value.encode(), hashlib.sha256).hexdigest()


def hash_pii_if_configured(value: str) -> Optional[str]:
    """Like hash_pii, but None instead of raising when no salt is set."""
    if not is_pii_salt_configured():
        return None
    return hash_pii(value)


def hash_text_for_audit(text: str) -> str:
    """Fingerprint message text without exposing its content."""
    return hashlib.sha256(text.encode()).hexdigest()
