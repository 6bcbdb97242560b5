"""Shared utilities for Haven."""
from .pii import (
    configure_pii_salt,
    hash_pii,
    hash_pii_if_configured,
    hash_text_for_audit,
    is_pii_salt_configured,
)

__all__ = [
    "configure_pii_salt",
    "hash_pii",
    "hash_pii_if_configured",
    "hash_text_for_audit",
    "is_pii_salt_configured",
]
