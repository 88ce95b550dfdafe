"""Shared utilities for the Nafsy platform."""
from .pii import hash_pii, hash_text_for_audit, configure_pii_salt, is_pii_salt_configured

__all__ = ["hash_pii", "hash_text_for_audit", "configure_pii_salt", "is_pii_salt_configured"]
