"""PII handling for crisis-detection logs.

User and conversation identifiers are hashed before they reach a log line,
and message text is only ever logged as a fingerprint.
"""
import hashlib
import logging
from typing import Optional

logger = logging.getLogger(__name__)


# Loaded from the PII_HASH_SALT environment variable at service startup
_PII_SALT: Optional[str] = None

MIN_SALT_LENGTH = 32


def configure_pii_salt(salt: str) -> None:
    """Configure the salt used for identifier hashing.

    Must be called during application startup before any PII hashing.

    Args:
        salt: Secret salt value

    Raises:
        ValueError: If salt is empty or too short
    """
    global _PII_SALT
    if not salt or len(salt) < MIN_SALT_LENGTH:
        logger.critical(
            "PII_SALT_CONFIGURATION_FAILED",
            extra={"reason": "Salt too short or empty", "min_length": MIN_SALT_LENGTH}
        )
        raise ValueError(f"PII salt must be at least {MIN_SALT_LENGTH} characters")

    _PII_SALT = salt
    logger.info("PII_SALT_CONFIGURED", extra={"salt_length": len(salt)})


def is_pii_salt_configured() -> bool:
    return _PII_SALT is not None


def hash_pii(value: str) -> str:
    """Hash an identifier for safe logging.

    Uses SHA-256 with the configured salt so the same user id always maps
    to the same non-reversible token.

    Args:
        value: The identifier to hash (user id, conversation id)

    Returns:
        64-char hex digest

    Raises:
        RuntimeError: If the salt has not been configured
    """
    if _PII_SALT is None:
        logger.critical(
            "PII_HASH_FAILED",
            extra={"reason": "Salt not configured", "action": "call configure_pii_salt()"}
        )
        raise RuntimeError("PII salt not configured. Call configure_pii_salt() first.")

    salted = f"{_PII_SALT}{value}"
    return hashlib.sha256(_encode(salted)).hexdigest()


def hash_text_for_audit(text: str) -> str:
    """Fingerprint message text for the audit trail without exposing content.

    Salted with the PII salt once it is configured so short messages cannot
    be recovered by hashing a dictionary of likely phrases.
    """
    salted = f"{_PII_SALT}{text}" if _PII_SALT is not None else text
    return hashlib.sha256(_encode(salted)).hexdigest()


def _encode(value: str) -> bytes:
    # Lone surrogates arrive from JSON bodies such as "\ud83d"
    return value.encode("utf-8", "surrogatepass")
