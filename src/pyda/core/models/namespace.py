"""
Namespace identifiers for the DA layer.

A namespace scopes which partition of the DA layer a rollup writes to and
reads from. IDs are fixed-size byte strings.
"""
import hashlib
import logging

logger = logging.getLogger(__name__)

NAMESPACE_ID_SIZE = 8

_HEX_DIGITS = "0123456789abcdefABCDEF"


def namespace_id_from_str(namespace: str) -> bytes:
    """Convert a namespace string to namespace ID bytes.

    A 16-character hex string is decoded as-is. Any other string is
    normalized to the first 8 bytes of its SHA-256 digest, so human-readable
    names map to a stable ID.

    Args:
        namespace: Hex namespace ID or arbitrary namespace name

    Returns:
        bytes: Namespace ID of NAMESPACE_ID_SIZE bytes
    """
    candidate = namespace[2:] if namespace.startswith("0x") else namespace
    if len(candidate) == NAMESPACE_ID_SIZE * 2 and all(c in _HEX_DIGITS for c in candidate):
        return bytes.fromhex(candidate)

    normalized = hashlib.sha256(namespace.encode()).digest()[:NAMESPACE_ID_SIZE]
    logger.info(f"Normalizing namespace '{namespace}' to '{normalized.hex()}'")
    return normalized


def validate_namespace_id(namespace_id: bytes) -> bytes:
    if len(namespace_id) != NAMESPACE_ID_SIZE:
        raise ValueError(
            f"Namespace ID must be {NAMESPACE_ID_SIZE} bytes, got {len(namespace_id)}"
        )
    return bytes(namespace_id)
