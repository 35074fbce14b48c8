"""
Device Identity Deriver

Builds a deterministic 16-byte device UUID from the backend's device
identity and formats it as an RFC4122 version 4 (variant 1) UUID.
"""

import uuid

from .constants import LEN_UUID
from .errors import TrustAnchorError
from .session import Session


def format_rfc4122_v4(raw: bytes) -> bytes:
    """
    Apply RFC4122 version 4 and variant 1 bits to 16 bytes.

    Args:
        raw: At least 16 bytes; only the first 16 are used

    Returns:
        16-byte UUID
    """
    uuid_bytes = bytearray(raw[:LEN_UUID])
    uuid_bytes[6] = (uuid_bytes[6] & 0x0F) | 0x40
    uuid_bytes[8] = (uuid_bytes[8] & 0x3F) | 0x80
    return bytes(uuid_bytes)


def get_device_uuid(session: Session) -> bytes:
    """
    Get the 16-byte UUID of the device.

    The same device yields the same UUID on every call and across process
    restarts.
    """
    with session.acquire() as backend:
        raw = backend.device_identity()

    if len(raw) < LEN_UUID:
        raise TrustAnchorError(f"Device identity too short: {len(raw)} bytes")
    return format_rfc4122_v4(raw)


def uuid_to_string(uuid_bytes: bytes) -> str:
    """Render a device UUID in the canonical 8-4-4-4-12 form."""
    return str(uuid.UUID(bytes=bytes(uuid_bytes)))
