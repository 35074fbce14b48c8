"""
Key Derivation Engine

Derives a key of 0..32 bytes as the prefix of
HMAC-SHA256(master_key[key_slot], dv). The master key never leaves the
trust anchor on hardware backends.
"""

from .constants import KEY_SLOTS, LEN_DV_V1, LEN_KEY_MAX
from .errors import (
    InvalidDerivationValueLengthError, InvalidKeyLengthError,
    InvalidKeySlotError, TrustAnchorError
)
from .session import Session


def validate_derivation_parameters(key_slot: int, dv: bytes, len_key: int) -> None:
    """
    Check derive_key parameters in their fixed precedence order.

    The derivation value length is checked first, then the key length and
    finally the key slot, so the first violated rule decides the error.

    Raises:
        InvalidDerivationValueLengthError: If dv is not exactly 8 bytes
        InvalidKeyLengthError: If len_key is outside 0..32
        InvalidKeySlotError: If key_slot is not 0 or 1
    """
    if len(dv) != LEN_DV_V1:
        raise InvalidDerivationValueLengthError(
            f"Derivation value must be {LEN_DV_V1} bytes, got {len(dv)}"
        )
    if not 0 <= len_key <= LEN_KEY_MAX:
        raise InvalidKeyLengthError(
            f"Key length must be between 0 and {LEN_KEY_MAX} bytes, got {len_key}"
        )
    if key_slot not in KEY_SLOTS:
        raise InvalidKeySlotError(f"Key slot must be 0 or 1, got {key_slot}")


def derive_key(session: Session, key_slot: int, dv: bytes, len_key: int = LEN_KEY_MAX) -> bytes:
    """
    Derive a key from the trust anchor.

    Parameters are validated before the session is touched. The derivation
    itself holds the session lock from start to finish.

    Args:
        session: Open session
        key_slot: Master key to use (0 or 1)
        dv: 8-byte derivation value
        len_key: Number of key bytes to return (0..32)

    Returns:
        The first len_key bytes of the HMAC-SHA256 digest
    """
    dv = memoryview(dv).tobytes()
    validate_derivation_parameters(key_slot, dv, len_key)

    with session.acquire() as backend:
        digest = backend.hmac(key_slot, dv)

    if len(digest) < len_key:
        raise TrustAnchorError(f"Trust anchor returned a {len(digest)} byte digest")
    return digest[:len_key]
