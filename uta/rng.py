"""
Random Byte Source

Some trust anchors cap the number of bytes returned per request, so the
remaining count is requested again until the caller's length is reached.
The result is all-or-nothing: a failure in any round discards everything
collected so far.
"""

from .errors import TrustAnchorError
from .session import Session


def get_random(session: Session, len_random: int) -> bytes:
    """
    Get exactly len_random random bytes from the trust anchor.

    Args:
        session: Open session
        len_random: Number of bytes wanted

    Returns:
        len_random random bytes

    Raises:
        ValueError: If len_random is negative
        TrustAnchorError: If any request fails or returns no bytes
    """
    if len_random < 0:
        raise ValueError(f"Random length must not be negative, got {len_random}")

    collected = bytearray()
    try:
        with session.acquire() as backend:
            while len(collected) < len_random:
                chunk = backend.random(len_random - len(collected))
                if not chunk:
                    raise TrustAnchorError("Trust anchor returned no random bytes")
                collected += chunk[:len_random - len(collected)]
        return bytes(collected)
    finally:
        # wipe the working buffer; on failure nothing of it is returned
        collected[:] = bytes(len(collected))
