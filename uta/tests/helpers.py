"""Shared fixtures for the UTA test suite."""

from unittest.mock import MagicMock

from cryptography.hazmat.primitives import hashes, hmac

from uta.backends.backend_interface import TrustAnchorBackend
from uta.backends.simulator import SIMULATED_KEY_SLOTS
from uta.constants import TrustAnchorType


def reference_hmac(key: bytes, message: bytes) -> bytes:
    """HMAC-SHA256 computed outside of the library."""
    h = hmac.HMAC(key, hashes.SHA256())
    h.update(message)
    return h.finalize()


def simulator_reference(key_slot: int, dv: bytes) -> bytes:
    return reference_hmac(SIMULATED_KEY_SLOTS[key_slot], dv)


def make_mock_backend(ta_type: TrustAnchorType = TrustAnchorType.UTA_SIM) -> MagicMock:
    """Mock backend answering like a healthy trust anchor."""
    backend = MagicMock(spec=TrustAnchorBackend)
    backend.TA_TYPE = ta_type
    backend.hmac.side_effect = lambda key_slot, message: simulator_reference(key_slot, message)
    backend.random.side_effect = lambda num_bytes: bytes(num_bytes)
    backend.device_identity.return_value = bytes(range(16))
    backend.self_test.return_value = 0
    return backend
