"""
Trust anchor context.

A Context bundles one session to one trust anchor with the full v1
operation set. It is owned by the caller that created it, may be shared
between threads once open, and serializes all trust anchor access through
its session lock.

Typical use:

    with Context(SimulatorBackend()) as ctx:
        key = ctx.derive_key(1, b"default!")
"""

import sys

from . import derivation, identity, rng, selftest
from .backends.backend_interface import TrustAnchorBackend
from .constants import LEN_KEY_MAX
from .session import Session, SessionState
from .version import VersionDescriptor, get_version


class Context:
    """
    Caller-facing handle for one trust anchor session.

    The backend variant is fixed when the context is created. Operations on
    a context that is not open raise TrustAnchorError.
    """

    __slots__ = ('_session',)

    def __init__(self, backend: TrustAnchorBackend) -> None:
        self._session = Session(backend)

    @property
    def backend(self) -> TrustAnchorBackend:
        return self._session.backend

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def is_open(self) -> bool:
        return self._session.is_open

    # ========================================================================
    # Session Lifecycle
    # ========================================================================

    def open(self) -> None:
        """Open the connection to the trust anchor."""
        self._session.open()

    def close(self) -> None:
        """Close the connection and release the trust anchor."""
        self._session.close()

    def __enter__(self) -> 'Context':
        self.open()
        return self

    def __exit__(self, _type, value, traceback) -> None:
        self.close()

    # ========================================================================
    # Operations
    # ========================================================================

    def derive_key(self, key_slot: int, dv: bytes, len_key: int = LEN_KEY_MAX) -> bytes:
        """
        Derive a key of len_key bytes from the 8-byte derivation value dv
        using the master key in key_slot.
        """
        return derivation.derive_key(self._session, key_slot, dv, len_key)

    def get_random(self, len_random: int) -> bytes:
        """Get exactly len_random random bytes."""
        return rng.get_random(self._session, len_random)

    def get_device_uuid(self) -> bytes:
        """Get the 16-byte RFC4122 formatted device UUID."""
        return identity.get_device_uuid(self._session)

    def self_test(self) -> None:
        """Run the trust anchor self test."""
        selftest.self_test(self._session)

    def get_version(self) -> VersionDescriptor:
        """Report backend tag and library version; the context is not used."""
        return get_version(self.backend.TA_TYPE)

    def __sizeof__(self) -> int:
        return object.__sizeof__(self) + sys.getsizeof(self._session)

    def __repr__(self) -> str:
        return f"Context(type={self.backend.TA_TYPE.name}, state={self.state.value})"
