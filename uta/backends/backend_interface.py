"""
Trust Anchor Backend Interface - Abstract base for trust anchor backends

This defines the boundary every trust anchor implementation must follow.
The API layer (session, derivation, random, identity, self-test) is written
once against this interface, so all backends behave identically to callers.

Implementations:
- SimulatorBackend: software simulation (development/testing)
- TcgTpmBackend: TPM 2.0 through the TCG TSS (tpm2-pytss)
- IbmTpmBackend: TPM 2.0 through the IBM TSS utilities
"""

from abc import ABC, abstractmethod

from ..constants import TrustAnchorType


class TrustAnchorBackend(ABC):
    """
    Abstract interface for one session to one trust anchor instance.

    Backends are not thread safe on their own. They are only driven through
    a Session, which serializes every call with the context lock.

    Backend methods raise freely on failure; the session layer converts
    anything that is not already a UtaError into a TrustAnchorError.
    """

    TA_TYPE: TrustAnchorType

    # ========================================================================
    # Session Management
    # ========================================================================

    @abstractmethod
    def open(self) -> None:
        """
        Establish the transport and the protected session.

        On failure every resource acquired so far must be released before
        raising, so a failed open leaves nothing behind.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """
        Tear down the session and release the transport.

        Every teardown step is attempted even if an earlier one fails; the
        first failure is raised once all steps have run.
        """
        pass

    # ========================================================================
    # Trust Anchor Primitives
    # ========================================================================

    @abstractmethod
    def hmac(self, key_slot: int, message: bytes) -> bytes:
        """
        Compute HMAC-SHA256 of message under the master key of key_slot.

        Args:
            key_slot: Validated key slot (0 or 1)
            message: Data to authenticate

        Returns:
            32-byte digest
        """
        pass

    @abstractmethod
    def random(self, num_bytes: int) -> bytes:
        """
        Request random bytes from the trust anchor.

        Args:
            num_bytes: Number of bytes requested

        Returns:
            At most num_bytes random bytes; backends may return fewer
        """
        pass

    @abstractmethod
    def device_identity(self) -> bytes:
        """
        Produce the raw device identity.

        Returns:
            At least 16 bytes, stable for the device; RFC4122 formatting
            is applied by the caller
        """
        pass

    @abstractmethod
    def self_test(self) -> int:
        """
        Run the built-in self test.

        Returns:
            Backend result code, 0 on success
        """
        pass
