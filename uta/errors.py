"""
Exceptions raised by the UTA API.

Every exception carries the integer return code of the libuta C API in
``rc`` so callers can still reason in terms of the single code space.
"""

from .constants import ReturnCode


class UtaError(Exception):
    """Base exception for all trust anchor API errors"""

    rc = ReturnCode.TA_ERROR


class InvalidKeyLengthError(UtaError):
    """Raised when the requested key length is outside 0..32"""

    rc = ReturnCode.INVALID_KEY_LENGTH


class InvalidDerivationValueLengthError(UtaError):
    """Raised when the derivation value is not exactly 8 bytes"""

    rc = ReturnCode.INVALID_DV_LENGTH


class InvalidKeySlotError(UtaError):
    """Raised when the key slot is not 0 or 1"""

    rc = ReturnCode.INVALID_KEY_SLOT


class TrustAnchorError(UtaError):
    """
    Raised for every backend failure.

    Transient unavailability and permanent failure are not distinguished;
    the backend exception, if any, is chained as ``__cause__``.
    """

    rc = ReturnCode.TA_ERROR
