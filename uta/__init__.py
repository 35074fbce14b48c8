"""
Unified Trust Anchor (UTA)
Hardware-rooted key derivation and device identity over interchangeable
trust anchor backends (TPM via IBM TSS, TPM via TCG TSS, software simulator).
"""

from .version import __version__, VersionDescriptor
from .constants import ReturnCode, TrustAnchorType, LEN_DV_V1, LEN_KEY_MAX
from .errors import (
    UtaError, InvalidKeyLengthError, InvalidDerivationValueLengthError,
    InvalidKeySlotError, TrustAnchorError
)
from .context import Context
from .api import UtaApiV1, init_v1

__all__ = [
    '__version__',
    'VersionDescriptor',
    'ReturnCode',
    'TrustAnchorType',
    'LEN_DV_V1',
    'LEN_KEY_MAX',
    'UtaError',
    'InvalidKeyLengthError',
    'InvalidDerivationValueLengthError',
    'InvalidKeySlotError',
    'TrustAnchorError',
    'Context',
    'UtaApiV1',
    'init_v1',
]
