"""
Constants shared by every trust anchor backend.

Mirrors the return codes and sizes of the libuta C API so the integer
codes stay identical across language bindings.
"""

from enum import IntEnum


class ReturnCode(IntEnum):
    """Return code space of the UTA API"""

    SUCCESS = 0x00
    INVALID_KEY_LENGTH = 0x01
    INVALID_DV_LENGTH = 0x02
    INVALID_KEY_SLOT = 0x03
    TA_ERROR = 0x10


class TrustAnchorType(IntEnum):
    """Trust anchor a process is bound to"""

    UTA_SIM = 0  # Software simulator for development
    TPM_IBM = 1  # TPM driven through the IBM TSS
    TPM_TCG = 2  # TPM driven through the TCG TSS (ESAPI)


# Derivation value length of version 1 of the API
LEN_DV_V1 = 8

# Longest key derive_key can provide (one SHA-256 digest)
LEN_KEY_MAX = 32

LEN_UUID = 16

KEY_SLOTS = (0, 1)

# HMACed under a device unique key to build the device UUID
DEVICE_ID_LABEL = b"DEVICEID"


def get_return_code_name(rc: int) -> str:
    """Get human-readable name for a return code"""
    try:
        return ReturnCode(rc).name
    except ValueError:
        return f"UNKNOWN_0x{rc:02X}"
