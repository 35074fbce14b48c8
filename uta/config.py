"""
UTA Configuration Constants

Deployment-time configuration of the trust anchor layer. Every value can be
overridden by an environment variable of the same name prefixed with
``UTA_`` (e.g. ``UTA_HARDWARE=TPM_TCG``).
"""

import os

from .logger import Logger


def _env_str(name: str, default: str) -> str:
    return os.environ.get(f"UTA_{name}", default)


def _env_handle(name: str, default: int) -> int:
    value = os.environ.get(f"UTA_{name}")
    if value is None:
        return default
    try:
        return int(value, 0)
    except ValueError:
        Logger.warning(f"Ignoring malformed UTA_{name}={value!r}, using 0x{default:08x}")
        return default


# Backend Selection
# One of UTA_SIM, TPM_IBM, TPM_TCG. Fixed for the lifetime of the process
# once the API table is initialized.
HARDWARE = _env_str("HARDWARE", "UTA_SIM")

# TPM Resource Allocation (TPM_IBM and TPM_TCG)
# Persistent HMAC keys backing key slot 0 and 1
TPM_KEY0_HANDLE = _env_handle("TPM_KEY0_HANDLE", 0x81000000)
TPM_KEY1_HANDLE = _env_handle("TPM_KEY1_HANDLE", 0x81000001)

# Persistent decrypt key used to salt the HMAC session
TPM_SALT_HANDLE = _env_handle("TPM_SALT_HANDLE", 0x81000002)

# TPM device file (resource manager by default)
TPM_DEVICE_FILE = _env_str("TPM_DEVICE_FILE", "/dev/tpmrm0")

# IBM TSS Configuration (TPM_IBM only)
TPM_IBM_INTERFACE_TYPE = _env_str("TPM_IBM_INTERFACE_TYPE", "dev")
TPM_IBM_DATA_DIR = _env_str("TPM_IBM_DATA_DIR", "/var/lib/tpm_ibm")

# Distributions ship the IBM TSS utilities with a "tss" prefix
TPM_IBM_COMMAND_PREFIX = _env_str("TPM_IBM_COMMAND_PREFIX", "tss")

# Simulator Configuration (UTA_SIM only)
# Source of the simulated device identity
MACHINE_ID_FILE = _env_str("MACHINE_ID_FILE", "/etc/machine-id")


def key_slot_handles() -> dict:
    """Map each key slot to its persistent TPM handle."""
    return {0: TPM_KEY0_HANDLE, 1: TPM_KEY1_HANDLE}
