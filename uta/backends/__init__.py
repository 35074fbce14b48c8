"""
Trust anchor backends.

Backends are imported lazily by name, so hosts without a TPM software stack
can still use the simulator.
"""

import importlib
from typing import Type

from ..errors import TrustAnchorError
from .backend_interface import TrustAnchorBackend

# Backend name -> (module, class)
BACKENDS = {
    'UTA_SIM': ('.simulator', 'SimulatorBackend'),
    'TPM_IBM': ('.tpm_ibm', 'IbmTpmBackend'),
    'TPM_TCG': ('.tpm_tcg', 'TcgTpmBackend'),
}


def load_backend(hardware: str) -> Type[TrustAnchorBackend]:
    """
    Resolve a backend name to its class.

    Raises:
        TrustAnchorError: If the name is unknown or the backend's software
            stack cannot be imported
    """
    try:
        module_name, class_name = BACKENDS[hardware]
    except KeyError:
        raise TrustAnchorError(
            f"Unknown hardware {hardware!r}, use one of {', '.join(BACKENDS)}"
        ) from None

    try:
        module = importlib.import_module(module_name, __name__)
    except ImportError as e:
        raise TrustAnchorError(f"Backend {hardware} is not available: {e}") from e
    return getattr(module, class_name)


__all__ = [
    'BACKENDS',
    'TrustAnchorBackend',
    'load_backend',
]
