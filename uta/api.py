"""
UTA API version 1

The operation table of version 1 of the Unified Trust Anchor API. One
backend variant is selected per process by ``init_v1()``; every context the
table hands out is bound to that variant, so callers stay backend agnostic.

    uta = init_v1()
    ctx = uta.context()
    uta.open(ctx)
    try:
        key = uta.derive_key(ctx, key_slot=1, dv=b"default!")
    finally:
        uta.close(ctx)
"""

import sys
import threading
from typing import Callable, Optional

from . import config
from .backends import load_backend
from .backends.backend_interface import TrustAnchorBackend
from .constants import LEN_KEY_MAX
from .context import Context
from .errors import InvalidDerivationValueLengthError, TrustAnchorError
from .logger import Logger
from .version import VersionDescriptor, get_version


class UtaApiV1:
    """
    Operation table bound to one backend variant.

    Args:
        backend_factory: Callable creating a fresh, unopened backend for
            each context (usually the backend class)
    """

    def __init__(self, backend_factory: Callable[[], TrustAnchorBackend]) -> None:
        self._backend_factory = backend_factory
        self.uta_type = backend_factory().TA_TYPE

    # ========================================================================
    # Hardware Independent
    # ========================================================================

    def context_v1_size(self) -> int:
        """
        Memory held by one unopened context of this variant.

        Counts the context, its session and lock, and the backend with its
        attribute table. Objects the backend only references (paths, handle
        tables shared with config) are not counted.
        """
        return sys.getsizeof(self.context())

    def len_key_max(self) -> int:
        """Longest key derive_key can provide."""
        return LEN_KEY_MAX

    def get_version(self) -> VersionDescriptor:
        return get_version(self.uta_type)

    def context(self) -> Context:
        """Allocate a new, unopened context for this variant."""
        return Context(self._backend_factory())

    # ========================================================================
    # Context Operations
    # ========================================================================

    def open(self, ctx: Context) -> None:
        ctx.open()

    def close(self, ctx: Context) -> None:
        ctx.close()

    def derive_key(self, ctx: Context, key_slot: int, dv: bytes,
                   len_key: int = LEN_KEY_MAX, len_dv: Optional[int] = None) -> bytes:
        """
        Derive a key; len_dv, if given, must match the length of dv.
        """
        if len_dv is not None and len_dv != len(dv):
            raise InvalidDerivationValueLengthError(
                f"len_dv {len_dv} does not match the {len(dv)} byte derivation value"
            )
        return ctx.derive_key(key_slot, dv, len_key)

    def get_random(self, ctx: Context, len_random: int) -> bytes:
        return ctx.get_random(len_random)

    def get_device_uuid(self, ctx: Context) -> bytes:
        return ctx.get_device_uuid()

    def self_test(self, ctx: Context) -> None:
        ctx.self_test()


# Process-wide selection; the variant never changes once chosen
_selection_lock = threading.Lock()
_selected_hardware: Optional[str] = None
_api: Optional[UtaApiV1] = None


def init_v1(hardware: Optional[str] = None) -> UtaApiV1:
    """
    Entry point to version 1 of the API.

    Args:
        hardware: UTA_SIM, TPM_IBM or TPM_TCG; defaults to config.HARDWARE

    Returns:
        The operation table of the process's backend variant

    Raises:
        TrustAnchorError: If the backend is unknown or unavailable, or a
            different backend was already selected in this process
    """
    global _selected_hardware, _api

    hardware = hardware or config.HARDWARE
    with _selection_lock:
        if _api is not None:
            if hardware != _selected_hardware:
                raise TrustAnchorError(
                    f"Backend {_selected_hardware} already selected, cannot switch to {hardware}"
                )
            return _api

        _api = UtaApiV1(load_backend(hardware))
        _selected_hardware = hardware
        Logger.debug("UTA", f"Selected backend {hardware}")
        return _api
