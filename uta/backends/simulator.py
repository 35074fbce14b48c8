"""
Software Simulator Backend

Simulates a trust anchor in software for development and testing.
Master keys are constant and public; nothing here is secret.

WARNING: Never deploy the simulator on a production device.
"""

import random
import time
from typing import Optional

from cryptography.hazmat.primitives import hashes, hmac

from .. import config
from ..constants import LEN_UUID, TrustAnchorType
from ..errors import TrustAnchorError
from ..logger import Logger
from .backend_interface import TrustAnchorBackend

# 32 byte master keys for key slot 0 and 1
KEY_SLOT_0 = bytes(range(0x00, 0x20))
KEY_SLOT_1 = bytes(range(0x1F, -1, -1))
SIMULATED_KEY_SLOTS = (KEY_SLOT_0, KEY_SLOT_1)


class SimulatorBackend(TrustAnchorBackend):
    """
    Trust anchor simulation.

    HMACs are computed with the constant key table, random bytes come from a
    non-cryptographic PRNG and the device identity is read from the
    machine-id file.
    """

    TA_TYPE = TrustAnchorType.UTA_SIM

    def __init__(self, machine_id_file: Optional[str] = None) -> None:
        self.machine_id_file = machine_id_file or config.MACHINE_ID_FILE
        self._rng: Optional[random.Random] = None

    def open(self) -> None:
        """Seed the PRNG. There is no transport to establish."""
        self._rng = random.Random(time.time_ns())
        Logger.debug("SIM", "Simulator session opened")

    def close(self) -> None:
        self._rng = None
        Logger.debug("SIM", "Simulator session closed")

    def hmac(self, key_slot: int, message: bytes) -> bytes:
        h = hmac.HMAC(SIMULATED_KEY_SLOTS[key_slot], hashes.SHA256())
        h.update(message)
        return h.finalize()

    def random(self, num_bytes: int) -> bytes:
        if self._rng is None:
            raise TrustAnchorError("Simulator PRNG is not seeded")
        return bytes(self._rng.getrandbits(8) for _ in range(num_bytes))

    def device_identity(self) -> bytes:
        """
        Read the device identity from the machine-id file.

        The first 32 characters must be hexadecimal; they are converted
        into 16 bytes.
        """
        try:
            with open(self.machine_id_file, 'rb') as f:
                machine_id = f.read(LEN_UUID * 2)
        except OSError as e:
            raise TrustAnchorError(f"Cannot read {self.machine_id_file}: {e}") from e

        if len(machine_id) != LEN_UUID * 2:
            raise TrustAnchorError(
                f"{self.machine_id_file} is too short: {len(machine_id)} characters"
            )

        try:
            identity = bytes.fromhex(machine_id.decode('ascii'))
        except (UnicodeDecodeError, ValueError) as e:
            raise TrustAnchorError(f"{self.machine_id_file} is not hexadecimal") from e

        # fromhex skips whitespace, which would shorten the identity
        if len(identity) != LEN_UUID:
            raise TrustAnchorError(f"{self.machine_id_file} is not hexadecimal")
        return identity

    def self_test(self) -> int:
        """No hardware to test; always passes."""
        return 0
