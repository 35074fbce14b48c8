"""
TPM2 Backend on the IBM software stack

The IBM TSS ships no Python binding, so this backend drives its command
line utilities. The TSS keeps session state in its data directory, which
lets one HMAC session span several utility invocations.

Requirements:
- TPM2 hardware or software emulator
- IBM TSS utilities (ibmtss package, "tss" prefixed binaries)
- HMAC keys provisioned at the key slot handles, a decrypt key at the
  salt handle
"""

import os
import re
import subprocess
import tempfile
from typing import Dict, Optional

from .. import config
from ..constants import DEVICE_ID_LABEL, TrustAnchorType
from ..errors import TrustAnchorError
from ..logger import Logger
from .backend_interface import TrustAnchorBackend

# Session attributes (continue + command/response encryption)
HMAC_SESSION_ATTRIBUTES = 0x61
RANDOM_SESSION_ATTRIBUTES = 0x41

HANDLE_PATTERN = re.compile(r"Handle\s+([0-9a-fA-F]{8})")
TEST_RESULT_PATTERN = re.compile(r"[Tt]est\s+[Rr]esult\s*:?\s*(?:0x)?([0-9a-fA-F]+)")


class IbmTpmBackend(TrustAnchorBackend):
    """
    TPM2 implementation using the IBM TSS command line utilities.

    Each primitive runs one or more utilities; session and transient key
    handles are parsed from their output.
    """

    TA_TYPE = TrustAnchorType.TPM_IBM

    def __init__(self, data_dir: Optional[str] = None) -> None:
        self.data_dir = data_dir or config.TPM_IBM_DATA_DIR
        self.interface_type = config.TPM_IBM_INTERFACE_TYPE
        self.device_file = config.TPM_DEVICE_FILE
        self.command_prefix = config.TPM_IBM_COMMAND_PREFIX
        self.salt_handle = config.TPM_SALT_HANDLE
        self.key_handles = config.key_slot_handles()
        self.session_handle: Optional[int] = None
        self._env: Optional[Dict[str, str]] = None

    # ========================================================================
    # Utility Execution
    # ========================================================================

    def _tss_environment(self) -> Dict[str, str]:
        env = dict(os.environ)
        env.update({
            'TPM_INTERFACE_TYPE': self.interface_type,
            'TPM_DATA_DIR': self.data_dir,
            'TPM_DEVICE': self.device_file,
            'TPM_TRACE_LEVEL': '0',
        })
        return env

    def _run(self, utility: str, *args: str) -> str:
        """
        Run one IBM TSS utility.

        Returns:
            The utility's stdout

        Raises:
            TrustAnchorError: If the utility is missing or exits non-zero
        """
        if self._env is None:
            raise TrustAnchorError("IBM TSS environment is not initialized")

        cmd = [f"{self.command_prefix}{utility}", *args]
        try:
            result = subprocess.run(cmd, env=self._env, capture_output=True)
        except FileNotFoundError as e:
            raise TrustAnchorError(f"{cmd[0]} not found - install the IBM TSS utilities") from e
        except OSError as e:
            raise TrustAnchorError(f"Cannot run {cmd[0]}: {e}") from e

        if result.returncode != 0:
            error = result.stderr.decode(errors='replace').strip()
            raise TrustAnchorError(f"{cmd[0]} returned {result.returncode}: {error}")
        return result.stdout.decode(errors='replace')

    @staticmethod
    def _parse_handle(output: str) -> int:
        match = HANDLE_PATTERN.search(output)
        if match is None:
            raise TrustAnchorError(f"No handle in TSS output: {output.strip()!r}")
        return int(match.group(1), 16)

    def _flush(self, handle: int) -> None:
        self._run('flushcontext', '-ha', f"{handle:08x}")

    # ========================================================================
    # Session Management
    # ========================================================================

    def open(self) -> None:
        if not os.path.isdir(self.data_dir):
            raise TrustAnchorError(f"IBM TSS data directory {self.data_dir} does not exist")

        self._env = self._tss_environment()
        try:
            output = self._run(
                'startauthsession',
                '-se', 'h',
                '-halg', 'sha256',
                '-sym', 'aes',
                '-hs', f"{self.salt_handle:08x}",
            )
            self.session_handle = self._parse_handle(output)
        except Exception:
            self._release()
            raise
        Logger.debug("TPM", f"IBM TSS HMAC session 0x{self.session_handle:08x} started")

    def close(self) -> None:
        first_error = self._release()
        if first_error is not None:
            raise TrustAnchorError("TPM teardown failed") from first_error

    def _release(self) -> Optional[Exception]:
        first_error = None
        if self.session_handle is not None:
            try:
                self._flush(self.session_handle)
            except TrustAnchorError as e:
                Logger.warning(f"Failed to flush HMAC session: {e}")
                first_error = e
            self.session_handle = None
        self._env = None
        return first_error

    # ========================================================================
    # Trust Anchor Primitives
    # ========================================================================

    def _session_hmac(self, key_handle: int, message: bytes) -> bytes:
        with tempfile.TemporaryDirectory(prefix='uta-') as tmpdir:
            in_file = os.path.join(tmpdir, 'message.bin')
            out_file = os.path.join(tmpdir, 'hmac.bin')
            with open(in_file, 'wb') as f:
                f.write(message)

            self._run(
                'hmac',
                '-hk', f"{key_handle:08x}",
                '-halg', 'sha256',
                '-if', in_file,
                '-of', out_file,
                '-se0', f"{self.session_handle:08x}", f"{HMAC_SESSION_ATTRIBUTES:x}",
            )
            with open(out_file, 'rb') as f:
                return f.read()

    def hmac(self, key_slot: int, message: bytes) -> bytes:
        return self._session_hmac(self.key_handles[key_slot], message)

    def random(self, num_bytes: int) -> bytes:
        with tempfile.TemporaryDirectory(prefix='uta-') as tmpdir:
            out_file = os.path.join(tmpdir, 'random.bin')
            self._run(
                'getrandom',
                '-by', str(num_bytes),
                '-of', out_file,
                '-se0', f"{self.session_handle:08x}", f"{RANDOM_SESSION_ATTRIBUTES:x}",
            )
            with open(out_file, 'rb') as f:
                return f.read()

    def device_identity(self) -> bytes:
        """HMAC the device id label under a transient endorsement key."""
        output = self._run(
            'createprimary',
            '-hi', 'e',
            '-kh',
            '-halg', 'sha256',
            '-nalg', 'sha256',
        )
        primary_handle = self._parse_handle(output)
        try:
            return self._session_hmac(primary_handle, DEVICE_ID_LABEL)
        finally:
            try:
                self._flush(primary_handle)
            except TrustAnchorError as e:
                # the digest stays valid even if the flush fails
                Logger.warning(f"Failed to flush identity key 0x{primary_handle:08x}: {e}")

    def self_test(self) -> int:
        self._run('selftest', '-full')
        output = self._run('gettestresult')
        match = TEST_RESULT_PATTERN.search(output)
        if match is None:
            raise TrustAnchorError(f"No test result in TSS output: {output.strip()!r}")
        return int(match.group(1), 16)
