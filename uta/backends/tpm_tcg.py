"""
TPM2 Backend on the TCG software stack

Drives a TPM 2.0 through the ESAPI of the TCG TSS (tpm2-pytss). All
commands touching key material run over a salted HMAC session with
AES-128-CFB parameter encryption.

Requirements:
- TPM2 hardware or software emulator
- tpm2-tss libraries and the tpm2-pytss package
- HMAC keys provisioned at the key slot handles, a decrypt key at the
  salt handle
"""

from typing import Optional

from tpm2_pytss import (
    ESAPI, ESYS_TR, TPM2_ALG, TPM2_SE, TPMA_OBJECT, TPMA_SESSION,
    TPM2B_PUBLIC, TPM2B_SENSITIVE_CREATE, TPMT_PUBLIC, TPMT_SYM_DEF,
    TPMU_SYM_KEY_BITS, TPMU_SYM_MODE
)

from .. import config
from ..constants import DEVICE_ID_LABEL, TrustAnchorType
from ..errors import TrustAnchorError
from ..logger import Logger
from .backend_interface import TrustAnchorBackend

# Session attributes per command
HMAC_SESSION_ATTRIBUTES = (
    TPMA_SESSION.CONTINUESESSION |
    TPMA_SESSION.ENCRYPT |
    TPMA_SESSION.DECRYPT
)
RANDOM_SESSION_ATTRIBUTES = TPMA_SESSION.CONTINUESESSION | TPMA_SESSION.ENCRYPT


def _device_id_template() -> TPM2B_PUBLIC:
    """HMAC-SHA256 keyed hash template for the transient identity key."""
    templ = TPMT_PUBLIC(
        type=TPM2_ALG.KEYEDHASH,
        nameAlg=TPM2_ALG.SHA256,
        objectAttributes=(
            TPMA_OBJECT.SIGN_ENCRYPT |
            TPMA_OBJECT.USERWITHAUTH |
            TPMA_OBJECT.SENSITIVEDATAORIGIN
        ),
    )
    templ.parameters.keyedHashDetail.scheme.scheme = TPM2_ALG.HMAC
    templ.parameters.keyedHashDetail.scheme.details.hmac.hashAlg = TPM2_ALG.SHA256
    return TPM2B_PUBLIC(publicArea=templ)


class TcgTpmBackend(TrustAnchorBackend):
    """
    TPM2 implementation using tpm2-pytss.

    Holds one ESAPI context (and with it the device TCTI) and one HMAC
    session for the lifetime of an open context.
    """

    TA_TYPE = TrustAnchorType.TPM_TCG

    def __init__(self, device_file: Optional[str] = None) -> None:
        self.device_file = device_file or config.TPM_DEVICE_FILE
        self.salt_handle = config.TPM_SALT_HANDLE
        self.key_handles = config.key_slot_handles()
        self.esapi: Optional[ESAPI] = None
        self.session: Optional[ESYS_TR] = None

    # ========================================================================
    # Session Management
    # ========================================================================

    def open(self) -> None:
        try:
            self.esapi = ESAPI(f"device:{self.device_file}")
            self.session = self._start_hmac_session()
        except Exception:
            self._release()
            raise
        Logger.debug("TPM", f"HMAC session started on {self.device_file}")

    def _start_hmac_session(self) -> ESYS_TR:
        symmetric = TPMT_SYM_DEF(
            algorithm=TPM2_ALG.AES,
            keyBits=TPMU_SYM_KEY_BITS(aes=128),
            mode=TPMU_SYM_MODE(aes=TPM2_ALG.CFB),
        )
        salt_key = self.esapi.tr_from_tpmpublic(self.salt_handle)
        try:
            return self.esapi.start_auth_session(
                tpm_key=salt_key,
                bind=ESYS_TR.NONE,
                session_type=TPM2_SE.HMAC,
                symmetric=symmetric,
                auth_hash=TPM2_ALG.SHA256,
            )
        finally:
            self.esapi.tr_close(salt_key)

    def close(self) -> None:
        first_error = self._release()
        if first_error is not None:
            raise TrustAnchorError("TPM teardown failed") from first_error

    def _release(self) -> Optional[Exception]:
        """Flush the session and finalize ESAPI, attempting both steps."""
        first_error = None

        if self.session is not None:
            try:
                self.esapi.flush_context(self.session)
            except Exception as e:
                Logger.warning(f"Failed to flush HMAC session: {e}")
                first_error = e
            self.session = None

        if self.esapi is not None:
            try:
                self.esapi.close()
            except Exception as e:
                Logger.warning(f"Failed to finalize ESAPI: {e}")
                first_error = first_error or e
            self.esapi = None

        return first_error

    # ========================================================================
    # Trust Anchor Primitives
    # ========================================================================

    def hmac(self, key_slot: int, message: bytes) -> bytes:
        key_handle = self.esapi.tr_from_tpmpublic(self.key_handles[key_slot])
        try:
            return self._session_hmac(key_handle, message)
        finally:
            self.esapi.tr_close(key_handle)

    def _session_hmac(self, key_handle: ESYS_TR, message: bytes) -> bytes:
        self.esapi.trsess_set_attributes(self.session, HMAC_SESSION_ATTRIBUTES)
        digest = self.esapi.hmac(
            key_handle,
            message,
            TPM2_ALG.SHA256,
            session1=ESYS_TR.PASSWORD,
            session2=self.session,
        )
        return bytes(digest)

    def random(self, num_bytes: int) -> bytes:
        self.esapi.trsess_set_attributes(self.session, RANDOM_SESSION_ATTRIBUTES)
        return bytes(self.esapi.get_random(num_bytes, session1=self.session))

    def device_identity(self) -> bytes:
        """
        HMAC the device id label under a transient endorsement hierarchy key.

        The primary key is derived from the endorsement seed, so it is the
        same on every call; it is flushed again right after use.
        """
        primary_handle, _, _, _, _ = self.esapi.create_primary(
            TPM2B_SENSITIVE_CREATE(),
            _device_id_template(),
            primary_handle=ESYS_TR.ENDORSEMENT,
        )
        try:
            return self._session_hmac(primary_handle, DEVICE_ID_LABEL)
        finally:
            self.esapi.flush_context(primary_handle)

    def self_test(self) -> int:
        self.esapi.self_test(True)
        _, test_result = self.esapi.get_test_result()
        return int(test_result)
