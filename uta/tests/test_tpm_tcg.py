import unittest
from unittest.mock import MagicMock, patch

from uta.context import Context
from uta.errors import TrustAnchorError
from uta.logger import Logger
from uta.session import SessionState

try:
    from tpm2_pytss import ESYS_TR, TPM2_ALG
    from uta.backends import tpm_tcg
    TPM2_PYTSS_AVAILABLE = True
except (ImportError, OSError):
    TPM2_PYTSS_AVAILABLE = False

Logger.verbose = False

SESSION = 'session-tr'
SALT_KEY = 'salt-tr'
KEY_TR = 'key-tr'
PRIMARY_TR = 'primary-tr'


@unittest.skipUnless(TPM2_PYTSS_AVAILABLE, "tpm2-pytss not installed")
class TestTcgTpmBackend(unittest.TestCase):
    def setUp(self):
        self.esapi = MagicMock()
        self.esapi.tr_from_tpmpublic.side_effect = (
            lambda handle: SALT_KEY if handle == tpm_tcg.config.TPM_SALT_HANDLE else KEY_TR
        )
        self.esapi.start_auth_session.return_value = SESSION
        self.esapi.hmac.return_value = b'\x11' * 32
        self.esapi.get_random.side_effect = lambda n, session1=None: b'\x22' * min(n, 48)
        self.esapi.create_primary.return_value = (PRIMARY_TR, None, None, None, None)
        self.esapi.get_test_result.return_value = (b'', 0)

        patcher = patch('uta.backends.tpm_tcg.ESAPI', return_value=self.esapi)
        self.mock_esapi_class = patcher.start()
        self.addCleanup(patcher.stop)

        self.backend = tpm_tcg.TcgTpmBackend(device_file='/dev/tpmrm0')

    def test_open_starts_salted_session(self):
        with Context(self.backend):
            self.mock_esapi_class.assert_called_once_with('device:/dev/tpmrm0')
            kwargs = self.esapi.start_auth_session.call_args.kwargs
            self.assertEqual(kwargs['tpm_key'], SALT_KEY)
            self.assertEqual(kwargs['auth_hash'], TPM2_ALG.SHA256)
            self.esapi.tr_close.assert_called_once_with(SALT_KEY)

        self.esapi.flush_context.assert_called_once_with(SESSION)
        self.esapi.close.assert_called_once_with()
        self.assertIsNone(self.backend.esapi)

    def test_derive_key(self):
        with Context(self.backend) as ctx:
            self.assertEqual(ctx.derive_key(1, b'default!', 16), b'\x11' * 16)

        args, kwargs = self.esapi.hmac.call_args
        self.assertEqual(args, (KEY_TR, b'default!', TPM2_ALG.SHA256))
        self.assertEqual(kwargs['session1'], ESYS_TR.PASSWORD)
        self.assertEqual(kwargs['session2'], SESSION)
        self.esapi.tr_from_tpmpublic.assert_any_call(tpm_tcg.config.TPM_KEY1_HANDLE)
        self.esapi.tr_close.assert_any_call(KEY_TR)

    def test_random_chunked(self):
        with Context(self.backend) as ctx:
            self.assertEqual(ctx.get_random(100), b'\x22' * 100)
        requested = [c.args[0] for c in self.esapi.get_random.call_args_list]
        self.assertEqual(requested, [100, 52, 4])

    def test_device_uuid_flushes_primary(self):
        with Context(self.backend) as ctx:
            device_uuid = ctx.get_device_uuid()
            self.esapi.flush_context.assert_called_once_with(PRIMARY_TR)
        self.assertEqual(device_uuid[6] & 0xF0, 0x40)
        self.assertEqual(device_uuid[8] & 0xC0, 0x80)
        self.assertEqual(self.esapi.hmac.call_args.args[1], b'DEVICEID')

    def test_self_test(self):
        with Context(self.backend) as ctx:
            ctx.self_test()
            self.esapi.self_test.assert_called_once_with(True)
            self.esapi.get_test_result.return_value = (b'', 0x101)
            with self.assertRaises(TrustAnchorError):
                ctx.self_test()

    def test_open_failure_rolls_back(self):
        self.esapi.start_auth_session.side_effect = RuntimeError("TPM_RC_HANDLE")
        ctx = Context(self.backend)
        with self.assertRaises(TrustAnchorError):
            ctx.open()
        self.assertEqual(ctx.state, SessionState.CLOSED)
        self.esapi.close.assert_called_once_with()
        self.esapi.flush_context.assert_not_called()

    def test_close_failure_still_finalizes(self):
        ctx = Context(self.backend)
        ctx.open()
        self.esapi.flush_context.side_effect = RuntimeError("TPM_RC_HANDLE")
        with self.assertRaises(TrustAnchorError):
            ctx.close()
        self.esapi.close.assert_called_once_with()
        self.assertEqual(ctx.state, SessionState.CLOSED)
        self.assertIsNone(self.backend.session)


if __name__ == '__main__':
    unittest.main()
