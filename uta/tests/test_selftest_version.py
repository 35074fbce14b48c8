import unittest

from uta import __version__
from uta.backends.simulator import SimulatorBackend
from uta.constants import ReturnCode, TrustAnchorType, get_return_code_name
from uta.context import Context
from uta.errors import TrustAnchorError
from uta.logger import Logger
from uta.tests.helpers import make_mock_backend
from uta.version import VersionDescriptor, get_version

Logger.verbose = False


class TestSelfTest(unittest.TestCase):
    def test_simulator_always_passes(self):
        with Context(SimulatorBackend()) as ctx:
            for _ in range(3):
                self.assertIsNone(ctx.self_test())

    def test_nonzero_result_fails(self):
        backend = make_mock_backend(TrustAnchorType.TPM_TCG)
        backend.self_test.return_value = 0x101
        with Context(backend) as ctx:
            with self.assertRaises(TrustAnchorError) as cm:
                ctx.self_test()
        self.assertEqual(cm.exception.rc, 0x10)

    def test_backend_exception_fails(self):
        backend = make_mock_backend(TrustAnchorType.TPM_IBM)
        backend.self_test.side_effect = RuntimeError("selftest not supported")
        with Context(backend) as ctx:
            with self.assertRaises(TrustAnchorError):
                ctx.self_test()


class TestVersion(unittest.TestCase):
    def test_version_triple(self):
        version = get_version(TrustAnchorType.UTA_SIM)
        self.assertEqual(version, VersionDescriptor(TrustAnchorType.UTA_SIM, 1, 2, 0))
        self.assertEqual(f"{version.major}.{version.minor}.{version.patch}", __version__)

    def test_backend_tags(self):
        self.assertEqual(int(TrustAnchorType.UTA_SIM), 0)
        self.assertEqual(int(TrustAnchorType.TPM_IBM), 1)
        self.assertEqual(int(TrustAnchorType.TPM_TCG), 2)
        self.assertEqual(get_version(2).uta_type, TrustAnchorType.TPM_TCG)

    def test_str(self):
        self.assertEqual(str(get_version(TrustAnchorType.TPM_IBM)), 'TPM_IBM 1.2.0')

    def test_return_code_names(self):
        self.assertEqual(get_return_code_name(ReturnCode.INVALID_KEY_SLOT), 'INVALID_KEY_SLOT')
        self.assertEqual(get_return_code_name(0x10), 'TA_ERROR')
        self.assertEqual(get_return_code_name(0x42), 'UNKNOWN_0x42')

    def test_context_version_on_closed_context(self):
        ctx = Context(SimulatorBackend())
        self.assertEqual(ctx.get_version().uta_type, TrustAnchorType.UTA_SIM)


if __name__ == '__main__':
    unittest.main()
