"""
Self-Test Invoker

Triggers the trust anchor's built-in self check. The backend's result code
is only used to decide pass or fail.
"""

from .errors import TrustAnchorError
from .logger import Logger
from .session import Session


def self_test(session: Session) -> None:
    """
    Run the trust anchor self test.

    Raises:
        TrustAnchorError: If the test cannot be run or reports a failure
    """
    with session.acquire() as backend:
        result = backend.self_test()

    if result != 0:
        Logger.error(f"Trust anchor self test failed with result 0x{result:08x}")
        raise TrustAnchorError("Trust anchor self test failed")
    Logger.success("Trust anchor self test passed")
