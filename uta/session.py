"""
Session Manager

Owns the backend of one context together with its mutual-exclusion lock and
drives the session state machine:

    CLOSED -> OPENING -> OPEN -> CLOSING -> CLOSED

Every operation touching the trust anchor runs inside ``Session.acquire()``,
which holds the lock for the full duration of the operation and releases it
on every exit path.
"""

import sys
import threading
from contextlib import contextmanager
from enum import Enum
from typing import Iterator

from .backends.backend_interface import TrustAnchorBackend
from .errors import TrustAnchorError, UtaError
from .logger import Logger


class SessionState(Enum):
    """Lifecycle states of a session"""
    CLOSED = 'closed'
    OPENING = 'opening'
    OPEN = 'open'
    CLOSING = 'closing'


class Session:
    """
    One logical session to one trust anchor instance.

    The lock lives as long as the session object and guards both the state
    and the backend, so a session that is closed and reopened still admits
    only one backend call at a time. Re-opening an open session or closing
    a closed one is a caller error and raises TrustAnchorError without
    touching the backend.
    """

    __slots__ = ('backend', 'state', '_lock')

    def __init__(self, backend: TrustAnchorBackend) -> None:
        self.backend = backend
        self.state = SessionState.CLOSED
        self._lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self.state is SessionState.OPEN

    def __sizeof__(self) -> int:
        backend_state = getattr(self.backend, '__dict__', {})
        return (
            object.__sizeof__(self) +
            sys.getsizeof(self._lock) +
            sys.getsizeof(self.backend) +
            sys.getsizeof(backend_state)
        )

    def open(self) -> None:
        """
        Open the session.

        A failure during OPENING is reported as TrustAnchorError; the
        backend has already rolled back its partial resources and the
        session is CLOSED again. Interrupts are re-raised unchanged, but
        also leave the session CLOSED.

        Raises:
            TrustAnchorError: If the session is not closed or the backend
                cannot be opened
        """
        with self._lock:
            if self.state is not SessionState.CLOSED:
                raise TrustAnchorError(f"Session is {self.state.value}, close it before opening")

            self.state = SessionState.OPENING
            opened = False
            try:
                self.backend.open()
                opened = True
            except Exception as e:
                Logger.error(f"Failed to open {self.backend.TA_TYPE.name} session: {e}")
                raise TrustAnchorError("Failed to open trust anchor session") from e
            finally:
                self.state = SessionState.OPEN if opened else SessionState.CLOSED

        Logger.info(f"{self.backend.TA_TYPE.name} session opened")

    def close(self) -> None:
        """
        Close the session.

        The session ends up CLOSED even when a teardown step fails; such a
        failure is reported afterwards.

        Raises:
            TrustAnchorError: If the session is not open or teardown failed
        """
        with self._lock:
            if self.state is not SessionState.OPEN:
                raise TrustAnchorError(f"Session is {self.state.value}, cannot close")
            self.state = SessionState.CLOSING
            try:
                self.backend.close()
            except Exception as e:
                Logger.error(f"Teardown of {self.backend.TA_TYPE.name} session failed: {e}")
                raise TrustAnchorError("Failed to close trust anchor session") from e
            finally:
                self.state = SessionState.CLOSED

        Logger.info(f"{self.backend.TA_TYPE.name} session closed")

    @contextmanager
    def acquire(self) -> Iterator[TrustAnchorBackend]:
        """
        Hold the session lock and yield the backend.

        Backend failures inside the block surface as TrustAnchorError;
        UtaErrors pass through unchanged.

        Raises:
            TrustAnchorError: If the session is not open
        """
        with self._lock:
            # the state may have changed while this thread waited
            if self.state is not SessionState.OPEN:
                raise TrustAnchorError(f"Session is {self.state.value}")
            try:
                yield self.backend
            except UtaError:
                raise
            except Exception as e:
                Logger.error(f"{self.backend.TA_TYPE.name} operation failed: {e}")
                raise TrustAnchorError("Trust anchor operation failed") from e
