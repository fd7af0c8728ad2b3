"""One-shot outcome delivery from a session worker to the UI thread."""

from __future__ import annotations

import threading
from typing import Optional

from models import Outcome


class ResultChannel:
    """Carries exactly one Outcome; the first ``put`` wins, one read consumes it.

    The UI polls ``try_take`` from its own event loop and never blocks.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._filled = threading.Event()
        self._outcome: Optional[Outcome] = None
        self._consumed = False

    @property
    def filled(self) -> bool:
        return self._filled.is_set()

    def put(self, outcome: Outcome) -> bool:
        with self._lock:
            if self._filled.is_set():
                return False
            self._outcome = outcome
            self._filled.set()
            return True

    def try_take(self) -> Optional[Outcome]:
        with self._lock:
            if not self._filled.is_set() or self._consumed:
                return None
            self._consumed = True
            return self._outcome

    def wait(self, timeout: Optional[float] = None) -> Optional[Outcome]:
        self._filled.wait(timeout=timeout)
        return self.try_take()
