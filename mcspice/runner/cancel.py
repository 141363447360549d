# mcspice/runner/cancel.py
from __future__ import annotations

import threading

from mcspice.utils.errors import Cancelled


class CancelToken:
    """
    Cooperative cancellation signal.

    Set from any thread; runners poll it between lines / steps.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise Cancelled("run cancelled")


class _NeverCancel(CancelToken):
    def cancel(self) -> None:
        raise RuntimeError("NEVER token can not be cancelled")


NEVER = _NeverCancel()
