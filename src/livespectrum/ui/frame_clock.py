"""
Frame clock driven by Qt timers.
"""

import itertools
from typing import Callable, Dict

from PySide6.QtCore import QObject, Qt, QTimer

from ..config import DEFAULT_FRAME_RATE


class QtFrameClock(QObject):
    """
    Invokes each requested callback once, one display frame from now.

    Every request gets its own single-shot timer so a cancelled request can
    never fire later.
    """

    def __init__(self, frame_rate: int = DEFAULT_FRAME_RATE, parent=None):
        super().__init__(parent)
        self.frame_rate = frame_rate
        self._interval_ms = max(1, round(1000 / frame_rate))
        self._timers: Dict[int, QTimer] = {}
        self._ids = itertools.count(1)

    def request_frame(self, callback: Callable[[], None]) -> int:
        handle = next(self._ids)

        timer = QTimer(self)
        timer.setSingleShot(True)
        timer.setTimerType(Qt.TimerType.PreciseTimer)
        timer.timeout.connect(lambda: self._fire(handle, callback))

        self._timers[handle] = timer
        timer.start(self._interval_ms)
        return handle

    def _fire(self, handle: int, callback: Callable[[], None]):
        timer = self._timers.pop(handle, None)
        if timer is None:
            return  # Cancelled
        timer.deleteLater()
        callback()

    def cancel_frame(self, handle: int) -> None:
        timer = self._timers.pop(handle, None)
        if timer is not None:
            timer.stop()
            timer.deleteLater()

    def cancel_all(self):
        for handle in list(self._timers):
            self.cancel_frame(handle)

    @property
    def pending(self) -> int:
        """Number of scheduled callbacks."""
        return len(self._timers)
