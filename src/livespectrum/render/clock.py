"""
Frame clocks: callbacks invoked once per display refresh.
"""

import itertools
from typing import Callable, Dict, Hashable, Protocol


class FrameClock(Protocol):
    """Schedules one callback for the next display refresh."""

    def request_frame(self, callback: Callable[[], None]) -> Hashable:
        """Schedule callback; returns a handle for cancel_frame()."""
        ...

    def cancel_frame(self, handle: Hashable) -> None:
        """Cancel a scheduled callback. Unknown or spent handles are ignored."""
        ...


class ManualFrameClock:
    """
    Frame clock advanced explicitly by the caller.

    Used for tests and headless rendering. Callbacks requested while a step is
    running are deferred to the next step, like a real display refresh.
    """

    def __init__(self):
        self._pending: Dict[int, Callable[[], None]] = {}
        self._ids = itertools.count(1)
        self.frames = 0

    def request_frame(self, callback: Callable[[], None]) -> int:
        handle = next(self._ids)
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: int) -> None:
        self._pending.pop(handle, None)

    def advance(self, frames: int = 1) -> int:
        """
        Run frames refresh steps.

        Returns:
            Number of callbacks invoked
        """
        invoked = 0
        for _ in range(frames):
            self.frames += 1
            due = list(self._pending)
            for handle in due:
                # A callback may cancel one that is due later in this step
                callback = self._pending.pop(handle, None)
                if callback is not None:
                    callback()
                    invoked += 1
        return invoked

    @property
    def pending(self) -> int:
        """Number of scheduled callbacks."""
        return len(self._pending)
