"""
Debounced callbacks.

Scheduling a new value replaces (cancels) the pending one, so a burst of
changes - scrubbing through the hex view, for example - results in a single
callback with the settled value once the delay has passed.

Debouncer is clock driven and framework independent; QtDebouncer provides the
same interface on top of a single-shot QTimer for the GUI.
"""

import time

from PyQt5.QtCore import QObject, QTimer

DEFAULT_DELAY_MS = 100


class Debouncer:
    """
    Cancellable delayed callback driven by an explicit clock.

    Attributes:
        delay_ms: Quiet period required before the callback fires
        callback: Called with the settled value
        clock: Returns the current time in seconds (time.monotonic by default)
    """

    def __init__(self, delay_ms, callback, clock=time.monotonic):
        self.delay_ms = delay_ms
        self.callback = callback
        self.clock = clock
        self._generation = 0
        self._pending = None
        self._deadline = None

    @property
    def pending(self):
        return self._deadline is not None

    def schedule(self, value):
        """Replace any pending value. Returns the token of the new schedule."""
        self._generation += 1
        self._pending = value
        self._deadline = self.clock() + self.delay_ms / 1000.0
        return self._generation

    def is_current(self, token):
        return self.pending and token == self._generation

    def cancel(self):
        self._generation += 1
        self._pending = None
        self._deadline = None

    def poll(self):
        """Fire the callback if the delay has elapsed. Returns True when it fired."""
        if not self.pending or self.clock() < self._deadline:
            return False
        return self.flush()

    def flush(self):
        """Fire the pending value now, if any."""
        if not self.pending:
            return False
        value = self._pending
        self._pending = None
        self._deadline = None
        self.callback(value)
        return True


class QtDebouncer(QObject):
    """Debouncer backed by a single-shot QTimer (restarted on every schedule)."""

    def __init__(self, delay_ms, callback, parent=None):
        super().__init__(parent)
        self.delay_ms = delay_ms
        self.callback = callback
        self._generation = 0
        self._pending = None
        self._has_pending = False

        self.timer = QTimer(self)
        self.timer.setSingleShot(True)
        self.timer.timeout.connect(self.flush)

    @property
    def pending(self):
        return self._has_pending

    def schedule(self, value):
        self._generation += 1
        self._pending = value
        self._has_pending = True
        self.timer.start(self.delay_ms)
        return self._generation

    def is_current(self, token):
        return self._has_pending and token == self._generation

    def cancel(self):
        self._generation += 1
        self.timer.stop()
        self._pending = None
        self._has_pending = False

    def poll(self):
        return False

    def flush(self):
        self.timer.stop()
        if not self._has_pending:
            return False
        value = self._pending
        self._pending = None
        self._has_pending = False
        self.callback(value)
        return True
