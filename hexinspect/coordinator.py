"""
Selection / offset coordination.

The OffsetCoordinator is the only writer of the cursor offset. Highlight
listeners (the hex view) hear about every change synchronously; decoding is
pushed through a debouncer so that only the settled offset is interpreted.
"""

import logging

from .debounce import DEFAULT_DELAY_MS, Debouncer
from .interpreter import LITTLE, byte_order_prefix, interpret

logger = logging.getLogger(__name__)


class OffsetCoordinator:
    """
    Owns (data, offset, endianness) and the latest InterpretationResult.

    Args:
        delay_ms: Debounce delay applied before decoding a new offset
        debouncer_factory: Callable (delay_ms, callback) -> debouncer; the GUI
            passes QtDebouncer, tests use the clock driven Debouncer
    """

    def __init__(self, delay_ms=DEFAULT_DELAY_MS, debouncer_factory=None, endianness=LITTLE):
        factory = debouncer_factory or (lambda delay, callback: Debouncer(delay, callback))
        self.debouncer = factory(delay_ms, self._on_settled)
        self.data = None
        self.offset = None
        self.settled_offset = None
        self.endianness = endianness
        self.result = None
        self._offset_listeners = []
        self._result_listeners = []

    def add_offset_listener(self, callback):
        self._offset_listeners.append(callback)

    def add_result_listener(self, callback):
        self._result_listeners.append(callback)

    def set_data(self, data):
        """Switch buffers. The offset resets to 0 and is decoded right away."""
        self.debouncer.cancel()
        self.data = data
        has_data = data is not None and len(data) > 0
        self.offset = 0 if has_data else None
        for callback in list(self._offset_listeners):
            callback(self.offset)
        self._decode(self.offset)

    def set_offset(self, offset):
        """Move the cursor. Highlight listeners run now; decoding is debounced."""
        if offset == self.offset:
            return
        self.offset = offset
        for callback in list(self._offset_listeners):
            callback(offset)
        self.debouncer.schedule(offset)

    def set_endianness(self, endianness):
        byte_order_prefix(endianness)
        if endianness == self.endianness:
            return
        self.endianness = endianness
        self._decode(self.settled_offset)

    def flush(self):
        """Decode a pending offset immediately."""
        return self.debouncer.flush()

    def poll(self):
        return self.debouncer.poll()

    def _on_settled(self, offset):
        self._decode(offset)

    def _decode(self, offset):
        self.settled_offset = offset
        if self.data is None or offset is None:
            self.result = None
        else:
            self.result = interpret(self.data, offset, self.endianness)
            logger.debug("Decoded offset 0x%X (%s endian)", offset, self.endianness)
        for callback in list(self._result_listeners):
            callback(self.result)
