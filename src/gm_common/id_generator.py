"""Time-ordered business ids for listings and orders.

An id is ``<PREFIX>-<snowflake>`` with the snowflake zero-padded to 20
digits, so comparing two ids of the same prefix as plain strings orders them
by creation time. Cursor pagination depends on this.
"""

import threading
import time

from config.settings import settings

_EPOCH_MS = 1_700_000_000_000
_MACHINE_BITS = 10
_SEQUENCE_BITS = 12
_SEQUENCE_MASK = (1 << _SEQUENCE_BITS) - 1
_MAX_MACHINE_ID = (1 << _MACHINE_BITS) - 1
_DIGITS = len(str(2**64 - 1))


class SnowflakeIdGenerator:
    """41 bits of milliseconds since _EPOCH_MS, 10 bits of machine id, 12 bits of sequence."""

    def __init__(self, machine_id: int = 0) -> None:
        if not 0 <= machine_id <= _MAX_MACHINE_ID:
            raise ValueError(f"machine_id must be 0-{_MAX_MACHINE_ID}")
        self._machine_id = machine_id
        self._lock = threading.Lock()
        self._last_ms = -1
        self._sequence = 0

    def next_int(self) -> int:
        with self._lock:
            # never step back in time, even if the wall clock does
            ms = max(self._current_ms(), self._last_ms)
            if ms == self._last_ms:
                self._sequence = (self._sequence + 1) & _SEQUENCE_MASK
                if self._sequence == 0:
                    ms = self._wait_past(ms)
            else:
                self._sequence = 0
            self._last_ms = ms

            value = ms - _EPOCH_MS
            value = (value << _MACHINE_BITS) | self._machine_id
            return (value << _SEQUENCE_BITS) | self._sequence

    def next_id(self, prefix: str) -> str:
        return f"{prefix}-{self.next_int():0{_DIGITS}d}"

    def _current_ms(self) -> int:
        return time.time_ns() // 1_000_000

    def _wait_past(self, ms: int) -> int:
        now = self._current_ms()
        while now <= ms:
            now = self._current_ms()
        return now


_generator = SnowflakeIdGenerator(machine_id=settings.ID_MACHINE_ID)


def generate_id(prefix: str) -> str:
    """``generate_id("ORD")`` -> ``"ORD-00001823456789012345"``"""
    return _generator.next_id(prefix)
