"""Snowflake-style generator for payment reference ids.

Every deposit/withdrawal gets an opaque reference id at creation time; this
is the value a real bKash/Nagad gateway callback would quote back.

The module-level generator takes its machine id from the process id, so
uvicorn workers on one host draw from disjoint id spaces. Two processes
collide only if their pids are congruent mod 1024 and they issue in the
same millisecond.
"""

import os
import threading
import time


class SnowflakeIdGenerator:
    """Simple snowflake ID generator.

    Layout (64 bits):
      - 41 bits: millisecond timestamp (since custom epoch)
      - 10 bits: machine_id (0-1023)
      - 12 bits: sequence (0-4095 per millisecond)
    """

    _EPOCH_MS = 1_700_000_000_000
    _MACHINE_BITS = 10
    _SEQUENCE_BITS = 12
    _MAX_SEQUENCE = (1 << _SEQUENCE_BITS) - 1

    def __init__(self, machine_id: int = 0) -> None:
        if not (0 <= machine_id < (1 << self._MACHINE_BITS)):
            raise ValueError(f"machine_id must be 0-{(1 << self._MACHINE_BITS) - 1}")
        self._machine_id = machine_id
        self._sequence = 0
        self._last_timestamp_ms = -1
        self._lock = threading.Lock()

    def next_id(self) -> int:
        with self._lock:
            ts = self._current_ms()
            if ts == self._last_timestamp_ms:
                self._sequence = (self._sequence + 1) & self._MAX_SEQUENCE
                if self._sequence == 0:
                    ts = self._wait_next_ms(ts)
            else:
                self._sequence = 0

            self._last_timestamp_ms = ts
            return (
                ((ts - self._EPOCH_MS) << (self._MACHINE_BITS + self._SEQUENCE_BITS))
                | (self._machine_id << self._SEQUENCE_BITS)
                | self._sequence
            )

    def _current_ms(self) -> int:
        return int(time.time() * 1000)

    def _wait_next_ms(self, last_ts: int) -> int:
        ts = self._current_ms()
        while ts <= last_ts:
            ts = self._current_ms()
        return ts


def _process_machine_id() -> int:
    return os.getpid() % (1 << SnowflakeIdGenerator._MACHINE_BITS)


_default_generator = SnowflakeIdGenerator(machine_id=_process_machine_id())


def generate_reference_id(prefix: str) -> str:
    """Opaque payment reference, e.g. 'DEP-7301234567890123'."""
    return f"{prefix}-{_default_generator.next_id()}"
