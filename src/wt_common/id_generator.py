"""Time-ordered row IDs for users, events, lines, wagers and ledger entries.

An ID is ``(ms since 2025-01-01) << 22 | counter``, printed as a zero-padded
19-digit string, so ordering by the string column matches creation order.
Cursor pagination over ledger entries and wagers relies on that. One
process writes, so there are no worker bits.
"""

import threading
import time

ID_WIDTH = 19  # digits in 2**63 - 1

_EPOCH_MS = 1_735_689_600_000
_COUNTER_BITS = 22


class IdGenerator:
    def __init__(self) -> None:
        self._last = 0
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            candidate = (int(time.time() * 1000) - _EPOCH_MS) << _COUNTER_BITS
            # a stalled or rewound clock keeps counting up from the last id
            self._last = max(candidate, self._last + 1)
            return str(self._last).zfill(ID_WIDTH)


_default_generator = IdGenerator()


def generate_id() -> str:
    return _default_generator.next_id()
