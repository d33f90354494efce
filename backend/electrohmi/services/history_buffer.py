from __future__ import annotations

from collections import deque
from typing import Deque, Tuple

from electrohmi.models.domain import TelemetrySample


class HistoryBuffer:
    """
    Fixed-capacity rolling window of telemetry samples (oldest first).

    Always full: every slot is pre-filled with `seed`, and each append evicts
    exactly one sample. Snapshots are tuples of frozen samples, so later
    appends are never visible through an earlier snapshot.
    """

    def __init__(self, capacity: int, seed: TelemetrySample):
        if int(capacity) < 1:
            raise ValueError("capacity must be >= 1")
        self._capacity = int(capacity)
        self._buf: Deque[TelemetrySample] = deque((seed for _ in range(self._capacity)), maxlen=self._capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._buf)

    def append(self, sample: TelemetrySample) -> None:
        # deque(maxlen) drops the leftmost (oldest) entry
        self._buf.append(sample)

    def latest(self) -> TelemetrySample:
        return self._buf[-1]

    def snapshot(self) -> Tuple[TelemetrySample, ...]:
        return tuple(self._buf)
