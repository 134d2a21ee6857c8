"""Serie temporal en memoria (tests, simulaciones y hosts embebidos)."""

from __future__ import annotations

import bisect
import threading
from datetime import datetime
from typing import Iterable, List, Optional

from ..samples import IStatusStore, Sample, SampleType, UpdateMode, to_utc


class InMemorySampleStream(IStatusStore):
    """Serie ordenada por timestamp; una muestra por timestamp."""

    def __init__(
        self,
        sample_type: SampleType,
        samples: Optional[Iterable[Sample]] = None,
        update_mode: UpdateMode = UpdateMode.ON_WRITE,
    ):
        self._sample_type = sample_type
        self._update_mode = update_mode
        self._lock = threading.Lock()
        self._timestamps: List[datetime] = []
        self._samples: List[Sample] = []
        for sample in samples or ():
            self.write(sample)

    @property
    def sample_type(self) -> SampleType:
        return self._sample_type

    @property
    def update_mode(self) -> UpdateMode:
        return self._update_mode

    def latest_at_or_before(self, time: datetime) -> Optional[Sample]:
        with self._lock:
            idx = bisect.bisect_right(self._timestamps, to_utc(time)) - 1
            return self._samples[idx] if idx >= 0 else None

    def write(self, sample: Sample) -> None:
        ts = to_utc(sample.timestamp)
        sample = Sample(ts, sample.value, sample.quality)
        with self._lock:
            idx = bisect.bisect_left(self._timestamps, ts)
            if idx < len(self._timestamps) and self._timestamps[idx] == ts:
                self._samples[idx] = sample
            else:
                self._timestamps.insert(idx, ts)
                self._samples.insert(idx, sample)

    @property
    def samples(self) -> List[Sample]:
        with self._lock:
            return list(self._samples)

    def __len__(self) -> int:
        return len(self._samples)
