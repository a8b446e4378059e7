"""Named timers with accumulated statistics."""

from __future__ import annotations

import math
import threading
import time
from collections import deque
from dataclasses import dataclass, field

_ROLLING_WINDOW = 50
_NANOSECONDS_PER_SECOND = 1e9


def seconds_to_time_string(seconds: float) -> str:
    """Format seconds as zero-padded fixed point with microsecond precision."""
    return "%09.6f" % seconds


@dataclass
class _Accumulator:
    total: float = 0.0
    count: int = 0
    minimum: float = math.inf
    maximum: float = -math.inf
    window: deque = field(default_factory=lambda: deque(maxlen=_ROLLING_WINDOW))

    def add(self, sample: float) -> None:
        self.total += sample
        self.count += 1
        self.minimum = min(self.minimum, sample)
        self.maximum = max(self.maximum, sample)
        self.window.append(sample)

    @property
    def mean(self) -> float:
        return self.total / self.count if self.count else 0.0

    @property
    def rolling_mean(self) -> float:
        return sum(self.window) / len(self.window) if self.window else 0.0

    @property
    def variance(self) -> float:
        if not self.window:
            return 0.0
        mean = self.rolling_mean
        return sum((s - mean) ** 2 for s in self.window) / len(self.window)


class Timing:
    """Registry of tagged timers and their statistics."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._tags: dict[str, int] = {}
        self._timers: list[_Accumulator] = []
        self._max_tag_length = 0

    def get_handle(self, tag: str) -> int:
        """Return the handle for a tag, creating it if needed."""
        with self._lock:
            handle = self._tags.get(tag)
            if handle is None:
                handle = len(self._timers)
                self._tags[tag] = handle
                self._timers.append(_Accumulator())
                self._max_tag_length = max(self._max_tag_length, len(tag))
            return handle

    def get_tag(self, handle: int) -> str:
        """Return the tag of a handle, or an empty string if unknown."""
        with self._lock:
            return next((tag for tag, h in self._tags.items() if h == handle), "")

    def _resolve(self, key: str | int) -> int:
        return self.get_handle(key) if isinstance(key, str) else key

    def _accumulator(self, key: str | int) -> _Accumulator:
        handle = self._resolve(key)
        with self._lock:
            return self._timers[handle]

    def add_time(self, handle: int, seconds: float) -> None:
        """Record one sample for a handle."""
        with self._lock:
            self._timers[handle].add(seconds)

    def total_seconds(self, key: str | int) -> float:
        with self._lock:
            return self._accumulator(key).total

    def mean_seconds(self, key: str | int) -> float:
        with self._lock:
            return self._accumulator(key).mean

    def num_samples(self, key: str | int) -> int:
        with self._lock:
            return self._accumulator(key).count

    def variance_seconds(self, key: str | int) -> float:
        with self._lock:
            return self._accumulator(key).variance

    def min_seconds(self, key: str | int) -> float:
        with self._lock:
            return self._accumulator(key).minimum

    def max_seconds(self, key: str | int) -> float:
        with self._lock:
            return self._accumulator(key).maximum

    def hz(self, key: str | int) -> float:
        """Rate derived from the rolling mean of recent samples."""
        with self._lock:
            rolling_mean = self._accumulator(key).rolling_mean
        if rolling_mean <= 0.0:
            raise ValueError("no positive timing samples to derive a rate from")
        return 1.0 / rolling_mean

    def report(self) -> str:
        """Render a table of all timers, sorted by tag."""
        with self._lock:
            if not self._tags:
                return ""
            lines = ["SM Timing", "-----------"]
            for tag, handle in sorted(self._tags.items()):
                acc = self._timers[handle]
                line = f"{tag:<{self._max_tag_length}}\t{acc.count:>7}\t"
                if acc.count > 0:
                    stddev = math.sqrt(acc.variance)
                    line += (
                        f"{seconds_to_time_string(acc.total)}\t"
                        f"({seconds_to_time_string(acc.mean)} +- "
                        f"{seconds_to_time_string(stddev)})\t"
                        f"[{seconds_to_time_string(acc.minimum)},"
                        f"{seconds_to_time_string(acc.maximum)}]"
                    )
                lines.append(line)
            return "\n".join(lines) + "\n"

    def reset(self) -> None:
        """Forget all tags."""
        with self._lock:
            self._tags.clear()


_DEFAULT_TIMING = Timing()


class Timer:
    """Measures elapsed wall time and records it in a Timing registry."""

    def __init__(
        self,
        key: str | int,
        construct_stopped: bool = False,
        timing: Timing | None = None,
    ) -> None:
        self._timing = timing if timing is not None else _DEFAULT_TIMING
        self._handle = self._timing.get_handle(key) if isinstance(key, str) else key
        self._running = False
        self._started_ns = 0
        if not construct_stopped:
            self.start()

    @property
    def handle(self) -> int:
        return self._handle

    @property
    def is_timing(self) -> bool:
        return self._running

    def start(self) -> None:
        self._running = True
        self._started_ns = time.perf_counter_ns()

    def stop(self) -> None:
        if not self._running:
            raise RuntimeError("timer was not started")
        elapsed = (time.perf_counter_ns() - self._started_ns) / _NANOSECONDS_PER_SECOND
        self._timing.add_time(self._handle, elapsed)
        self._running = False

    def __enter__(self) -> "Timer":
        if not self._running:
            self.start()
        return self

    def __exit__(self, *args) -> None:
        if self._running:
            self.stop()