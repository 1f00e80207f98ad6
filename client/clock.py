"""
Client clock with drift correction.

The clock runs in server ticks. Every accepted snapshot yields an offset
sample (server tick minus client time); the mean of the last few samples
nudges the tick duration so the clock speeds up when it lags behind the
server. When the client runs out of data the clock pauses, and the next
accepted snapshot snaps it back onto the server's tick.
"""

from collections import deque

from common.config import OFFSET_WINDOW_SIZE, DRIFT_GAIN, MAX_SPEEDUP


class OffsetSampleWindow:
    """Fixed-capacity FIFO of clock offset samples."""

    def __init__(self, capacity: int = OFFSET_WINDOW_SIZE):
        if capacity < 1:
            raise ValueError(f"Window capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._samples = deque(maxlen=capacity)

    def push(self, sample: float):
        self._samples.append(sample)

    def mean(self) -> float:
        if not self._samples:
            return 0.0
        return sum(self._samples) / len(self._samples)

    def clear(self):
        self._samples.clear()

    def __len__(self):
        return len(self._samples)

    def __iter__(self):
        return iter(self._samples)


class ClientClock:
    """
    Logical client clock measured in ticks.

    States: running (advances with wall time) and paused (held while the
    snapshot buffer has nothing to interpolate towards).
    """

    def __init__(self, base_tick_duration: float,
                 window_size: int = OFFSET_WINDOW_SIZE,
                 gain: float = DRIFT_GAIN):
        if base_tick_duration <= 0:
            raise ValueError(
                f"base_tick_duration must be positive, got {base_tick_duration}"
            )
        self.base_tick_duration = base_tick_duration
        self.tick_duration = base_tick_duration
        self.gain = gain
        self.window = OffsetSampleWindow(window_size)

        self.tick = 0
        self.accumulator = 0.0
        self.paused = False

        # Statistics
        self.pause_count = 0
        self.resume_count = 0
        self.last_offset = 0.0

    def client_time(self) -> float:
        """Current clock position in fractional ticks."""
        return self.tick + self.accumulator / self.tick_duration

    def resume(self, tick: int):
        """Leave the paused state, snapping onto the given server tick."""
        self.tick = tick
        self.accumulator = 0.0
        self.paused = False
        self.resume_count += 1

    def pause(self):
        if not self.paused:
            self.paused = True
            self.pause_count += 1

    def observe(self, server_tick: int) -> float:
        """
        Record the offset of an accepted snapshot and re-derive tick duration.

        Returns:
            the offset sample, in ticks
        """
        offset = server_tick - self.client_time()
        self.window.push(offset)
        self.last_offset = offset
        self._apply_drift_correction()
        # A shorter tick could leave the accumulator past a boundary
        self._drain_accumulator()
        return offset

    def _apply_drift_correction(self):
        # Positive offset means the client lags: shorten ticks to catch up.
        # Only the speed-up is bounded.
        base = self.base_tick_duration
        avg_offset = self.window.mean()
        self.tick_duration = max(base * MAX_SPEEDUP,
                                 base - self.gain * avg_offset * base)

    def set_base_tick_duration(self, base_tick_duration: float):
        """Follow a tick rate change, keeping the current correction."""
        if base_tick_duration <= 0:
            raise ValueError(
                f"base_tick_duration must be positive, got {base_tick_duration}"
            )
        if base_tick_duration == self.base_tick_duration:
            return
        self.base_tick_duration = base_tick_duration
        self._apply_drift_correction()
        self._drain_accumulator()

    def advance(self, rdt: float):
        """Advance by rdt seconds of wall time; a paused clock holds."""
        if self.paused:
            return
        self.accumulator += rdt
        self._drain_accumulator()

    def _drain_accumulator(self):
        while self.accumulator > self.tick_duration:
            self.accumulator -= self.tick_duration
            self.tick += 1

    @property
    def state(self) -> str:
        return 'paused' if self.paused else 'running'

    def to_dict(self) -> dict:
        return {
            'state': self.state,
            'tick': self.tick,
            'accumulator': self.accumulator,
            'tick_duration': self.tick_duration,
            'base_tick_duration': self.base_tick_duration,
            'avg_offset': self.window.mean(),
            'samples': list(self.window),
        }
