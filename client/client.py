"""
Game client — receives snapshots over the simulated transport, keeps its
clock aligned with the server's tick stream, and interpolates entity
positions for rendering.
"""

import random

from common.config import SimulationConfig
from common.net import SimulatedTransport
from common.snapshot import Snapshot
from common.metrics_logger import MetricsLogger
from client.clock import ClientClock
from client.interpolation import Interpolator, SnapshotBuffer


class GameClient:
    """
    One simulated client.

    Per frame (after the server has dispatched): deliver due messages,
    advance the clock, pause on buffer underrun, then interpolate.
    """

    def __init__(self, index: int, config: SimulationConfig,
                 rng: random.Random = None, metrics: MetricsLogger = None,
                 verbose: bool = False):
        self.index = index
        self.config = config
        self.verbose = verbose
        self.metrics = metrics

        self.transport = SimulatedTransport(self.on_receive, rng)
        self.clock = ClientClock(config.tick_duration)
        self.buffer = SnapshotBuffer()
        self.interpolator = Interpolator(config.interpolation_delay_ticks)

        self.last_accepted_tick = None
        self.raw_positions = []         # Latest accepted, unsmoothed
        self.positions = []             # Interpolated, clock-corrected
        self.target_sub_tick = None

        # Statistics
        self.total_accepted = 0
        self.stale_dropped = 0
        self.frames = 0

    def _log(self, msg: str):
        """Print a message if verbose mode is enabled."""
        if self.verbose:
            print(f"[CLIENT {self.index}] {msg}", flush=True)

    def on_receive(self, snapshot: Snapshot):
        """
        Admission gate for delivered snapshots.

        Anything not newer than the last accepted tick is a stale or
        duplicate arrival and is dropped without touching clock or buffer.
        """
        if (self.last_accepted_tick is not None
                and snapshot.tick <= self.last_accepted_tick):
            self.stale_dropped += 1
            return False

        self.last_accepted_tick = snapshot.tick
        self.buffer.append(snapshot)
        self.raw_positions = list(snapshot.entity_positions)
        self.total_accepted += 1

        if self.clock.paused:
            self.clock.resume(snapshot.tick)
            self._log(f"Resumed at tick {snapshot.tick}")
            if self.metrics:
                self.metrics.log_clock_event(self.index, 'resume', snapshot.tick)

        offset = self.clock.observe(snapshot.tick)
        if self.metrics:
            self.metrics.log_offset(self.index, offset, self.clock.window.mean(),
                                    self.clock.tick_duration,
                                    self.clock.base_tick_duration)
        return True

    def _apply_config(self):
        """Pick up runtime config changes."""
        self.clock.set_base_tick_duration(self.config.tick_duration)
        self.interpolator.interp_ticks = self.config.interpolation_delay_ticks

    def update(self, rdt: float) -> dict:
        """
        Run one client frame.

        Returns:
            the client's render view (see view())
        """
        self.frames += 1
        self._apply_config()

        # Deliveries pass through the admission gate
        self.transport.advance(rdt)
        if self.metrics:
            for delay in self.transport.last_delays:
                self.metrics.log_delivery(self.index, delay)

        self.clock.advance(rdt)

        if self.clock.paused:
            return self.view()

        target = self.interpolator.target_sub_tick(self.clock.client_time())
        self.target_sub_tick = target

        newest = self.buffer.newest()
        if newest is None or newest.tick <= target:
            # Nothing to interpolate towards: hold positions, no extrapolation
            self.clock.pause()
            self._log(f"Paused at tick {self.clock.tick} "
                      f"(buffered: {len(self.buffer)})")
            if self.metrics:
                self.metrics.log_clock_event(self.index, 'pause', self.clock.tick)
            return self.view()

        positions = self.interpolator.interpolate(self.buffer, target)
        self.interpolator.trim(self.buffer, target)
        if positions is not None:
            self.positions = positions

        if self.metrics:
            self.metrics.log_buffer_depth(self.index, len(self.buffer))
        return self.view()

    def view(self) -> dict:
        """Render view: raw and interpolated (entity_index, (x, y)) pairs."""
        return {
            'client': self.index,
            'raw': list(enumerate(self.raw_positions)),
            'interpolated': list(enumerate(self.positions)),
            'paused': self.clock.paused,
            'tick': self.clock.tick,
        }

    def stats(self) -> dict:
        return {
            'last_accepted_tick': self.last_accepted_tick,
            'accepted': self.total_accepted,
            'stale_dropped': self.stale_dropped,
            'buffered': len(self.buffer),
            'pauses': self.clock.pause_count,
            'resumes': self.clock.resume_count,
            'transport': self.transport.stats(),
        }

    def to_dict(self) -> dict:
        return {
            'index': self.index,
            'clock': self.clock.to_dict(),
            'buffer_ticks': self.buffer.ticks(),
            'target_sub_tick': self.target_sub_tick,
            'raw_positions': [list(p) for p in self.raw_positions],
            'positions': [list(p) for p in self.positions],
            'stats': self.stats(),
        }
