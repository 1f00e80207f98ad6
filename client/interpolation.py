"""
Snapshot buffering and interpolation for rendering remote entities smoothly.
Entities are rendered slightly in the past, interpolating between the two
buffered server snapshots that bracket the render time.
"""

from bisect import bisect_right

from common.snapshot import Snapshot


def lerp(a: float, b: float, t: float) -> float:
    """Linear interpolation; exact at both ends."""
    if t == 0.0:
        return a
    if t == 1.0:
        return b
    return a + (b - a) * t


class SnapshotBuffer:
    """Accepted snapshots, strictly ascending by tick."""

    def __init__(self):
        self._snapshots = []
        self._ticks = []

    def append(self, snapshot: Snapshot):
        """Add a snapshot newer than every buffered one."""
        if self._ticks and snapshot.tick <= self._ticks[-1]:
            raise ValueError(
                f"Snapshot tick {snapshot.tick} is not newer than "
                f"buffered tick {self._ticks[-1]}"
            )
        self._snapshots.append(snapshot)
        self._ticks.append(snapshot.tick)

    def newest(self):
        return self._snapshots[-1] if self._snapshots else None

    def bracket(self, target_sub_tick: float) -> tuple:
        """
        Find the snapshots enclosing target_sub_tick.

        Returns:
            (prev_idx, next_idx); next_idx is the first snapshot with
            tick > target and equals len(self) if there is none. prev_idx
            is next_idx - 1, or None if next_idx is 0.
        """
        next_idx = bisect_right(self._ticks, target_sub_tick)
        prev_idx = next_idx - 1 if next_idx > 0 else None
        return prev_idx, next_idx

    def drop_before(self, index: int):
        """Discard the first index entries."""
        if index > 0:
            self._snapshots = self._snapshots[index:]
            self._ticks = self._ticks[index:]

    def ticks(self) -> list:
        return list(self._ticks)

    def clear(self):
        self._snapshots = []
        self._ticks = []

    def __getitem__(self, index: int) -> Snapshot:
        return self._snapshots[index]

    def __len__(self):
        return len(self._snapshots)

    def __iter__(self):
        return iter(self._snapshots)


class Interpolator:
    """
    Interpolates entity positions between buffered snapshots.
    Renders at (client time - interp_ticks) for smooth motion.
    """

    def __init__(self, interp_ticks: float):
        """
        Args:
            interp_ticks: number of ticks to render behind the client clock
        """
        if interp_ticks < 0:
            raise ValueError(f"interp_ticks must be >= 0, got {interp_ticks}")
        self.interp_ticks = interp_ticks

    def target_sub_tick(self, client_time: float) -> float:
        return client_time - self.interp_ticks

    @staticmethod
    def select(buffer: SnapshotBuffer, target_sub_tick: float) -> tuple:
        """
        Returns:
            (prev, next) snapshots; either may be None
        """
        prev_idx, next_idx = buffer.bracket(target_sub_tick)
        prev = buffer[prev_idx] if prev_idx is not None else None
        nxt = buffer[next_idx] if next_idx < len(buffer) else None
        return prev, nxt

    @staticmethod
    def alpha(prev: Snapshot, nxt: Snapshot, target_sub_tick: float) -> float:
        """Interpolation factor (0.0 = prev, 1.0 = next)."""
        return 1.0 - (nxt.tick - target_sub_tick) / (nxt.tick - prev.tick)

    @staticmethod
    def blend(prev: Snapshot, nxt: Snapshot, alpha: float) -> list:
        """
        Blend two snapshots component-wise.

        Entities missing from one side take the other side's position.
        """
        p = prev.entity_positions
        n = nxt.entity_positions
        result = []
        for idx in range(max(len(p), len(n))):
            if idx >= len(p):
                result.append(n[idx])
            elif idx >= len(n):
                result.append(p[idx])
            else:
                result.append((lerp(p[idx][0], n[idx][0], alpha),
                               lerp(p[idx][1], n[idx][1], alpha)))
        return result

    def interpolate(self, buffer: SnapshotBuffer, target_sub_tick: float):
        """
        Interpolate positions at target_sub_tick without touching the buffer.

        Returns:
            list of (x, y) per entity, or None if there is no complete bracket
        """
        prev, nxt = self.select(buffer, target_sub_tick)
        if prev is None or nxt is None:
            return None
        return self.blend(prev, nxt, self.alpha(prev, nxt, target_sub_tick))

    @staticmethod
    def trim(buffer: SnapshotBuffer, target_sub_tick: float):
        """Drop every snapshot older than the bracket's lower bound."""
        prev_idx, _ = buffer.bracket(target_sub_tick)
        if prev_idx is not None:
            buffer.drop_before(prev_idx)
