"""
World snapshots and their binary wire format.
"""

import struct

# Network byte order: tick (uint64), entity count (uint32)
SNAPSHOT_HEADER_FORMAT = '!Q I'
SNAPSHOT_HEADER_SIZE = struct.calcsize(SNAPSHOT_HEADER_FORMAT)

# Per entity: x, y (float64, so delivered copies are exact)
POSITION_FORMAT = '!d d'
POSITION_SIZE = struct.calcsize(POSITION_FORMAT)

MAX_TICK = 2 ** 64 - 1
MAX_ENTITIES = 2 ** 32 - 1


class Snapshot:
    """
    Entity positions at one server tick.

    Positions are stored as a tuple of (x, y) tuples indexed by entity,
    so a snapshot cannot be changed after it is built.
    """

    __slots__ = ('_tick', '_positions')

    def __init__(self, tick: int = 0, entity_positions=()):
        if not 0 <= tick <= MAX_TICK:
            raise ValueError(f"Snapshot tick must be within [0, {MAX_TICK}], got {tick}")
        self._tick = int(tick)
        self._positions = tuple((float(x), float(y)) for x, y in entity_positions)
        if len(self._positions) > MAX_ENTITIES:
            raise ValueError(
                f"Snapshot holds at most {MAX_ENTITIES} entities, "
                f"got {len(self._positions)}"
            )

    @property
    def tick(self) -> int:
        return self._tick

    @property
    def entity_positions(self) -> tuple:
        return self._positions

    def __len__(self):
        return len(self._positions)

    def __eq__(self, other):
        if not isinstance(other, Snapshot):
            return NotImplemented
        return self._tick == other._tick and self._positions == other._positions

    def __hash__(self):
        return hash((self._tick, self._positions))

    def __repr__(self):
        return f"Snapshot(tick={self._tick}, entities={len(self._positions)})"

    def serialize(self) -> bytes:
        """Serialize snapshot to binary payload."""
        parts = [struct.pack(SNAPSHOT_HEADER_FORMAT, self._tick, len(self._positions))]
        for x, y in self._positions:
            parts.append(struct.pack(POSITION_FORMAT, x, y))
        return b''.join(parts)

    def serialized_size(self) -> int:
        return SNAPSHOT_HEADER_SIZE + len(self._positions) * POSITION_SIZE

    @staticmethod
    def deserialize(data: bytes) -> 'Snapshot':
        """Deserialize binary payload to Snapshot."""
        if len(data) < SNAPSHOT_HEADER_SIZE:
            raise ValueError("Snapshot data too short")

        tick, count = struct.unpack(SNAPSHOT_HEADER_FORMAT,
                                    data[:SNAPSHOT_HEADER_SIZE])
        offset = SNAPSHOT_HEADER_SIZE
        positions = []

        for _ in range(count):
            if offset + POSITION_SIZE > len(data):
                raise ValueError(
                    f"Snapshot truncated: expected {count} entities, "
                    f"got {len(positions)}"
                )
            positions.append(struct.unpack(
                POSITION_FORMAT, data[offset:offset + POSITION_SIZE]
            ))
            offset += POSITION_SIZE

        return Snapshot(tick, positions)

    def to_dict(self) -> dict:
        return {
            'tick': self._tick,
            'entity_positions': [list(p) for p in self._positions],
        }
