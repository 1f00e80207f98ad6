"""
Authoritative game server — fixed-timestep tick loop.

Handles:
- Advancing the simulation at a fixed tick rate, independent of frame timing
- Building one snapshot per frame in which at least one tick ran
- Dispatching that snapshot through each client's simulated transport
"""

from common.config import SimulationConfig
from common.net import SimulatedTransport
from server.game_state import GameState


class GameServer:
    """
    Authoritative game server.
    Accumulates real frame time and converts it into whole simulation ticks.
    """

    def __init__(self, game_state: GameState, config: SimulationConfig,
                 verbose: bool = False):
        self.game_state = game_state
        self.config = config
        self.verbose = verbose
        self.tick_accumulator = 0.0

        self.channels = []      # (transport, conditions) per client

        # Statistics
        self.snapshots_sent = 0

    def _log(self, msg: str):
        """Print a message if verbose mode is enabled."""
        if self.verbose:
            print(msg, flush=True)

    @property
    def tick(self) -> int:
        return self.game_state.tick

    def attach(self, transport: SimulatedTransport, conditions=None):
        """
        Register a client channel.

        Args:
            transport: the client's simulated transport
            conditions: network conditions for this channel; defaults to
                        the server config
        """
        self.channels.append((transport, conditions or self.config))
        self._log(f"[SERVER] Client channel {len(self.channels) - 1} attached")

    def simulate_tick(self, dt: float):
        """Run one simulation step."""
        self.game_state.step(dt)

    def send_snapshots(self):
        """Broadcast the current world state to all attached clients."""
        snapshot = self.game_state.get_snapshot()
        for transport, conditions in self.channels:
            transport.send(snapshot, conditions)
        self.snapshots_sent += 1
        return snapshot

    def update(self, rdt: float):
        """
        Advance by rdt seconds of real time.

        Returns:
            the snapshot dispatched this frame, or None if no tick ran
        """
        tick_duration = self.config.tick_duration
        self.tick_accumulator += rdt

        ticked = False
        while self.tick_accumulator > tick_duration:
            self.tick_accumulator -= tick_duration
            self.simulate_tick(tick_duration)
            ticked = True

        # Intermediate ticks of the same frame are not sent individually
        if ticked:
            return self.send_snapshots()
        return None

    def to_dict(self) -> dict:
        return {
            'tick': self.tick,
            'tick_accumulator': self.tick_accumulator,
            'snapshots_sent': self.snapshots_sent,
            'positions': [list(p) for p in self.game_state.positions()],
        }
