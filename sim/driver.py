"""
Frame driver — owns the server, the clients and the time source, and runs
the whole pipeline once per external frame callback.
"""

import copy
import random

from common.config import (
    SimulationConfig, DEFAULT_NUM_CLIENTS, DEFAULT_NUM_ENTITIES
)
from common.metrics_logger import MetricsLogger
from server.game_state import GameState
from server.server import GameServer
from client.client import GameClient


class FrameTimer:
    """
    Turns monotonically increasing timestamps (seconds) into frame deltas.
    The first timestamp only sets the baseline.
    """

    def __init__(self):
        self.start_time = None
        self.last_time = None

    def tick(self, timestamp: float) -> float:
        if self.last_time is None:
            self.start_time = timestamp
            self.last_time = timestamp
            return 0.0
        if timestamp < self.last_time:
            raise ValueError(
                f"Timestamp went backwards: {timestamp} < {self.last_time}"
            )
        rdt = timestamp - self.last_time
        self.last_time = timestamp
        return rdt

    @property
    def elapsed(self) -> float:
        if self.last_time is None:
            return 0.0
        return self.last_time - self.start_time


class FrameDriver:
    """
    Explicit owner of all simulation state.

    Frame order: server ticks and dispatch, then per client: deliveries,
    clock advance, pause check, interpolation. Finally the frame view goes
    to the render sink.
    """

    def __init__(self, config: SimulationConfig = None,
                 num_clients: int = DEFAULT_NUM_CLIENTS,
                 num_entities: int = DEFAULT_NUM_ENTITIES,
                 seed: int = None, sink=None,
                 metrics: MetricsLogger = None, verbose: bool = False):
        self.config = config or SimulationConfig()
        self.sink = sink
        self.metrics = metrics
        self.verbose = verbose
        self.timer = FrameTimer()
        self.frames = 0
        self._last_stats_time = 0.0

        self.rng = random.Random(seed)

        game_state = GameState(random.Random(self.rng.getrandbits(64)))
        game_state.spawn_entities(num_entities)
        self.server = GameServer(game_state, self.config, verbose=verbose)

        self.clients = []
        for i in range(num_clients):
            client = GameClient(
                i, self.config, rng=random.Random(self.rng.getrandbits(64)),
                metrics=metrics, verbose=verbose
            )
            self.server.attach(client.transport)
            self.clients.append(client)

        self._log(f"[SIM] {num_clients} clients, {num_entities} entities, "
                  f"config={self.config.to_dict()}")

    def _log(self, msg: str):
        """Print a message if verbose mode is enabled."""
        if self.verbose:
            print(msg, flush=True)

    def frame(self, timestamp: float) -> dict:
        """Run one frame at the given real-time timestamp (seconds)."""
        return self.step(self.timer.tick(timestamp))

    def step(self, rdt: float) -> dict:
        """Run one frame with an explicit real elapsed time."""
        self.frames += 1
        if self.metrics:
            self.metrics.set_time(self.timer.elapsed)

        self.server.update(rdt)
        client_views = [client.update(rdt) for client in self.clients]

        frame_view = {
            'frame': self.frames,
            'server': list(enumerate(self.server.game_state.positions())),
            'server_tick': self.server.tick,
            'clients': client_views,
        }

        if self.metrics and self.timer.elapsed - self._last_stats_time >= 1.0:
            for client in self.clients:
                self.metrics.log_transport(client.index, client.transport.stats())
            self._last_stats_time = self.timer.elapsed

        if self.sink is not None:
            self.sink.render(frame_view)
        return frame_view

    def run_for(self, duration: float, fps: float) -> dict:
        """Drive frames at a fixed rate of simulated time."""
        frame_dt = 1.0 / fps
        frame_view = None
        if self.timer.last_time is None:
            t = 0.0
            frame_view = self.frame(t)
        else:
            # Continue from the last frame without repeating it
            t = self.timer.last_time
        for i in range(1, int(round(duration * fps)) + 1):
            frame_view = self.frame(t + i * frame_dt)
        return frame_view

    def inspect(self) -> dict:
        """Read-only view of the whole simulation, for debugging."""
        return copy.deepcopy({
            'frames': self.frames,
            'elapsed': self.timer.elapsed,
            'config': self.config.to_dict(),
            'server': self.server.to_dict(),
            'clients': [client.to_dict() for client in self.clients],
        })
