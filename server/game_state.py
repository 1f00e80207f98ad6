"""
Authoritative world owned by the server.
A toy bouncing-entity motion model that produces test data for the netcode.
"""

import math
import random

from common.config import (
    WORLD_MIN, WORLD_MAX, ENTITY_MIN_SPEED, ENTITY_SPEED_RANGE, TURN_CHANCE
)
from common.snapshot import Snapshot


class Entity:
    """Kinematic state of one simulated entity."""

    __slots__ = ('x', 'y', 'speed', 'angle', 'angular_velocity')

    def __init__(self, x: float = 0.5, y: float = 0.5, speed: float = 0.0,
                 angle: float = 0.0, angular_velocity: float = 0.0):
        self.x = x
        self.y = y
        self.speed = speed
        self.angle = angle
        self.angular_velocity = angular_velocity

    @property
    def position(self) -> tuple:
        return (self.x, self.y)


class GameState:
    """
    The single source of truth for the simulated world.
    Entities wander with random turns and bounce off the unit square's edges.
    """

    def __init__(self, rng: random.Random = None):
        self.rng = rng or random.Random()
        self.entities = []
        self.tick = 0

    def spawn_entities(self, count: int):
        """Add count entities with random position, speed and heading."""
        for _ in range(count):
            self.entities.append(Entity(
                x=self.rng.random(),
                y=self.rng.random(),
                speed=self.rng.random() * ENTITY_SPEED_RANGE + ENTITY_MIN_SPEED,
                angle=self.rng.random() * 2 * math.pi,
            ))

    def step(self, dt: float):
        """Advance the world by exactly one tick of length dt."""
        for e in self.entities:
            if self.rng.random() < TURN_CHANCE:
                e.angular_velocity = 2 * self.rng.random() - 1

            e.angle += e.angular_velocity * dt

            vx = math.cos(e.angle) * e.speed
            vy = math.sin(e.angle) * e.speed

            e.x += vx * dt
            e.y += vy * dt

            # Reflect off the walls
            if e.x > WORLD_MAX:
                e.x = WORLD_MAX
                vx = -abs(vx)
            elif e.x < WORLD_MIN:
                e.x = WORLD_MIN
                vx = abs(vx)

            if e.y > WORLD_MAX:
                e.y = WORLD_MAX
                vy = -abs(vy)
            elif e.y < WORLD_MIN:
                e.y = WORLD_MIN
                vy = abs(vy)

            e.angle = math.atan2(vy, vx)
            if e.angle < 0:
                e.angle += 2 * math.pi

        self.tick += 1

    def positions(self) -> list:
        return [e.position for e in self.entities]

    def get_snapshot(self) -> Snapshot:
        """Create a snapshot of the current world state."""
        return Snapshot(self.tick, self.positions())
