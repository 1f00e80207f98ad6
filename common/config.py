"""
Simulation constants and runtime configuration.
"""

# World bounds (normalized unit square)
WORLD_MIN = 0.0
WORLD_MAX = 1.0

# Toy motion model
ENTITY_MIN_SPEED = 0.1      # units per second
ENTITY_SPEED_RANGE = 0.2
TURN_CHANCE = 0.05          # Per-tick chance of re-rolling angular velocity

# Session defaults
DEFAULT_NUM_ENTITIES = 2
DEFAULT_NUM_CLIENTS = 3
DEFAULT_FPS = 60

# Network defaults
DEFAULT_TICK_RATE = 20      # Server ticks per second
DEFAULT_LATENCY_MS = 60.0   # Round-trip time; one-way delay is half of this
DEFAULT_JITTER_MS = 10.0    # +/- milliseconds
DEFAULT_PACKET_LOSS = 0.1

# Interpolation
INTERPOLATION_TICKS = 6.0   # Render N ticks behind the client clock

# Clock drift correction
OFFSET_WINDOW_SIZE = 5      # Samples averaged to cancel per-packet jitter
DRIFT_GAIN = 0.01
MAX_SPEEDUP = 0.9           # Floor on tick duration, as a fraction of base


class ConfigError(ValueError):
    """Raised when a configuration value is out of range."""


class SimulationConfig:
    """
    Runtime-adjustable network and clock settings.

    Values are validated on construction and on every update; invalid
    values are rejected, never clamped. Readers pick up changes on the
    next frame.
    """

    FIELDS = ('tick_rate_hz', 'latency_ms', 'jitter_ms', 'packet_loss',
              'interpolation_delay_ticks')

    def __init__(self, tick_rate_hz: float = DEFAULT_TICK_RATE,
                 latency_ms: float = DEFAULT_LATENCY_MS,
                 jitter_ms: float = DEFAULT_JITTER_MS,
                 packet_loss: float = DEFAULT_PACKET_LOSS,
                 interpolation_delay_ticks: float = INTERPOLATION_TICKS):
        values = {
            'tick_rate_hz': tick_rate_hz,
            'latency_ms': latency_ms,
            'jitter_ms': jitter_ms,
            'packet_loss': packet_loss,
            'interpolation_delay_ticks': interpolation_delay_ticks,
        }
        self.validate(values)
        self.__dict__.update(values)

    @staticmethod
    def validate(values: dict):
        """Check a full or partial set of values, raising ConfigError."""
        for key in values:
            if key not in SimulationConfig.FIELDS:
                raise ConfigError(f"Unknown config field: {key!r}")

        if 'tick_rate_hz' in values and not values['tick_rate_hz'] > 0:
            raise ConfigError(
                f"tick_rate_hz must be positive, got {values['tick_rate_hz']}"
            )
        for key in ('latency_ms', 'jitter_ms', 'interpolation_delay_ticks'):
            if key in values and not values[key] >= 0:
                raise ConfigError(f"{key} must be >= 0, got {values[key]}")
        if 'packet_loss' in values and not 0.0 <= values['packet_loss'] <= 1.0:
            raise ConfigError(
                f"packet_loss must be within [0, 1], got {values['packet_loss']}"
            )

    def __setattr__(self, name, value):
        self.validate({name: value})
        super().__setattr__(name, value)

    def update(self, **changes):
        """Apply changes atomically; nothing changes if any value is invalid."""
        self.validate(changes)
        self.__dict__.update(changes)

    @property
    def tick_duration(self) -> float:
        return 1.0 / self.tick_rate_hz

    def to_dict(self) -> dict:
        return {key: getattr(self, key) for key in self.FIELDS}
