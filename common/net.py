"""
Simulated unreliable network channel: latency, jitter, packet loss.
"""

import random

from common.snapshot import Snapshot


class InFlightMessage:
    """A serialized snapshot waiting out its simulated delay."""

    __slots__ = ('payload', 'time_remaining', 'delay')

    def __init__(self, payload: bytes, delay: float):
        self.payload = payload
        self.delay = delay
        self.time_remaining = delay


class SimulatedTransport:
    """
    One-way server-to-client channel with simulated network conditions.

    Each message is either dropped at send time or given an independently
    drawn delay, so delivery order can differ from send order. Dropped
    messages are gone for good; there are no retries.
    """

    def __init__(self, on_receive, rng: random.Random = None):
        """
        Args:
            on_receive: callable taking the delivered Snapshot
            rng: random source for loss and jitter draws
        """
        self.on_receive = on_receive
        self.rng = rng or random.Random()
        self.in_flight_messages = []

        # Statistics
        self.total_sent = 0
        self.total_dropped = 0
        self.total_delivered = 0
        self.bytes_sent = 0
        self.last_delays = []

    def send(self, snapshot: Snapshot, conditions) -> bool:
        """
        Send a snapshot under the given conditions.

        Args:
            snapshot: state to deliver
            conditions: object with latency_ms, jitter_ms, packet_loss

        Returns:
            True if the message was scheduled, False if it was dropped
        """
        self.total_sent += 1

        if self.rng.random() < conditions.packet_loss:
            self.total_dropped += 1
            return False

        jitter = self.rng.uniform(-conditions.jitter_ms, conditions.jitter_ms)
        delay = (conditions.latency_ms / 2.0 + jitter) / 1000.0

        # The payload is the receiver's own copy of the state
        payload = snapshot.serialize()
        self.in_flight_messages.append(InFlightMessage(payload, delay))
        self.bytes_sent += snapshot.serialized_size()
        return True

    def advance(self, dt: float) -> int:
        """
        Age in-flight messages by dt seconds and deliver the ones that are due.

        Returns:
            number of messages delivered
        """
        due = []
        still_waiting = []
        for message in self.in_flight_messages:
            message.time_remaining -= dt
            if message.time_remaining <= 0.0:
                due.append(message)
            else:
                still_waiting.append(message)
        self.in_flight_messages = still_waiting

        self.last_delays = []
        for message in due:
            self.total_delivered += 1
            self.last_delays.append(message.delay)
            self.on_receive(Snapshot.deserialize(message.payload))
        return len(due)

    @property
    def in_flight(self) -> int:
        return len(self.in_flight_messages)

    def get_loss_rate(self) -> float:
        """Fraction of sent messages that were dropped."""
        if self.total_sent == 0:
            return 0.0
        return self.total_dropped / self.total_sent

    def stats(self) -> dict:
        return {
            'sent': self.total_sent,
            'dropped': self.total_dropped,
            'delivered': self.total_delivered,
            'in_flight': self.in_flight,
            'bytes_sent': self.bytes_sent,
            'loss_rate': self.get_loss_rate(),
        }
