"""
Unit tests for the simulated unreliable transport.
"""

import random
import unittest

from common.config import SimulationConfig
from common.net import SimulatedTransport
from common.snapshot import Snapshot


class TestSimulatedTransport(unittest.TestCase):

    def setUp(self):
        self.received = []
        self.transport = SimulatedTransport(self.received.append,
                                            random.Random(1))

    def test_fixed_delay_delivery(self):
        """60 ms round trip, no jitter: one-way delay is exactly 30 ms."""
        conditions = SimulationConfig(latency_ms=60, jitter_ms=0, packet_loss=0)
        snap = Snapshot(tick=10, entity_positions=[(0.5, 0.5)])
        self.assertTrue(self.transport.send(snap, conditions))
        self.assertEqual(self.transport.in_flight_messages[0].delay, 0.03)

        self.assertEqual(self.transport.advance(0.0299), 0)
        self.assertEqual(self.received, [])

        self.transport.advance(0.0002)
        self.assertEqual(len(self.received), 1)
        self.assertEqual(self.received[0], snap)
        self.assertEqual(self.transport.in_flight, 0)

    def test_exact_delay_boundary(self):
        conditions = SimulationConfig(latency_ms=60, jitter_ms=0, packet_loss=0)
        self.transport.send(Snapshot(tick=10), conditions)
        self.assertEqual(self.transport.advance(0.03), 1)
        self.assertEqual(self.received[0].tick, 10)

    def test_delivered_snapshot_is_a_copy(self):
        conditions = SimulationConfig(latency_ms=0, jitter_ms=0, packet_loss=0)
        snap = Snapshot(tick=1, entity_positions=[(0.1, 0.2)])
        self.transport.send(snap, conditions)
        self.transport.advance(0.0)
        self.assertEqual(self.received[0], snap)
        self.assertIsNot(self.received[0], snap)

    def test_total_loss(self):
        conditions = SimulationConfig(packet_loss=1.0)
        for tick in range(1, 101):
            self.assertFalse(self.transport.send(Snapshot(tick=tick), conditions))
        self.transport.advance(10.0)
        self.assertEqual(self.received, [])
        self.assertEqual(self.transport.in_flight, 0)
        self.assertEqual(self.transport.total_dropped, 100)
        self.assertEqual(self.transport.get_loss_rate(), 1.0)

    def test_no_loss(self):
        conditions = SimulationConfig(packet_loss=0.0)
        for tick in range(1, 101):
            self.transport.send(Snapshot(tick=tick), conditions)
        self.transport.advance(10.0)
        self.assertEqual(len(self.received), 100)
        self.assertEqual(self.transport.get_loss_rate(), 0.0)

    def test_partial_loss_rate(self):
        conditions = SimulationConfig(packet_loss=0.3)
        for tick in range(1, 2001):
            self.transport.send(Snapshot(tick=tick), conditions)
        self.assertAlmostEqual(self.transport.get_loss_rate(), 0.3, delta=0.05)

    def test_delay_within_jitter_range(self):
        conditions = SimulationConfig(latency_ms=100, jitter_ms=20, packet_loss=0)
        for tick in range(1, 201):
            self.transport.send(Snapshot(tick=tick), conditions)
        for message in self.transport.in_flight_messages:
            self.assertTrue(0.03 <= message.delay <= 0.07)

    def test_jitter_can_reorder(self):
        conditions = SimulationConfig(latency_ms=60, jitter_ms=25, packet_loss=0)
        for tick in range(1, 51):
            self.transport.send(Snapshot(tick=tick), conditions)
            self.transport.advance(0.005)
        self.transport.advance(1.0)
        ticks = [s.tick for s in self.received]
        self.assertEqual(sorted(ticks), list(range(1, 51)))
        self.assertNotEqual(ticks, sorted(ticks))

    def test_undelivered_messages_keep_order(self):
        conditions = SimulationConfig(latency_ms=100, jitter_ms=0, packet_loss=0)
        for tick in (1, 2, 3):
            self.transport.send(Snapshot(tick=tick), conditions)
        self.transport.advance(0.01)
        self.assertEqual(self.transport.in_flight, 3)
        self.transport.advance(0.05)
        self.assertEqual([s.tick for s in self.received], [1, 2, 3])

    def test_seeded_runs_are_reproducible(self):
        def run(seed):
            out = []
            transport = SimulatedTransport(out.append, random.Random(seed))
            conditions = SimulationConfig(latency_ms=60, jitter_ms=10,
                                          packet_loss=0.2)
            for tick in range(1, 101):
                transport.send(Snapshot(tick=tick), conditions)
                transport.advance(0.01)
            transport.advance(1.0)
            return [s.tick for s in out]

        self.assertEqual(run(5), run(5))

    def test_stats(self):
        conditions = SimulationConfig(latency_ms=0, jitter_ms=0, packet_loss=0)
        snap = Snapshot(tick=1, entity_positions=[(0.0, 0.0)])
        self.transport.send(snap, conditions)
        stats = self.transport.stats()
        self.assertEqual(stats['sent'], 1)
        self.assertEqual(stats['in_flight'], 1)
        self.assertEqual(stats['bytes_sent'], snap.serialized_size())
        self.assertEqual(stats['bytes_sent'],
                         len(self.transport.in_flight_messages[0].payload))

    def test_large_snapshot_delivered(self):
        conditions = SimulationConfig(latency_ms=0, jitter_ms=0, packet_loss=0)
        snap = Snapshot(tick=2 ** 40, entity_positions=[(0.5, 0.5)] * 70000)
        self.assertTrue(self.transport.send(snap, conditions))
        self.transport.advance(0.0)
        self.assertEqual(self.received, [snap])


if __name__ == '__main__':
    unittest.main()
