"""
Tests for metrics collection and the offline analysis helpers.
"""

import os
import tempfile
import unittest

from common.config import SimulationConfig
from common.metrics_logger import MetricsLogger
from sim.driver import FrameDriver
from analysis.plot_results import (
    load_metrics, summarize, plot_clock_analysis, plot_buffer_analysis
)


class TestMetricsLogger(unittest.TestCase):

    def test_summary(self):
        metrics = MetricsLogger()
        metrics.set_time(1.0)
        metrics.log_offset(0, 0.5, 0.5, 0.049, 0.05)
        metrics.log_offset(0, -0.5, 0.0, 0.05, 0.05)
        metrics.log_delivery(0, 0.03)
        metrics.log_buffer_depth(0, 4)
        metrics.log_clock_event(0, 'pause', 10)
        summary = metrics.get_summary()
        self.assertEqual(summary['offset_mean'], 0.0)
        self.assertEqual(summary['tick_duration_min'], 0.049)
        self.assertEqual(summary['delay_mean_ms'], 30.0)
        self.assertEqual(summary['buffer_depth_max'], 4)
        self.assertEqual(summary['pauses'], 1)
        self.assertEqual(summary['resumes'], 0)

    def test_empty_summary(self):
        self.assertEqual(MetricsLogger().get_summary(), {})

    def test_save_and_load(self):
        with tempfile.TemporaryDirectory() as tmp:
            metrics = MetricsLogger(log_dir=os.path.join(tmp, 'logs'))
            metrics.log_clock_event(1, 'resume', 3)
            path = metrics.save('run.json')
            data = load_metrics(path)
        self.assertEqual(data['clock_events'][0]['event'], 'resume')


class TestAnalysis(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        metrics = MetricsLogger()
        driver = FrameDriver(SimulationConfig(), num_clients=2, seed=10,
                             metrics=metrics)
        driver.run_for(5.0, fps=60)
        cls.data = metrics.data

    def test_summarize(self):
        summary = summarize(self.data)
        self.assertIn('offset_mean', summary)
        self.assertGreater(summary['delay_mean_ms'], 0.0)
        self.assertGreaterEqual(summary['pauses'], 2)

    def test_plots_written(self):
        with tempfile.TemporaryDirectory() as tmp:
            clock_path = plot_clock_analysis(self.data, tmp)
            buffer_path = plot_buffer_analysis(self.data, tmp)
            self.assertTrue(os.path.exists(clock_path))
            self.assertTrue(os.path.exists(buffer_path))

    def test_plots_skip_missing_data(self):
        with tempfile.TemporaryDirectory() as tmp:
            self.assertIsNone(plot_clock_analysis({}, tmp))
            self.assertIsNone(plot_buffer_analysis({}, tmp))


if __name__ == '__main__':
    unittest.main()
