"""
Metrics logging for netcode analysis.
Logs clock offsets, tick duration, buffer depth, delivery delays and
pause/resume events per client.
"""

import json
import os


class MetricsLogger:
    """Collects and persists clock and network metrics."""

    def __init__(self, log_dir: str = 'analysis/logs'):
        self.log_dir = log_dir
        self.sim_time = 0.0     # Set by the frame driver each frame
        self.data = {
            'offset': [],
            'buffer_depth': [],
            'delivery': [],
            'clock_events': [],
            'transport': [],
        }

    def set_time(self, t: float):
        self.sim_time = t

    def _t(self) -> float:
        return round(self.sim_time, 4)

    def log_offset(self, client: int, offset: float, avg_offset: float,
                   tick_duration: float, base_tick_duration: float):
        """Log one clock offset sample and the correction it produced."""
        self.data['offset'].append({
            't': self._t(), 'client': client,
            'offset': round(offset, 4),
            'avg_offset': round(avg_offset, 4),
            'tick_duration': tick_duration,
            'base_tick_duration': base_tick_duration,
        })

    def log_buffer_depth(self, client: int, depth: int):
        self.data['buffer_depth'].append({
            't': self._t(), 'client': client, 'depth': depth
        })

    def log_delivery(self, client: int, delay: float):
        self.data['delivery'].append({
            't': self._t(), 'client': client,
            'delay_ms': round(delay * 1000.0, 3)
        })

    def log_clock_event(self, client: int, event: str, tick: int):
        self.data['clock_events'].append({
            't': self._t(), 'client': client, 'event': event, 'tick': tick
        })

    def log_transport(self, client: int, stats: dict):
        entry = {'t': self._t(), 'client': client}
        entry.update(stats)
        self.data['transport'].append(entry)

    def save(self, filename: str = 'metrics.json'):
        os.makedirs(self.log_dir, exist_ok=True)
        path = os.path.join(self.log_dir, filename)
        with open(path, 'w') as f:
            json.dump(self.data, f, indent=2)
        print(f"[METRICS] Saved to {path}")
        return path

    def get_summary(self) -> dict:
        """Compute summary statistics."""
        summary = {}
        offsets = [o['offset'] for o in self.data['offset']]
        if offsets:
            summary['offset_mean'] = sum(offsets) / len(offsets)
            summary['offset_min'] = min(offsets)
            summary['offset_max'] = max(offsets)

        durations = [o['tick_duration'] for o in self.data['offset']]
        if durations:
            summary['tick_duration_min'] = min(durations)
            summary['tick_duration_max'] = max(durations)

        delays = sorted(d['delay_ms'] for d in self.data['delivery'])
        if delays:
            summary['delay_mean_ms'] = sum(delays) / len(delays)
            summary['delay_p50_ms'] = delays[len(delays) // 2]
            summary['delay_p95_ms'] = delays[int(len(delays) * 0.95)]

        depths = [d['depth'] for d in self.data['buffer_depth']]
        if depths:
            summary['buffer_depth_mean'] = sum(depths) / len(depths)
            summary['buffer_depth_max'] = max(depths)

        events = self.data['clock_events']
        if events:
            summary['pauses'] = sum(1 for e in events if e['event'] == 'pause')
            summary['resumes'] = sum(1 for e in events if e['event'] == 'resume')

        return summary
