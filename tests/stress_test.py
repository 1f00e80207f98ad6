"""
Stress test: sweep network conditions and measure how often clients stall.
"""

import os
import time
import json

from common.config import SimulationConfig
from common.metrics_logger import MetricsLogger
from sim.driver import FrameDriver


def run_stress_test(packet_loss: float, jitter_ms: float,
                    duration: float = 30.0, num_clients: int = 4,
                    fps: float = 60.0, seed: int = 0) -> dict:
    """Run one headless session under the given conditions."""
    config = SimulationConfig(packet_loss=packet_loss, jitter_ms=jitter_ms)
    metrics = MetricsLogger()
    driver = FrameDriver(config, num_clients=num_clients, seed=seed,
                         metrics=metrics)

    paused_frames = 0
    frame_dt = 1.0 / fps
    start = time.perf_counter()
    for i in range(int(duration * fps) + 1):
        view = driver.frame(i * frame_dt)
        paused_frames += sum(1 for c in view['clients'] if c['paused'])
    elapsed = time.perf_counter() - start

    summary = metrics.get_summary()
    total_frames = driver.frames * num_clients
    return {
        'packet_loss': packet_loss,
        'jitter_ms': jitter_ms,
        'server_ticks': driver.server.tick,
        'paused_fraction': round(paused_frames / total_frames, 4),
        'pauses': sum(c.clock.pause_count for c in driver.clients),
        'stale_dropped': sum(c.stale_dropped for c in driver.clients),
        'buffer_depth_mean': round(summary.get('buffer_depth_mean', 0.0), 2),
        'buffer_depth_max': summary.get('buffer_depth_max', 0),
        'min_tick_duration_ms': round(summary.get('tick_duration_min', 0.0) * 1000, 3),
        'wall_time_s': round(elapsed, 3),
    }


def main():
    """Run the sweep and print a summary table."""
    import argparse
    parser = argparse.ArgumentParser(description='Stress test')
    parser.add_argument('--duration', type=float, default=30.0,
                        help='Simulated seconds per run')
    parser.add_argument('--clients', type=int, default=4,
                        help='Clients per run')
    args = parser.parse_args()

    LOSSES = [0.0, 0.1, 0.3, 0.5]
    JITTERS = [0.0, 10.0, 25.0]

    print("=" * 78)
    print("  Stress Test: Snapshot Interpolation")
    print(f"  Duration: {args.duration}s simulated | Clients: {args.clients}")
    print("=" * 78)

    results = []
    for loss in LOSSES:
        for jitter in JITTERS:
            result = run_stress_test(loss, jitter, duration=args.duration,
                                     num_clients=args.clients)
            results.append(result)
            print(f"  loss={loss:<5} jitter={jitter:<6} "
                  f"paused={result['paused_fraction']:<8} "
                  f"stale={result['stale_dropped']}")

    output_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
                               'analysis', 'logs', 'stress_test_results.json')
    os.makedirs(os.path.dirname(output_path), exist_ok=True)
    with open(output_path, 'w') as f:
        json.dump(results, f, indent=2)
    print(f"\n[STRESS] Results saved to {output_path}")

    print("\n" + "=" * 78)
    print(f"{'Loss':<8} {'Jitter':<8} {'Paused':<10} {'Pauses':<8} "
          f"{'Stale':<8} {'Buf avg':<9} {'Buf max':<9} {'Min tick ms':<12}")
    print("-" * 78)
    for r in results:
        print(f"{r['packet_loss']:<8} {r['jitter_ms']:<8} "
              f"{r['paused_fraction']:<10} {r['pauses']:<8} "
              f"{r['stale_dropped']:<8} {r['buffer_depth_mean']:<9} "
              f"{r['buffer_depth_max']:<9} {r['min_tick_duration_ms']:<12}")
    print("=" * 78)


if __name__ == '__main__':
    main()
