"""
Demo entry point: runs the server and clients in one process, either in a
pygame window at wall-clock speed or headless on simulated time.
"""

import time

from common.config import (
    SimulationConfig, ConfigError,
    DEFAULT_TICK_RATE, DEFAULT_LATENCY_MS, DEFAULT_JITTER_MS,
    DEFAULT_PACKET_LOSS, INTERPOLATION_TICKS,
    DEFAULT_NUM_CLIENTS, DEFAULT_NUM_ENTITIES, DEFAULT_FPS
)
from common.metrics_logger import MetricsLogger
from sim.driver import FrameDriver


def run_windowed(driver: FrameDriver, duration: float):
    """Run at wall-clock speed until the window closes or duration elapses."""
    from client.renderer import GameRenderer

    renderer = GameRenderer(len(driver.clients))
    driver.sink = renderer
    start = time.perf_counter()
    try:
        while not renderer.check_quit():
            now = time.perf_counter()
            if duration > 0 and now - start >= duration:
                break
            driver.frame(now)
    except KeyboardInterrupt:
        print("\n[SIM] Interrupted")
    finally:
        renderer.close()


def main():
    import argparse
    parser = argparse.ArgumentParser(description='Snapshot interpolation demo')
    parser.add_argument('--tick-rate', type=float, default=DEFAULT_TICK_RATE,
                        help='Server tick rate (Hz)')
    parser.add_argument('--latency', type=float, default=DEFAULT_LATENCY_MS,
                        help='Simulated round-trip latency (ms)')
    parser.add_argument('--jitter', type=float, default=DEFAULT_JITTER_MS,
                        help='Simulated jitter (+/- ms)')
    parser.add_argument('--loss', type=float, default=DEFAULT_PACKET_LOSS,
                        help='Simulated packet loss rate (0.0-1.0)')
    parser.add_argument('--interp-delay', type=float, default=INTERPOLATION_TICKS,
                        help='Interpolation delay (ticks)')
    parser.add_argument('--clients', type=int, default=DEFAULT_NUM_CLIENTS,
                        help='Number of simulated clients')
    parser.add_argument('--entities', type=int, default=DEFAULT_NUM_ENTITIES,
                        help='Number of simulated entities')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for reproducible runs')
    parser.add_argument('--duration', type=float, default=0.0,
                        help='Run time in seconds (0 = until closed; '
                             'headless defaults to 10)')
    parser.add_argument('--fps', type=float, default=DEFAULT_FPS,
                        help='Headless frame rate')
    parser.add_argument('--headless', action='store_true',
                        help='Run without pygame on simulated time')
    parser.add_argument('--metrics', default=None,
                        help='Save metrics to analysis/logs/<name>.json')
    parser.add_argument('--verbose', action='store_true')
    args = parser.parse_args()

    try:
        config = SimulationConfig(
            tick_rate_hz=args.tick_rate, latency_ms=args.latency,
            jitter_ms=args.jitter, packet_loss=args.loss,
            interpolation_delay_ticks=args.interp_delay
        )
    except ConfigError as e:
        parser.error(str(e))

    metrics = MetricsLogger() if args.metrics else None
    driver = FrameDriver(config, num_clients=args.clients,
                         num_entities=args.entities, seed=args.seed,
                         metrics=metrics, verbose=args.verbose)

    if args.headless:
        driver.run_for(args.duration or 10.0, args.fps)
    else:
        run_windowed(driver, args.duration)

    for client in driver.clients:
        print(f"[SIM] Client {client.index}: {client.stats()}")

    if metrics:
        metrics.save(f'{args.metrics}.json')
        summary = metrics.get_summary()
        if summary:
            print(f"[SIM] Metrics summary: {summary}")


if __name__ == '__main__':
    main()
