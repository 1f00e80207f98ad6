"""
Analysis and visualization of clock and network metrics.
Generates plots for clock offset, tick duration, buffer depth and delivery delay.
"""

import json
import os

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np

from common.config import MAX_SPEEDUP


def load_metrics(filepath: str) -> dict:
    """Load a metrics JSON file."""
    with open(filepath) as f:
        return json.load(f)


def _by_client(entries: list) -> dict:
    grouped = {}
    for entry in entries:
        grouped.setdefault(entry['client'], []).append(entry)
    return grouped


def plot_clock_analysis(data: dict, output_dir: str = 'analysis'):
    """Plot offset samples, window mean and the resulting tick duration."""
    offsets = data.get('offset', [])
    if not offsets:
        print("[ANALYSIS] No clock offset data.")
        return None

    os.makedirs(output_dir, exist_ok=True)
    fig, axes = plt.subplots(2, 1, figsize=(12, 8), sharex=True)
    fig.suptitle('Client Clock Drift Correction', fontsize=14, fontweight='bold')

    # ── 1. Offset ──
    ax = axes[0]
    for client, entries in sorted(_by_client(offsets).items()):
        times = [e['t'] for e in entries]
        ax.plot(times, [e['offset'] for e in entries], linewidth=0.5,
                alpha=0.4, label=f'Client {client} sample')
        ax.plot(times, [e['avg_offset'] for e in entries], linewidth=1.5,
                label=f'Client {client} mean')
    ax.axhline(y=0.0, color='black', linewidth=0.8)
    ax.set_title('Clock Offset')
    ax.set_ylabel('Offset (ticks)')
    ax.legend(fontsize=8)
    ax.grid(True, alpha=0.3)

    # ── 2. Tick duration ──
    ax = axes[1]
    for client, entries in sorted(_by_client(offsets).items()):
        times = [e['t'] for e in entries]
        durations = np.array([e['tick_duration'] for e in entries]) * 1000.0
        floor = np.array([e['base_tick_duration'] for e in entries]) \
            * MAX_SPEEDUP * 1000.0
        ax.plot(times, durations, linewidth=1.0, label=f'Client {client}')
        ax.plot(times, floor, color='red', linestyle='--', linewidth=0.8)
    for event in data.get('clock_events', []):
        ax.axvline(x=event['t'], color='red' if event['event'] == 'pause'
                   else 'green', linewidth=0.5, alpha=0.5)
    ax.set_title('Tick Duration')
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Duration (ms)')
    ax.legend(fontsize=8)
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    path = os.path.join(output_dir, 'clock_analysis.png')
    plt.savefig(path, dpi=150)
    print(f"[ANALYSIS] Saved: {path}")
    plt.close(fig)
    return path


def plot_buffer_analysis(data: dict, output_dir: str = 'analysis'):
    """Plot buffer depth over time and the delivery delay distribution."""
    depths = data.get('buffer_depth', [])
    deliveries = data.get('delivery', [])
    if not depths and not deliveries:
        return None

    os.makedirs(output_dir, exist_ok=True)
    fig, axes = plt.subplots(1, 2, figsize=(14, 5))
    fig.suptitle('Snapshot Buffer', fontsize=13)

    ax = axes[0]
    for client, entries in sorted(_by_client(depths).items()):
        ax.step([e['t'] for e in entries], [e['depth'] for e in entries],
                where='post', linewidth=0.8, label=f'Client {client}')
    ax.set_title('Buffer Depth')
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Snapshots')
    if depths:
        ax.legend(fontsize=8)
    ax.grid(True, alpha=0.3)

    ax = axes[1]
    if deliveries:
        arr = np.array([d['delay_ms'] for d in deliveries])
        ax.hist(arr, bins=40, edgecolor='black', alpha=0.7, color='#4CAF50')
        stats_text = (f'Mean: {np.mean(arr):.1f} ms\n'
                      f'Std:  {np.std(arr):.1f} ms\n'
                      f'P95:  {np.percentile(arr, 95):.1f} ms')
        ax.text(0.95, 0.95, stats_text, transform=ax.transAxes,
                verticalalignment='top', horizontalalignment='right',
                fontsize=9, family='monospace',
                bbox=dict(boxstyle='round', facecolor='wheat', alpha=0.8))
    ax.set_title('Delivery Delay')
    ax.set_xlabel('Delay (ms)')
    ax.set_ylabel('Frequency')
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    path = os.path.join(output_dir, 'buffer_analysis.png')
    plt.savefig(path, dpi=150)
    print(f"[ANALYSIS] Saved: {path}")
    plt.close(fig)
    return path


def summarize(data: dict) -> dict:
    """Numeric summary of a metrics file."""
    summary = {}
    offsets = [o['offset'] for o in data.get('offset', [])]
    if offsets:
        arr = np.array(offsets)
        summary['offset_mean'] = float(np.mean(arr))
        summary['offset_std'] = float(np.std(arr))

    delays = [d['delay_ms'] for d in data.get('delivery', [])]
    if delays:
        summary['delay_mean_ms'] = float(np.mean(delays))
        summary['delay_p95_ms'] = float(np.percentile(delays, 95))

    depths = [d['depth'] for d in data.get('buffer_depth', [])]
    if depths:
        summary['buffer_depth_mean'] = float(np.mean(depths))
        summary['buffer_depth_max'] = int(np.max(depths))

    events = data.get('clock_events', [])
    summary['pauses'] = sum(1 for e in events if e['event'] == 'pause')
    return summary


def analyze_all(filepath: str, output_dir: str = 'analysis'):
    """Run all analysis on a metrics file."""
    print(f"[ANALYSIS] Loading {filepath}...")
    data = load_metrics(filepath)

    plot_clock_analysis(data, output_dir)
    plot_buffer_analysis(data, output_dir)

    print("\n=== Metrics Summary ===")
    for key, value in summarize(data).items():
        print(f"  {key}: {value:.3f}" if isinstance(value, float)
              else f"  {key}: {value}")


if __name__ == '__main__':
    import argparse
    parser = argparse.ArgumentParser(description='Analyze netcode metrics')
    parser.add_argument('file', help='Metrics JSON file to analyze')
    parser.add_argument('--output', default='analysis', help='Output directory')
    args = parser.parse_args()
    analyze_all(args.file, args.output)
