#!/usr/bin/env python3
"""Profile backward scanning for snakeviz analysis."""

import cProfile
import pstats
import sys
from pathlib import Path

from tailog.scanner import WINDOW_SIZE, tail_lines


def profile_scan(log_path: str, count: int, output_file: str = "logs/profile.stats"):
    """Profile finding the last lines of a log file."""

    # Ensure output directory exists
    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    print(f"Profiling scan of last {count:,} lines of {log_path}")
    print(f"Output will be saved to {output_file}")
    print("Running profiler...")

    profiler = cProfile.Profile()
    profiler.enable()

    # This is what we're profiling
    lines = tail_lines(log_path, count, WINDOW_SIZE)

    profiler.disable()
    print(f"Found {len(lines):,} lines")

    # Save stats
    profiler.dump_stats(output_file)

    # Print summary
    print(f"\nProfile saved to {output_file}")
    print("To view with snakeviz:")
    print(f"  snakeviz {output_file}")
    print("\nTop 20 functions by cumulative time:")
    stats = pstats.Stats(output_file)
    stats.sort_stats("cumulative")
    stats.print_stats(20)

    print("\n\nScanner functions:")
    stats.print_stats("scanner")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python profile_scan.py <log_file> [lines] [output.stats]")
        print("Example: python profile_scan.py logs/app.log 10000 profile.stats")
        sys.exit(1)

    count = int(sys.argv[2]) if len(sys.argv) > 2 else 10
    output = sys.argv[3] if len(sys.argv) > 3 else "logs/profile.stats"
    profile_scan(sys.argv[1], count, output)
