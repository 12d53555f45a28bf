"""Entry point for the Planet Lira colony simulation."""

import sys

from lira.config import settings
from lira.simulation.loop import run
from lira.systems.stats import collect_colony_stats

JOURNAL_TAIL = 15


def _print_summary(state) -> None:
    stats = collect_colony_stats(state)
    sys.stdout.write(f"Day {stats['day']}: {stats['population']} Liri, {stats['housing_capacity']} beds\n")
    sys.stdout.write(
        f"  food {stats['food_stock']:.1f} rations ({stats['buffer_days']:.1f} days), "
        f"{stats['greenhouses']} greenhouses, {stats['schools']} schools\n"
    )
    sys.stdout.write(
        f"  tech {stats['technology_level']:.1f}, explored {stats['explored_km']:.2f} km, "
        f"build points {stats['build_points']:.1f}\n"
    )
    if stats["active_build"]:
        sys.stdout.write(f"  building {stats['active_build']} ({stats['active_build_percent']}%)\n")
    if stats["queue"]:
        sys.stdout.write(f"  queued: {', '.join(stats['queue'])}\n")
    sys.stdout.write("\n")
    for line in state.event_log[-JOURNAL_TAIL:]:
        sys.stdout.write(f"{line}\n")


if __name__ == "__main__":
    runtime_settings = settings.load_runtime_settings(sys.argv[1:])
    settings.apply_runtime_settings(runtime_settings)
    _print_summary(run(runtime_settings))
