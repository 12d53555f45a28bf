import argparse
import json
import sys
from pathlib import Path

import matplotlib

matplotlib.use("Agg")
from matplotlib import pyplot as plt

parser = argparse.ArgumentParser(description="Summarise the newest daily telemetry file")
parser.add_argument("--log-dir", default="logs/telemetry", help="Directory holding daily_*.jsonl files")
parser.add_argument("--plot", type=str, help="Write population/food/tech curves to this image path")
options = parser.parse_args()

# Find latest daily log
log_dir = Path(options.log_dir)
daily_logs = sorted(log_dir.glob("daily_*.jsonl"))

if not daily_logs:
    sys.stdout.write("No daily logs found\n")
    sys.exit(0)

latest_log = daily_logs[-1]
sys.stdout.write(f"Analyzing: {latest_log.name}\n")
sys.stdout.write("=" * 80 + "\n\n")

samples = []
skipped = 0
with open(latest_log, "r", encoding="utf-8") as f:
    for line in f:
        line = line.strip()
        if not line:
            continue
        try:
            samples.append(json.loads(line))
        except json.JSONDecodeError:
            skipped += 1

if not samples:
    sys.stdout.write("No valid samples found\n")
    sys.exit(0)

first, last = samples[0], samples[-1]
sys.stdout.write(f"TOTAL SAMPLES: {len(samples)} (skipped {skipped})\n")
sys.stdout.write(f"Day range: {first['day']} to {last['day']}\n\n")

rows = [
    ("population", "Population"),
    ("housing_capacity", "Beds"),
    ("food_stock_rations", "Food stock"),
    ("greenhouse_count", "Greenhouses"),
    ("school_count", "Schools"),
    ("technology_level", "Tech level"),
    ("explored_radius_km", "Explored km"),
]
sys.stdout.write(f"{'METRIC':15s} {'START':>10s} {'END':>10s} {'CHANGE':>10s}\n")
for key, label in rows:
    start, end = float(first[key]), float(last[key])
    sys.stdout.write(f"{label:15s} {start:10.2f} {end:10.2f} {end - start:+10.2f}\n")

starving = [s["day"] for s in samples if s["food_stock_rations"] == 0]
sys.stdout.write(f"\nDays with an empty pantry: {len(starving)}\n")
if starving:
    sys.stdout.write(f"  first: {starving[0]}, last: {starving[-1]}\n")

building_days = sum(1 for s in samples if s["active_build"])
sys.stdout.write(f"Days with construction underway: {building_days} ({building_days / len(samples) * 100:.1f}%)\n")

sleep_total = sum(s["sleep_science"] for s in samples)
daylight_total = sum(s["daylight_science"] for s in samples)
sys.stdout.write(f"Science from sleep: {sleep_total:.2f}, from daylight: {daylight_total:.2f}\n")

if options.plot:
    days = [s["day"] for s in samples]
    figure, axes = plt.subplots(3, 1, figsize=(8, 9), sharex=True)
    axes[0].plot(days, [s["population"] for s in samples], label="Population")
    axes[0].plot(days, [s["housing_capacity"] for s in samples], label="Beds", linestyle="--")
    axes[0].legend()
    axes[1].plot(days, [s["food_stock_rations"] for s in samples], color="tab:green")
    axes[1].set_ylabel("Food stock")
    axes[2].plot(days, [s["technology_level"] for s in samples], color="tab:purple")
    axes[2].set_ylabel("Tech level")
    axes[2].set_xlabel("Day")
    figure.tight_layout()
    figure.savefig(options.plot)
    sys.stdout.write(f"\nWrote {options.plot}\n")
