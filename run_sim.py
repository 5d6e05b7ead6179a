import argparse
import dataclasses
import logging
import sys
import time

from tracksim.core.config import TrackerConfig
from tracksim.simulation import simulate_year

# CLI flag -> TrackerConfig field
OVERRIDES = {
    "latitude": "latitude",
    "longitude": "longitude",
    "chord": "panel_chord",
    "length": "tracker_length",
    "pitch": "row_spacing",
    "hub_height": "hub_height",
    "max_rotation": "max_rotation",
    "rows": "number_of_rows",
    "start": "start_time",
    "end": "end_time",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Annual inter-row shading of single-axis trackers")
    parser.add_argument("--config", default=None, help="JSON file with tracker parameters.")
    parser.add_argument("--latitude", type=float)
    parser.add_argument("--longitude", type=float)
    parser.add_argument("--chord", type=float, help="Panel chord (m).")
    parser.add_argument("--length", type=float, help="Tracker length (m).")
    parser.add_argument("--pitch", type=float, help="Row spacing (m).")
    parser.add_argument("--hub_height", type=float, help="Axis height (m).")
    parser.add_argument("--max_rotation", type=float, help="Rotation limit (deg).")
    parser.add_argument("--rows", type=int, help="Number of rows.")
    parser.add_argument("--start", type=int, help="First sampled hour.")
    parser.add_argument("--end", type=int, help="Sampling stops before this hour.")
    parser.add_argument("--backtracking", action=argparse.BooleanOptionalAction, default=None)
    parser.add_argument("--reference-check", action="store_true",
                        help="Also compare the solar model with pvlib at this latitude.")
    parser.add_argument("--verbose", action="store_true", help="Debug logging.")
    return parser


def config_from_args(args: argparse.Namespace) -> TrackerConfig:
    cfg = TrackerConfig.load(args.config) if args.config else TrackerConfig()
    changes = {field: getattr(args, flag) for flag, field in OVERRIDES.items()
               if getattr(args, flag) is not None}
    if args.backtracking is not None:
        changes["backtracking"] = args.backtracking
    return dataclasses.replace(cfg, **changes)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    try:
        cfg = config_from_args(args)
        cfg.validate()
    except FileNotFoundError as e:
        print(f"Config file not found: {e.filename}", file=sys.stderr)
        return 2
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 2

    print(f"GCR {cfg.gcr:.2f}, {cfg.number_of_rows} rows, backtracking={cfg.backtracking}")

    start = time.time()
    result = simulate_year(cfg)
    end = time.time()

    print(f"\nSimulation Complete in {end-start:.2f}s")
    print(f"Shading Loss: {result.shading_loss_percent:.3f} %")
    print(f"Total ASWA:   {result.total_aswa:.1f}")
    print(f"Daylight samples: {result.daylight_samples}")
    g = result.ground_heatmap
    print(f"Ground grid: {g.width} x {g.height} cells @ {g.resolution} m, peak {g.grid.max():.3f}")
    print("\nMonthly:")
    print(result.monthly_frame().to_string(index=False))

    if args.reference_check:
        from tracksim.analysis.reference_check import compare_with_pvlib, summarize
        stats = summarize(compare_with_pvlib(cfg.latitude))
        print("\nSolar model vs pvlib:")
        for k, v in stats.items():
            print(f"  {k}: {v:.3f}" if isinstance(v, float) else f"  {k}: {v}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
