"""Command line interface for theatre seating."""
from __future__ import annotations

import argparse
import csv
import logging
import sys
from pathlib import Path
from typing import List, Sequence

import yaml

from .csv_loader import load_all, load_tables, party_lookup
from .exceptions import SeatingError
from .groups import build_guest_groups
from .models import SeatingStrategy
from .plan_map import render_plan_map
from .planner import allocation_stats, plan_seating_strategies
from .topology import default_theatre_layout, load_layout

logger = logging.getLogger(__name__)

ARRANGEMENT_FIELDS = [
    "strategy", "guest", "guests", "tables", "extra_chairs", "efficiency", "rating", "reason",
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Theatre table allocation")
    parser.add_argument("--checkins", required=True, type=Path, help="Path to checkins.csv")
    parser.add_argument("--parties", type=Path, help="Path to parties.csv")
    parser.add_argument("--layout", type=Path,
                        help="Venue layout YAML (tables and adjacency). Defaults to the bundled theatre.")
    parser.add_argument("--tables", type=Path,
                        help="Table inventory CSV; replaces the layout's tables, keeping its adjacency.")
    parser.add_argument("--occupied", type=int, nargs="*", default=[],
                        help="Table ids already in use.")
    parser.add_argument("--show", help="Only plan guests and tables for this show time.")
    parser.add_argument("--out-arrangements", type=Path,
                        help="Write the top strategy's arrangements CSV.")
    parser.add_argument("--out-map", type=Path,
                        help="Write an HTML venue map of the top strategy.")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging verbosity (default: WARNING).")
    return parser


def format_strategy(rank: int, strategy: SeatingStrategy) -> List[str]:
    lines = [
        f"[{rank}] {strategy.name}: {strategy.overall_efficiency.value} "
        f"(mean {strategy.mean_efficiency:.1f}%)",
        f"    {strategy.description}",
    ]
    for a in strategy.arrangements:
        tables = "+".join(str(t) for t in a.table_ids)
        chairs = f" +{a.extra_chairs} chair(s)" if a.extra_chairs else ""
        lines.append(
            f"    {a.guest_group.name} ({a.guest_group.size}) -> table {tables}"
            f" {a.efficiency}%{chairs} [{a.rating.value}] {a.reason}"
        )
    for g in strategy.unplaced:
        lines.append(f"    {g.name} ({g.size}) -> needs manual seating")
    return lines


def write_arrangements(path: Path, strategy: SeatingStrategy) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="") as f:
        w = csv.DictWriter(f, fieldnames=ARRANGEMENT_FIELDS)
        w.writeheader()
        for a in strategy.arrangements:
            w.writerow({
                "strategy": strategy.name,
                "guest": a.guest_group.name,
                "guests": a.guest_group.size,
                "tables": "|".join(str(t) for t in a.table_ids),
                "extra_chairs": a.extra_chairs,
                "efficiency": a.efficiency,
                "rating": a.rating.value,
                "reason": a.reason,
            })


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point used by ``python -m theatre_seating.cli``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    try:
        records, parties = load_all(args.checkins, args.parties)
        layout = load_layout(args.layout) if args.layout else default_theatre_layout()
        if args.tables:
            layout = layout.with_tables(load_tables(args.tables))
        if args.occupied:
            layout = layout.with_occupancy(args.occupied)
        if args.show:
            records = [r for r in records if r.show_time == args.show]
            layout = layout.with_tables([t for t in layout.tables if t.serves(args.show)])
        groups = build_guest_groups(records, party_lookup(parties))
        strategies = plan_seating_strategies(groups, layout)
    except (SeatingError, OSError, ValueError, KeyError, yaml.YAMLError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    stats = allocation_stats(layout)
    print(f"{layout.name or 'Venue'}: {len(layout)} tables, {stats.total_capacity} seats, "
          f"{stats.utilisation}% in use; {len(groups)} group(s) waiting")
    for tip in stats.tips:
        print(f"  tip: {tip}")

    for rank, strategy in enumerate(strategies, start=1):
        print()
        print("\n".join(format_strategy(rank, strategy)))

    if strategies:
        top = strategies[0]
        if args.out_arrangements:
            write_arrangements(args.out_arrangements, top)
            logger.info("Wrote %d arrangement(s) to %s", len(top.arrangements), args.out_arrangements)
        if args.out_map:
            args.out_map.parent.mkdir(parents=True, exist_ok=True)
            args.out_map.write_text(render_plan_map(layout, top), encoding="utf-8")
            logger.info("Wrote venue map to %s", args.out_map)
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
