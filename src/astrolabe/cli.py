# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Command-line interface for system propagation and calendar display.

Usage:
    # Current date through the default (Gregorian) calendar
    astrolabe

    # Stardate, advanced one day and committed, saved for next time
    astrolabe --calendar star_trek_stardate --advance 86400 --commit \\
        --save-temporal time.json

    # Re-anchor the saved calendar so the display reads year 2400
    astrolabe --temporal time.json --set-year 2400 --save-temporal time.json

    # Resolve a system at t = 1e7 s and export positions
    astrolabe --system sol.json --time 10000000 --export-csv positions.csv
"""
import argparse
import logging
import os
import sys

from astrolabe.adapters.csv_exporter import CsvPositionExporter
from astrolabe.adapters.json_io import JsonSystemReader, JsonTemporalStore
from astrolabe.domain.constants import m_to_au
from astrolabe.domain.hierarchy import resolve_positions
from astrolabe.domain.temporal_state import (
    TemporalState,
    advance_display,
    apply_ratio_override,
    apply_year_override,
    commit_display,
    create_default_temporal_state,
    resolve_temporal_display,
    set_active_calendar,
)


def _configure_logging(verbose: bool = False) -> None:
    """Configure logging for CLI (stderr, level from --verbose or ASTROLABE_LOG)."""
    level = logging.DEBUG if verbose else logging.WARNING
    env_level = os.environ.get('ASTROLABE_LOG', '').upper()
    if env_level in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
        level = getattr(logging, env_level)
    logging.basicConfig(
        level=level,
        format='%(levelname)s: %(name)s: %(message)s',
        stream=sys.stderr,
    )


def run_temporal(args: argparse.Namespace) -> TemporalState:
    """Apply the temporal options in order and print the display string."""
    store = JsonTemporalStore()
    if args.temporal:
        state = store.load_temporal_state(args.temporal)
    else:
        state = create_default_temporal_state()

    if args.calendar:
        state = set_active_calendar(state, args.calendar)
    if args.advance:
        state = advance_display(state, args.advance)
    if args.set_year is not None:
        state, result = apply_year_override(state, args.set_year)
        if result.clamped:
            print("Note: year precedes the calendar origin; clamped to its first instant")
        if result.day_adjusted:
            print("Note: day does not exist in that year; moved to the end of the month")
    if args.set_value is not None:
        state, _ = apply_ratio_override(state, args.set_value)
    if args.commit:
        state = commit_display(state)

    print(resolve_temporal_display(state).formatted)

    if args.save_temporal:
        store.save_temporal_state(state, args.save_temporal)
        print(f"Saved temporal state to {args.save_temporal}")
    return state


def run_system(args: argparse.Namespace) -> int:
    """Resolve the system at --time, print positions, optionally export CSV."""
    nodes = JsonSystemReader().read_system(args.system)
    snapshot = resolve_positions(nodes, args.time)

    print(f"Positions at t={args.time} s (AU):")
    for node_id, (x, y, z) in snapshot.positions.items():
        flag = "  [warning]" if node_id in snapshot.warnings else ""
        print(f"  {node_id:<24} {m_to_au(x):>14.6f} {m_to_au(y):>14.6f} {m_to_au(z):>14.6f}{flag}")

    if args.export_csv:
        n = CsvPositionExporter().export(snapshot, args.export_csv)
        print(f"Exported {n} positions to {args.export_csv}")
    return len(snapshot.positions)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Propagate hierarchical orbital systems and render calendar time"
    )
    parser.add_argument(
        '--verbose', '-v', action='store_true', default=False,
        help="Debug logging (ASTROLABE_LOG overrides the level)"
    )

    system_group = parser.add_argument_group('system')
    system_group.add_argument('--system', help="Path to system graph JSON")
    system_group.add_argument(
        '--time', type=int, default=0,
        help="Query time in seconds on the orbits' clock (default: 0)"
    )
    system_group.add_argument(
        '--export-csv',
        help="Export resolved positions to CSV (requires --system)"
    )

    time_group = parser.add_argument_group('calendar')
    time_group.add_argument(
        '--temporal',
        help="Load temporal state JSON (default: builtin calendars at the current time)"
    )
    time_group.add_argument('--calendar', help="Switch the active calendar key")
    time_group.add_argument(
        '--advance', type=int, default=0,
        help="Move the display clock by this many seconds"
    )
    time_group.add_argument(
        '--set-year', type=int,
        help="Re-anchor the active calendar so the display shows this year"
    )
    time_group.add_argument(
        '--set-value', type=float,
        help="Re-anchor the active ratio calendar so the display shows this value"
    )
    time_group.add_argument(
        '--commit', action='store_true', default=False,
        help="Set the master clock to the display clock"
    )
    time_group.add_argument('--save-temporal', help="Write the resulting temporal state JSON")

    args = parser.parse_args(argv)
    _configure_logging(verbose=args.verbose)

    if args.export_csv and not args.system:
        parser.error("--export-csv requires --system")

    try:
        run_temporal(args)
        if args.system:
            run_system(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
