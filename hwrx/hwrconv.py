#!/usr/bin/env python3
"""
HwrX — Humminbird Converter
================================
Read, inspect and rewrite Humminbird fishfinder files.

Usage:
    hwrconv waypoints.hwr --info                  # Show file info only
    hwrconv waypoints.hwr copy.hwr                # Rewrite waypoints and routes
    hwrconv track.ht track_old.ht --old-track-format
    hwrconv --formats                             # List all formats
"""

from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path

from .models import ArrayType
from .formats import (
    FORMAT_REGISTRY, read_file, write_file,
    supported_input_formats, supported_output_formats,
    get_format, SOFT_FULL_NAME,
)
from .logger import setup_logger


def format_distance(meters: float) -> str:
    """Format distance in human-readable form."""
    if meters >= 1000:
        return f"{meters / 1000:.2f} km"
    return f"{meters:.0f} m"


def show_info(arrays, filepath: str = ""):
    """Display information about GPS data."""
    if filepath:
        print(f"\nFile: {filepath}")
        ext = Path(filepath).suffix.lower().lstrip(".")
        fmt = get_format(ext)
        if fmt:
            print(f"   Format: {fmt.name} (.{fmt.extension})")

    type_names = {
        ArrayType.ROUTE: "Route",
        ArrayType.TRACK: "Track",
        ArrayType.WAYPOINT: "Waypoints",
    }
    for i, arr in enumerate(arrays):
        type_name = type_names.get(arr.array_type, "Unknown")
        name = arr.name or "(unnamed)"
        print(f"\n   [{i+1}] {type_name}: {name}")
        print(f"       Points: {len(arr)}")

        if arr:
            dist = arr.total_distance()
            print(f"       Distance: {format_distance(dist)}")
            min_lat, min_lng, max_lat, max_lng = arr.bounds()
            print(f"       Bounds: ({min_lat:.6f}, {min_lng:.6f}) -> ({max_lat:.6f}, {max_lng:.6f})")

            first = arr[0]
            last = arr[-1]
            print(f"       Start: {first.lat:.6f}, {first.lng:.6f}  {first.name}")
            if len(arr) > 1:
                print(f"       End:   {last.lat:.6f}, {last.lng:.6f}  {last.name}")


def list_formats():
    """Display all supported formats."""
    print(f"\n{SOFT_FULL_NAME}")
    print("=" * 55)
    print(f"{'Extension':<12} {'Format Name':<32} {'R':>3} {'W':>3}")
    print("-" * 55)
    for fmt in sorted(FORMAT_REGISTRY, key=lambda f: f.extension):
        r = "y" if fmt.reader else "-"
        w = "y" if fmt.writer else "-"
        print(f"  .{fmt.extension:<10} {fmt.name:<32} {r:>3} {w:>3}")
    print("-" * 55)
    print(f"  Readable: {len(supported_input_formats())}, Writable: {len(supported_output_formats())}\n")


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="hwrconv",
        description=f"{SOFT_FULL_NAME} — Humminbird Converter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --info spots.hwr                Show file information
  %(prog)s spots.hwr copy.hwr              Rewrite waypoints and routes
  %(prog)s new.ht old.ht --old-track-format
  %(prog)s --formats                       List all supported formats
        """)

    parser.add_argument("input", nargs="?", help="Input Humminbird file")
    parser.add_argument("outputs", nargs="*", help="Output file(s)")
    parser.add_argument("--formats", action="store_true", help="List supported formats")
    parser.add_argument("--info", action="store_true", help="Show file info")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("--name", type=str, help="Rename every route and track")
    parser.add_argument("--log-file", type=str, help="Also write log messages to this file")

    hum_group = parser.add_argument_group("Humminbird options")
    hum_group.add_argument("--old-track-format", action="store_true",
                           help="Write tracks in the old 8048-byte layout")
    hum_group.add_argument("--synthesize-shortnames", action="store_true",
                           help="Build waypoint names from their descriptions")

    args = parser.parse_args(argv)
    setup_logger("hwrx", logging.DEBUG if args.verbose else logging.INFO, log_file=args.log_file)

    if args.formats:
        list_formats()
        return 0

    if not args.input:
        parser.print_help()
        return 1

    opts = {
        "old_format": args.old_track_format,
        "synthesize_shortnames": args.synthesize_shortnames,
    }

    try:
        arrays = read_file(args.input, **opts)
    except Exception as e:
        print(f"Error reading {args.input}: {e}", file=sys.stderr)
        return 1

    if not arrays:
        print(f"No GPS data found in {args.input}", file=sys.stderr)
        return 1

    total_points = sum(len(a) for a in arrays)
    if args.verbose or args.info:
        show_info(arrays, args.input)

    if not args.outputs:
        if not args.info:
            print(f"Read {total_points} points from {args.input}")
            print("   (specify output file(s) to convert, or use --info for details)")
        return 0

    if args.name:
        for arr in arrays:
            if arr.array_type != ArrayType.WAYPOINT:
                arr.name = args.name

    for output_path in args.outputs:
        try:
            write_file(output_path, arrays, **opts)
            ext = Path(output_path).suffix.lower().lstrip(".")
            fmt = get_format(ext)
            fmt_name = fmt.name if fmt else ext.upper()
            print(f"Converted -> {output_path} ({fmt_name})")
        except Exception as e:
            print(f"Error writing {output_path}: {e}", file=sys.stderr)
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
