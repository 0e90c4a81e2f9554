from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import UTC, datetime

from photos_heatmap.config import (
    DATABASE_PATH_ENV,
    DEFAULT_FORMAT,
    DEFAULT_OUTPUT,
    DEFAULT_TEST_OUTPUT,
)
from photos_heatmap.errors import PhotosHeatmapError
from photos_heatmap.extractor import LocationExtractor
from photos_heatmap.library import default_library_path, explore_library, find_photos_database
from photos_heatmap.map import generate_heatmap
from photos_heatmap.models import LocationRecord


SAMPLE_POINTS = [
    (35.6762, 139.6503, "2024-01-15"),  # Tokyo Station
    (35.6586, 139.7454, "2024-02-10"),  # Tokyo Skytree
    (35.6595, 139.7006, "2024-03-05"),  # Imperial Palace
    (35.6684, 139.7647, "2024-04-12"),  # Asakusa
    (35.6598, 139.7030, "2024-05-20"),  # Ginza
    (35.6938, 139.7035, "2024-06-01"),  # Ueno
]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="photos-heatmap",
        description="Create heatmaps from Photos.app location data.",
    )
    parser.add_argument(
        "--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"]
    )
    parser.add_argument("--library", default=None, help="Photos library directory")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("explore", help="Explore Photos.app library structure")

    test = commands.add_parser("test", help="Generate test heatmap with sample data")
    test.add_argument("-o", "--output", default=DEFAULT_TEST_OUTPUT)

    generate = commands.add_parser("generate", help="Generate heatmap from Photos.app location data")
    generate.add_argument("-o", "--output", default=DEFAULT_OUTPUT)
    generate.add_argument("-f", "--format", default=DEFAULT_FORMAT, help="Output format (html)")
    generate.add_argument(
        "--photos-db",
        default=os.environ.get(DATABASE_PATH_ENV),
        help="Custom Photos database path",
    )
    return parser.parse_args(argv)


def sample_locations() -> list[LocationRecord]:
    return [
        LocationRecord(
            latitude=lat,
            longitude=lng,
            timestamp=datetime.fromisoformat(day).replace(tzinfo=UTC),
        )
        for lat, lng, day in SAMPLE_POINTS
    ]


def run_explore(args: argparse.Namespace) -> int:
    library_path = args.library or default_library_path()
    print(f"Photos Library path: {library_path}")
    try:
        for line in explore_library(library_path):
            print(line)
    except PhotosHeatmapError as exc:
        print(f"Error: {exc}", file=sys.stderr)
    return 0


def run_test(args: argparse.Namespace) -> int:
    print("Generating test heatmap with sample data...")
    locations = sample_locations()
    print(f"Generated {len(locations)} sample locations")

    try:
        generate_heatmap(locations, args.output)
    except PhotosHeatmapError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Test heatmap saved to: {args.output}")
    print("Open the HTML file in a web browser to view the heatmap.")
    return 0


def run_generate(args: argparse.Namespace) -> int:
    print("Extracting location data from Photos.app...")
    try:
        db_path = find_photos_database(custom_path=args.photos_db, library_path=args.library)
        print(f"Using Photos database: {db_path}")

        locations = LocationExtractor.from_path(db_path).extract_locations()
        print(f"Found {len(locations)} photos with location data")
        if not locations:
            print("No location data found in Photos.app")
            return 0

        print("Generating heatmap...")
        generate_heatmap(locations, args.output, args.format)
    except PhotosHeatmapError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Heatmap saved to: {args.output}")
    return 0


COMMANDS = {
    "explore": run_explore,
    "test": run_test,
    "generate": run_generate,
}


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    return COMMANDS[args.command](args)


if __name__ == "__main__":
    raise SystemExit(main())
