"""Command-line interface for the item waypoint mapper."""

import argparse
import dataclasses
import logging
import sys

from src.config import DEFAULT_CENTER_SCALE, DEFAULT_VIEWPORT_HEIGHT, DEFAULT_VIEWPORT_WIDTH, load_settings
from src.errors import MalformedInputError
from src.logging_config import setup_logging
from src.lookup.client import ItemLookupClient
from src.map_viewer.loader import load_item_file
from src.map_viewer.renderer import RenderOptions
from src.map_viewer.session import MapSession, ReportKind, StatusReport
from src.map_viewer.viewer import create_figure, export_html, show_figure
from src.map_viewer.viewport import Viewport


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Item Waypoint Mapper - convert item drop locations to waypoints and map them",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Look an item up and print export waypoints
  uv run python -m src.map_viewer --search "Sword"

  # Several matches: pick the second one and save the waypoints
  uv run python -m src.map_viewer --search "Ring" --select 1 --output waypoints.json

  # Convert a saved lookup response and show it on the map with radii
  uv run python -m src.map_viewer --file item.json --render --show-radius

  # Export the map to HTML, centered on the third waypoint
  uv run python -m src.map_viewer --file item.json --export map.html --center 2
        """,
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--search", type=str, metavar="NAME", help="Item name to look up")
    source.add_argument("--file", type=str, metavar="PATH", help="Lookup response or item JSON file")

    parser.add_argument(
        "--select",
        type=int,
        metavar="INDEX",
        help="Result to load when a search returns several items (0-based)",
    )
    parser.add_argument("--icon", type=str, default=None, help="Waypoint icon (default: flag)")
    parser.add_argument("--color", type=str, default=None, help="Waypoint color, #RRGGBB or #RRGGBBAA")
    parser.add_argument(
        "--output",
        type=str,
        metavar="FILE",
        help="Write export waypoints to FILE instead of stdout",
    )
    parser.add_argument("--map", type=str, metavar="PATH", help="Map image (default: ITEM_MAP_PATH)")
    parser.add_argument("--render", action="store_true", help="Open the map in the browser")
    parser.add_argument("--export", type=str, metavar="FILE", help="Export the map to an HTML file")
    parser.add_argument(
        "--center",
        type=int,
        metavar="INDEX",
        help=f"Center on a waypoint (0-based) at zoom {DEFAULT_CENTER_SCALE:g} instead of fitting",
    )
    parser.add_argument("--show-radius", action="store_true", help="Draw drop radius circles")
    parser.add_argument("--show-labels", action="store_true", help="Draw waypoint names")
    parser.add_argument("--width", type=int, default=DEFAULT_VIEWPORT_WIDTH, help="Viewport width in pixels")
    parser.add_argument("--height", type=int, default=DEFAULT_VIEWPORT_HEIGHT, help="Viewport height in pixels")
    parser.add_argument("--proxy", action="store_true", help="Send lookups through the CORS proxy")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    return parser


def _print_status(report: StatusReport) -> None:
    # stdout is reserved for the waypoint JSON
    prefix = "Error: " if report.is_error else ""
    print(f"{prefix}{report.message}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI; returns the process exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    setup_logging(console_level=logging.DEBUG if args.verbose else logging.WARNING)

    logger = logging.getLogger(__name__)

    try:
        settings = load_settings()
        viewport = Viewport(args.width, args.height)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    show_map = args.render or args.export
    session = MapSession(
        settings,
        viewport=viewport,
        status_callback=_print_status,
        render_options=RenderOptions(show_radius=args.show_radius, show_labels=args.show_labels),
    )
    if args.icon:
        session.icon = args.icon
    if args.color:
        session.set_color(args.color, debounced=False)

    if show_map:
        report = session.load_map(args.map)
        if report.is_error:
            return 1

    # Load the item
    if args.search:
        if args.proxy:
            settings = dataclasses.replace(settings, use_proxy=True)
        client = ItemLookupClient(settings)
        try:
            report = session.search(client, args.search)
        finally:
            client.close()
        if report.kind in (ReportKind.MALFORMED_INPUT, ReportKind.REQUEST_FAILED) or not session.search_results:
            return 1
        if len(session.search_results) > 1:
            if args.select is None:
                for i, result in enumerate(session.search_results):
                    print(f"  [{i}] {result.name}")
                print("Re-run with --select INDEX to load one.")
                return 0
            report = session.select_result(args.select)
            if report.kind is ReportKind.INVALID_SELECTION:
                return 1
    else:
        try:
            logger.info(f"Loading item JSON from {args.file}")
            item = load_item_file(args.file)
        except MalformedInputError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        session.load_item(item)

    # Write export waypoints
    if args.output:
        with open(args.output, "w", encoding="utf-8") as output_file:
            output_file.write(session.output_text + "\n")
        print(f"Wrote {len(session.export_waypoints)} waypoint(s) to {args.output}")
    elif not show_map:
        print(session.output_text)

    if not show_map:
        return 0

    if args.center is not None and not session.goto(args.center):
        print(f"Error: no waypoint with a location at index {args.center}", file=sys.stderr)
        return 1

    frame = session.last_render or session.draw()
    fig = create_figure(frame, viewport, title=args.search or args.file)

    if args.export:
        logger.info(f"Exporting to {args.export}")
        export_html(fig, args.export)
        print(f"Exported to {args.export}")
    if args.render:
        logger.info("Opening in browser")
        show_figure(fig)
    return 0


if __name__ == "__main__":
    sys.exit(main())
