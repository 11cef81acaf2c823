#!/usr/bin/env python3
"""
Pub Compass - Point the way to the nearest pub

Usage:
    python -m pubcompass [options]

Options:
    --lat LAT              Latitude (skip GPS)
    --lon LON              Longitude (skip GPS)
    --radius METERS        Search radius (default: 1500)
    --offset DEG           Compass calibration offset (default: 180)
    --html FILE            Save a map of the results to an HTML file
    --log FILE             Append log output to a file
    --heading-trace FILE   Replay magnetometer samples from a JSON trace
    --watch SECONDS        Stream the arrow direction for this many seconds
"""

import argparse
import sys
import time
import webbrowser
from pathlib import Path
from typing import Optional

from .compass import PubCompass
from .config import CONFIG
from .exceptions import PositionUnavailable, RetrievalFailed
from .geo import format_distance
from .gps import GPS, FixedPosition
from .heading import HeadingTracker
from .logger import Logger
from .overpass import PubFetcher
from .sensors import MagnetometerPlayback, TermuxMagnetometer


def _print_summary(compass: PubCompass):
    pointer = compass.pointer()
    if pointer is None:
        print(f"No pubs found within {format_distance(compass.radius)}. Try a different location!")
        return

    print(f"\nNearest pub: {pointer.pub.name}")
    print(f"  {pointer.distance_text} away, {pointer.compass} ({pointer.bearing:.0f}°)")
    others = len(compass.pubs) - 1
    if others > 0:
        print(f"  +{others} more pub{'s' if others > 1 else ''} nearby")


def _watch(compass: PubCompass, seconds: float):
    """Print the arrow rotation as the heading changes"""
    tracker = compass.heading_tracker
    if not tracker.start():
        print("Compass unavailable")
        return

    try:
        end = time.monotonic() + seconds
        while time.monotonic() < end and tracker.is_running:
            pointer = compass.pointer()
            if pointer:
                print(f"\rHeading {compass.heading:5.1f}°  arrow {pointer.rotation:5.1f}°  "
                      f"{pointer.direction:<14}", end="", flush=True)
            time.sleep(0.25)
        print()
    except KeyboardInterrupt:
        print()
    finally:
        tracker.stop()

    if tracker.error:
        print(f"Compass error: {tracker.error}")


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Pub Compass - Point the way to the nearest pub"
    )
    parser.add_argument("--lat", type=float, metavar="LAT",
                        help="Latitude (for use without GPS)")
    parser.add_argument("--lon", type=float, metavar="LON",
                        help="Longitude (for use without GPS)")
    parser.add_argument("--radius", type=float, default=CONFIG["search_radius"],
                        help=f"Search radius in meters (default: {CONFIG['search_radius']})")
    parser.add_argument("--offset", type=float, default=CONFIG["compass_offset"],
                        help=f"Compass calibration offset in degrees (default: {CONFIG['compass_offset']})")
    parser.add_argument("--html", metavar="FILE",
                        help="Save a map of the results to an HTML file")
    parser.add_argument("--log", metavar="FILE",
                        help="Append log output to a file")
    parser.add_argument("--heading-trace", metavar="FILE",
                        help="Replay magnetometer samples from a JSON trace")
    parser.add_argument("--watch", type=float, metavar="SECONDS", default=0,
                        help="Stream the arrow direction for this many seconds")

    args = parser.parse_args(argv)

    # Validate lat/lon - must provide both or neither
    if (args.lat is None) != (args.lon is None):
        parser.error("--lat and --lon must be used together")
    if args.radius <= 0:
        parser.error("--radius must be positive")

    if args.heading_trace and not Path(args.heading_trace).exists():
        print(f"Heading trace not found: {args.heading_trace}")
        return 1

    position_source = FixedPosition(args.lat, args.lon) if args.lat is not None else GPS()
    sensor = (MagnetometerPlayback.from_file(args.heading_trace)
              if args.heading_trace else TermuxMagnetometer())

    with Logger(args.log) as logger:
        compass = PubCompass(
            fetcher=PubFetcher(logger=logger),
            position_source=position_source,
            heading_tracker=HeadingTracker(sensor, logger=logger),
            radius=args.radius,
            offset=args.offset,
            logger=logger,
        )

        try:
            compass.refresh()
        except PositionUnavailable as e:
            print(f"Error: {e}")
            return 1
        except RetrievalFailed:
            print("Failed to find nearby pubs. Check your connection.")
            return 1
        finally:
            logger.log("STATE", compass.get_state())

        _print_summary(compass)

        if args.html:
            from .map_viewer import create_pub_map
            m = create_pub_map(compass.position, compass.pubs, compass.radius)
            m.save(args.html)
            print(f"\nMap saved to: {args.html}")
            webbrowser.open(f"file://{Path(args.html).absolute()}")

        if args.watch > 0 and compass.pubs:
            _watch(compass, args.watch)

    return 0


if __name__ == "__main__":
    sys.exit(main())
