# Copyright (c) 2025 Efstratios Goudelis
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.


import argparse

from .constants import (
    DEFAULT_MAX_WATCH_TICKS,
    DEFAULT_MIN_ELEVATION_DEG,
    DEFAULT_NOTIFY_COMMAND,
    DEFAULT_SAMPLE_DELAY_SECONDS,
    DEFAULT_THRESHOLDS,
    DEFAULT_WATCH_INTERVAL_MS,
)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="iss-notifier",
        description="Notify ahead of and during ISS passes over your location.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging level",
    )
    parser.add_argument(
        "--log-config",
        type=str,
        default=None,
        help="Path to the logger configuration file (defaults to the bundled logconfig.yaml)",
    )
    parser.add_argument(
        "--latitude", type=float, default=None, help="Observer latitude (IP geolocation if omitted)"
    )
    parser.add_argument(
        "--longitude", type=float, default=None, help="Observer longitude (IP geolocation if omitted)"
    )
    parser.add_argument(
        "--min-elevation",
        type=float,
        default=DEFAULT_MIN_ELEVATION_DEG,
        help="Minimum elevation in degrees for the ISS to count as in range",
    )
    parser.add_argument(
        "--sample-delay",
        type=float,
        default=DEFAULT_SAMPLE_DELAY_SECONDS,
        help="Seconds between the two position samples of one estimate",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("estimate", help="print the minutes until the ISS is in range and exit")

    watch = sub.add_parser("watch", help="schedule pass alerts and run until the pass is over")
    watch.add_argument(
        "--thresholds",
        type=float,
        nargs="+",
        default=list(DEFAULT_THRESHOLDS),
        help="Minutes before range entry at which alerts fire (0 is the in-range alert)",
    )
    watch.add_argument(
        "--watch-interval",
        type=float,
        default=DEFAULT_WATCH_INTERVAL_MS / 1000,
        help="Seconds between range checks while the ISS is in range",
    )
    watch.add_argument(
        "--max-watch-ticks",
        type=int,
        default=DEFAULT_MAX_WATCH_TICKS,
        help="Maximum number of range checks before the watch gives up",
    )
    watch.add_argument(
        "--notifier",
        type=str,
        default="command",
        choices=["log", "command"],
        help="Deliver alerts to the log only, or through a desktop notification command",
    )
    watch.add_argument(
        "--notify-command",
        type=str,
        default=DEFAULT_NOTIFY_COMMAND,
        help="Desktop notification command, called as <command> <title> <body>",
    )
    watch.add_argument(
        "--rearm",
        action="store_true",
        help="Schedule the next pass once the current one is over instead of exiting",
    )

    return parser


def parse_arguments(argv=None):
    return build_parser().parse_args(argv)
