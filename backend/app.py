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

import asyncio
import signal
import sys
from datetime import timezone
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from common.arguments import parse_arguments
from common.exceptions import PassNotifierError
from common.logger import get_logger
from notifications.config import SchedulerConfig
from notifications.scheduler import PassScheduler
from notifications.sinks import CommandNotificationSink, LoggingNotificationSink
from notifications.state import Phase
from notifications.timers import TimerRegistry
from tracking.estimate import IssEstimateSource

__version__ = "0.1.0"


def print_banner():
    """Print banner with version."""
    print(f"ISS Pass Notifier v{__version__}")


def build_estimate_source(args) -> IssEstimateSource:
    return IssEstimateSource(
        latitude=args.latitude,
        longitude=args.longitude,
        min_elevation_deg=args.min_elevation,
        sample_delay=args.sample_delay,
    )


def build_sink(args):
    if args.notifier == "log":
        return LoggingNotificationSink()
    return CommandNotificationSink(args.notify_command)


async def run_estimate(args, logger) -> int:
    source = build_estimate_source(args)
    minutes = await source.read()
    if minutes <= 0:
        print("The ISS is in range now.")
    else:
        print(f"The ISS will be in range in {minutes:g} minutes.")
    return 0


async def run_watch(args, logger, stop_requested: Optional[asyncio.Event] = None) -> int:
    """
    Arm pass alerts and wait until the pass is over or a stop is requested.

    SIGINT and SIGTERM set ``stop_requested``; with ``--rearm`` the next pass is
    armed each time the watcher finishes.
    """
    config = SchedulerConfig(
        thresholds=tuple(args.thresholds),
        watch_interval_ms=args.watch_interval * 1000,
        max_watch_ticks=args.max_watch_ticks,
    )

    scheduler = AsyncIOScheduler(timezone=timezone.utc)
    scheduler.start()

    watch_over = asyncio.Event()
    if stop_requested is None:
        stop_requested = asyncio.Event()

    def on_phase_change(phase: Phase):
        if phase is Phase.IDLE:
            watch_over.set()

    pass_scheduler = PassScheduler(
        build_estimate_source(args),
        build_sink(args),
        TimerRegistry(scheduler),
        config=config,
        on_phase_change=on_phase_change,
    )

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_requested.set)

    try:
        while True:
            minutes = await pass_scheduler.arm()
            watch_over.clear()
            logger.info(f"Pass alerts armed from estimate {minutes} min: {pass_scheduler.snapshot()}")

            waiters = [
                asyncio.ensure_future(watch_over.wait()),
                asyncio.ensure_future(stop_requested.wait()),
            ]
            await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
            for waiter in waiters:
                waiter.cancel()

            if stop_requested.is_set():
                logger.info("Stop requested, cancelling pass alerts")
                break
            if not args.rearm:
                logger.info("Pass is over")
                break
            logger.info("Pass is over, scheduling the next one")
    finally:
        pass_scheduler.cancel()
        scheduler.shutdown(wait=False)
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)

    return 0


def main(argv=None) -> int:
    args = parse_arguments(argv)
    logger = get_logger(args)

    print_banner()
    logger.info(f"Starting ISS pass notifier with parameters {args}")

    runner = run_estimate if args.command == "estimate" else run_watch
    try:
        return asyncio.run(runner(args, logger))
    except PassNotifierError as e:
        logger.error(str(e))
        return 1
    except ValueError as e:
        logger.error(f"Invalid options: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
