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

"""Timer bookkeeping for pass alerts - owns every APScheduler job the pass scheduler creates."""

import inspect
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger("iss-notifier.timers")

Action = Callable[[], Union[None, Awaitable[None]]]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ScheduledAction:
    """Handle to one job owned by a TimerRegistry."""

    job_id: str
    name: str
    delay_ms: float
    recurring: bool = False


class TimerRegistry:
    """
    Owns the pending one-shot alert jobs and the single recurring watcher job.

    Jobs are added to an APScheduler ``AsyncIOScheduler`` that may be shared
    with other registries; every job id carries this registry's prefix.

    Each job runs through a wrapper that first checks its handle is still
    registered, so once ``cancel_all()`` returns nothing scheduled before it
    will run, even a job the scheduler had already handed to its executor.
    """

    def __init__(
        self,
        scheduler: AsyncIOScheduler,
        clock: Callable[[], datetime] = utcnow,
        job_prefix: Optional[str] = None,
    ):
        """
        Initialize the timer registry.

        Args:
            scheduler: APScheduler instance the jobs are added to
            clock: Returns the current time as an aware UTC datetime
            job_prefix: Prefix for all job ids of this registry (random if omitted)
        """
        self.scheduler = scheduler
        self._clock = clock
        self._job_prefix = job_prefix or f"pass_{uuid.uuid4().hex[:8]}"
        self._pending: Dict[str, ScheduledAction] = {}
        self._watcher: Optional[ScheduledAction] = None

    def _make_job_id(self, kind: str) -> str:
        return f"{self._job_prefix}_{kind}_{uuid.uuid4().hex}"

    @property
    def pending_actions(self) -> frozenset:
        return frozenset(self._pending.values())

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def watcher(self) -> Optional[ScheduledAction]:
        return self._watcher

    @property
    def has_watcher(self) -> bool:
        return self._watcher is not None

    def jobs(self) -> List[ScheduledAction]:
        """All live handles, one-shots first in scheduling order, watcher last."""
        handles = list(self._pending.values())
        if self._watcher is not None:
            handles.append(self._watcher)
        return handles

    def is_live(self, handle: ScheduledAction) -> bool:
        if handle.recurring:
            return self._watcher is not None and self._watcher.job_id == handle.job_id
        return handle.job_id in self._pending

    def schedule(self, delay_ms: float, action: Action, name: str = "alert") -> ScheduledAction:
        """
        Run ``action`` once after ``delay_ms`` milliseconds.

        Negative delays are clamped to zero.
        """
        delay_ms = max(0.0, float(delay_ms))
        handle = ScheduledAction(job_id=self._make_job_id("once"), name=name, delay_ms=delay_ms)
        run_date = self._clock() + timedelta(milliseconds=delay_ms)

        self._pending[handle.job_id] = handle
        self.scheduler.add_job(
            self._wrap(handle, action),
            trigger=DateTrigger(run_date=run_date),
            id=handle.job_id,
            name=name,
            replace_existing=True,
            misfire_grace_time=None,  # a late alert is still delivered
        )
        logger.debug(f"Scheduled '{name}' in {delay_ms / 1000:.1f}s at {run_date.isoformat()}")
        return handle

    def schedule_recurring(
        self, interval_ms: float, action: Action, name: str = "watcher"
    ) -> ScheduledAction:
        """
        Run ``action`` every ``interval_ms`` milliseconds, first run one interval from now.

        Only one recurring action may exist; while one is active a second
        registration is ignored and the active handle is returned.
        """
        if self._watcher is not None:
            logger.warning(
                f"Recurring action '{self._watcher.name}' already active, ignoring '{name}'"
            )
            return self._watcher

        interval_ms = float(interval_ms)
        if interval_ms <= 0:
            raise ValueError(f"Recurring interval must be positive, got {interval_ms!r}")

        handle = ScheduledAction(
            job_id=self._make_job_id("every"), name=name, delay_ms=interval_ms, recurring=True
        )
        self._watcher = handle
        first_run = self._clock() + timedelta(milliseconds=interval_ms)
        self.scheduler.add_job(
            self._wrap(handle, action),
            trigger=IntervalTrigger(
                seconds=interval_ms / 1000, start_date=first_run, timezone=timezone.utc
            ),
            id=handle.job_id,
            name=name,
            replace_existing=True,
            coalesce=True,
            # overlapping runs are skipped by the watcher's own in-flight guard
            max_instances=2,
        )
        logger.debug(f"Scheduled recurring '{name}' every {interval_ms / 1000:.1f}s")
        return handle

    def cancel_all(self) -> int:
        """
        Cancel every pending one-shot and the recurring action.

        Idempotent; returns the number of handles that were cancelled.
        """
        handles = self.jobs()
        self._pending.clear()
        self._watcher = None

        for handle in handles:
            try:
                self.scheduler.remove_job(handle.job_id)
            except JobLookupError:
                # Already fired and removed by the scheduler
                pass

        if handles:
            logger.debug(f"Cancelled {len(handles)} scheduled action(s)")
        return len(handles)

    def _wrap(self, handle: ScheduledAction, action: Action) -> Callable[[], Awaitable[None]]:
        # Always a coroutine function so AsyncIOScheduler runs it on the event loop
        async def run_action() -> None:
            if not self.is_live(handle):
                logger.debug(f"Skipping cancelled action '{handle.name}'")
                return
            if not handle.recurring:
                self._pending.pop(handle.job_id, None)

            try:
                result: Any = action()
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Error running scheduled action '{handle.name}': {e}")
                logger.exception(e)

        return run_action
