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

"""Shared fakes for the pass notifier tests."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from apscheduler.jobstores.base import JobLookupError
from apscheduler.triggers.date import DateTrigger

from common.constants import PERMISSION_DENIED, PERMISSION_GRANTED
from notifications.config import SchedulerConfig
from notifications.scheduler import PassScheduler
from notifications.timers import TimerRegistry


class FakeClock:
    """Settable clock returning aware UTC datetimes."""

    def __init__(self):
        self.now = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now


class FakeJob:
    def __init__(self, func, trigger, job_id, name, kwargs):
        self.func = func
        self.trigger = trigger
        self.id = job_id
        self.name = name
        self.kwargs = kwargs
        if isinstance(trigger, DateTrigger):
            self.next_run_time = trigger.run_date
        else:
            # IntervalTrigger fires first at its start date
            self.next_run_time = trigger.start_date


class FakeScheduler:
    """
    Stand-in for AsyncIOScheduler driven by a FakeClock.

    Jobs only run when the test calls ``advance()``; date jobs are removed from
    the store before they run, like APScheduler does.
    """

    def __init__(self, clock):
        self.clock = clock
        self.jobs = {}

    def add_job(self, func, trigger=None, id=None, name=None, replace_existing=False, **kwargs):
        self.jobs[id] = FakeJob(func, trigger, id, name, kwargs)
        return self.jobs[id]

    def remove_job(self, job_id):
        if job_id not in self.jobs:
            raise JobLookupError(job_id)
        del self.jobs[job_id]

    def get_jobs(self):
        return list(self.jobs.values())

    async def advance(self, ms):
        """Move the clock forward, running every job that falls due on the way in order."""
        target = self.clock.now + timedelta(milliseconds=ms)
        while True:
            due = [job for job in self.jobs.values() if job.next_run_time <= target]
            if not due:
                break
            job = min(due, key=lambda j: j.next_run_time)
            self.clock.now = max(self.clock.now, job.next_run_time)
            if isinstance(job.trigger, DateTrigger):
                del self.jobs[job.id]
            else:
                job.next_run_time = job.next_run_time + job.trigger.interval
            await job.func()
        self.clock.now = target


class FakeEstimateSource:
    """
    Returns queued estimates in order.

    Exceptions in the queue are raised, futures are awaited and their result
    returned. Once the queue is empty ``default`` is returned.
    """

    def __init__(self, values=(), default=0.0):
        self.values = list(values)
        self.default = default
        self.reads = 0

    async def read(self):
        self.reads += 1
        value = self.values.pop(0) if self.values else self.default
        if isinstance(value, BaseException):
            raise value
        if isinstance(value, asyncio.Future):
            return await value
        return value


class RecordingSink:
    def __init__(self, granted=True, grant_on_request=True, fail_send=False):
        self.granted = granted
        self.grant_on_request = grant_on_request
        self.fail_send = fail_send
        self.permission_requests = 0
        self.sent = []

    async def is_permission_granted(self):
        return self.granted

    async def request_permission(self):
        self.permission_requests += 1
        if self.grant_on_request:
            self.granted = True
            return PERMISSION_GRANTED
        return PERMISSION_DENIED

    def send(self, title, body):
        if self.fail_send:
            raise RuntimeError("notification daemon unavailable")
        self.sent.append((title, body))

    @property
    def titles(self):
        return [title for title, _ in self.sent]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_scheduler(clock):
    return FakeScheduler(clock)


@pytest.fixture
def timers(fake_scheduler, clock):
    return TimerRegistry(fake_scheduler, clock=clock, job_prefix="test")


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def make_pass_scheduler(timers, sink):
    """Build a PassScheduler around the fake timers and sink, recording errors and phases."""

    def factory(values=(), default=0.0, **config_kwargs):
        source = FakeEstimateSource(values, default=default)
        errors = []
        phases = []
        scheduler = PassScheduler(
            source,
            sink,
            timers,
            config=SchedulerConfig(**config_kwargs),
            on_error=errors.append,
            on_phase_change=phases.append,
        )
        scheduler.test_source = source
        scheduler.test_errors = errors
        scheduler.test_phases = phases
        return scheduler

    return factory
