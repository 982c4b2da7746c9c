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

"""
Pass notification scheduling

Turns a single "minutes until the ISS is in range" estimate into a staged
sequence of alerts, then watches for the end of the pass.

Components:
- timers.py: TimerRegistry, APScheduler-backed ownership of pending alert jobs
- scheduler.py: PassScheduler, the arm / watch / cancel state machine
- sinks.py: notification sinks the scheduler delivers alerts through
"""

from .config import SchedulerConfig
from .scheduler import PassScheduler
from .state import Phase, ScheduleState
from .timers import ScheduledAction, TimerRegistry

__all__ = [
    "PassScheduler",
    "Phase",
    "ScheduleState",
    "ScheduledAction",
    "SchedulerConfig",
    "TimerRegistry",
]
