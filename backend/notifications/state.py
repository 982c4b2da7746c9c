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

"""State held by a PassScheduler for one observer session."""

from dataclasses import dataclass
from enum import Enum


class Phase(str, Enum):
    IDLE = "idle"
    ARMED = "armed"
    WATCHING = "watching"


@dataclass
class ScheduleState:
    """
    Mutable scheduling state owned by exactly one PassScheduler.

    Pending alert handles and the watcher handle live in the TimerRegistry;
    this only tracks where the scheduler is in its lifecycle.
    """

    phase: Phase = Phase.IDLE
    watch_ticks: int = 0
    in_flight_poll: bool = False
    # Bumped by every arm() and cancel(); continuations holding an older value are stale
    generation: int = 0

    def reset_watch(self) -> None:
        self.watch_ticks = 0
        self.in_flight_poll = False
