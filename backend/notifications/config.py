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

"""Tunable options of the pass scheduler."""

import math
from dataclasses import dataclass, field
from typing import Iterable, Tuple

from common.constants import (
    DEFAULT_MAX_WATCH_TICKS,
    DEFAULT_THRESHOLDS,
    DEFAULT_WATCH_INTERVAL_MS,
)


def normalize_thresholds(thresholds: Iterable[float]) -> Tuple[float, ...]:
    """
    Validate alert thresholds and return them de-duplicated in descending order.

    The in-range alert (threshold 0) is part of every schedule, so it is added
    when the caller leaves it out.

    :raises ValueError: If a threshold is negative or not a finite number.
    """
    values = set()
    for threshold in thresholds:
        value = float(threshold)
        if not math.isfinite(value) or value < 0:
            raise ValueError(f"Alert thresholds must be finite and non-negative, got {threshold!r}")
        values.add(value)
    values.add(0.0)
    return tuple(sorted(values, reverse=True))


@dataclass(frozen=True)
class SchedulerConfig:
    """Options of one PassScheduler instance."""

    thresholds: Tuple[float, ...] = field(default=DEFAULT_THRESHOLDS)
    watch_interval_ms: float = DEFAULT_WATCH_INTERVAL_MS
    max_watch_ticks: int = DEFAULT_MAX_WATCH_TICKS

    def __post_init__(self):
        # frozen dataclass, so normalized values go through object.__setattr__
        object.__setattr__(self, "thresholds", normalize_thresholds(self.thresholds))
        if not self.watch_interval_ms > 0:
            raise ValueError(f"watch_interval_ms must be positive, got {self.watch_interval_ms!r}")
        if int(self.max_watch_ticks) < 1:
            raise ValueError(f"max_watch_ticks must be at least 1, got {self.max_watch_ticks!r}")
        object.__setattr__(self, "max_watch_ticks", int(self.max_watch_ticks))

    @property
    def staged_thresholds(self) -> Tuple[float, ...]:
        """Positive thresholds, i.e. the alerts that precede the in-range alert."""
        return tuple(t for t in self.thresholds if t > 0)
