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

"""Estimate of the minutes until the ISS comes within range of the observer."""

import asyncio
import logging
import math
from typing import Awaitable, Callable, Optional, Tuple

from common.constants import (
    DEFAULT_MIN_ELEVATION_DEG,
    DEFAULT_SAMPLE_DELAY_SECONDS,
    ISS_ORBITAL_PERIOD_MINUTES,
    MIN_GROUND_SPEED_KM_S,
)

from .geo import haversine_km, max_distance_for_elevation_km
from .iss import IssLocation, get_iss_location
from .location import get_user_location

logger = logging.getLogger("iss-notifier.estimate")


def round_tenths(value: float) -> float:
    """Round to one decimal with halves going up (0.25 -> 0.3)."""
    return math.floor(value * 10 + 0.5) / 10


def minutes_until_in_range(
    observer: Tuple[float, float],
    first: IssLocation,
    second: IssLocation,
    min_elevation_deg: float = DEFAULT_MIN_ELEVATION_DEG,
) -> float:
    """
    Rough minutes until the ISS rises above ``min_elevation_deg`` for the observer.

    ``first`` and ``second`` are two position samples a few seconds apart; the
    ISS is approaching when the second sample is closer. The remaining ground
    distance is covered at the reported ground speed; a receding ISS is
    assumed back after one orbital period. This is a straight-line estimate,
    not a pass prediction.

    :return: Minutes rounded to one decimal; 0 when the ISS is in range at ``first``
    """
    user_lat, user_lon = observer
    d0 = haversine_km(user_lat, user_lon, first.latitude, first.longitude)
    d_max = max_distance_for_elevation_km(first.altitude, min_elevation_deg)

    if d0 <= d_max:
        return 0.0

    d1 = haversine_km(user_lat, user_lon, second.latitude, second.longitude)
    approaching = d1 < d0

    # km/h to km/s
    speed = max(first.velocity / 3600.0, MIN_GROUND_SPEED_KM_S)

    seconds = (d0 - d_max) / speed
    if not approaching:
        seconds = max(ISS_ORBITAL_PERIOD_MINUTES * 60.0 - seconds, 0.0)

    minutes = max(seconds / 60.0, 0.0)
    return round_tenths(minutes)


class IssEstimateSource:
    """
    Estimate source backed by the live ISS position.

    The observer location is taken from the constructor, or resolved once by
    IP geolocation on the first read and reused afterwards.
    """

    def __init__(
        self,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        min_elevation_deg: float = DEFAULT_MIN_ELEVATION_DEG,
        sample_delay: float = DEFAULT_SAMPLE_DELAY_SECONDS,
        fetch_iss: Callable[[], Awaitable[IssLocation]] = get_iss_location,
        locate_user: Callable[[], Awaitable[Tuple[float, float]]] = get_user_location,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if (latitude is None) != (longitude is None):
            raise ValueError("latitude and longitude must be given together")
        self._observer = (latitude, longitude) if latitude is not None else None
        self.min_elevation_deg = min_elevation_deg
        self.sample_delay = sample_delay
        self._fetch_iss = fetch_iss
        self._locate_user = locate_user
        self._sleep = sleep

    async def observer(self) -> Tuple[float, float]:
        if self._observer is None:
            self._observer = await self._locate_user()
            logger.info(
                f"Observer location resolved to {self._observer[0]:.4f}, {self._observer[1]:.4f}"
            )
        return self._observer

    async def read(self) -> float:
        """
        Minutes until the ISS is in range, 0 if it is in range now.

        Raises:
            EstimateUnavailable: If the observer or ISS position cannot be fetched
        """
        observer, first = await asyncio.gather(self.observer(), self._fetch_iss())

        d0 = haversine_km(observer[0], observer[1], first.latitude, first.longitude)
        if d0 <= max_distance_for_elevation_km(first.altitude, self.min_elevation_deg):
            logger.debug(f"ISS in range, {d0:.0f} km from observer")
            return 0.0

        await self._sleep(self.sample_delay)
        second = await self._fetch_iss()

        minutes = minutes_until_in_range(observer, first, second, self.min_elevation_deg)
        logger.debug(f"ISS {d0:.0f} km from observer, in range in {minutes:g} min")
        return minutes
