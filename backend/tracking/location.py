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

"""Resolving the observer's location."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional, Sequence, Tuple

import requests

from common.constants import GEOLOCATION_ENDPOINTS
from common.exceptions import EstimateUnavailable

from .iss import async_fetch_json

logger = logging.getLogger("iss-notifier.location")


def parse_geolocation_reply(data: Dict[str, Any]) -> Tuple[float, float]:
    """
    Extract (latitude, longitude) from an IP geolocation reply.

    Understands the three reply shapes of the supported providers:
    ``latitude``/``longitude`` (ipapi.co), ``loc: "lat,lon"`` (ipinfo.io)
    and ``lat``/``lon`` (ip-api.com).

    :raises ValueError: If the reply holds no usable coordinates.
    """
    if "latitude" in data and "longitude" in data:
        return float(data["latitude"]), float(data["longitude"])
    if "loc" in data:
        lat, sep, lon = str(data["loc"]).partition(",")
        if not sep:
            raise ValueError(f"Malformed loc field: {data['loc']!r}")
        return float(lat.strip()), float(lon.strip())
    if "lat" in data and "lon" in data:
        return float(data["lat"]), float(data["lon"])
    raise ValueError("No coordinates in geolocation reply")


async def get_user_location(
    endpoints: Sequence[str] = GEOLOCATION_ENDPOINTS,
    executor: Optional[ThreadPoolExecutor] = None,
) -> Tuple[float, float]:
    """
    Locate the observer by IP address, trying each provider in turn.

    Raises:
        EstimateUnavailable: If every provider fails
    """
    for url in endpoints:
        try:
            data = await async_fetch_json(url, executor)
            location = parse_geolocation_reply(data)
            logger.debug(f"Observer located via {url}: {location}")
            return location
        except (requests.RequestException, ValueError, TypeError) as e:
            logger.debug(f"Geolocation provider {url} failed: {e}")

    raise EstimateUnavailable("All IP geolocation providers failed")
