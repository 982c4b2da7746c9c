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

"""Fetching the current ISS position."""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from common.constants import HTTP_TIMEOUT_SECONDS, ISS_LOCATION_ENDPOINT
from common.exceptions import EstimateUnavailable

logger = logging.getLogger("iss-notifier.iss")


@dataclass(frozen=True)
class IssLocation:
    latitude: float
    longitude: float
    altitude: float  # km
    velocity: float  # km/h
    timestamp: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IssLocation":
        return cls(
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            altitude=float(data["altitude"]),
            velocity=float(data["velocity"]),
            timestamp=float(data["timestamp"]),
        )


def sync_fetch_json(url: str) -> Any:
    """
    Synchronously fetch and decode a JSON document.

    Args:
        url (str): The URL to fetch

    Returns:
        The decoded JSON body

    Raises:
        requests.RequestException: On transport errors and non-2xx responses
        ValueError: If the body is not valid JSON
    """
    reply = requests.get(url, timeout=HTTP_TIMEOUT_SECONDS)
    reply.raise_for_status()
    return reply.json()


async def async_fetch_json(url: str, executor: Optional[ThreadPoolExecutor] = None) -> Any:
    """
    Asynchronously fetch a JSON document using a thread pool executor.

    Args:
        url (str): The URL to fetch
        executor (ThreadPoolExecutor): The thread pool executor to use (loop default if None)

    Returns:
        The decoded JSON body
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(executor, sync_fetch_json, url)


async def get_iss_location(
    url: str = ISS_LOCATION_ENDPOINT, executor: Optional[ThreadPoolExecutor] = None
) -> IssLocation:
    """
    Fetch the current ISS position.

    Raises:
        EstimateUnavailable: If the position cannot be fetched or decoded
    """
    try:
        data = await async_fetch_json(url, executor)
        return IssLocation.from_dict(data)
    except (requests.RequestException, ValueError, KeyError, TypeError) as e:
        logger.warning(f"Failed to fetch ISS location from {url}: {e}")
        raise EstimateUnavailable(f"Failed to fetch ISS location: {e}") from e
