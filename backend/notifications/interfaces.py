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

"""Collaborators the pass scheduler talks to."""

from typing import Protocol, Union

Estimate = Union[float, int, str]


class EstimateSource(Protocol):
    """Produces the current estimate of minutes until the ISS is in range."""

    async def read(self) -> Estimate:
        """
        Return the estimated minutes until range entry; zero or negative means in range now.

        Raises EstimateUnavailable when no estimate can be produced.
        """
        ...


class NotificationSink(Protocol):
    """Delivers alerts to the user."""

    async def is_permission_granted(self) -> bool: ...

    async def request_permission(self) -> str:
        """Ask for permission to notify; returns "granted" or "denied"."""
        ...

    def send(self, title: str, body: str) -> None:
        """Fire-and-forget delivery of one alert."""
        ...
