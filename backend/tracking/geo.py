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

"""Great-circle helpers for deciding whether the ISS is within range of an observer."""

import math

from common.constants import EARTH_RADIUS_KM


def haversine_km(lat1_deg: float, lon1_deg: float, lat2_deg: float, lon2_deg: float) -> float:
    """
    Great-circle distance between two points on the Earth's surface.

    :param lat1_deg: Latitude of the first point in degrees
    :param lon1_deg: Longitude of the first point in degrees
    :param lat2_deg: Latitude of the second point in degrees
    :param lon2_deg: Longitude of the second point in degrees
    :return: Distance in kilometers
    :rtype: float
    """
    lat1 = math.radians(lat1_deg)
    lon1 = math.radians(lon1_deg)
    lat2 = math.radians(lat2_deg)
    lon2 = math.radians(lon2_deg)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    a = min(max(a, 0.0), 1.0)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def max_distance_for_elevation_km(alt_km: float, min_elev_deg: float) -> float:
    """
    Largest ground distance from the sub-satellite point at which a satellite at
    ``alt_km`` is seen at least ``min_elev_deg`` above the horizon.

    Elevation decreases monotonically with the central angle, so the limit is
    found by bisection between zero and the horizon angle.

    :param alt_km: Satellite altitude above the surface in kilometers
    :param min_elev_deg: Minimum elevation in degrees (<= 0 means the geometric horizon)
    :return: Ground distance in kilometers
    :rtype: float
    """
    r = EARTH_RADIUS_KM + alt_km
    e_min = math.radians(min_elev_deg)

    psi_horizon = math.acos(EARTH_RADIUS_KM / r)
    if min_elev_deg <= 0:
        return EARTH_RADIUS_KM * psi_horizon

    lo = 0.0
    hi = psi_horizon
    for _ in range(60):
        mid = (lo + hi) * 0.5
        elevation = math.atan2(math.cos(mid) - EARTH_RADIUS_KM / r, math.sin(mid))
        if elevation >= e_min:
            lo = mid
        else:
            hi = mid

    return EARTH_RADIUS_KM * lo
