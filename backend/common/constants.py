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
Constants module for the ISS pass notifier.
Contains the default timings, alert texts and endpoints used throughout the application.
"""

# ============================================================================
# Scheduler defaults
# ============================================================================

MS_PER_MINUTE = 60 * 1000

# Minutes before range entry at which staged alerts fire. 0 is the in-range alert.
DEFAULT_THRESHOLDS = (30, 5, 0)

# Watcher poll interval once the station is in range
DEFAULT_WATCH_INTERVAL_MS = 60 * 1000

# Hard bound on watcher polls (30 polls at 60 s = 30 minutes)
DEFAULT_MAX_WATCH_TICKS = 30


# ============================================================================
# Alert texts
# ============================================================================
class AlertTexts:
    """Titles and bodies of the notifications sent by the scheduler"""

    # Staged alerts with dedicated wording, keyed by threshold minutes
    STAGED = {
        30: ("ISS in 30 minutes", "Get ready."),
        5: ("ISS in 5 minutes", "Almost time."),
    }

    # Fallback for thresholds without dedicated wording
    STAGED_TITLE = "ISS in {minutes:g} minutes"
    STAGED_BODY = "Heads up."

    IN_RANGE_TITLE = "ISS is in range"
    IN_RANGE_BODY = "Look up!"

    OUT_OF_RANGE_TITLE = "ISS is out of range"
    OUT_OF_RANGE_BODY = "Goodbye until the next pass."


# ============================================================================
# Estimate source
# ============================================================================

ISS_NORAD_ID = 25544
ISS_LOCATION_ENDPOINT = f"https://api.wheretheiss.at/v1/satellites/{ISS_NORAD_ID}"

# IP geolocation providers, tried in order
GEOLOCATION_ENDPOINTS = (
    "https://ipapi.co/json/",
    "https://ipinfo.io/json",
    "https://ip-api.com/json",
)

HTTP_TIMEOUT_SECONDS = 5

EARTH_RADIUS_KM = 6371.0

# Minimum elevation above the horizon for the station to count as in range
DEFAULT_MIN_ELEVATION_DEG = 10.0

# Seconds between the two position samples used to tell approach from recession
DEFAULT_SAMPLE_DELAY_SECONDS = 10.0

ISS_ORBITAL_PERIOD_MINUTES = 92.6

# Floor for the ground track speed (km/s) to avoid dividing by zero
MIN_GROUND_SPEED_KM_S = 0.001


# ============================================================================
# Notification sinks
# ============================================================================

PERMISSION_GRANTED = "granted"
PERMISSION_DENIED = "denied"

DEFAULT_NOTIFY_COMMAND = "notify-send"
