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

"""Exceptions raised by the pass notifier."""


class PassNotifierError(Exception):

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self):
        base_str = f"{self.__class__.__name__}: {self.message}"
        return base_str


class PermissionDenied(PassNotifierError):
    """The notification sink refused permission to deliver alerts."""

    def __init__(self, message: str = "Notification permission was not granted."):
        super().__init__(message)


class InvalidEstimate(PassNotifierError):
    """The estimate source returned a value that is not a finite number of minutes."""

    def __init__(self, message: str, value=None):
        super().__init__(message)
        self.value = value


class EstimateUnavailable(PassNotifierError):
    """The estimate source could not produce an estimate (transport or computation failure)."""
