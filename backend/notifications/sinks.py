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

"""Notification sinks the pass scheduler delivers alerts through."""

import logging
import shutil
import subprocess
from typing import List, Optional, Tuple

from common.constants import DEFAULT_NOTIFY_COMMAND, PERMISSION_DENIED, PERMISSION_GRANTED

logger = logging.getLogger("iss-notifier.sinks")


class LoggingNotificationSink:
    """Writes alerts to the log. Permission is always granted."""

    def __init__(self):
        self.history: List[Tuple[str, str]] = []

    async def is_permission_granted(self) -> bool:
        return True

    async def request_permission(self) -> str:
        return PERMISSION_GRANTED

    def send(self, title: str, body: str) -> None:
        self.history.append((title, body))
        logger.info(f"[notification] {title}: {body}")


class CommandNotificationSink:
    """
    Delivers alerts as desktop notifications through an external command.

    The command is called as ``<command> <title> <body>``, which matches
    ``notify-send`` and compatible tools. Permission is granted when the
    command can be found on the PATH.
    """

    def __init__(self, command: str = DEFAULT_NOTIFY_COMMAND):
        self.command = command
        self._executable: Optional[str] = None

    def _resolve(self) -> Optional[str]:
        if self._executable is None:
            self._executable = shutil.which(self.command)
        return self._executable

    async def is_permission_granted(self) -> bool:
        return self._resolve() is not None

    async def request_permission(self) -> str:
        if self._resolve() is None:
            logger.warning(f"Notification command '{self.command}' not found on PATH")
            return PERMISSION_DENIED
        return PERMISSION_GRANTED

    def send(self, title: str, body: str) -> None:
        executable = self._resolve()
        if executable is None:
            logger.error(f"Cannot send '{title}': notification command '{self.command}' not found")
            return
        try:
            # Fire and forget, delivery is not tracked
            subprocess.Popen(
                [executable, title, body],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
            logger.debug(f"Launched {self.command} for '{title}'")
        except OSError as e:
            logger.error(f"Failed to launch {self.command} for '{title}': {e}")
