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

"""Pass scheduler - turns one range estimate into staged ISS pass alerts and watches for the end of the pass."""

import logging
import math
from functools import partial
from typing import Any, Callable, Dict, Optional

from common.constants import MS_PER_MINUTE, PERMISSION_GRANTED, AlertTexts
from common.exceptions import (
    EstimateUnavailable,
    InvalidEstimate,
    PassNotifierError,
    PermissionDenied,
)

from .config import SchedulerConfig
from .interfaces import EstimateSource, NotificationSink
from .state import Phase, ScheduleState
from .timers import TimerRegistry

logger = logging.getLogger("iss-notifier.scheduler")


def parse_estimate(value: Any) -> float:
    """
    Convert a raw estimate to minutes.

    :raises InvalidEstimate: If the value is not numeric or not finite.
    """
    try:
        minutes = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidEstimate(f"Invalid time to ISS value: {value!r}", value=value) from e
    if not math.isfinite(minutes):
        raise InvalidEstimate(f"Invalid time to ISS value: {value!r}", value=value)
    return minutes


def staged_alert_text(threshold: float):
    """Title and body of the alert sent ``threshold`` minutes before range entry."""
    if threshold in AlertTexts.STAGED:
        return AlertTexts.STAGED[threshold]
    return AlertTexts.STAGED_TITLE.format(minutes=threshold), AlertTexts.STAGED_BODY


class PassScheduler:
    """
    Schedules the alerts of one ISS pass for one observer session.

    Lifecycle:
    - ``arm()`` reads a fresh estimate and schedules the staged alerts and the
      in-range alert (phase ARMED)
    - the in-range alert starts a watcher that polls the estimate every
      ``watch_interval_ms`` until the ISS has left range or ``max_watch_ticks``
      polls have run (phase WATCHING)
    - ``cancel()`` drops everything and returns to IDLE; the scheduler can be
      armed again at any time

    Every ``arm()`` and ``cancel()`` clears all pending jobs first, so the most
    recent call always wins and alerts are never duplicated.
    """

    def __init__(
        self,
        estimate_source: EstimateSource,
        sink: NotificationSink,
        timers: TimerRegistry,
        config: Optional[SchedulerConfig] = None,
        on_error: Optional[Callable[[str], None]] = None,
        on_phase_change: Optional[Callable[[Phase], None]] = None,
    ):
        """
        Initialize the pass scheduler.

        Args:
            estimate_source: Source of "minutes until in range" estimates
            sink: Notification sink alerts are delivered through
            timers: TimerRegistry owning the alert and watcher jobs
            config: Thresholds and watcher options (defaults if omitted)
            on_error: Receives a message for every error, including the ones the watcher survives
            on_phase_change: Called with the new phase whenever the phase changes
        """
        self.estimate_source = estimate_source
        self.sink = sink
        self.timers = timers
        self.config = config or SchedulerConfig()
        self.on_error = on_error
        self.on_phase_change = on_phase_change
        self.state = ScheduleState()

    @property
    def phase(self) -> Phase:
        return self.state.phase

    def snapshot(self) -> Dict[str, Any]:
        """Current scheduling state, for status output."""
        return {
            "phase": self.state.phase.value,
            "watch_ticks": self.state.watch_ticks,
            "in_flight_poll": self.state.in_flight_poll,
            "pending": [
                {"name": handle.name, "delay_ms": handle.delay_ms}
                for handle in self.timers.pending_actions
            ],
            "watching": self.timers.has_watcher,
        }

    # ============================================================================
    # PUBLIC API
    # ============================================================================

    async def arm(self) -> Optional[float]:
        """
        Schedule the alerts for the next pass from a fresh estimate.

        Any previous schedule is dropped first. If a later ``arm()`` or
        ``cancel()`` runs while this call is waiting on the sink or the
        estimate source, this call schedules nothing and returns None.

        Returns:
            The estimate (minutes until in range) the alerts were scheduled from

        Raises:
            PermissionDenied: The sink refused permission to notify
            EstimateUnavailable: The estimate source failed
            InvalidEstimate: The estimate is not a finite number
        """
        self.cancel()
        generation = self.state.generation

        try:
            await self._ensure_permission()
            if self._superseded(generation):
                logger.debug("Arm superseded while waiting for notification permission")
                return None

            raw = await self._read_estimate()
            if self._superseded(generation):
                logger.debug("Arm superseded while waiting for the estimate")
                return None

            minutes = parse_estimate(raw)
            self._schedule_alerts(minutes)
            return minutes

        except Exception as e:
            if not self._superseded(generation):
                self.cancel()
            self._report_error(f"Failed to schedule pass alerts: {e}")
            raise

    def cancel(self) -> None:
        """Drop every pending alert and the watcher and return to IDLE. Always safe to call."""
        cancelled = self.timers.cancel_all()
        self.state.generation += 1
        self.state.reset_watch()
        if cancelled:
            logger.info(f"Cancelled {cancelled} pending pass alert job(s)")
        self._set_phase(Phase.IDLE)

    # ============================================================================
    # ARMING
    # ============================================================================

    async def _ensure_permission(self) -> None:
        if await self.sink.is_permission_granted():
            return
        permission = await self.sink.request_permission()
        if permission != PERMISSION_GRANTED:
            raise PermissionDenied()

    async def _read_estimate(self) -> Any:
        try:
            return await self.estimate_source.read()
        except PassNotifierError:
            raise
        except Exception as e:
            raise EstimateUnavailable(f"Estimate source failed: {e}") from e

    def _schedule_alerts(self, minutes: float) -> None:
        for threshold in self.config.staged_thresholds:
            if minutes >= threshold:
                title, body = staged_alert_text(threshold)
                self.timers.schedule(
                    (minutes - threshold) * MS_PER_MINUTE,
                    partial(self._send, title, body),
                    name=f"alert_{threshold:g}min",
                )

        if minutes <= 0:
            logger.info(f"ISS already in range (estimate {minutes:g} min)")
            self._send(AlertTexts.IN_RANGE_TITLE, AlertTexts.IN_RANGE_BODY)
            self._start_watcher()
            return

        self.timers.schedule(max(0.0, minutes) * MS_PER_MINUTE, self._on_in_range, name="in_range")
        self._set_phase(Phase.ARMED)
        logger.info(
            f"Armed {self.timers.pending_count} pass alert(s), ISS in range in {minutes:g} min"
        )

    def _on_in_range(self) -> None:
        if self.state.phase is not Phase.ARMED:
            return
        self._send(AlertTexts.IN_RANGE_TITLE, AlertTexts.IN_RANGE_BODY)
        self._start_watcher()

    # ============================================================================
    # WATCHING
    # ============================================================================

    def _start_watcher(self) -> None:
        if self.timers.has_watcher:
            return
        self.state.reset_watch()
        self.timers.schedule_recurring(
            self.config.watch_interval_ms, self._poll, name="out_of_range_watcher"
        )
        self._set_phase(Phase.WATCHING)
        logger.info(
            f"Watching for the end of the pass every {self.config.watch_interval_ms / 1000:g}s "
            f"(at most {self.config.max_watch_ticks} checks)"
        )

    async def _poll(self) -> None:
        """One watcher tick."""
        if self.state.phase is not Phase.WATCHING:
            return
        if self.state.in_flight_poll:
            logger.debug("Previous range check still running, skipping this tick")
            return

        generation = self.state.generation
        self.state.in_flight_poll = True
        try:
            minutes = await self._poll_estimate()
        finally:
            if not self._superseded(generation):
                self.state.in_flight_poll = False

        if self._superseded(generation) or self.state.phase is not Phase.WATCHING:
            logger.debug("Discarding range check result of a cancelled watch")
            return

        if minutes is not None and minutes > 0:
            logger.info(f"ISS left range (next pass in {minutes:g} min)")
            self._send(AlertTexts.OUT_OF_RANGE_TITLE, AlertTexts.OUT_OF_RANGE_BODY)
            self.cancel()
            return

        self.state.watch_ticks += 1
        logger.debug(f"ISS still in range, check {self.state.watch_ticks}/{self.config.max_watch_ticks}")
        if self.state.watch_ticks >= self.config.max_watch_ticks:
            logger.info(f"Giving up watching after {self.state.watch_ticks} range checks")
            self.cancel()

    async def _poll_estimate(self) -> Optional[float]:
        """Read one estimate for the watcher; None when it failed or is not a finite number."""
        try:
            raw = await self._read_estimate()
        except PassNotifierError as e:
            # any failed read still counts as a completed check
            self._report_error(f"Failed while checking ISS range: {e}")
            return None

        try:
            return parse_estimate(raw)
        except InvalidEstimate as e:
            logger.debug(f"Ignoring range check result: {e}")
            return None

    # ============================================================================
    # HELPER METHODS
    # ============================================================================

    def _superseded(self, generation: int) -> bool:
        return self.state.generation != generation

    def _set_phase(self, phase: Phase) -> None:
        if self.state.phase is phase:
            return
        previous = self.state.phase
        self.state.phase = phase
        logger.debug(f"Phase {previous.value} -> {phase.value}")
        if self.on_phase_change is not None:
            try:
                self.on_phase_change(phase)
            except Exception as e:
                logger.error(f"Error in phase change callback: {e}")
                logger.exception(e)

    def _send(self, title: str, body: str) -> None:
        logger.info(f"Sending alert: {title} - {body}")
        try:
            self.sink.send(title, body)
        except Exception as e:
            self._report_error(f"Failed to send notification '{title}': {e}")

    def _report_error(self, message: str) -> None:
        logger.error(message)
        if self.on_error is not None:
            try:
                self.on_error(message)
            except Exception as e:
                logger.error(f"Error in error callback: {e}")
                logger.exception(e)
