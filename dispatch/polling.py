"""
Purpose: The time-based "heartbeat" for candidate lists.
What it does:
Candidate lists are pulled on a fixed interval, not pushed. This module makes that
explicit: a PollingTask owns one callback and one interval, and the feeds below own
the latest result instead of it living in ambient client state.

- DriverRideFeed: pending rides near a driver, every ~10 s
- RiderDriverFeed: drivers near a pickup, every ~30 s

Staleness of "available drivers / rides" is bounded by roughly one interval.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Generic, List, Optional, TypeVar

from common.exceptions import DispatchError
from drivers.models import CandidateDriver
from drivers.selection import nearest
from routing.geo import Location

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PollingTask(Generic[T]):
    """
    Runs `callback` every `interval_seconds` until stopped.
    Dispatch errors in a cycle are logged and the next cycle still runs.
    """

    def __init__(self, name: str, interval_seconds: float, callback: Callable[[], T]):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self.name = name
        self.interval_seconds = interval_seconds
        self.callback = callback
        self.runs = 0
        self.last_result: Optional[T] = None
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def run_once(self) -> T:
        result = self.callback()
        self.runs += 1
        self.last_result = result
        return result

    def run_forever(self, stop_event: Optional[threading.Event] = None, max_runs: Optional[int] = None) -> None:
        stop_event = stop_event or self._stop_event
        while not stop_event.is_set():
            try:
                self.run_once()
            except DispatchError as exc:
                logger.warning("Polling task %s failed this cycle: %s", self.name, exc.message)
            if max_runs is not None and self.runs >= max_runs:
                return
            stop_event.wait(self.interval_seconds)

    def start(self) -> threading.Thread:
        """
        Run in a daemon thread until stop() is called.
        """
        if self._thread is not None and self._thread.is_alive():
            return self._thread
        self._stop_event.clear()
        self._thread = threading.Thread(target=self.run_forever, name=self.name, daemon=True)
        self._thread.start()
        return self._thread

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None


class DriverRideFeed:
    """
    What a driver's "available rides" screen shows.
    """

    def __init__(self, dispatcher, driver_id: str, interval_seconds: Optional[float] = None):
        self.dispatcher = dispatcher
        self.driver_id = driver_id
        self.offers = []
        self.task = PollingTask(
            f"driver-feed-{driver_id}",
            dispatcher.policy.driver_poll_interval_seconds if interval_seconds is None else interval_seconds,
            self.refresh,
        )

    def refresh(self):
        self.offers = self.dispatcher.available_rides(self.driver_id)
        return self.offers


class RiderDriverFeed:
    """
    What a rider's booking screen shows: nearby drivers and the default (nearest) pick.
    """

    def __init__(self, dispatcher, pickup: Location, radius_km: Optional[float] = None,
                 interval_seconds: Optional[float] = None):
        self.dispatcher = dispatcher
        self.pickup = pickup
        self.radius_km = radius_km
        self.candidates: List[CandidateDriver] = []
        self.task = PollingTask(
            "rider-feed",
            dispatcher.policy.rider_poll_interval_seconds if interval_seconds is None else interval_seconds,
            self.refresh,
        )

    @property
    def selected(self) -> Optional[CandidateDriver]:
        return nearest(self.candidates)

    def refresh(self) -> List[CandidateDriver]:
        self.candidates = self.dispatcher.nearby_drivers(self.pickup, self.radius_km)
        return self.candidates
