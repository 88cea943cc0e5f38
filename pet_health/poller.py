"""Timer-driven report refresh for the currently selected tracker."""

import threading
from dataclasses import dataclass
from typing import Callable, Optional, Set

from .config import settings
from .logging_utils import setup_logger
from .models import ReportResult

logger = setup_logger(__name__)


@dataclass(frozen=True)
class PollTicket:
    """Identity and generation a poll was issued for."""

    generation: int
    pet_id: str


class ReportPoller:
    """Poll loop with last-request-wins semantics.

    Selecting another tracker bumps the generation; a response that arrives
    for an older generation is dropped instead of overwriting the newer
    report. At most one poll per tracker is in flight at a time.
    """

    def __init__(
        self,
        fetch: Callable[[str], ReportResult],
        pet_id: str,
        interval_seconds: Optional[float] = None,
        on_report: Optional[Callable[[ReportResult], None]] = None,
    ):
        self._fetch = fetch
        self._on_report = on_report
        self.interval_seconds = interval_seconds or settings.POLL_INTERVAL_SECONDS

        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._generation = 0
        self._pet_id = pet_id
        self._in_flight: Set[str] = set()
        self.latest: Optional[ReportResult] = None

    @property
    def pet_id(self) -> str:
        return self._pet_id

    @property
    def generation(self) -> int:
        return self._generation

    def select(self, pet_id: str) -> int:
        """Switch to another tracker; any in-flight result becomes stale."""
        with self._lock:
            self._generation += 1
            self._pet_id = pet_id
            self.latest = None
            logger.info(f"Selected tracker {pet_id} (generation {self._generation})")
            return self._generation

    def _issue(self) -> Optional[PollTicket]:
        with self._lock:
            if self._pet_id in self._in_flight:
                return None
            self._in_flight.add(self._pet_id)
            return PollTicket(generation=self._generation, pet_id=self._pet_id)

    def poll_once(self) -> Optional[ReportResult]:
        """Fetch one report for the current tracker.

        Returns:
            The result, or None when a poll for the same tracker was already
            running or the result was superseded while in flight.
        """
        ticket = self._issue()
        if ticket is None:
            logger.debug(f"Poll for tracker {self._pet_id} already in flight, skipping")
            return None

        try:
            result = self._fetch(ticket.pet_id)
        finally:
            with self._lock:
                self._in_flight.discard(ticket.pet_id)

        with self._lock:
            if ticket.generation != self._generation:
                logger.info(
                    f"Discarding stale report for tracker {ticket.pet_id} "
                    f"(generation {ticket.generation}, current {self._generation})"
                )
                return None
            self.latest = result

        if self._on_report is not None:
            self._on_report(result)
        return result

    def run(self) -> None:
        """Poll immediately, then every ``interval_seconds`` until ``stop()``."""
        logger.info(f"Polling every {self.interval_seconds}s")
        while not self._stop.is_set():
            try:
                self.poll_once()
            except Exception as e:
                logger.error(f"Poll failed: {e}", exc_info=True)
            self._stop.wait(self.interval_seconds)

    def stop(self) -> None:
        self._stop.set()
