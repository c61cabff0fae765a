"""
Continuous monitoring of an ongoing release.

The engine is stateless and never decides when to run.  ContinuousMonitor
is the caller-side task that does: it polls a WeatherProvider, recomputes
the assessment only when a newer observation has arrived, and hands each
new assessment to a callback (a broadcaster, a store, a log).
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Iterable, Optional

from config import MONITOR_INTERVAL_S
from analysis.engine import DispersionEngine
from data.weather import WeatherProvider, WeatherState
from models.errors import DegenerateConditionError, DispersionError, InvalidInputError
from models.results import DispersionAssessment
from models.source import ReceptorPoint, ReleaseSource

logger = logging.getLogger(__name__)


class ContinuousMonitor:
    """Recompute a release's assessment whenever the weather updates.

    Args:
        engine: Dispersion engine to run.
        source: The ongoing release.
        provider: Weather source polled each cycle.
        on_update: Called with each new DispersionAssessment.
        receptors: Receptors evaluated every cycle.
        levels: Contour levels (mg/m^3); engine default when omitted.
        on_calm: Called with the WeatherState when the wind is too weak to
            compute a plume.
    """

    def __init__(
        self,
        engine: DispersionEngine,
        source: ReleaseSource,
        provider: WeatherProvider,
        on_update: Callable[[DispersionAssessment], None],
        receptors: Iterable[ReceptorPoint] = (),
        levels=None,
        on_calm: Optional[Callable[[WeatherState], None]] = None,
    ):
        self.engine = engine
        self.source = source
        self.provider = provider
        self.on_update = on_update
        self.receptors = list(receptors)
        self.levels = levels
        self.on_calm = on_calm
        self.last_timestamp: Optional[datetime] = None
        self.updates = 0
        self.failures = 0

    def _is_new(self, weather: WeatherState) -> bool:
        if weather.timestamp is None:
            # Untimed observations cannot be ordered; always recompute
            return True
        return self.last_timestamp is None or weather.timestamp > self.last_timestamp

    def poll_once(self) -> Optional[DispersionAssessment]:
        """
        Run one monitoring cycle.

        Returns:
            The new assessment, or None if the weather had not changed, the
            wind was calm, or the cycle failed.  Failures are logged and
            counted in ``failures``; the next cycle runs as usual.
        """
        try:
            weather = self.provider.get_current_weather()
        except DispersionError as exc:
            self.failures += 1
            logger.error("Weather provider failed: %s", exc)
            return None

        if not self._is_new(weather):
            logger.debug("No new weather since %s", self.last_timestamp)
            return None
        self.last_timestamp = weather.timestamp

        try:
            assessment = self.engine.assess(
                self.source, weather, self.receptors, self.levels
            )
        except DegenerateConditionError as exc:
            logger.warning("Skipping update for %s: %s", self.source.name or "release", exc)
            if self.on_calm is not None:
                self.on_calm(weather)
            return None
        except DispersionError as exc:
            self.failures += 1
            logger.error("Assessment failed for %s: %s", self.source.name or "release", exc)
            return None

        self.updates += 1
        self.on_update(assessment)
        return assessment

    def run(
        self,
        interval_s: float = MONITOR_INTERVAL_S,
        max_cycles: Optional[int] = None,
        stop_event: Optional[threading.Event] = None,
    ) -> int:
        """
        Poll until stopped.

        Args:
            interval_s: Seconds between polls.
            max_cycles: Stop after this many polls (None = until stopped).
            stop_event: Set from another thread to stop promptly.

        Returns:
            Number of assessments delivered.
        """
        if interval_s < 0:
            raise InvalidInputError("interval_s must be >= 0")
        stop_event = stop_event or threading.Event()

        cycles = 0
        logger.info("Monitoring %s every %.1f s", self.source.name or "release", interval_s)
        while not stop_event.is_set():
            self.poll_once()
            cycles += 1
            if max_cycles is not None and cycles >= max_cycles:
                break
            stop_event.wait(interval_s)

        logger.info("Monitor stopped after %d cycles, %d updates, %d failures",
                    cycles, self.updates, self.failures)
        return self.updates
