"""
Weather state and provider abstraction.

WeatherState is the validated, strongly typed weather value the engine
consumes.  Loosely typed payloads from weather collaborators are turned
into a WeatherState once, at the boundary, with ``WeatherState.from_mapping``.

WeatherProvider is the pluggable interface to those collaborators.  The
stub and replay providers return configurable values for development and
testing.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Iterable, List, Mapping, Optional

from config import STANDARD_PRESSURE_HPA
from models.errors import InvalidInputError


def percent_to_fraction(percent: float) -> float:
    """Convert a 0-100 cloud cover report to a 0-1 fraction."""
    if not math.isfinite(percent) or percent < 0 or percent > 100:
        raise InvalidInputError(f"cloud cover must be a percentage in [0, 100], got {percent!r}")
    return percent / 100.0


@dataclass(frozen=True)
class WeatherState:
    """A single surface weather observation.

    Args:
        wind_speed: m/s, >= 0.  Zero is legal data (calm); whether a plume
            can be computed is the engine's decision.
        wind_direction: Meteorological degrees (direction wind comes FROM),
            normalised to [0, 360).
        temperature: Ambient air temperature (deg C).
        cloud_cover: Fraction 0-1, or None if unknown.
        timestamp: Local observation time.
        pressure: Surface pressure (hPa).
        station_id: Optional station identifier.
    """

    wind_speed: float
    wind_direction: float
    temperature: float = 15.0
    cloud_cover: Optional[float] = None
    timestamp: Optional[datetime] = None
    pressure: float = STANDARD_PRESSURE_HPA
    station_id: Optional[str] = None

    def __post_init__(self):
        for name in ("wind_speed", "wind_direction", "temperature", "pressure"):
            value = getattr(self, name)
            if value is None or not math.isfinite(value):
                raise InvalidInputError(f"{name} must be a finite number, got {value!r}")
        if self.wind_speed < 0:
            raise InvalidInputError("Wind speed must be >= 0")
        if self.pressure <= 0:
            raise InvalidInputError("Pressure must be > 0")
        object.__setattr__(self, "wind_direction", float(self.wind_direction) % 360.0)
        if self.cloud_cover is not None:
            cover = float(self.cloud_cover)
            if not math.isfinite(cover) or cover < 0 or cover > 1:
                raise InvalidInputError(
                    f"cloud_cover must be a fraction in [0, 1], got {self.cloud_cover!r}"
                )
            object.__setattr__(self, "cloud_cover", cover)

    @property
    def is_calm(self) -> bool:
        return self.wind_speed == 0.0

    @classmethod
    def from_mapping(cls, payload: Mapping) -> "WeatherState":
        """
        Build a WeatherState from a loosely typed weather payload.

        Accepted keys: ``wind_speed``, ``wind_direction``, ``temperature``,
        ``cloud_cover`` (percent 0-100, as weather services report it;
        ``cloud_cover_total`` is accepted as an alias), ``timestamp``
        (datetime or ISO 8601 string; ``observed_at``/``recorded_at``
        aliases), ``pressure``, ``station_id``.

        Raises:
            InvalidInputError: when a required field is missing or malformed.
        """
        try:
            wind_speed = float(payload["wind_speed"])
            wind_direction = float(payload["wind_direction"])
            cloud = payload.get("cloud_cover", payload.get("cloud_cover_total"))
            if cloud is not None:
                cloud = percent_to_fraction(float(cloud))
            temperature = payload.get("temperature")
            temperature = 15.0 if temperature is None else float(temperature)
            pressure = payload.get("pressure")
            pressure = STANDARD_PRESSURE_HPA if pressure is None else float(pressure)
        except KeyError as exc:
            raise InvalidInputError(f"Weather payload missing {exc.args[0]!r}") from exc
        except (TypeError, ValueError) as exc:
            raise InvalidInputError(f"Malformed field in weather payload: {exc}") from exc

        timestamp = payload.get("timestamp", payload.get("observed_at", payload.get("recorded_at")))
        if isinstance(timestamp, str):
            try:
                timestamp = datetime.fromisoformat(timestamp)
            except ValueError as exc:
                raise InvalidInputError(f"Bad timestamp {timestamp!r}") from exc

        return cls(
            wind_speed=wind_speed,
            wind_direction=wind_direction,
            temperature=temperature,
            cloud_cover=cloud,
            timestamp=timestamp,
            pressure=pressure,
            station_id=payload.get("station_id"),
        )

    def to_dict(self) -> dict:
        return {
            "wind_speed": self.wind_speed,
            "wind_direction": self.wind_direction,
            "temperature": self.temperature,
            "cloud_cover": self.cloud_cover,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "pressure": self.pressure,
            "station_id": self.station_id,
        }


class WeatherProvider(ABC):
    """Abstract base class for weather data sources."""

    @abstractmethod
    def get_current_weather(self) -> WeatherState:
        """Return the most recent weather observation."""
        ...

    @abstractmethod
    def get_forecast(self, hours_ahead: int = 6) -> List[WeatherState]:
        """Return forecast states for the next N hours.

        Args:
            hours_ahead: Number of hours to forecast.

        Returns:
            List of WeatherState, one per hour.
        """
        ...


class StubWeatherProvider(WeatherProvider):
    """Configurable stub that returns hardcoded weather.

    Args:
        speed: Wind speed (m/s).
        direction: Wind direction (meteorological degrees).
        temperature: Air temperature (deg C).
        cloud_cover: Cloud cover fraction.
        timestamp: Fixed observation time; ``None`` uses the current time.
        station_id: Optional station identifier.
    """

    def __init__(
        self,
        speed: float = 3.0,
        direction: float = 270.0,
        temperature: float = 15.0,
        cloud_cover: Optional[float] = 0.5,
        timestamp: Optional[datetime] = None,
        station_id: str = "STUB-001",
    ):
        self.speed = speed
        self.direction = direction
        self.temperature = temperature
        self.cloud_cover = cloud_cover
        self.timestamp = timestamp
        self.station_id = station_id

    def get_current_weather(self) -> WeatherState:
        return WeatherState(
            wind_speed=self.speed,
            wind_direction=self.direction,
            temperature=self.temperature,
            cloud_cover=self.cloud_cover,
            timestamp=self.timestamp or datetime.now(),
            station_id=self.station_id,
        )

    def get_forecast(self, hours_ahead: int = 6) -> List[WeatherState]:
        current = self.get_current_weather()
        return [
            replace(current, timestamp=current.timestamp + timedelta(hours=h))
            for h in range(hours_ahead)
        ]


class ReplayWeatherProvider(WeatherProvider):
    """Replays a fixed sequence of observations, one per call.

    After the sequence is exhausted the last observation is repeated, which
    mimics a provider whose feed has stopped updating.
    """

    def __init__(self, states: Iterable[WeatherState]):
        self.states = list(states)
        if not self.states:
            raise InvalidInputError("ReplayWeatherProvider needs at least one state")
        self._index = 0

    def get_current_weather(self) -> WeatherState:
        state = self.states[min(self._index, len(self.states) - 1)]
        self._index += 1
        return state

    def get_forecast(self, hours_ahead: int = 6) -> List[WeatherState]:
        start = min(self._index, len(self.states) - 1)
        return self.states[start:start + hours_ahead]
