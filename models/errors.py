"""Error taxonomy for the dispersion engine.

``InvalidInputError`` signals a caller bug (negative mass, non-finite
coordinates, unknown stability class).  ``DegenerateConditionError`` signals
a physically valid state in which the Gaussian plume model does not apply
(near-calm air).  Callers are expected to treat the two differently.
"""


class DispersionError(Exception):
    """Base exception for all dispersion engine errors."""


class InvalidInputError(DispersionError, ValueError):
    """Raised when an input value cannot come from a correct caller."""


class DegenerateConditionError(DispersionError):
    """Raised when wind speed is below the calm-air floor.

    Attributes:
        wind_speed: The wind speed that was supplied (m/s).
        min_wind_speed: The floor in force for the calculation (m/s).
    """

    def __init__(self, wind_speed: float, min_wind_speed: float):
        self.wind_speed = wind_speed
        self.min_wind_speed = min_wind_speed
        super().__init__(
            f"Calm conditions: wind speed {wind_speed:.2f} m/s is below "
            f"{min_wind_speed:.2f} m/s, Gaussian plume model invalid"
        )


class ContourOrderError(DispersionError):
    """Raised when a higher contour level extends past a lower one on some ray."""
