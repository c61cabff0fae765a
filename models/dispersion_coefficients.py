"""
Pasquill-Gifford dispersion coefficients.

Maps a stability class and downwind distance to the lateral (sigma_y) and
vertical (sigma_z) plume spread parameters.

Two coefficient families are available:

  - ``pasquill_gifford``: power-law fit to the Turner (1970) curves,
        sigma = a * x^b
  - ``briggs_rural``: Briggs (1973) open-country formulas,
        sigma = a * x * (1 + b*x)^c

Both were fitted over roughly 100 m - 10 km.  Outside that range the values
are still computed (the curves are smooth) but callers should report the
result as low confidence; see :func:`within_validity`.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np

from config import (
    BRIGGS_RURAL_COEFFICIENTS,
    DEFAULT_DISPERSION_TABLE,
    DISPERSION_COEFFICIENTS,
    DISPERSION_VALID_RANGE_M,
)
from models.errors import InvalidInputError
from models.stability import normalise_stability_class


@dataclass(frozen=True)
class DispersionTable:
    """A named set of per-class sigma coefficients.

    Args:
        name: Registry key.
        form: ``"power_law"`` (a, b) or ``"briggs"`` (a, b, c).
        coefficients: ``{class: {"sigma_y": tuple, "sigma_z": tuple}}``.
        valid_range: (min, max) downwind distance in metres.
    """

    name: str
    form: str
    coefficients: Dict[str, Dict[str, Tuple[float, ...]]]
    valid_range: Tuple[float, float] = DISPERSION_VALID_RANGE_M

    def __post_init__(self):
        if self.form not in ("power_law", "briggs"):
            raise InvalidInputError(f"Unknown coefficient form '{self.form}'")


PASQUILL_GIFFORD = DispersionTable(
    name="pasquill_gifford",
    form="power_law",
    coefficients=DISPERSION_COEFFICIENTS,
)

BRIGGS_RURAL = DispersionTable(
    name="briggs_rural",
    form="briggs",
    coefficients=BRIGGS_RURAL_COEFFICIENTS,
)

DISPERSION_TABLES = {
    PASQUILL_GIFFORD.name: PASQUILL_GIFFORD,
    BRIGGS_RURAL.name: BRIGGS_RURAL,
}


def get_table(table=None) -> DispersionTable:
    """Resolve a table name (or pass a DispersionTable through)."""
    if table is None:
        table = DEFAULT_DISPERSION_TABLE
    if isinstance(table, DispersionTable):
        return table
    if table not in DISPERSION_TABLES:
        raise InvalidInputError(
            f"Unknown dispersion table '{table}'. Use one of {sorted(DISPERSION_TABLES)}."
        )
    return DISPERSION_TABLES[table]


def _get_dispersion_coeffs(stability_class: str, table: DispersionTable) -> dict:
    """Return raw coefficient tuples for sigma_y and sigma_z."""
    return table.coefficients[normalise_stability_class(stability_class)]


def coefficients_for(stability_class: str, table=None) -> dict:
    """
    Look up the coefficients for a stability class.

    Returns:
        For power-law tables::

            {"sigma_y": {"a": ..., "b": ...}, "sigma_z": {"c": ..., "d": ...}}

        For Briggs tables each axis maps to ``{"a", "b", "c"}`` for
        ``a * x * (1 + b*x)^c``.
    """
    tbl = get_table(table)
    coeffs = _get_dispersion_coeffs(stability_class, tbl)
    if tbl.form == "power_law":
        a, b = coeffs["sigma_y"]
        c, d = coeffs["sigma_z"]
        return {"sigma_y": {"a": a, "b": b}, "sigma_z": {"c": c, "d": d}}
    return {
        axis: dict(zip(("a", "b", "c"), coeffs[axis]))
        for axis in ("sigma_y", "sigma_z")
    }


def _evaluate(form: str, coeffs: Tuple[float, ...], x: np.ndarray) -> np.ndarray:
    if form == "power_law":
        a, b = coeffs
        return a * np.power(x, b)
    a, b, c = coeffs
    return a * x * np.power(1.0 + b * x, c)


def _validate_distance(distance) -> np.ndarray:
    x = np.asarray(distance, dtype=float)
    if not np.all(np.isfinite(x)):
        raise InvalidInputError("Downwind distance must be finite.")
    if np.any(x <= 0):
        raise InvalidInputError(
            "Downwind distance must be > 0; upwind receptors have no plume."
        )
    return x


def compute_sigma(distance_downwind, stability_class: str, table=None):
    """
    Compute lateral (sigma_y) and vertical (sigma_z) dispersion parameters.

    Args:
        distance_downwind: Downwind distances in meters, all > 0.
        stability_class: Pasquill-Gifford class A-F.
        table: Table name or DispersionTable (default from config).

    Returns:
        (sigma_y, sigma_z) in meters, same shape as the input.

    Raises:
        InvalidInputError: for non-positive distances or unknown class.
    """
    tbl = get_table(table)
    coeffs = _get_dispersion_coeffs(stability_class, tbl)
    x = _validate_distance(distance_downwind)

    sigma_y = _evaluate(tbl.form, coeffs["sigma_y"], x)
    sigma_z = _evaluate(tbl.form, coeffs["sigma_z"], x)

    if sigma_y.ndim == 0:
        return float(sigma_y), float(sigma_z)
    return sigma_y, sigma_z


def sigma_y(distance, stability_class: str, table=None):
    """Lateral spread at a downwind distance (m)."""
    return compute_sigma(distance, stability_class, table)[0]


def sigma_z(distance, stability_class: str, table=None):
    """Vertical spread at a downwind distance (m)."""
    return compute_sigma(distance, stability_class, table)[1]


def within_validity(distance, table=None):
    """True where the distance lies inside the table's fitted range."""
    lo, hi = get_table(table).valid_range
    x = np.asarray(distance, dtype=float)
    inside = (x >= lo) & (x <= hi)
    if inside.ndim == 0:
        return bool(inside)
    return inside
