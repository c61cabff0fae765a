"""
Global configuration and constants for the Chemical Release Dispersion Engine.
"""

# --- Physical Constants ---
GRAVITY = 9.81                  # m/s^2
GAS_CONSTANT = 8.314            # J/(mol*K)
KELVIN_OFFSET = 273.15
STANDARD_PRESSURE_HPA = 1013.25
AIR_MOLAR_MASS = 28.97          # g/mol (dry air average)
EARTH_RADIUS_M = 6371000.0
MG_PER_G = 1000.0

# --- Wind ---
# Below this speed the steady-state plume has no meaningful direction or
# transport; the engine refuses to evaluate (or floors, by caller policy).
MIN_WIND_SPEED_MPS = 0.5
HIGH_WIND_NEUTRAL_MPS = 6.0     # At or above this, mechanical turbulence forces class D
CALM_POLICY = "reject"          # "reject" or "floor"

# --- Stability Classification ---
DAY_START_HOUR = 6              # Local hour, inclusive
DAY_END_HOUR = 18               # Local hour, exclusive
DEFAULT_CLOUD_COVER = 0.5       # Fraction used when cloud cover is missing
STRONG_INSOLATION_MAX_COVER = 0.3
MODERATE_INSOLATION_MAX_COVER = 0.7
SLIGHT_INSOLATION_MAX_COVER = 0.95  # At or above: overcast -> neutral
NIGHT_CLOUDY_MIN_COVER = 0.5
NIGHT_OVERCAST_MIN_COVER = 0.9
FALLBACK_STABILITY_CLASS = "D"

# Upper edges (m/s) of the wind-speed bands used by the Pasquill-Gifford table
STABILITY_WIND_BANDS = (2.0, 3.0, 5.0, 6.0)

# Pasquill-Gifford table, one class per wind band
DAY_STABILITY_TABLE = {
    "strong": ("A", "A", "B", "C"),
    "moderate": ("A", "B", "B", "C"),
    "slight": ("B", "C", "C", "D"),
    "overcast": ("D", "D", "D", "D"),
}
NIGHT_STABILITY_TABLE = {
    "clear": ("F", "F", "E", "D"),
    "cloudy": ("E", "E", "D", "D"),
    "overcast": ("D", "D", "D", "D"),
}

# --- Pasquill-Gifford Stability Classes ---
# Coefficients for sigma_y and sigma_z: sigma = a * x^b
# x in meters, sigma in meters
# Source: Turner (1970), adapted for continuous point source
DISPERSION_COEFFICIENTS = {
    "A": {"sigma_y": (0.3658, 0.9031), "sigma_z": (0.192, 1.2044)},
    "B": {"sigma_y": (0.2751, 0.9031), "sigma_z": (0.156, 1.0857)},
    "C": {"sigma_y": (0.2090, 0.9031), "sigma_z": (0.116, 0.9865)},
    "D": {"sigma_y": (0.1471, 0.9031), "sigma_z": (0.079, 0.9031)},
    "E": {"sigma_y": (0.1046, 0.9031), "sigma_z": (0.063, 0.8314)},
    "F": {"sigma_y": (0.0722, 0.9031), "sigma_z": (0.053, 0.7540)},
}

# Briggs (1973) open-country curves: sigma = a * x * (1 + b*x)^c
BRIGGS_RURAL_COEFFICIENTS = {
    "A": {"sigma_y": (0.22, 0.0001, -0.5), "sigma_z": (0.20, 0.0, 1.0)},
    "B": {"sigma_y": (0.16, 0.0001, -0.5), "sigma_z": (0.12, 0.0, 1.0)},
    "C": {"sigma_y": (0.11, 0.0001, -0.5), "sigma_z": (0.08, 0.0002, -0.5)},
    "D": {"sigma_y": (0.08, 0.0001, -0.5), "sigma_z": (0.06, 0.0015, -0.5)},
    "E": {"sigma_y": (0.06, 0.0001, -0.5), "sigma_z": (0.03, 0.0003, -1.0)},
    "F": {"sigma_y": (0.04, 0.0001, -0.5), "sigma_z": (0.016, 0.0003, -1.0)},
}

# Range (m) over which the curves above were fitted to field data
DISPERSION_VALID_RANGE_M = (100.0, 10000.0)
DEFAULT_DISPERSION_TABLE = "pasquill_gifford"

# --- Plume Rise ---
PLUME_RISE_COEFFICIENT = 2.6            # Final buoyant rise
TRANSITIONAL_RISE_COEFFICIENT = 1.6     # Gradual (2/3-law) rise
# Briggs distance to final rise x_f = a * F^b, switching at F = 55 m^4/s^3
FINAL_RISE_FLUX_BREAK = 55.0
FINAL_RISE_DISTANCE_WEAK = (49.0, 5.0 / 8.0)
FINAL_RISE_DISTANCE_STRONG = (119.0, 2.0 / 5.0)

# --- Health Impact ---
# Safety threshold (mg/m^3) by hazard class
HAZARD_THRESHOLDS_MG_M3 = {
    "highly_toxic": 0.1,
    "toxic": 1.0,
    "toxic_gas": 1.0,
    "corrosive": 5.0,
}
DEFAULT_HAZARD_THRESHOLD_MG_M3 = 10.0
# Upper edge of each impact band as a multiple of the threshold
IMPACT_BANDS = (
    (0.1, "safe"),
    (0.5, "low"),
    (1.0, "moderate"),
    (5.0, "high"),
)
IMPACT_CRITICAL = "critical"

# --- Contours ---
DEFAULT_CONTOUR_LEVELS = (0.1, 1.0, 10.0, 100.0)   # mg/m^3
CONTOUR_SECTORS = 36            # 10 degree steps
CONTOUR_RESOLUTION_M = 50.0
CONTOUR_MAX_DISTANCE_M = 10000.0
MAX_CONTOUR_SAMPLES = 2_000_000  # sectors x distance steps

# --- Receptors ---
RECEPTOR_HEIGHT_M = 1.5         # Breathing height for named receptors

# --- Peak Search ---
PEAK_SEARCH_MAX_DISTANCE_M = 10000.0

# --- Monitoring ---
MONITOR_INTERVAL_S = 30.0

# --- Visualization ---
SEVERITY_COLORS = (
    (1.0, "#00ff00"),           # Green - below 1 mg/m^3
    (10.0, "#ffff00"),          # Yellow - caution
    (100.0, "#ff8800"),         # Orange - warning
    (float("inf"), "#ff0000"),  # Red - danger
)
IMPACT_COLORS = {
    "safe": "#00ff00",
    "low": "#ffff00",
    "moderate": "#ff8800",
    "high": "#ff0000",
    "critical": "#b000ff",
}
