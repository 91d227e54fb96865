"""Global default values and constants.

All numeric constants used throughout the pv_yield_model package must be defined
here rather than as inline literals. Import from this module wherever a constant
is needed to ensure a single source of truth and full traceability.
"""

# ---------------------------------------------------------------------------
# Time constants
# ---------------------------------------------------------------------------

HOURS_PER_YEAR: int = 8760
"""Number of hours in a non-leap year (365 × 24), used for the capacity factor."""

MONTHS_PER_YEAR: int = 12
"""Highest valid month index in a PVGIS monthly series."""

# ---------------------------------------------------------------------------
# PVGIS API
# ---------------------------------------------------------------------------

PVGIS_API_ROOT_URL: str = "https://re.jrc.ec.europa.eu/api/"
"""Root URL of the EU PVGIS REST API (the version segment is appended)."""

PVGIS_API_VERSION: str = "v5_3"
"""Default PVGIS API version."""

PVGIS_API_VERSION_NSRDB: str = "v5_2"
"""API version required by the PVGIS-NSRDB radiation database."""

PVGIS_NSRDB_DATABASE: str = "PVGIS-NSRDB"
"""Radiation database that is only served by the older API version."""

PVGIS_CACHE_DIR: str = "~/.pv_yield_cache"
"""Local directory for caching raw PVGIS JSON responses."""

PVGIS_PVCALC_ENDPOINT: str = "PVcalc"
"""PVGIS endpoint returning monthly and annual grid-connected PV yield."""

PVGIS_HORIZON_ENDPOINT: str = "printhorizon"
"""PVGIS endpoint returning the terrain horizon profile of a location."""

PVGIS_OUTPUT_FORMAT: str = "json"
"""Output format requested from PVGIS API."""

PVGIS_RETRY_MAX: int = 5
"""Maximum number of HTTP attempts for a PVGIS API call."""

PVGIS_RETRY_BACKOFF_FACTOR: float = 1.0
"""Exponential backoff factor (seconds) between PVGIS retries."""

PVGIS_RETRY_BACKOFF_MAX_S: float = 10.0
"""Upper bound of a single backoff wait in seconds."""

PVGIS_REQUEST_TIMEOUT_S: int = 30
"""HTTP request timeout in seconds for PVGIS API calls."""

PVGIS_MIN_REQUEST_INTERVAL_S: float = 0.06
"""Minimum spacing between two live PVGIS requests (PVGIS allows ~20 req/s)."""

# ---------------------------------------------------------------------------
# Site shading (area type) factors
# ---------------------------------------------------------------------------

SHADING_FACTOR_RURAL: float = 1.0
"""Yield factor for open rural sites (no adjustment)."""

SHADING_FACTOR_SUBURBAN: float = 0.92
"""Yield factor for suburban sites (trees, neighbouring houses)."""

SHADING_FACTOR_URBAN: float = 0.85
"""Yield factor for dense urban sites (surrounding buildings)."""

# ---------------------------------------------------------------------------
# PV system request defaults
# ---------------------------------------------------------------------------

DEFAULT_LOSS_PERCENT: float = 14.0
"""Default total system loss in percent passed to PVGIS."""

DEFAULT_PV_TECH: str = "crystSi"
"""Default PV module technology."""

DEFAULT_MOUNTING_PLACE: str = "free"
"""Default mounting position (free-standing)."""

DEFAULT_SIMULATION_NAME: str = "simulation"
"""Name used for output files when the request carries none."""

# ---------------------------------------------------------------------------
# Economics defaults
# ---------------------------------------------------------------------------

DEFAULT_SELF_CONSUMPTION: float = 0.5
"""Default fraction of generated energy consumed on site."""

DEFAULT_PRICE_SELL: float = 0.0
"""Default feed-in price per exported kWh."""

DEFAULT_OPEX_YEARLY: float = 0.0
"""Default yearly operating cost."""

DEFAULT_DEGRADATION: float = 0.005
"""Default annual yield degradation (0.5 %)."""

DEFAULT_ANALYSIS_YEARS: int = 25
"""Default analysis horizon in years."""

DEFAULT_DISCOUNT_RATE: float = 0.06
"""Default discount rate (6 %) used for NPV calculation."""

DEFAULT_PRICE_ESCALATION: float = 0.0
"""Default annual escalation of the electricity buy price."""

# ---------------------------------------------------------------------------
# Scenario & sensitivity sweeps
# ---------------------------------------------------------------------------

SCENARIO_SELF_CONSUMPTION_VALUES: tuple[float, ...] = (0.3, 0.5, 0.7)
"""Self-consumption levels evaluated by the discrete scenario sweep."""

SCENARIO_PRICE_BUY_MULTIPLIERS: tuple[float, ...] = (0.8, 1.0, 1.2)
"""Multipliers of the base buy price evaluated by the discrete scenario sweep."""

SENSITIVITY_1D_PRICE_RANGE: tuple[float, float] = (0.5, 1.5)
"""Buy-price multiplier range of the 1D sensitivity sweep."""

SENSITIVITY_1D_POINTS: int = 11
"""Number of points of the 1D sensitivity sweep."""

SENSITIVITY_2D_PRICE_RANGE: tuple[float, float] = (0.6, 1.4)
"""Buy-price multiplier range (x axis) of the 2D sensitivity grid."""

SENSITIVITY_2D_SELF_CONSUMPTION_RANGE: tuple[float, float] = (0.2, 0.9)
"""Self-consumption range (y axis) of the 2D sensitivity grid."""

SENSITIVITY_2D_POINTS: int = 9
"""Number of points per axis of the 2D sensitivity grid."""

# ---------------------------------------------------------------------------
# Monte Carlo defaults
# ---------------------------------------------------------------------------

DEFAULT_MC_TRIALS: int = 2000
"""Default number of Monte Carlo trials."""

MC_HISTOGRAM_BINS: int = 20
"""Number of equal-width histogram bins for payback and NPV distributions."""

MC_UNIFORM_FLOOR: float = 1e-10
"""Replacement for a zero first uniform draw so that log(u1) stays finite."""

MC_PERCENTILES: tuple[float, float, float] = (0.1, 0.5, 0.9)
"""Reported percentiles (as fractions): P10, P50, P90."""

# ---------------------------------------------------------------------------
# Break-even solver
# ---------------------------------------------------------------------------

DEFAULT_TARGET_PAYBACK_YEARS: int = 10
"""Default payback horizon used for the break-even CAPEX."""

BREAK_EVEN_PRICE_LOWER: float = 0.01
"""Lower bound of the break-even buy price bisection interval."""

BREAK_EVEN_PRICE_UPPER_MULTIPLIER: float = 3.0
"""Upper bound of the bisection interval as a multiple of the base price."""

BREAK_EVEN_PRICE_UPPER_MIN: float = 1.0
"""The bisection upper bound is never below this price."""

BREAK_EVEN_MAX_ITERATIONS: int = 50
"""Maximum number of bisection iterations."""

BREAK_EVEN_NPV_TOLERANCE: float = 1.0
"""|NPV| below which the bisection midpoint is accepted immediately."""

BREAK_EVEN_NPV_FALLBACK_TOLERANCE: float = 100.0
"""Looser |NPV| accepted for the final midpoint when the bisection did not converge."""

# ---------------------------------------------------------------------------
# Capacity optimisation
# ---------------------------------------------------------------------------

DEFAULT_KWP_RANGE: tuple[float, float, float] = (1.0, 10.0, 0.5)
"""Default (min, max, step) system-size sweep in kWp."""

KWP_RANGE_STEP_TOLERANCE: float = 0.5
"""Fraction of the step added to the upper bound to absorb floating-point drift."""

# ---------------------------------------------------------------------------
# Insight thresholds
# ---------------------------------------------------------------------------

INSIGHT_HIGH_LOSSES_PCT: float = 20.0
"""System losses above this percentage trigger a warning."""

INSIGHT_MAX_ASPECT_FROM_SOUTH_DEG: float = 90.0
"""|aspect| above this angle (0 = south) triggers an orientation warning."""

INSIGHT_HIGH_VARIABILITY_RATIO: float = 0.05
"""SD_y / E_y above this ratio triggers a variability note."""

INSIGHT_GREAT_SPECIFIC_YIELD: float = 1200.0
"""Specific yield (kWh/kWp) above which the site is flagged as excellent."""

# ---------------------------------------------------------------------------
# Output defaults
# ---------------------------------------------------------------------------

DEFAULT_OUTPUT_DIR: str = "output"
"""Default root directory for simulation result files."""

CSV_DELIMITER: str = ","
"""Delimiter used in all output CSV files."""

FLOAT_PRECISION: int = 4
"""Number of decimal places for floating-point values in output CSVs."""

CURRENCY_PRECISION: int = 2
"""Number of decimal places for monetary values in output CSVs."""
