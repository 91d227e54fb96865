"""JSON schema definition and validation for simulation request files.

Validation uses the ``jsonschema`` library (Draft 7). The ``default`` keys
document the values :mod:`pv_yield_model.config.loader` fills in; jsonschema
itself does not apply them.

Usage::

    from pv_yield_model.config.schema import validate_request
    validate_request(data)   # raises jsonschema.ValidationError on failure
"""

from __future__ import annotations

import jsonschema

from pv_yield_model.config.defaults import (
    DEFAULT_ANALYSIS_YEARS,
    DEFAULT_DEGRADATION,
    DEFAULT_DISCOUNT_RATE,
    DEFAULT_LOSS_PERCENT,
    DEFAULT_MC_TRIALS,
    DEFAULT_MOUNTING_PLACE,
    DEFAULT_OPEX_YEARLY,
    DEFAULT_PRICE_ESCALATION,
    DEFAULT_PRICE_SELL,
    DEFAULT_PV_TECH,
    DEFAULT_SELF_CONSUMPTION,
    DEFAULT_TARGET_PAYBACK_YEARS,
)

# ---------------------------------------------------------------------------
# Re-usable sub-schemas
# ---------------------------------------------------------------------------

_NON_NEGATIVE_NUMBER = {"type": "number", "minimum": 0}
_POSITIVE_NUMBER = {"type": "number", "exclusiveMinimum": 0}
_FRACTION = {"type": "number", "minimum": 0, "maximum": 1}

PV_TECH_CHOICES = ["crystSi", "crystSi2025", "CIS", "CdTe", "Unknown"]
MOUNTING_PLACES = ["free", "building"]
AREA_TYPES = ["rural", "suburban", "urban"]

# ---------------------------------------------------------------------------
# location / pv
# ---------------------------------------------------------------------------

_LOCATION = {
    "type": "object",
    "required": ["lat", "lon"],
    "properties": {
        "lat": {"type": "number", "minimum": -90, "maximum": 90},
        "lon": {"type": "number", "minimum": -180, "maximum": 180},
        "area_type": {"enum": AREA_TYPES + [None]},
    },
    "additionalProperties": False,
}

_PV = {
    "type": "object",
    "required": ["peakpower_kw"],
    "properties": {
        "peakpower_kw": {"type": "number", "exclusiveMinimum": 0, "maximum": 1000},
        "loss_percent": {
            "type": "number",
            "minimum": 0,
            "maximum": 80,
            "default": DEFAULT_LOSS_PERCENT,
        },
        "usehorizon": {"type": "boolean", "default": True},
        "optimalangles": {"type": "boolean", "default": True},
        "angle_deg": {"type": ["number", "null"], "minimum": 0, "maximum": 90},
        # PVGIS convention: 0 = south, 90 = west, -90 = east
        "aspect_deg": {"type": ["number", "null"], "minimum": -180, "maximum": 180},
        "azimuth_from_north_deg": {"type": "number", "minimum": 0, "maximum": 360},
        "pvtechchoice": {
            "type": "string",
            "enum": PV_TECH_CHOICES,
            "default": DEFAULT_PV_TECH,
        },
        "mountingplace": {
            "type": "string",
            "enum": MOUNTING_PLACES,
            "default": DEFAULT_MOUNTING_PLACE,
        },
        "raddatabase": {"type": ["string", "null"]},
    },
    "additionalProperties": False,
}

# ---------------------------------------------------------------------------
# economics
# ---------------------------------------------------------------------------

_ECONOMICS = {
    "type": "object",
    "required": ["capex", "price_buy"],
    "properties": {
        "capex": _POSITIVE_NUMBER,
        "price_buy": _POSITIVE_NUMBER,
        "self_consumption": {**_FRACTION, "default": DEFAULT_SELF_CONSUMPTION},
        "price_sell": {**_NON_NEGATIVE_NUMBER, "default": DEFAULT_PRICE_SELL},
        "opex_yearly": {**_NON_NEGATIVE_NUMBER, "default": DEFAULT_OPEX_YEARLY},
        "degradation": {
            "type": "number",
            "minimum": 0,
            "maximum": 0.1,
            "default": DEFAULT_DEGRADATION,
        },
        "analysis_years": {
            "type": "integer",
            "minimum": 1,
            "maximum": 40,
            "default": DEFAULT_ANALYSIS_YEARS,
        },
        "discount_rate": {**_FRACTION, "default": DEFAULT_DISCOUNT_RATE},
        "price_escalation": {**_FRACTION, "default": DEFAULT_PRICE_ESCALATION},
    },
    "additionalProperties": False,
}

# ---------------------------------------------------------------------------
# Optional analysis blocks
# ---------------------------------------------------------------------------

_COST_MODEL = {
    "type": "object",
    "required": ["fixed_cost", "cost_per_kwp"],
    "properties": {
        "fixed_cost": _NON_NEGATIVE_NUMBER,
        "cost_per_kwp": _NON_NEGATIVE_NUMBER,
    },
    "additionalProperties": False,
}

_CONSUMPTION = {
    "type": "object",
    "required": ["annual_kwh", "daytime_fraction"],
    "properties": {
        "annual_kwh": _NON_NEGATIVE_NUMBER,
        "daytime_fraction": _FRACTION,
    },
    "additionalProperties": False,
}

_KWP_RANGE = {
    "type": "array",
    "items": _POSITIVE_NUMBER,
    "minItems": 3,
    "maxItems": 3,
}

_MONTE_CARLO = {
    "type": "object",
    "properties": {
        "enabled": {"type": "boolean", "default": True},
        "n_trials": {"type": "integer", "minimum": 1, "default": DEFAULT_MC_TRIALS},
        "target_payback_years": _POSITIVE_NUMBER,
        "seed": {"type": ["integer", "null"], "minimum": 0},
    },
    "additionalProperties": False,
}

_BREAK_EVEN = {
    "type": "object",
    "properties": {
        "target_payback_years": {
            "type": "integer",
            "minimum": 1,
            "default": DEFAULT_TARGET_PAYBACK_YEARS,
        },
    },
    "additionalProperties": False,
}

# ---------------------------------------------------------------------------
# Top-level schema
# ---------------------------------------------------------------------------

REQUEST_SCHEMA: dict = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "PV Yield Simulation Request",
    "type": "object",
    "required": ["location", "pv", "economics"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "location": _LOCATION,
        "pv": _PV,
        "economics": _ECONOMICS,
        "cost_model": _COST_MODEL,
        "consumption": _CONSUMPTION,
        "kwp_range": _KWP_RANGE,
        "monte_carlo": _MONTE_CARLO,
        "break_even": _BREAK_EVEN,
    },
    "additionalProperties": False,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_request(data: dict) -> None:
    """Validate a simulation request dictionary against the JSON schema.

    Raises a ``jsonschema.ValidationError`` with a descriptive message
    (including the JSON path to the failing field) if validation fails.

    Parameters
    ----------
    data:
        Parsed request dictionary (e.g. from ``json.load``).

    Raises
    ------
    jsonschema.ValidationError
        When *data* does not conform to the request schema.
    ValueError
        When cross-field constraints are violated (e.g. ``kwp_range`` with
        min > max).
    """
    validator = jsonschema.Draft7Validator(REQUEST_SCHEMA)
    errors = sorted(validator.iter_errors(data), key=lambda e: list(e.absolute_path))

    if errors:
        first = errors[0]
        path_str = " → ".join(str(p) for p in first.absolute_path) or "(root)"
        raise jsonschema.ValidationError(
            f"Request validation failed at '{path_str}': {first.message}",
            path=first.absolute_path,
            schema_path=first.absolute_schema_path,
            validator=first.validator,
            validator_value=first.validator_value,
            instance=first.instance,
            schema=first.schema,
            cause=first.cause,
        )

    _validate_kwp_range(data)


def _validate_kwp_range(data: dict) -> None:
    """Check that the capacity range is ordered."""
    kwp_range = data.get("kwp_range")
    if kwp_range is None:
        return
    min_kwp, max_kwp, _ = kwp_range
    if min_kwp > max_kwp:
        raise ValueError(
            f"kwp_range minimum ({min_kwp}) must not exceed the maximum "
            f"({max_kwp}). Check the 'kwp_range' field."
        )


def get_schema() -> dict:
    """Return a copy of the request JSON schema dictionary."""
    return REQUEST_SCHEMA.copy()
