"""Load and validate simulation request JSON files.

Public API
----------
load_request(path)        – Parse + validate a request JSON file.
load_request_dict(data)   – Validate an already-parsed request dictionary.
azimuth_to_aspect(deg)    – Convert a compass azimuth to the PVGIS aspect.

All error messages name the specific field that caused the problem so the
user can fix the JSON without guessing. Optional fields are filled from
:mod:`pv_yield_model.config.defaults`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pv_yield_model.config.defaults import (
    DEFAULT_ANALYSIS_YEARS,
    DEFAULT_DEGRADATION,
    DEFAULT_DISCOUNT_RATE,
    DEFAULT_KWP_RANGE,
    DEFAULT_LOSS_PERCENT,
    DEFAULT_MC_TRIALS,
    DEFAULT_MOUNTING_PLACE,
    DEFAULT_OPEX_YEARLY,
    DEFAULT_PRICE_ESCALATION,
    DEFAULT_PRICE_SELL,
    DEFAULT_PV_TECH,
    DEFAULT_SELF_CONSUMPTION,
    DEFAULT_SIMULATION_NAME,
    DEFAULT_TARGET_PAYBACK_YEARS,
)
from pv_yield_model.config.schema import validate_request
from pv_yield_model.finance.cashflow import EconomicsParams
from pv_yield_model.optimization.capacity import Consumption, CostModel

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Typed result containers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LocationConfig:
    """Site coordinates and optional shading category (``rural`` etc.)."""

    lat: float
    lon: float
    area_type: str | None = None


@dataclass(frozen=True)
class PVConfig:
    """PV system definition sent to PVGIS.

    Attributes
    ----------
    peakpower_kw:
        Installed peak power in kWp.
    loss_percent:
        System losses in %.
    usehorizon:
        Account for the terrain horizon.
    optimalangles:
        Let PVGIS pick tilt and aspect.
    angle_deg:
        Tilt from horizontal; only used when ``optimalangles`` is False.
    aspect_deg:
        PVGIS aspect (0 = south, 90 = west, -90 = east).
    pvtechchoice:
        Module technology.
    mountingplace:
        ``"free"`` or ``"building"``.
    raddatabase:
        Radiation database name; None lets PVGIS choose.
    """

    peakpower_kw: float
    loss_percent: float = DEFAULT_LOSS_PERCENT
    usehorizon: bool = True
    optimalangles: bool = True
    angle_deg: float | None = None
    aspect_deg: float | None = None
    pvtechchoice: str = DEFAULT_PV_TECH
    mountingplace: str = DEFAULT_MOUNTING_PLACE
    raddatabase: str | None = None


@dataclass(frozen=True)
class MonteCarloConfig:
    enabled: bool = True
    n_trials: int = DEFAULT_MC_TRIALS
    target_payback_years: float | None = None
    seed: int | None = None


@dataclass
class SimulationRequest:
    """Fully validated, parsed simulation request.

    Attributes
    ----------
    raw:
        The original validated dictionary as loaded from JSON.
    name:
        Simulation name, used for output file names.
    path:
        Absolute path to the source JSON file (``None`` if loaded from a dict).
    """

    raw: dict[str, Any]
    name: str
    location: LocationConfig
    pv: PVConfig
    economics: EconomicsParams
    cost_model: CostModel | None = None
    consumption: Consumption | None = None
    kwp_range: tuple[float, float, float] = DEFAULT_KWP_RANGE
    monte_carlo: MonteCarloConfig = field(default_factory=MonteCarloConfig)
    target_payback_years: int = DEFAULT_TARGET_PAYBACK_YEARS
    path: Path | None = field(default=None, repr=False)


# ---------------------------------------------------------------------------
# Public functions
# ---------------------------------------------------------------------------


def load_request(path: str | Path) -> SimulationRequest:
    """Load and validate a simulation request JSON file.

    Parameters
    ----------
    path:
        Path to the request ``.json`` file.

    Returns
    -------
    SimulationRequest
        Validated request with defaults applied.

    Raises
    ------
    FileNotFoundError
        When *path* does not exist.
    json.JSONDecodeError
        When the file contains invalid JSON.
    jsonschema.ValidationError
        When the JSON does not conform to the request schema.
    ValueError
        When cross-field constraints are violated.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(
            f"Request file not found: '{path}'. "
            "Check that the path is correct and the file exists."
        )

    logger.debug("Loading request from '%s'", path)

    try:
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except json.JSONDecodeError as exc:
        raise json.JSONDecodeError(
            f"Invalid JSON in request file '{path}': {exc.msg}",
            exc.doc,
            exc.pos,
        ) from exc

    request = load_request_dict(data)
    request.path = path.resolve()

    logger.info(
        "Loaded request '%s' (%.2f kWp at %.4f, %.4f) from '%s'",
        request.name,
        request.pv.peakpower_kw,
        request.location.lat,
        request.location.lon,
        path,
    )
    return request


def load_request_dict(data: dict) -> SimulationRequest:
    """Validate and wrap an already-parsed request dictionary.

    Raises
    ------
    jsonschema.ValidationError
        When *data* does not conform to the request schema.
    ValueError
        When cross-field constraints are violated.
    """
    validate_request(data)

    cost_model = None
    if "cost_model" in data:
        cm = data["cost_model"]
        cost_model = CostModel(
            fixed_cost=float(cm["fixed_cost"]),
            cost_per_kwp=float(cm["cost_per_kwp"]),
        )

    consumption = None
    if "consumption" in data:
        cons = data["consumption"]
        consumption = Consumption(
            annual_kwh=float(cons["annual_kwh"]),
            daytime_fraction=float(cons["daytime_fraction"]),
        )

    kwp_range = DEFAULT_KWP_RANGE
    if "kwp_range" in data:
        min_kwp, max_kwp, step = data["kwp_range"]
        kwp_range = (float(min_kwp), float(max_kwp), float(step))

    break_even = data.get("break_even", {})

    return SimulationRequest(
        raw=data,
        name=data.get("name", DEFAULT_SIMULATION_NAME),
        location=_parse_location(data["location"]),
        pv=_parse_pv(data["pv"]),
        economics=_parse_economics(data["economics"]),
        cost_model=cost_model,
        consumption=consumption,
        kwp_range=kwp_range,
        monte_carlo=_parse_monte_carlo(data.get("monte_carlo", {})),
        target_payback_years=int(
            break_even.get("target_payback_years", DEFAULT_TARGET_PAYBACK_YEARS)
        ),
    )


def azimuth_to_aspect(azimuth_from_north_deg: float) -> float:
    """Convert a compass azimuth (0 = N, 90 = E) to the PVGIS aspect (0 = S).

    >>> azimuth_to_aspect(180.0)
    0.0
    >>> azimuth_to_aspect(90.0)
    -90.0
    """
    aspect = azimuth_from_north_deg - 180.0
    if aspect > 180.0:
        aspect -= 360.0
    if aspect < -180.0:
        aspect += 360.0
    return aspect


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _parse_location(block: dict) -> LocationConfig:
    return LocationConfig(
        lat=float(block["lat"]),
        lon=float(block["lon"]),
        area_type=block.get("area_type"),
    )


def _parse_pv(block: dict) -> PVConfig:
    aspect = block.get("aspect_deg")
    if aspect is None and "azimuth_from_north_deg" in block:
        aspect = azimuth_to_aspect(float(block["azimuth_from_north_deg"]))
        logger.debug(
            "Converted azimuth %.1f° (from north) to PVGIS aspect %.1f°",
            block["azimuth_from_north_deg"],
            aspect,
        )

    angle = block.get("angle_deg")
    raddatabase = block.get("raddatabase")
    if raddatabase is not None and not raddatabase.strip():
        raddatabase = None

    return PVConfig(
        peakpower_kw=float(block["peakpower_kw"]),
        loss_percent=float(block.get("loss_percent", DEFAULT_LOSS_PERCENT)),
        usehorizon=bool(block.get("usehorizon", True)),
        optimalangles=bool(block.get("optimalangles", True)),
        angle_deg=float(angle) if angle is not None else None,
        aspect_deg=float(aspect) if aspect is not None else None,
        pvtechchoice=block.get("pvtechchoice", DEFAULT_PV_TECH),
        mountingplace=block.get("mountingplace", DEFAULT_MOUNTING_PLACE),
        raddatabase=raddatabase,
    )


def _parse_economics(block: dict) -> EconomicsParams:
    return EconomicsParams(
        capex=float(block["capex"]),
        price_buy=float(block["price_buy"]),
        self_consumption=float(block.get("self_consumption", DEFAULT_SELF_CONSUMPTION)),
        price_sell=float(block.get("price_sell", DEFAULT_PRICE_SELL)),
        opex_yearly=float(block.get("opex_yearly", DEFAULT_OPEX_YEARLY)),
        degradation=float(block.get("degradation", DEFAULT_DEGRADATION)),
        analysis_years=int(block.get("analysis_years", DEFAULT_ANALYSIS_YEARS)),
        discount_rate=float(block.get("discount_rate", DEFAULT_DISCOUNT_RATE)),
        price_escalation=float(block.get("price_escalation", DEFAULT_PRICE_ESCALATION)),
    )


def _parse_monte_carlo(block: dict) -> MonteCarloConfig:
    target = block.get("target_payback_years")
    return MonteCarloConfig(
        enabled=bool(block.get("enabled", True)),
        n_trials=int(block.get("n_trials", DEFAULT_MC_TRIALS)),
        target_payback_years=float(target) if target is not None else None,
        seed=block.get("seed"),
    )
