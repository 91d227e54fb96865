"""Yield data model and parsing of PVGIS ``PVcalc`` responses.

The ``PVcalc`` endpoint returns, for a fixed-mounted system::

    {
        "inputs": {...},
        "outputs": {
            "monthly": {"fixed": [{"month": 1, "E_m": 150.2, "SD_m": 20.1,
                                   "H(i)_m": 60.3, ...}, ...]},
            "totals":  {"fixed": {"E_y": 4800.0, "SD_y": 210.0,
                                  "H(i)_y": 1500.0, "l_total": -22.3, ...}}
        }
    }

Older responses (and some cached payloads) omit the ``fixed`` level, so both
shapes are accepted. Non-numeric fields are read as ``0.0``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

from pv_yield_model.config.defaults import MONTHS_PER_YEAR

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class YieldTotals:
    """Annual aggregate yield of the PV system.

    Attributes:
        E_y: Annual energy production in kWh.
        SD_y: Year-to-year standard deviation of ``E_y`` in kWh.
        H_i_y: Annual in-plane irradiation in kWh/m².
        l_total: Total loss in percent (negative in PVGIS output).
        LCOE_pv: Levelised cost reported by PVGIS, or None if not requested.
    """

    E_y: float
    SD_y: float
    H_i_y: float = 0.0
    l_total: float = 0.0
    LCOE_pv: float | None = None


@dataclass(frozen=True)
class MonthlyPoint:
    """Yield of a single calendar month (``month`` in 1..12)."""

    month: int
    E_m: float
    SD_m: float
    H_i_m: float = 0.0


@dataclass(frozen=True)
class PVGISYield:
    """Parsed provider output: echoed inputs, monthly series and totals."""

    inputs: dict | None
    monthly: list[MonthlyPoint]
    totals: YieldTotals


def to_number(value: Any) -> float:
    """Convert *value* to a finite float, returning 0.0 when that is impossible."""
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(result) or math.isinf(result):
        return 0.0
    return result


def parse_monthly(raw: dict | None) -> list[MonthlyPoint]:
    """Extract the monthly series, keeping whole months 1..12 in ascending order.

    Args:
        raw: Parsed PVGIS ``PVcalc`` JSON.

    Returns:
        List of :class:`MonthlyPoint`, empty if the response has no monthly data.
    """
    outputs = (raw or {}).get("outputs") or {}
    monthly = outputs.get("monthly")
    if isinstance(monthly, dict):
        monthly = monthly.get("fixed")
    if not isinstance(monthly, list):
        return []

    points: list[MonthlyPoint] = []
    for row in monthly:
        if not isinstance(row, dict):
            continue
        month = to_number(row.get("month"))
        if not (1 <= month <= MONTHS_PER_YEAR and month.is_integer()):
            logger.debug("Dropping monthly record with month=%r", row.get("month"))
            continue
        points.append(
            MonthlyPoint(
                month=int(month),
                E_m=to_number(row.get("E_m")),
                SD_m=to_number(row.get("SD_m")),
                H_i_m=to_number(row.get("H(i)_m", row.get("H_i_m"))),
            )
        )

    points.sort(key=lambda p: p.month)
    return points


def parse_totals(raw: dict | None) -> YieldTotals:
    """Extract the annual totals block.

    Args:
        raw: Parsed PVGIS ``PVcalc`` JSON.

    Returns:
        :class:`YieldTotals`; missing values are 0.0 and ``LCOE_pv`` is None
        when PVGIS did not report it.
    """
    outputs = (raw or {}).get("outputs") or {}
    totals = outputs.get("totals") or {}
    if isinstance(totals.get("fixed"), dict):
        totals = totals["fixed"]

    lcoe_raw = totals.get("LCOE_pv")
    return YieldTotals(
        E_y=to_number(totals.get("E_y")),
        SD_y=to_number(totals.get("SD_y")),
        H_i_y=to_number(totals.get("H(i)_y", totals.get("H_i_y"))),
        l_total=to_number(totals.get("l_total")),
        LCOE_pv=None if lcoe_raw is None else to_number(lcoe_raw),
    )


def parse_pvcalc_response(raw: dict) -> PVGISYield:
    """Parse a complete ``PVcalc`` response into a :class:`PVGISYield`."""
    monthly = parse_monthly(raw)
    totals = parse_totals(raw)
    logger.debug(
        "Parsed PVcalc response: E_y=%.1f kWh, SD_y=%.1f kWh, %d month(s)",
        totals.E_y,
        totals.SD_y,
        len(monthly),
    )
    return PVGISYield(inputs=(raw or {}).get("inputs"), monthly=monthly, totals=totals)
