"""Energy KPIs derived from the (normalised) provider yield."""

from __future__ import annotations

from dataclasses import dataclass

from pv_yield_model.config.defaults import HOURS_PER_YEAR
from pv_yield_model.pv.yield_data import MonthlyPoint, YieldTotals


@dataclass(frozen=True)
class MonthEnergy:
    """Energy of one calendar month, as reported in KPIs and charts."""

    month: int
    kwh: float


@dataclass(frozen=True)
class Kpis:
    """Informational yield indicators.

    Attributes:
        annual_kwh: Annual production ``E_y``.
        specific_yield_kwh_per_kwp: ``E_y`` per installed kWp (0 without kWp).
        capacity_factor_pct: Share of the theoretical continuous output in %.
        best_month: Month with the highest production, or None.
        worst_month: Month with the lowest production, or None.
        seasonality_ratio: ``best / worst`` production, or None when the
            worst month produced nothing.
        uncertainty_annual_kwh: Year-to-year standard deviation ``SD_y``.
    """

    annual_kwh: float
    specific_yield_kwh_per_kwp: float
    capacity_factor_pct: float
    best_month: MonthEnergy | None
    worst_month: MonthEnergy | None
    seasonality_ratio: float | None
    uncertainty_annual_kwh: float


def compute_kpis(
    totals: YieldTotals,
    monthly: list[MonthlyPoint],
    peak_kwp: float,
) -> Kpis:
    """Compute specific yield, capacity factor and seasonality.

    Ties between months resolve to the earliest month.
    """
    e_y = totals.E_y
    if peak_kwp > 0:
        specific_yield = e_y / peak_kwp
        capacity_factor = e_y / (peak_kwp * HOURS_PER_YEAR)
    else:
        specific_yield = 0.0
        capacity_factor = 0.0

    best: MonthEnergy | None = None
    worst: MonthEnergy | None = None
    for m in monthly:
        if best is None or m.E_m > best.kwh:
            best = MonthEnergy(month=m.month, kwh=m.E_m)
        if worst is None or m.E_m < worst.kwh:
            worst = MonthEnergy(month=m.month, kwh=m.E_m)

    seasonality = (
        best.kwh / worst.kwh
        if best is not None and worst is not None and worst.kwh > 0
        else None
    )

    return Kpis(
        annual_kwh=e_y,
        specific_yield_kwh_per_kwp=specific_yield,
        capacity_factor_pct=capacity_factor * 100,
        best_month=best,
        worst_month=worst,
        seasonality_ratio=seasonality,
        uncertainty_annual_kwh=totals.SD_y,
    )
