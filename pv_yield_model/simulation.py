"""Simulation orchestrator: provider yield in, complete analysis out.

Execution flow
--------------
1.  Apply the site shading factor to the provider yield.
2.  Energy KPIs.
3.  Headline cashflow (plus IRR / LCOE).
4.  Charts and insights.
5.  Scenario tables and sensitivity sweeps.
6.  Monte Carlo risk (if enabled).
7.  Break-even CAPEX and buy price.
8.  Capacity sweep (if a cost model and consumption are given).

:func:`run_simulation` is pure and takes an already-fetched
:class:`~pv_yield_model.pv.yield_data.PVGISYield`; :func:`simulate` fetches it
through a :class:`~pv_yield_model.pv.pvgis_client.PVGISClient` first.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, replace
from typing import Any

import numpy as np

from pv_yield_model.config.loader import SimulationRequest
from pv_yield_model.finance.cashflow import FinanceResult, compute_finance
from pv_yield_model.finance.metrics import headline_metrics
from pv_yield_model.optimization.break_even import BreakEvenResult, solve_break_even
from pv_yield_model.optimization.capacity import KwpOptimizationResult, optimize_kwp
from pv_yield_model.optimization.monte_carlo import MCResult, run_monte_carlo
from pv_yield_model.optimization.scenarios import ScenarioResult, build_scenarios
from pv_yield_model.optimization.sensitivity import SensitivityResult, build_sensitivity
from pv_yield_model.output.insights import Insight, build_insights
from pv_yield_model.pv.kpis import Kpis, MonthEnergy, compute_kpis
from pv_yield_model.pv.pvgis_client import PVGISClient
from pv_yield_model.pv.yield_data import PVGISYield
from pv_yield_model.pv.yield_normalizer import normalize_yield

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CashflowPoint:
    year: int
    value: float


@dataclass(frozen=True)
class Charts:
    """Chart-ready series: monthly energy and cumulative cashflow from year 0."""

    monthly_energy_kwh: list[MonthEnergy]
    cashflow_cumulative: list[CashflowPoint]


@dataclass(frozen=True)
class Meta:
    area_type_applied: str | None


@dataclass(frozen=True)
class SimulationResult:
    """Complete simulation output.

    Attributes
    ----------
    pvgis:
        Normalised provider yield (echoed inputs, monthly series, totals).
    monte_carlo:
        None when Monte Carlo is disabled.
    kwp_optimization:
        None unless the request has both a cost model and a consumption
        profile.
    """

    pvgis: PVGISYield
    kpis: Kpis
    finance: FinanceResult
    charts: Charts
    insights: list[Insight]
    meta: Meta
    scenarios: ScenarioResult
    sensitivity: SensitivityResult
    monte_carlo: MCResult | None
    break_even: BreakEvenResult
    kwp_optimization: KwpOptimizationResult | None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def build_charts(pvgis: PVGISYield, capex: float, finance: FinanceResult) -> Charts:
    """Build chart series; the cashflow curve starts at ``-capex`` in year 0."""
    monthly_energy = [MonthEnergy(month=m.month, kwh=m.E_m) for m in pvgis.monthly]
    cashflow_points = [CashflowPoint(year=0, value=-capex)]
    cashflow_points.extend(
        CashflowPoint(year=t, value=value)
        for t, value in enumerate(finance.cashflow_cumulative, start=1)
    )
    return Charts(monthly_energy_kwh=monthly_energy, cashflow_cumulative=cashflow_points)


def result_to_dict(result: SimulationResult) -> dict[str, Any]:
    """Convert a :class:`SimulationResult` to plain JSON-serialisable types."""
    return asdict(result)


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def run_simulation(
    request: SimulationRequest,
    pvgis_yield: PVGISYield,
    rng: np.random.Generator | None = None,
) -> SimulationResult:
    """Run every analysis stage on an already-fetched provider yield.

    Parameters
    ----------
    request:
        Validated simulation request.
    pvgis_yield:
        Raw (un-normalised) provider yield for ``request.pv``.
    rng:
        Random source for Monte Carlo. Defaults to a generator seeded with
        ``request.monte_carlo.seed``.

    Returns
    -------
    SimulationResult
    """
    economics = request.economics

    totals, monthly, category = normalize_yield(
        pvgis_yield.totals, pvgis_yield.monthly, request.location.area_type
    )
    pvgis = replace(pvgis_yield, monthly=monthly, totals=totals)

    kpis = compute_kpis(totals, monthly, request.pv.peakpower_kw)

    finance = compute_finance(totals, economics)
    irr, lcoe = headline_metrics(totals, economics, finance)
    finance = replace(finance, irr=irr, lcoe=lcoe)
    logger.info(
        "Headline: savings year 1=%.2f, payback=%s, NPV=%s",
        finance.savings_year1,
        finance.payback_years,
        f"{finance.npv:.2f}" if finance.npv is not None else "n/a",
    )

    charts = build_charts(pvgis, economics.capex, finance)
    insights = build_insights(request.pv, totals, kpis, category)
    scenarios = build_scenarios(totals, economics)
    sensitivity = build_sensitivity(totals, economics)

    monte_carlo = None
    mc_cfg = request.monte_carlo
    if mc_cfg.enabled:
        if rng is None:
            rng = np.random.default_rng(mc_cfg.seed)
        monte_carlo = run_monte_carlo(
            totals,
            economics,
            n_trials=mc_cfg.n_trials,
            target_payback_years=mc_cfg.target_payback_years,
            rng=rng,
        )
    else:
        logger.info("Monte Carlo disabled.")

    break_even = solve_break_even(totals, economics, request.target_payback_years)

    kwp_optimization = None
    if request.cost_model is not None and request.consumption is not None:
        kwp_optimization = optimize_kwp(
            totals,
            economics,
            request.pv.peakpower_kw,
            request.cost_model,
            request.consumption,
            request.kwp_range,
        )

    return SimulationResult(
        pvgis=pvgis,
        kpis=kpis,
        finance=finance,
        charts=charts,
        insights=insights,
        meta=Meta(area_type_applied=category.label if category is not None else None),
        scenarios=scenarios,
        sensitivity=sensitivity,
        monte_carlo=monte_carlo,
        break_even=break_even,
        kwp_optimization=kwp_optimization,
    )


def simulate(
    request: SimulationRequest,
    client: PVGISClient,
    rng: np.random.Generator | None = None,
) -> SimulationResult:
    """Fetch the provider yield for *request* and run the simulation.

    Raises
    ------
    PVGISError
        When the provider request fails.
    """
    logger.info(
        "Fetching PVGIS yield (lat=%.4f, lon=%.4f, %.2f kWp)…",
        request.location.lat,
        request.location.lon,
        request.pv.peakpower_kw,
    )
    pvgis_yield = client.fetch_pvcalc(request.location, request.pv)
    return run_simulation(request, pvgis_yield, rng=rng)
