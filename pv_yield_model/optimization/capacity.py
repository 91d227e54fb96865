"""Capacity sweep over installed peak power (kWp).

The specific yield of the fetched system (kWh per kWp) is scaled linearly to
each candidate size. For every candidate the self-consumption share follows
from the household's daytime demand and the investment from a linear cost
model, then the cashflow engine is run.

Public API
----------
CostModel               – Linear CAPEX model (fixed + per kWp).
Consumption             – Household demand used to derive self-consumption.
KwpPoint                – Result for one candidate size.
KwpOptimizationResult   – Curve plus NPV- and payback-optimal sizes.
kwp_candidates          – Candidate sizes for a ``(min, max, step)`` range.
optimize_kwp            – Main entry point.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from pv_yield_model.config.defaults import DEFAULT_KWP_RANGE, KWP_RANGE_STEP_TOLERANCE
from pv_yield_model.finance.cashflow import EconomicsParams, compute_finance
from pv_yield_model.pv.yield_data import YieldTotals

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CostModel:
    """CAPEX as ``fixed_cost + cost_per_kwp × kWp``."""

    fixed_cost: float
    cost_per_kwp: float

    def capex(self, kwp: float) -> float:
        return self.fixed_cost + self.cost_per_kwp * kwp


@dataclass(frozen=True)
class Consumption:
    """Household demand.

    Attributes:
        annual_kwh: Yearly electricity consumption.
        daytime_fraction: Share of consumption during PV production hours.
    """

    annual_kwh: float
    daytime_fraction: float

    @property
    def daytime_kwh(self) -> float:
        return self.annual_kwh * self.daytime_fraction

    def self_consumption_share(self, production_kwh: float) -> float:
        """Fraction of *production_kwh* consumed on site, capped at 1."""
        if production_kwh <= 0:
            return 0.0
        return min(1.0, self.daytime_kwh / production_kwh)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KwpPoint:
    """One point on the capacity curve; ``npv`` is 0 when NPV is disabled."""

    kwp: float
    npv: float
    payback_years: int | None


@dataclass(frozen=True)
class KwpOptimizationResult:
    """Capacity curve and recommendations.

    Attributes
    ----------
    recommended_kwp_npv:
        First size with the highest NPV (range minimum if none is defined).
    recommended_kwp_payback:
        First size with the shortest payback (range minimum if none pays back).
    curve:
        All evaluated sizes in ascending order.
    """

    recommended_kwp_npv: float
    recommended_kwp_payback: float
    curve: list[KwpPoint]


# ---------------------------------------------------------------------------
# Candidate generation
# ---------------------------------------------------------------------------


def kwp_candidates(min_kwp: float, max_kwp: float, step: float) -> list[float]:
    """Return the sizes ``min, min + step, ...`` up to ``max`` (half-step tolerance).

    Sizes are produced by repeated addition. A non-positive *step* yields only
    ``min``.
    """
    if step <= 0:
        logger.warning("Non-positive kWp step %.3f; evaluating %.3f kWp only.", step, min_kwp)
        return [min_kwp]

    candidates: list[float] = []
    kwp = min_kwp
    while kwp <= max_kwp + step * KWP_RANGE_STEP_TOLERANCE:
        candidates.append(kwp)
        kwp += step
    return candidates


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------


def optimize_kwp(
    totals: YieldTotals,
    economics: EconomicsParams,
    peak_kwp: float,
    cost_model: CostModel,
    consumption: Consumption,
    kwp_range: tuple[float, float, float] = DEFAULT_KWP_RANGE,
) -> KwpOptimizationResult:
    """Evaluate the cashflow engine across candidate system sizes.

    Parameters
    ----------
    totals:
        Normalised annual yield of the fetched system.
    economics:
        Base economics; ``capex`` and ``self_consumption`` are replaced per
        candidate.
    peak_kwp:
        Peak power the yield was computed for.
    cost_model:
        Linear CAPEX model.
    consumption:
        Household demand.
    kwp_range:
        ``(min, max, step)`` in kWp.

    Returns
    -------
    KwpOptimizationResult
        Curve and recommended sizes.
    """
    min_kwp, max_kwp, step = kwp_range
    specific_yield = totals.E_y / peak_kwp if peak_kwp > 0 else 0.0

    curve: list[KwpPoint] = []
    best_npv = float("-inf")
    best_npv_kwp = min_kwp
    best_payback: int | None = None
    best_payback_kwp = min_kwp

    for kwp in kwp_candidates(min_kwp, max_kwp, step):
        energy = specific_yield * kwp
        fin = compute_finance(
            replace(totals, E_y=energy),
            replace(
                economics,
                capex=cost_model.capex(kwp),
                self_consumption=consumption.self_consumption_share(energy),
            ),
        )
        curve.append(
            KwpPoint(
                kwp=kwp,
                npv=fin.npv if fin.npv is not None else 0.0,
                payback_years=fin.payback_years,
            )
        )

        if fin.npv is not None and fin.npv > best_npv:
            best_npv = fin.npv
            best_npv_kwp = kwp
        if fin.payback_years is not None and (
            best_payback is None or fin.payback_years < best_payback
        ):
            best_payback = fin.payback_years
            best_payback_kwp = kwp

    logger.info(
        "Capacity sweep: %d sizes, best NPV at %.2f kWp, best payback at %.2f kWp.",
        len(curve),
        best_npv_kwp,
        best_payback_kwp,
    )

    return KwpOptimizationResult(
        recommended_kwp_npv=best_npv_kwp,
        recommended_kwp_payback=best_payback_kwp,
        curve=curve,
    )
