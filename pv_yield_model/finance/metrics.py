"""Headline financial metrics: IRR and LCOE.

IRR computations use ``numpy_financial``. IRR convergence failures return
``None`` instead of raising exceptions.
"""

from __future__ import annotations

import logging

import numpy as np
import numpy_financial as npf

from pv_yield_model.finance.cashflow import EconomicsParams, FinanceResult
from pv_yield_model.pv.degradation import degraded_energy
from pv_yield_model.pv.yield_data import YieldTotals

logger = logging.getLogger(__name__)


def safe_irr(cashflows: list[float] | np.ndarray) -> float | None:
    """Compute IRR, returning None on convergence failure.

    Args:
        cashflows: Cashflows from year 0 (investment) through N.

    Returns:
        IRR as a decimal, or None if the solver does not converge.
    """
    try:
        result = float(npf.irr(np.asarray(cashflows, dtype=float)))
        if np.isnan(result) or np.isinf(result):
            return None
        return result
    except (ValueError, FloatingPointError, np.linalg.LinAlgError):
        return None


def calculate_lcoe(
    total_costs: float,
    total_production_kwh: float,
) -> float | None:
    """Calculate the (undiscounted) levelised cost of energy.

    Args:
        total_costs: Lifetime costs (CAPEX + sum of OPEX).
        total_production_kwh: Lifetime energy production in kWh.

    Returns:
        LCOE per kWh, or None if production is zero.
    """
    if total_production_kwh <= 0.0:
        return None
    return total_costs / total_production_kwh


def lifetime_production_kwh(totals: YieldTotals, economics: EconomicsParams) -> float:
    """Sum of degraded annual production over the analysis horizon."""
    return sum(
        degraded_energy(totals.E_y, economics.degradation, t)
        for t in range(1, economics.analysis_years + 1)
    )


def headline_metrics(
    totals: YieldTotals,
    economics: EconomicsParams,
    finance: FinanceResult,
) -> tuple[float | None, float | None]:
    """Return ``(irr, lcoe)`` for a finance result.

    The IRR is computed on ``[-capex, savings_1, ..., savings_N]``.
    """
    irr = safe_irr([-economics.capex, *finance.cashflow_yearly])
    if irr is None:
        logger.debug("IRR did not converge for capex=%.2f", economics.capex)

    total_costs = economics.capex + economics.opex_yearly * economics.analysis_years
    lcoe = calculate_lcoe(total_costs, lifetime_production_kwh(totals, economics))
    return irr, lcoe
