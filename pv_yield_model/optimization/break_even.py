"""Break-even solver: maximum CAPEX and minimum buy price.

Public API
----------
BreakEvenResult     – Solver output.
break_even_capex    – Largest investment recovered within a payback target.
break_even_price    – Buy price at which the NPV crosses zero (bisection).
solve_break_even    – Run both.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace

from pv_yield_model.config.defaults import (
    BREAK_EVEN_MAX_ITERATIONS,
    BREAK_EVEN_NPV_FALLBACK_TOLERANCE,
    BREAK_EVEN_NPV_TOLERANCE,
    BREAK_EVEN_PRICE_LOWER,
    BREAK_EVEN_PRICE_UPPER_MIN,
    BREAK_EVEN_PRICE_UPPER_MULTIPLIER,
    DEFAULT_TARGET_PAYBACK_YEARS,
)
from pv_yield_model.finance.cashflow import EconomicsParams, compute_finance
from pv_yield_model.pv.yield_data import YieldTotals

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BreakEvenResult:
    """Break-even figures.

    Attributes:
        target_payback_years: Effective target, capped at the analysis horizon.
        break_even_capex: Sum of the first ``target_payback_years`` yearly
            savings, or None when that sum is not positive.
        break_even_price_buy: Buy price giving an NPV of about zero, or None
            when the bisection does not get close enough.
    """

    target_payback_years: int
    break_even_capex: float | None
    break_even_price_buy: float | None


def break_even_capex(
    totals: YieldTotals,
    economics: EconomicsParams,
    target_years: int,
) -> float | None:
    """Return the investment recovered by the savings of the first *target_years*."""
    fin = compute_finance(totals, economics)
    total = sum(fin.cashflow_yearly[:target_years])
    return total if total > 0 else None


def _npv_at(totals: YieldTotals, economics: EconomicsParams, price_buy: float) -> float:
    npv = compute_finance(totals, replace(economics, price_buy=price_buy)).npv
    # NPV disabled (zero discount rate) pushes the search upwards
    return npv if npv is not None else -math.inf


def break_even_price(totals: YieldTotals, economics: EconomicsParams) -> float | None:
    """Bisect the buy price on ``[0.01, max(3 × base, 1)]`` for ``NPV ≈ 0``.

    Stops as soon as ``|NPV(mid)| < 1``. After the iteration budget the last
    midpoint is accepted only if ``|NPV| < 100``.
    """
    lo = BREAK_EVEN_PRICE_LOWER
    hi = max(economics.price_buy * BREAK_EVEN_PRICE_UPPER_MULTIPLIER, BREAK_EVEN_PRICE_UPPER_MIN)

    for _ in range(BREAK_EVEN_MAX_ITERATIONS):
        mid = (lo + hi) / 2
        npv = _npv_at(totals, economics, mid)
        if abs(npv) < BREAK_EVEN_NPV_TOLERANCE:
            return mid
        if npv < 0:
            lo = mid
        else:
            hi = mid

    mid = (lo + hi) / 2
    if abs(_npv_at(totals, economics, mid)) < BREAK_EVEN_NPV_FALLBACK_TOLERANCE:
        return mid
    logger.debug("Break-even price not bracketed in [%.4f, %.4f]", lo, hi)
    return None


def solve_break_even(
    totals: YieldTotals,
    economics: EconomicsParams,
    target_payback_years: int = DEFAULT_TARGET_PAYBACK_YEARS,
) -> BreakEvenResult:
    """Compute break-even CAPEX and buy price.

    Args:
        totals: Annual yield.
        economics: Base economic parameters.
        target_payback_years: Desired payback; capped at ``analysis_years``.

    Returns:
        :class:`BreakEvenResult`.
    """
    target = min(target_payback_years, economics.analysis_years)
    capex = break_even_capex(totals, economics, target)
    price = break_even_price(totals, economics)

    logger.info(
        "Break-even (%d years): capex=%s, price_buy=%s",
        target,
        f"{capex:.2f}" if capex is not None else "n/a",
        f"{price:.4f}" if price is not None else "n/a",
    )
    return BreakEvenResult(
        target_payback_years=target,
        break_even_capex=capex,
        break_even_price_buy=price,
    )
