"""Year-by-year savings, cumulative cashflow, payback, ROI and NPV.

The engine is the single financial primitive of the package: every sweep,
the Monte Carlo sampler, the break-even solver and the capacity optimiser call
:func:`compute_finance` with a modified copy of the inputs.

For each year ``t = 1..N``::

    E_t        = E_y × (1 − degradation) ^ (t − 1)
    price_t    = price_buy × (1 + price_escalation) ^ (t − 1)
    savings_t  = E_t × sc × price_t + E_t × (1 − sc) × price_sell − opex_yearly

Year 0 carries the investment (cumulative cashflow starts at ``-capex``).
A zero discount rate disables the NPV (``None``) instead of returning the
undiscounted sum; callers rely on that ``None``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pv_yield_model.finance.inflation import inflate_value
from pv_yield_model.pv.degradation import degraded_energy
from pv_yield_model.pv.yield_data import YieldTotals


@dataclass(frozen=True)
class EconomicsParams:
    """Economic inputs of a simulation (validated upstream).

    Attributes:
        capex: Upfront investment.
        price_buy: Grid electricity price per kWh in year 1.
        self_consumption: Fraction of production consumed on site (0–1).
        price_sell: Feed-in price per exported kWh.
        opex_yearly: Yearly operating cost.
        degradation: Annual production degradation fraction (0–0.1).
        analysis_years: Analysis horizon in years (1–40).
        discount_rate: Discount rate for NPV (0 disables NPV).
        price_escalation: Annual escalation of ``price_buy``.
    """

    capex: float
    price_buy: float
    self_consumption: float = 0.5
    price_sell: float = 0.0
    opex_yearly: float = 0.0
    degradation: float = 0.005
    analysis_years: int = 25
    discount_rate: float = 0.06
    price_escalation: float = 0.0


@dataclass(frozen=True)
class FinanceResult:
    """Output of one cashflow engine run.

    ``irr`` and ``lcoe`` are only filled for the headline result of a
    simulation; sweep runs leave them ``None``.
    """

    savings_year1: float
    payback_years: int | None
    roi: float | None
    npv: float | None
    cashflow_yearly: list[float] = field(default_factory=list)
    cashflow_cumulative: list[float] = field(default_factory=list)
    irr: float | None = None
    lcoe: float | None = None


def compute_finance(totals: YieldTotals, economics: EconomicsParams) -> FinanceResult:
    """Run the discounted-cashflow recurrence over the analysis horizon.

    Args:
        totals: Annual yield; only ``E_y`` is used.
        economics: Economic parameters.

    Returns:
        :class:`FinanceResult` with per-year arrays of length
        ``analysis_years``.
    """
    capex = economics.capex
    rate = economics.discount_rate

    cashflow_yearly: list[float] = []
    cashflow_cumulative: list[float] = []

    cumulative = -capex
    total_savings = 0.0
    discounted_sum = 0.0
    payback_years: int | None = None

    for t in range(1, economics.analysis_years + 1):
        energy = degraded_energy(totals.E_y, economics.degradation, t)
        price_buy = inflate_value(economics.price_buy, economics.price_escalation, t)

        energy_self = energy * economics.self_consumption
        energy_export = energy - energy_self

        savings = (
            energy_self * price_buy
            + energy_export * economics.price_sell
            - economics.opex_yearly
        )

        total_savings += savings
        cashflow_yearly.append(savings)

        cumulative += savings
        cashflow_cumulative.append(cumulative)

        if payback_years is None and cumulative >= 0:
            payback_years = t

        if rate > 0:
            discounted_sum += savings / (1 + rate) ** t

    roi = (total_savings - capex) / capex if capex > 0 else None
    npv = discounted_sum - capex if rate > 0 else None

    return FinanceResult(
        savings_year1=cashflow_yearly[0] if cashflow_yearly else 0.0,
        payback_years=payback_years,
        roi=roi,
        npv=npv,
        cashflow_yearly=cashflow_yearly,
        cashflow_cumulative=cashflow_cumulative,
    )
