"""Discrete what-if scenarios on self-consumption and buy price.

The yield is held fixed; each scenario re-runs the cashflow engine with one
economic parameter overridden.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from pv_yield_model.config.defaults import (
    SCENARIO_PRICE_BUY_MULTIPLIERS,
    SCENARIO_SELF_CONSUMPTION_VALUES,
)
from pv_yield_model.finance.cashflow import EconomicsParams, compute_finance
from pv_yield_model.pv.yield_data import YieldTotals

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelfConsumptionScenario:
    self_consumption: float
    payback_years: int | None
    npv: float | None
    savings_year1: float


@dataclass(frozen=True)
class PriceBuyScenario:
    price_buy: float
    payback_years: int | None
    npv: float | None
    savings_year1: float


@dataclass(frozen=True)
class ScenarioResult:
    """Scenario tables, each ordered as the swept values."""

    by_self_consumption: list[SelfConsumptionScenario]
    by_price_buy: list[PriceBuyScenario]


def build_scenarios(totals: YieldTotals, economics: EconomicsParams) -> ScenarioResult:
    """Evaluate the fixed self-consumption and buy-price scenarios."""
    by_self_consumption = []
    for self_consumption in SCENARIO_SELF_CONSUMPTION_VALUES:
        fin = compute_finance(totals, replace(economics, self_consumption=self_consumption))
        by_self_consumption.append(
            SelfConsumptionScenario(
                self_consumption=self_consumption,
                payback_years=fin.payback_years,
                npv=fin.npv,
                savings_year1=fin.savings_year1,
            )
        )

    by_price_buy = []
    for multiplier in SCENARIO_PRICE_BUY_MULTIPLIERS:
        price_buy = economics.price_buy * multiplier
        fin = compute_finance(totals, replace(economics, price_buy=price_buy))
        by_price_buy.append(
            PriceBuyScenario(
                price_buy=price_buy,
                payback_years=fin.payback_years,
                npv=fin.npv,
                savings_year1=fin.savings_year1,
            )
        )

    logger.debug(
        "Scenarios: %d self-consumption, %d buy-price variants",
        len(by_self_consumption),
        len(by_price_buy),
    )
    return ScenarioResult(by_self_consumption=by_self_consumption, by_price_buy=by_price_buy)
