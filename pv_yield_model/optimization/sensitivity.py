"""One- and two-dimensional sensitivity sweeps of payback and NPV.

Public API
----------
linspace            – Evenly spaced values, both ends inclusive.
OneDSensitivity     – Payback / NPV along the buy-price axis.
TwoDSensitivity     – Payback / NPV grids over buy price × self-consumption.
build_sensitivity   – Run both sweeps.

Grids are indexed ``[price_index][self_consumption_index]``. Undefined
results (payback never reached, NPV disabled) stay ``None``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from pv_yield_model.config.defaults import (
    SENSITIVITY_1D_POINTS,
    SENSITIVITY_1D_PRICE_RANGE,
    SENSITIVITY_2D_POINTS,
    SENSITIVITY_2D_PRICE_RANGE,
    SENSITIVITY_2D_SELF_CONSUMPTION_RANGE,
)
from pv_yield_model.finance.cashflow import EconomicsParams, compute_finance
from pv_yield_model.pv.yield_data import YieldTotals

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OneDSensitivity:
    variable: str
    values: list[float]
    payback_years: list[int | None]
    npv: list[float | None]


@dataclass(frozen=True)
class TwoDSensitivity:
    variable_x: str
    variable_y: str
    x_axis: list[float]
    y_axis: list[float]
    payback_grid: list[list[int | None]]
    npv_grid: list[list[float | None]]


@dataclass(frozen=True)
class SensitivityResult:
    one_d: OneDSensitivity
    two_d: TwoDSensitivity


def linspace(start: float, stop: float, count: int) -> list[float]:
    """Return *count* evenly spaced values from *start* to *stop* inclusive.

    Each value is computed as ``start + (stop - start) * (i / (count - 1))``
    so that results do not depend on accumulated rounding.
    """
    if count <= 1:
        return [start] if count == 1 else []
    return [start + (stop - start) * (i / (count - 1)) for i in range(count)]


def sweep_price_buy(
    totals: YieldTotals,
    economics: EconomicsParams,
) -> OneDSensitivity:
    """Sweep the buy price over the 1D sensitivity range."""
    low, high = SENSITIVITY_1D_PRICE_RANGE
    base = economics.price_buy
    values = linspace(base * low, base * high, SENSITIVITY_1D_POINTS)

    payback: list[int | None] = []
    npv: list[float | None] = []
    for price_buy in values:
        fin = compute_finance(totals, replace(economics, price_buy=price_buy))
        payback.append(fin.payback_years)
        npv.append(fin.npv)

    return OneDSensitivity(
        variable="price_buy", values=values, payback_years=payback, npv=npv
    )


def sweep_price_self_consumption(
    totals: YieldTotals,
    economics: EconomicsParams,
) -> TwoDSensitivity:
    """Evaluate the buy price × self-consumption grid."""
    price_low, price_high = SENSITIVITY_2D_PRICE_RANGE
    sc_low, sc_high = SENSITIVITY_2D_SELF_CONSUMPTION_RANGE
    base = economics.price_buy
    x_axis = linspace(base * price_low, base * price_high, SENSITIVITY_2D_POINTS)
    y_axis = linspace(sc_low, sc_high, SENSITIVITY_2D_POINTS)

    payback_grid: list[list[int | None]] = []
    npv_grid: list[list[float | None]] = []
    for price_buy in x_axis:
        payback_row: list[int | None] = []
        npv_row: list[float | None] = []
        for self_consumption in y_axis:
            fin = compute_finance(
                totals,
                replace(economics, price_buy=price_buy, self_consumption=self_consumption),
            )
            payback_row.append(fin.payback_years)
            npv_row.append(fin.npv)
        payback_grid.append(payback_row)
        npv_grid.append(npv_row)

    return TwoDSensitivity(
        variable_x="price_buy",
        variable_y="self_consumption",
        x_axis=x_axis,
        y_axis=y_axis,
        payback_grid=payback_grid,
        npv_grid=npv_grid,
    )


def build_sensitivity(totals: YieldTotals, economics: EconomicsParams) -> SensitivityResult:
    """Run the 1D buy-price sweep and the 2D price × self-consumption grid."""
    one_d = sweep_price_buy(totals, economics)
    two_d = sweep_price_self_consumption(totals, economics)
    logger.info(
        "Sensitivity: %d-point price sweep, %d×%d price/self-consumption grid",
        len(one_d.values),
        len(two_d.x_axis),
        len(two_d.y_axis),
    )
    return SensitivityResult(one_d=one_d, two_d=two_d)
