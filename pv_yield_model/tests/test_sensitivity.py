"""Unit tests for pv_yield_model.optimization.sensitivity.

Covers:
- linspace: both ends inclusive, degenerate counts
- 1D sweep: 11 buy prices from 0.5× to 1.5× base, NPV increasing
- 2D grid: 9 × 9, price axis 0.6×..1.4×, self-consumption 0.2..0.9
- Grid cells equal a direct cashflow evaluation
- Payback never reached stays None
"""

from __future__ import annotations

from dataclasses import replace

import pytest

from pv_yield_model.finance.cashflow import compute_finance
from pv_yield_model.optimization.sensitivity import (
    build_sensitivity,
    linspace,
    sweep_price_buy,
    sweep_price_self_consumption,
)


class TestLinspace:
    def test_endpoints_inclusive(self):
        values = linspace(0.2, 0.9, 9)
        assert len(values) == 9
        assert values[0] == pytest.approx(0.2)
        assert values[-1] == pytest.approx(0.9)
        assert values[1] - values[0] == pytest.approx(0.0875)

    def test_single_value(self):
        assert linspace(3.0, 5.0, 1) == [3.0]

    def test_zero_count(self):
        assert linspace(3.0, 5.0, 0) == []


class TestOneD:
    def test_axis(self, reference_totals, reference_economics):
        one_d = sweep_price_buy(reference_totals, reference_economics)
        assert one_d.variable == "price_buy"
        assert len(one_d.values) == 11
        assert one_d.values[0] == pytest.approx(0.15)
        assert one_d.values[5] == pytest.approx(0.30)
        assert one_d.values[-1] == pytest.approx(0.45)

    def test_npv_increases_with_price(self, reference_totals, reference_economics):
        one_d = sweep_price_buy(reference_totals, reference_economics)
        assert all(a < b for a, b in zip(one_d.npv, one_d.npv[1:]))

    def test_mid_point_matches_base(self, reference_totals, reference_economics):
        one_d = sweep_price_buy(reference_totals, reference_economics)
        base = compute_finance(reference_totals, reference_economics)
        assert one_d.payback_years[5] == base.payback_years
        assert one_d.npv[5] == pytest.approx(base.npv)


class TestTwoD:
    def test_axes(self, reference_totals, reference_economics):
        two_d = sweep_price_self_consumption(reference_totals, reference_economics)
        assert (two_d.variable_x, two_d.variable_y) == ("price_buy", "self_consumption")
        assert len(two_d.x_axis) == 9
        assert len(two_d.y_axis) == 9
        assert two_d.x_axis[0] == pytest.approx(0.18)
        assert two_d.x_axis[-1] == pytest.approx(0.42)
        assert two_d.y_axis[0] == pytest.approx(0.2)
        assert two_d.y_axis[-1] == pytest.approx(0.9)

    def test_grid_shape(self, reference_totals, reference_economics):
        two_d = sweep_price_self_consumption(reference_totals, reference_economics)
        assert len(two_d.payback_grid) == 9
        assert all(len(row) == 9 for row in two_d.payback_grid)
        assert len(two_d.npv_grid) == 9
        assert all(len(row) == 9 for row in two_d.npv_grid)

    def test_cell_matches_direct_evaluation(self, reference_totals, reference_economics):
        two_d = sweep_price_self_consumption(reference_totals, reference_economics)
        i, j = 2, 6
        fin = compute_finance(
            reference_totals,
            replace(
                reference_economics,
                price_buy=two_d.x_axis[i],
                self_consumption=two_d.y_axis[j],
            ),
        )
        assert two_d.payback_grid[i][j] == fin.payback_years
        assert two_d.npv_grid[i][j] == pytest.approx(fin.npv)

    def test_unreachable_payback_is_none(self, reference_totals, reference_economics):
        econ = replace(reference_economics, capex=1e6)
        two_d = sweep_price_self_consumption(reference_totals, econ)
        assert all(p is None for row in two_d.payback_grid for p in row)


class TestBuildSensitivity:
    def test_both_sweeps(self, reference_totals, reference_economics):
        result = build_sensitivity(reference_totals, reference_economics)
        assert len(result.one_d.values) == 11
        assert len(result.two_d.x_axis) == 9
