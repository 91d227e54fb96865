"""Unit tests for pv_yield_model.optimization.scenarios.

Covers:
- Fixed scenario grids (self-consumption 0.3/0.5/0.7, price ×0.8/1.0/1.2)
- Base scenario rows equal the headline cashflow result
- Savings grow with self-consumption when buy price exceeds sell price
- Input economics are not modified
"""

from __future__ import annotations

import pytest

from pv_yield_model.finance.cashflow import compute_finance
from pv_yield_model.optimization.scenarios import build_scenarios


class TestScenarioGrid:
    def test_self_consumption_values(self, reference_totals, reference_economics):
        result = build_scenarios(reference_totals, reference_economics)
        assert [s.self_consumption for s in result.by_self_consumption] == [0.3, 0.5, 0.7]

    def test_price_buy_values(self, reference_totals, reference_economics):
        result = build_scenarios(reference_totals, reference_economics)
        assert [s.price_buy for s in result.by_price_buy] == pytest.approx([0.24, 0.30, 0.36])


class TestScenarioValues:
    def test_base_rows_match_headline(self, reference_totals, reference_economics):
        base = compute_finance(reference_totals, reference_economics)
        result = build_scenarios(reference_totals, reference_economics)
        sc_base = result.by_self_consumption[1]
        price_base = result.by_price_buy[1]
        for row in (sc_base, price_base):
            assert row.payback_years == base.payback_years
            assert row.npv == pytest.approx(base.npv)
            assert row.savings_year1 == pytest.approx(base.savings_year1)

    def test_self_consumption_savings(self, reference_totals, reference_economics):
        result = build_scenarios(reference_totals, reference_economics)
        # 4 800 × (0.3 × 0.30 + 0.7 × 0.08) = 700.8
        assert result.by_self_consumption[0].savings_year1 == pytest.approx(700.8)
        savings = [s.savings_year1 for s in result.by_self_consumption]
        assert savings == sorted(savings)

    def test_price_buy_payback_order(self, reference_totals, reference_economics):
        result = build_scenarios(reference_totals, reference_economics)
        paybacks = [s.payback_years for s in result.by_price_buy]
        assert paybacks[0] >= paybacks[1] >= paybacks[2]

    def test_npv_none_without_discounting(self, flat_totals, flat_economics):
        result = build_scenarios(flat_totals, flat_economics)
        assert all(s.npv is None for s in result.by_self_consumption)
        assert all(s.npv is None for s in result.by_price_buy)

    def test_input_untouched(self, reference_totals, reference_economics):
        build_scenarios(reference_totals, reference_economics)
        assert reference_economics.self_consumption == 0.5
        assert reference_economics.price_buy == 0.30
