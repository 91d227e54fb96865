"""Tests for finance/metrics.py – IRR and LCOE.

Reference IRR: cashflows [-1000, 300, 300, 300, 300]
  Solve: 300 × [(1-(1+r)^-4) / r] = 1000  →  r ≈ 7.71 %

Reference LCOE (reference household system, no degradation):
  (6 000 + 0 × 25) / (4 800 × 25) = 0.05 per kWh
"""

from __future__ import annotations

import math
from dataclasses import replace

import numpy as np
import numpy_financial as npf
import pytest

from pv_yield_model.finance.cashflow import compute_finance
from pv_yield_model.finance.metrics import (
    calculate_lcoe,
    headline_metrics,
    lifetime_production_kwh,
    safe_irr,
)


# ---------------------------------------------------------------------------
# safe_irr
# ---------------------------------------------------------------------------


class TestSafeIrr:
    """Tests for safe_irr."""

    def test_known_irr(self) -> None:
        """[-1000, 300, 300, 300, 300] → IRR ≈ 7.71 %."""
        cf = np.array([-1000.0, 300.0, 300.0, 300.0, 300.0])
        result = safe_irr(cf)
        assert result is not None
        expected = float(npf.irr(cf))
        assert math.isclose(result, expected, rel_tol=1e-6)
        assert math.isclose(result, 0.0771, abs_tol=1e-4)

    def test_accepts_list(self) -> None:
        assert safe_irr([-1000.0, 300.0, 300.0, 300.0, 300.0]) is not None

    def test_negative_irr(self) -> None:
        """Investment that loses money: [-1000, 100, 100, 100] → negative IRR."""
        result = safe_irr([-1000.0, 100.0, 100.0, 100.0])
        assert result is not None
        assert result < 0.0

    def test_all_positive_returns_none(self) -> None:
        """No sign change → IRR undefined."""
        assert safe_irr([100.0, 200.0, 300.0]) is None


# ---------------------------------------------------------------------------
# calculate_lcoe
# ---------------------------------------------------------------------------


class TestLcoe:
    def test_simple(self) -> None:
        assert calculate_lcoe(6000.0, 120_000.0) == pytest.approx(0.05)

    def test_zero_production_returns_none(self) -> None:
        assert calculate_lcoe(6000.0, 0.0) is None


# ---------------------------------------------------------------------------
# lifetime_production_kwh / headline_metrics
# ---------------------------------------------------------------------------


class TestHeadlineMetrics:
    def test_lifetime_production_without_degradation(
        self, reference_totals, reference_economics
    ) -> None:
        assert lifetime_production_kwh(reference_totals, reference_economics) == pytest.approx(
            4800.0 * 25
        )

    def test_lifetime_production_with_degradation(
        self, reference_totals, reference_economics
    ) -> None:
        econ = replace(reference_economics, degradation=0.01, analysis_years=3)
        expected = 4800.0 * (1 + 0.99 + 0.99**2)
        assert lifetime_production_kwh(reference_totals, econ) == pytest.approx(expected)

    def test_reference_values(self, reference_totals, reference_economics) -> None:
        fin = compute_finance(reference_totals, reference_economics)
        irr, lcoe = headline_metrics(reference_totals, reference_economics, fin)
        expected_irr = float(npf.irr([-6000.0] + [912.0] * 25))
        assert irr == pytest.approx(expected_irr, rel=1e-6)
        assert lcoe == pytest.approx(0.05)

    def test_irr_zero_npv_at_irr(self, reference_totals, reference_economics) -> None:
        fin = compute_finance(reference_totals, reference_economics)
        irr, _ = headline_metrics(reference_totals, reference_economics, fin)
        npv = float(npf.npv(irr, [-6000.0] + fin.cashflow_yearly))
        assert npv == pytest.approx(0.0, abs=1e-6)

    def test_opex_included_in_lcoe(self, reference_totals, reference_economics) -> None:
        econ = replace(reference_economics, opex_yearly=100.0)
        fin = compute_finance(reference_totals, econ)
        _, lcoe = headline_metrics(reference_totals, econ, fin)
        assert lcoe == pytest.approx((6000.0 + 2500.0) / 120_000.0)

    def test_zero_yield(self, reference_economics) -> None:
        from pv_yield_model.pv.yield_data import YieldTotals

        totals = YieldTotals(E_y=0.0, SD_y=0.0)
        fin = compute_finance(totals, reference_economics)
        irr, lcoe = headline_metrics(totals, reference_economics, fin)
        assert irr is None
        assert lcoe is None
