"""Shared pytest fixtures for the pv_yield_model test suite.

All fixtures provide synthetic, deterministic data so tests run without
real PVGIS API calls. Numerical reference fixtures document expected results
for key calculations to enable regression testing.

Reference household system (used by ``reference_totals`` / ``reference_economics``)
-----------------------------------------------------------------------------
PV   4 kWp, E_y = 4 800 kWh/year, SD_y = 200 kWh
Economics: capex 6 000, price_buy 0.30, self-consumption 50 %,
           price_sell 0.08, no opex, no degradation, no escalation,
           25 years, discount 6 %

  savings_t = 4 800 × 0.5 × 0.30 + 4 800 × 0.5 × 0.08 = 720 + 192 = 912
  cumulative after 6 years = −6 000 + 6 × 912 = −528
  cumulative after 7 years = −6 000 + 7 × 912 = +384   → payback 7

Reference flat scenario (``flat_totals`` / ``flat_economics``)
---------------------------------------------------------------
E_y = 5 000 kWh, capex 15 000, price_buy 1.0, self-consumption 0.5,
price_sell 0, no opex/degradation/escalation, 25 years, discount 0:
  savings_t = 2 500  → payback 6, NPV None, ROI (62 500 − 15 000)/15 000
"""

from __future__ import annotations

import numpy as np
import pytest

from pv_yield_model.finance.cashflow import EconomicsParams
from pv_yield_model.pv.yield_data import MonthlyPoint, YieldTotals

# Monthly shape of a central-European 4 kWp system (kWh), sums to 4 800.
# Best month July (620), worst month January (160).
_MONTHLY_E_M = [
    160.0, 240.0, 390.0, 500.0, 580.0, 600.0,
    620.0, 560.0, 440.0, 320.0, 200.0, 190.0,
]


# ---------------------------------------------------------------------------
# Raw PVGIS responses
# ---------------------------------------------------------------------------


@pytest.fixture
def pvcalc_response() -> dict:
    """Minimal PVGIS ``PVcalc`` JSON for the reference 4 kWp system."""
    return {
        "inputs": {
            "location": {"latitude": 48.2, "longitude": 16.4, "elevation": 180.0},
            "pv_module": {"technology": "c-Si", "peak_power": 4.0, "system_loss": 14.0},
        },
        "outputs": {
            "monthly": {
                "fixed": [
                    {"month": m + 1, "E_m": e, "SD_m": e * 0.1, "H(i)_m": e / 3.2}
                    for m, e in enumerate(_MONTHLY_E_M)
                ]
            },
            "totals": {
                "fixed": {
                    "E_y": 4800.0,
                    "SD_y": 200.0,
                    "H(i)_y": 1500.0,
                    "l_total": -22.5,
                }
            },
        },
    }


@pytest.fixture
def horizon_response() -> dict:
    """Minimal PVGIS ``printhorizon`` JSON (flat 2° horizon, 8 points)."""
    return {
        "outputs": {
            "horizon_profile": [
                {"A": float(a), "H_hor": 2.0} for a in range(-180, 180, 45)
            ]
        }
    }


# ---------------------------------------------------------------------------
# Yield fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def reference_monthly() -> list[MonthlyPoint]:
    return [
        MonthlyPoint(month=m + 1, E_m=e, SD_m=e * 0.1, H_i_m=e / 3.2)
        for m, e in enumerate(_MONTHLY_E_M)
    ]


@pytest.fixture
def reference_totals() -> YieldTotals:
    return YieldTotals(E_y=4800.0, SD_y=200.0, H_i_y=1500.0, l_total=-22.5)


@pytest.fixture
def flat_totals() -> YieldTotals:
    return YieldTotals(E_y=5000.0, SD_y=0.0)


# ---------------------------------------------------------------------------
# Economics fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def reference_economics() -> EconomicsParams:
    return EconomicsParams(
        capex=6000.0,
        price_buy=0.30,
        self_consumption=0.5,
        price_sell=0.08,
        opex_yearly=0.0,
        degradation=0.0,
        analysis_years=25,
        discount_rate=0.06,
        price_escalation=0.0,
    )


@pytest.fixture
def flat_economics() -> EconomicsParams:
    return EconomicsParams(
        capex=15000.0,
        price_buy=1.0,
        self_consumption=0.5,
        price_sell=0.0,
        opex_yearly=0.0,
        degradation=0.0,
        analysis_years=25,
        discount_rate=0.0,
        price_escalation=0.0,
    )


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded generator for reproducible Monte Carlo tests."""
    return np.random.default_rng(42)


# ---------------------------------------------------------------------------
# Request fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def minimal_request_dict() -> dict:
    """Smallest valid request (defaults fill everything else)."""
    return {
        "location": {"lat": 48.2, "lon": 16.4},
        "pv": {"peakpower_kw": 4.0},
        "economics": {"capex": 6000.0, "price_buy": 0.30},
    }


@pytest.fixture
def full_request_dict() -> dict:
    """Request exercising every optional block."""
    return {
        "name": "vienna_home",
        "location": {"lat": 48.2, "lon": 16.4, "area_type": "suburban"},
        "pv": {
            "peakpower_kw": 4.0,
            "loss_percent": 14.0,
            "usehorizon": True,
            "optimalangles": False,
            "angle_deg": 30.0,
            "azimuth_from_north_deg": 180.0,
            "pvtechchoice": "crystSi",
            "mountingplace": "building",
            "raddatabase": "PVGIS-SARAH3",
        },
        "economics": {
            "capex": 6000.0,
            "price_buy": 0.30,
            "self_consumption": 0.5,
            "price_sell": 0.08,
            "opex_yearly": 50.0,
            "degradation": 0.005,
            "analysis_years": 25,
            "discount_rate": 0.05,
            "price_escalation": 0.02,
        },
        "cost_model": {"fixed_cost": 2000.0, "cost_per_kwp": 1200.0},
        "consumption": {"annual_kwh": 4000.0, "daytime_fraction": 0.4},
        "kwp_range": [2.0, 8.0, 1.0],
        "monte_carlo": {"enabled": True, "n_trials": 200, "target_payback_years": 12, "seed": 7},
        "break_even": {"target_payback_years": 10},
    }
