"""Tests for output/insights.py.

The reference 4 kWp system triggers no insight (losses 14 %, optimal
angles, SD_y / E_y ≈ 4.2 %, specific yield exactly 1 200 kWh/kWp).
"""

from __future__ import annotations

from dataclasses import replace

import pytest

from pv_yield_model.config.loader import PVConfig
from pv_yield_model.output.insights import INFO, WARNING, build_insights
from pv_yield_model.pv.kpis import compute_kpis
from pv_yield_model.pv.yield_normalizer import SiteShadingCategory


@pytest.fixture
def pv() -> PVConfig:
    return PVConfig(peakpower_kw=4.0)


@pytest.fixture
def kpis(reference_totals, reference_monthly):
    return compute_kpis(reference_totals, reference_monthly, 4.0)


def _keys(insights) -> list[str]:
    return [i.key for i in insights]


class TestNoInsights:
    def test_reference_system(self, pv, reference_totals, kpis):
        assert build_insights(pv, reference_totals, kpis, None) == []

    def test_rural_has_no_shading_hint(self, pv, reference_totals, kpis):
        assert build_insights(pv, reference_totals, kpis, SiteShadingCategory.RURAL) == []


class TestIndividualRules:
    @pytest.mark.parametrize("category", [SiteShadingCategory.URBAN, SiteShadingCategory.SUBURBAN])
    def test_area_type_shading(self, pv, reference_totals, kpis, category):
        (insight,) = build_insights(pv, reference_totals, kpis, category)
        assert insight.key == "insight.areaTypeShading"
        assert insight.type == INFO
        assert insight.text == f"Yield adjusted for {category.label} shading (buildings/trees)."

    def test_high_losses(self, pv, reference_totals, kpis):
        (insight,) = build_insights(replace(pv, loss_percent=25.0), reference_totals, kpis, None)
        assert insight.key == "insight.highLosses"
        assert insight.type == WARNING

    def test_losses_at_threshold_not_flagged(self, pv, reference_totals, kpis):
        assert build_insights(replace(pv, loss_percent=20.0), reference_totals, kpis, None) == []

    def test_orientation_far_from_south(self, pv, reference_totals, kpis):
        north_east = replace(pv, optimalangles=False, angle_deg=30.0, aspect_deg=-135.0)
        (insight,) = build_insights(north_east, reference_totals, kpis, None)
        assert insight.key == "insight.orientationFarFromSouth"
        assert insight.type == WARNING

    def test_orientation_ignored_with_optimal_angles(self, pv, reference_totals, kpis):
        optimal = replace(pv, optimalangles=True, aspect_deg=170.0)
        assert build_insights(optimal, reference_totals, kpis, None) == []

    def test_orientation_east_not_flagged(self, pv, reference_totals, kpis):
        east = replace(pv, optimalangles=False, aspect_deg=-90.0)
        assert build_insights(east, reference_totals, kpis, None) == []

    def test_high_variability(self, pv, reference_totals, kpis):
        totals = replace(reference_totals, SD_y=300.0)
        (insight,) = build_insights(pv, totals, kpis, None)
        assert insight.key == "insight.highVariability"
        assert insight.type == INFO

    def test_zero_yield_no_variability_hint(self, pv, reference_totals, kpis):
        totals = replace(reference_totals, E_y=0.0)
        assert "insight.highVariability" not in _keys(build_insights(pv, totals, kpis, None))

    def test_great_solar_resource(self, pv, reference_totals, reference_monthly):
        totals = replace(reference_totals, E_y=5600.0)
        kpis = compute_kpis(totals, reference_monthly, 4.0)
        (insight,) = build_insights(pv, totals, kpis, None)
        assert insight.key == "insight.greatSolarResource"


class TestOrdering:
    def test_all_rules_in_order(self, pv, reference_totals, reference_monthly):
        system = replace(pv, loss_percent=30.0, optimalangles=False, aspect_deg=180.0)
        totals = replace(reference_totals, E_y=6000.0, SD_y=600.0)
        kpis = compute_kpis(totals, reference_monthly, 4.0)
        insights = build_insights(system, totals, kpis, SiteShadingCategory.URBAN)
        assert _keys(insights) == [
            "insight.areaTypeShading",
            "insight.highLosses",
            "insight.orientationFarFromSouth",
            "insight.highVariability",
            "insight.greatSolarResource",
        ]
