"""Plain-language hints attached to a simulation result.

Each insight carries a stable ``key`` that front ends can use for
translation, plus an English ``text`` fallback.
"""

from __future__ import annotations

from dataclasses import dataclass

from pv_yield_model.config.defaults import (
    INSIGHT_GREAT_SPECIFIC_YIELD,
    INSIGHT_HIGH_LOSSES_PCT,
    INSIGHT_HIGH_VARIABILITY_RATIO,
    INSIGHT_MAX_ASPECT_FROM_SOUTH_DEG,
)
from pv_yield_model.config.loader import PVConfig
from pv_yield_model.pv.kpis import Kpis
from pv_yield_model.pv.yield_data import YieldTotals
from pv_yield_model.pv.yield_normalizer import SiteShadingCategory

INFO = "info"
WARNING = "warning"


@dataclass(frozen=True)
class Insight:
    type: str
    text: str
    key: str


def build_insights(
    pv: PVConfig,
    totals: YieldTotals,
    kpis: Kpis,
    category: SiteShadingCategory | None,
) -> list[Insight]:
    """Return the insights that apply, in a fixed order.

    Args:
        pv: PV system definition (losses and orientation).
        totals: Normalised annual yield.
        kpis: KPIs of the normalised yield.
        category: Applied shading category, or None.
    """
    insights: list[Insight] = []

    if category in (SiteShadingCategory.URBAN, SiteShadingCategory.SUBURBAN):
        insights.append(
            Insight(
                type=INFO,
                text=f"Yield adjusted for {category.label} shading (buildings/trees).",
                key="insight.areaTypeShading",
            )
        )

    if pv.loss_percent > INSIGHT_HIGH_LOSSES_PCT:
        insights.append(
            Insight(
                type=WARNING,
                text="High system losses; check inverter sizing, cabling, and shading.",
                key="insight.highLosses",
            )
        )

    if (
        not pv.optimalangles
        and pv.aspect_deg is not None
        and abs(pv.aspect_deg) > INSIGHT_MAX_ASPECT_FROM_SOUTH_DEG
    ):
        insights.append(
            Insight(
                type=WARNING,
                text="Array orientation is far from south; expect reduced energy yield.",
                key="insight.orientationFarFromSouth",
            )
        )

    if totals.E_y > 0 and totals.SD_y / totals.E_y > INSIGHT_HIGH_VARIABILITY_RATIO:
        insights.append(
            Insight(
                type=INFO,
                text="Year-to-year variability of solar resource is relatively high.",
                key="insight.highVariability",
            )
        )

    if kpis.specific_yield_kwh_per_kwp > INSIGHT_GREAT_SPECIFIC_YIELD:
        insights.append(
            Insight(
                type=INFO,
                text="Great solar resource for PV at this location (high specific yield).",
                key="insight.greatSolarResource",
            )
        )

    return insights
