"""Site shading adjustment of the provider yield.

PVGIS models terrain shading only. Buildings and trees around urban and
suburban sites are approximated with a flat multiplicative factor applied to
the annual and monthly energy (and their standard deviations) before any KPI
or financial computation.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import replace

from pv_yield_model.config.defaults import (
    SHADING_FACTOR_RURAL,
    SHADING_FACTOR_SUBURBAN,
    SHADING_FACTOR_URBAN,
)
from pv_yield_model.pv.yield_data import MonthlyPoint, YieldTotals

logger = logging.getLogger(__name__)


class SiteShadingCategory(enum.Enum):
    """Area type of the site, valued by its yield factor."""

    RURAL = SHADING_FACTOR_RURAL
    SUBURBAN = SHADING_FACTOR_SUBURBAN
    URBAN = SHADING_FACTOR_URBAN

    @property
    def label(self) -> str:
        """Lower-case name as used in requests (``"urban"``)."""
        return self.name.lower()

    @classmethod
    def from_value(cls, value: object) -> SiteShadingCategory | None:
        """Resolve a request value to a category, or None if unrecognised."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                return None
        return None


def normalize_yield(
    totals: YieldTotals,
    monthly: list[MonthlyPoint],
    area_type: SiteShadingCategory | str | None = None,
) -> tuple[YieldTotals, list[MonthlyPoint], SiteShadingCategory | None]:
    """Scale energy and its uncertainty by the site shading factor.

    Unknown or missing area types leave the yield unchanged.

    Args:
        totals: Raw annual totals from the provider.
        monthly: Raw monthly series from the provider.
        area_type: Category member, its name (``"suburban"``) or None.

    Returns:
        ``(totals, monthly, applied_category)``. The inputs are never
        modified; new objects are returned when a factor other than 1.0
        applies.
    """
    category = SiteShadingCategory.from_value(area_type)
    if category is None and area_type is not None:
        logger.debug("Unrecognised area type %r – no shading adjustment", area_type)

    factor = category.value if category is not None else 1.0
    if factor == 1.0:
        return totals, list(monthly), category

    logger.info(
        "Applying %s shading factor %.2f to PVGIS yield", category.label, factor
    )
    scaled_totals = replace(
        totals,
        E_y=totals.E_y * factor,
        SD_y=totals.SD_y * factor,
    )
    scaled_monthly = [
        replace(m, E_m=m.E_m * factor, SD_m=m.SD_m * factor) for m in monthly
    ]
    return scaled_totals, scaled_monthly, category
