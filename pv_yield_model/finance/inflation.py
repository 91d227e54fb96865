"""Escalation of the electricity buy price.

Year 1 is the base year (no escalation applied). Escalation begins in year 2:

    escalated_value[year] = base_value × (1 + escalation_rate) ^ max(0, year - 1)

This means year 1 returns the base value unchanged, year 2 returns
``base × (1 + rate)``, year 3 returns ``base × (1 + rate)²``, etc.
"""

from __future__ import annotations


def inflate_value(
    base_value: float,
    inflation_rate: float,
    year: int,
) -> float:
    """Apply compound escalation to a base value for a given analysis year.

    Year 1 is the base year (factor = 1.0). Escalation starts from year 2.

    Args:
        base_value: The value in the base year (year 1), e.g. the buy price.
        inflation_rate: Annual escalation rate as decimal (e.g. 0.02 for 2 %).
        year: Analysis year (1-indexed). Year 1 = no escalation.

    Returns:
        Escalated value.
    """
    return base_value * (1 + inflation_rate) ** max(0, year - 1)
