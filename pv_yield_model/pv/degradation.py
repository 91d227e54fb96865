"""Annual degradation of PV energy production.

For analysis year *t* (1-indexed, t = 1 is the first operating year):

    production[t] = base_production × (1 − degradation_rate) ^ (t − 1)

The first operating year therefore produces the full provider estimate; the
module ages from year 2 onwards.

Typical usage::

    from pv_yield_model.pv.degradation import degraded_energy
    e_t = degraded_energy(5000.0, degradation_rate=0.005, year=10)
"""

from __future__ import annotations


def degradation_factor(degradation_rate: float, year: int) -> float:
    """Return the production multiplier for a single analysis year.

    Parameters
    ----------
    degradation_rate:
        Annual degradation fraction (e.g. ``0.005`` for 0.5 %/year).
    year:
        1-indexed analysis year (year 1 = first operating year).

    Returns
    -------
    float
        ``(1 − degradation_rate) ^ (year − 1)``
    """
    return (1 - degradation_rate) ** (year - 1)


def degraded_energy(base_energy_kwh: float, degradation_rate: float, year: int) -> float:
    """Return the annual energy of *year* after degradation.

    Parameters
    ----------
    base_energy_kwh:
        First-year energy production in kWh (``E_y``).
    degradation_rate:
        Annual degradation fraction.
    year:
        1-indexed analysis year.

    Returns
    -------
    float
        ``base_energy_kwh × (1 − degradation_rate) ^ (year − 1)``
    """
    return base_energy_kwh * degradation_factor(degradation_rate, year)
