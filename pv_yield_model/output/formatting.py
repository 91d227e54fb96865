"""String rendering of result numbers for the CSV writers and the CLI summary.

Missing values (None) render as ``placeholder``, which is empty by default so
that CSV cells stay blank; the terminal summary passes ``"n/a"`` instead.

Public API
----------
fmt_float    – Fixed-point rendering of a plain number.
fmt_currency – Fixed-point rendering of an amount in the request currency.
fmt_pct      – Percentage rendering of a fraction (no % sign).
fmt_years    – Whole-year rendering of a payback period.
"""

from __future__ import annotations

from pv_yield_model.config.defaults import CURRENCY_PRECISION, FLOAT_PRECISION


def fmt_float(
    value: float | None,
    precision: int = FLOAT_PRECISION,
    placeholder: str = "",
) -> str:
    """Render *value* with ``precision`` digits after the decimal point.

    >>> fmt_float(1234.56789, 2)
    '1234.57'
    >>> fmt_float(None, placeholder="n/a")
    'n/a'
    """
    if value is None:
        return placeholder
    return f"{value:.{precision}f}"


def fmt_currency(
    value: float | None,
    precision: int = CURRENCY_PRECISION,
    placeholder: str = "",
) -> str:
    # Amounts carry no symbol: they are in whatever unit capex and price_buy use.
    return fmt_float(value, precision=precision, placeholder=placeholder)


def fmt_pct(
    value: float | None,
    precision: int = 2,
    *,
    already_pct: bool = False,
    placeholder: str = "",
) -> str:
    """Render a share such as ROI or self-consumption as a percentage.

    Fractions (``0.152``) are scaled by 100. KPIs kept in percent, such as
    the capacity factor, pass ``already_pct=True`` and are only rounded.
    """
    if value is None:
        return placeholder
    display = value if already_pct else value * 100.0
    return f"{display:.{precision}f}"


def fmt_years(value: int | None, placeholder: str = "") -> str:
    """Format a payback period; None means the investment is never recovered."""
    if value is None:
        return placeholder
    return str(value)
