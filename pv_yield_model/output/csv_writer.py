"""Write simulation results to CSV and JSON files.

Up to six output files are produced per simulation run:

1. ``{name}_result.json``          – The complete result as JSON.
2. ``{name}_summary.csv``          – Single row: key inputs + headline results.
3. ``{name}_cashflows.csv``        – One row per year, year 0 = investment.
4. ``{name}_sensitivity_2d.csv``   – NPV grid, buy price × self-consumption.
5. ``{name}_kwp_curve.csv``        – One row per candidate size (optional).
6. ``{name}_monte_carlo.csv``      – Histogram bins of payback and NPV (optional).

Monetary values are in the request currency, energy in kWh, prices per kWh.
None values are written as empty strings.

Public API
----------
write_result_json         – Write the full result dictionary.
write_summary_csv         – Write the single-row summary file.
write_cashflows_csv       – Write the per-year cashflow table.
write_sensitivity_csv     – Write the 2D NPV sensitivity grid.
write_kwp_curve_csv       – Write the capacity curve.
write_monte_carlo_csv     – Write the Monte Carlo histograms.
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path

import pandas as pd

from pv_yield_model.config.defaults import CSV_DELIMITER
from pv_yield_model.config.loader import SimulationRequest
from pv_yield_model.optimization.capacity import KwpOptimizationResult
from pv_yield_model.optimization.monte_carlo import Histogram, MCResult
from pv_yield_model.optimization.sensitivity import TwoDSensitivity
from pv_yield_model.output.formatting import fmt_currency, fmt_float, fmt_pct, fmt_years
from pv_yield_model.pv.degradation import degraded_energy
from pv_yield_model.simulation import SimulationResult, result_to_dict

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# JSON result
# ---------------------------------------------------------------------------


def write_result_json(path: Path | str, result: SimulationResult) -> None:
    """Write the complete result as indented JSON (None → ``null``)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(result_to_dict(result), fh, indent=2)
    logger.info("Wrote result JSON: %s", path)


# ---------------------------------------------------------------------------
# Summary CSV
# ---------------------------------------------------------------------------


def write_summary_csv(
    path: Path | str,
    request: SimulationRequest,
    result: SimulationResult,
) -> None:
    """Write the single-row simulation summary CSV.

    Parameters
    ----------
    path:
        Destination file path.
    request:
        Validated request (location, system and economic inputs).
    result:
        Complete simulation result.
    """
    economics = request.economics
    kpis = result.kpis
    fin = result.finance
    be = result.break_even
    mc = result.monte_carlo
    kwp = result.kwp_optimization

    row = {
        "name": request.name,
        "lat": fmt_float(request.location.lat),
        "lon": fmt_float(request.location.lon),
        "area_type_applied": result.meta.area_type_applied or "",
        "peakpower_kw": fmt_float(request.pv.peakpower_kw),
        "capex": fmt_currency(economics.capex),
        "price_buy": fmt_float(economics.price_buy),
        "self_consumption": fmt_float(economics.self_consumption),
        "analysis_years": str(economics.analysis_years),
        "annual_kwh": fmt_float(kpis.annual_kwh),
        "specific_yield_kwh_per_kwp": fmt_float(kpis.specific_yield_kwh_per_kwp),
        "capacity_factor_pct": fmt_pct(kpis.capacity_factor_pct, already_pct=True),
        "savings_year1": fmt_currency(fin.savings_year1),
        "payback_years": fmt_years(fin.payback_years),
        "roi_pct": fmt_pct(fin.roi),
        "npv": fmt_currency(fin.npv),
        "irr_pct": fmt_pct(fin.irr),
        "lcoe_per_kwh": fmt_float(fin.lcoe, precision=6),
        "break_even_capex": fmt_currency(be.break_even_capex),
        "break_even_price_buy": fmt_float(be.break_even_price_buy),
        "mc_payback_p50": fmt_float(mc.payback.p50 if mc else None),
        "mc_npv_p50": fmt_currency(mc.npv.p50 if mc else None),
        "mc_prob_under_target": fmt_float(mc.payback.prob_under_target if mc else None),
        "recommended_kwp_npv": fmt_float(kwp.recommended_kwp_npv if kwp else None),
        "recommended_kwp_payback": fmt_float(kwp.recommended_kwp_payback if kwp else None),
    }

    _write_dicts(path, [row])
    logger.info("Wrote summary CSV: %s", path)


# ---------------------------------------------------------------------------
# Cashflows CSV
# ---------------------------------------------------------------------------


def write_cashflows_csv(
    path: Path | str,
    request: SimulationRequest,
    result: SimulationResult,
) -> None:
    """Write the per-year cashflow table.

    Year 0 carries the investment; years 1..N the degraded production,
    yearly savings and cumulative cashflow.
    """
    economics = request.economics
    fin = result.finance
    e_y = result.pvgis.totals.E_y

    rows = [{
        "year": "0",
        "energy_kwh": "",
        "savings": fmt_currency(-economics.capex),
        "cumulative": fmt_currency(-economics.capex),
    }]
    for t, (savings, cumulative) in enumerate(
        zip(fin.cashflow_yearly, fin.cashflow_cumulative), start=1
    ):
        rows.append({
            "year": str(t),
            "energy_kwh": fmt_float(degraded_energy(e_y, economics.degradation, t)),
            "savings": fmt_currency(savings),
            "cumulative": fmt_currency(cumulative),
        })

    _write_dicts(path, rows)
    logger.info("Wrote cashflows CSV (%d rows): %s", len(rows), path)


# ---------------------------------------------------------------------------
# Sensitivity CSV
# ---------------------------------------------------------------------------


def write_sensitivity_csv(path: Path | str, two_d: TwoDSensitivity) -> None:
    """Write the NPV grid with buy prices as rows and self-consumption as columns."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    df = pd.DataFrame(
        two_d.npv_grid,
        index=pd.Index([round(x, 6) for x in two_d.x_axis], name=two_d.variable_x),
        columns=[round(y, 6) for y in two_d.y_axis],
        dtype=float,
    )
    df.to_csv(path, sep=CSV_DELIMITER, float_format="%.2f")
    logger.info("Wrote sensitivity CSV (%d×%d): %s", df.shape[0], df.shape[1], path)


# ---------------------------------------------------------------------------
# Capacity curve CSV
# ---------------------------------------------------------------------------


def write_kwp_curve_csv(path: Path | str, kwp_result: KwpOptimizationResult) -> None:
    """Write one row per evaluated system size, flagging the recommendations."""
    rows = []
    for pt in kwp_result.curve:
        rows.append({
            "kwp": fmt_float(pt.kwp),
            "npv": fmt_currency(pt.npv),
            "payback_years": fmt_years(pt.payback_years),
            "best_npv": str(pt.kwp == kwp_result.recommended_kwp_npv),
            "best_payback": str(pt.kwp == kwp_result.recommended_kwp_payback),
        })

    _write_dicts(path, rows)
    logger.info("Wrote kWp curve CSV (%d rows): %s", len(rows), path)


# ---------------------------------------------------------------------------
# Monte Carlo CSV
# ---------------------------------------------------------------------------


def write_monte_carlo_csv(path: Path | str, mc_result: MCResult) -> None:
    """Write the payback and NPV histograms, one row per bin."""
    rows = []
    rows.extend(_histogram_rows("payback_years", mc_result.histogram_bins.payback))
    rows.extend(_histogram_rows("npv", mc_result.histogram_bins.npv))

    _write_dicts(path, rows)
    logger.info("Wrote Monte Carlo CSV (%d rows): %s", len(rows), path)


def _histogram_rows(metric: str, hist: Histogram) -> list[dict]:
    return [
        {
            "metric": metric,
            "bin": str(i),
            "lower": fmt_float(hist.edges[i]),
            "upper": fmt_float(hist.edges[i + 1]),
            "count": str(count),
        }
        for i, count in enumerate(hist.counts)
    ]


# ---------------------------------------------------------------------------
# Internal helper
# ---------------------------------------------------------------------------


def _write_dicts(path: Path | str, rows: list[dict]) -> None:
    """Write a list of dicts to a CSV file, creating parent directories.

    The first dict determines the column order. An empty *rows* list yields
    an empty file.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if not rows:
        path.write_text("", encoding="utf-8")
        return

    fieldnames = list(rows[0].keys())
    with path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=fieldnames, delimiter=CSV_DELIMITER)
        writer.writeheader()
        writer.writerows(rows)
