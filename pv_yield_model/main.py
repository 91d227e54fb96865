"""CLI entrypoint for the PV yield and financial model.

Execution flow
--------------
1.  Load & validate request JSON.
2.  Fetch the PVGIS yield (or load it from cache).
3.  Run the simulation (KPIs, cashflow, sweeps, Monte Carlo, break-even,
    capacity sweep).
4.  Write the JSON result and output CSVs.
5.  Print summary to stdout.

Usage
-----
    python -m pv_yield_model.main --request requests/home.json
    python -m pv_yield_model.main --request home.json --no-mc
    python -m pv_yield_model.main --request home.json --trials 5000 --seed 42
    python -m pv_yield_model.main --request home.json --dry-run
    python -m pv_yield_model.main --request home.json -v
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

import jsonschema
import requests

from pv_yield_model.config.defaults import DEFAULT_OUTPUT_DIR
from pv_yield_model.config.loader import load_request
from pv_yield_model.output.csv_writer import (
    write_cashflows_csv,
    write_kwp_curve_csv,
    write_monte_carlo_csv,
    write_result_json,
    write_sensitivity_csv,
    write_summary_csv,
)
from pv_yield_model.output.formatting import fmt_currency, fmt_float, fmt_pct, fmt_years
from pv_yield_model.pv.pvgis_client import PVGISClient, PVGISError
from pv_yield_model.simulation import SimulationResult, simulate

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# CLI argument parsing
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    p = argparse.ArgumentParser(
        prog="python -m pv_yield_model.main",
        description="PV Yield and Financial Model",
    )
    p.add_argument(
        "--request",
        required=True,
        metavar="PATH",
        help="Path to simulation request JSON file.",
    )
    p.add_argument(
        "--output",
        metavar="DIR",
        default=None,
        help=f"Output directory (default: '{DEFAULT_OUTPUT_DIR}').",
    )
    p.add_argument(
        "--no-mc",
        action="store_true",
        default=False,
        help="Skip Monte Carlo simulation even if enabled in JSON.",
    )
    p.add_argument(
        "--trials",
        type=int,
        default=None,
        metavar="N",
        help="Number of Monte Carlo trials (overrides JSON).",
    )
    p.add_argument(
        "--seed",
        type=int,
        default=None,
        metavar="S",
        help="Random seed for Monte Carlo (overrides JSON).",
    )
    p.add_argument(
        "--no-cache",
        action="store_true",
        default=False,
        help="Do not read or write the PVGIS response cache.",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Enable DEBUG logging.",
    )
    p.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Validate the request JSON, then exit without fetching or simulating.",
    )
    return p


# ---------------------------------------------------------------------------
# Main orchestration
# ---------------------------------------------------------------------------


def run(args: argparse.Namespace, client: PVGISClient | None = None) -> int:
    """Execute a full simulation run.

    Parameters
    ----------
    args:
        Parsed CLI arguments.
    client:
        PVGIS client to use; built from *args* when None.

    Returns
    -------
    int
        Exit code (0 = success, 1 = error).
    """
    # ------------------------------------------------------------------
    # Step 1: Load & validate request JSON
    # ------------------------------------------------------------------
    logger.info("Loading request: %s", args.request)
    try:
        request = load_request(args.request)
    except (FileNotFoundError, json.JSONDecodeError, jsonschema.ValidationError, ValueError) as exc:
        logger.error("Failed to load request: %s", exc)
        return 1

    if args.dry_run:
        print(f"Dry run: request '{request.name}' validated successfully.")
        return 0

    mc_cfg = request.monte_carlo
    if args.no_mc:
        mc_cfg = replace(mc_cfg, enabled=False)
    if args.trials is not None:
        mc_cfg = replace(mc_cfg, n_trials=args.trials)
    if args.seed is not None:
        mc_cfg = replace(mc_cfg, seed=args.seed)
    request.monte_carlo = mc_cfg

    output_base = Path(args.output) if args.output else Path(DEFAULT_OUTPUT_DIR)
    output_dir = output_base / request.name
    output_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Output directory: %s", output_dir)

    # ------------------------------------------------------------------
    # Step 2 + 3: Fetch PVGIS yield and simulate
    # ------------------------------------------------------------------
    if client is None:
        client = PVGISClient(cache_dir=None) if args.no_cache else PVGISClient()
    try:
        result = simulate(request, client)
    except (PVGISError, requests.RequestException) as exc:
        logger.error("PVGIS fetch failed: %s", exc)
        return 1

    # ------------------------------------------------------------------
    # Step 4: Write outputs
    # ------------------------------------------------------------------
    name = request.name
    write_result_json(output_dir / f"{name}_result.json", result)
    write_summary_csv(output_dir / f"{name}_summary.csv", request, result)
    write_cashflows_csv(output_dir / f"{name}_cashflows.csv", request, result)
    write_sensitivity_csv(output_dir / f"{name}_sensitivity_2d.csv", result.sensitivity.two_d)
    if result.kwp_optimization is not None:
        write_kwp_curve_csv(output_dir / f"{name}_kwp_curve.csv", result.kwp_optimization)
    if result.monte_carlo is not None:
        write_monte_carlo_csv(output_dir / f"{name}_monte_carlo.csv", result.monte_carlo)

    # ------------------------------------------------------------------
    # Step 5: Print summary
    # ------------------------------------------------------------------
    _print_summary(name, result)

    return 0


def _print_summary(name: str, result: SimulationResult) -> None:
    """Print a concise result summary to stdout."""
    kpis = result.kpis
    fin = result.finance
    print()
    print("=" * 60)
    print(f"  Simulation: {name}")
    print("=" * 60)
    print(f"  Annual yield:          {kpis.annual_kwh:,.0f} kWh")
    print(f"  Specific yield:        {kpis.specific_yield_kwh_per_kwp:,.0f} kWh/kWp")
    print(f"  Capacity factor:       {fmt_pct(kpis.capacity_factor_pct, already_pct=True)} %")
    if result.meta.area_type_applied is not None:
        print(f"  Shading applied:       {result.meta.area_type_applied}")
    print()
    print(f"  Savings year 1:        {fmt_currency(fin.savings_year1)}")
    print(f"  Payback:               {fmt_years(fin.payback_years, 'never')} years")
    print(f"  ROI:                   {fmt_pct(fin.roi, placeholder='n/a')} %")
    print(f"  NPV:                   {fmt_currency(fin.npv, placeholder='n/a')}")
    print(f"  IRR:                   {fmt_pct(fin.irr, placeholder='n/a')} %")
    if fin.lcoe is not None:
        print(f"  LCOE:                  {fmt_float(fin.lcoe)} per kWh")

    be = result.break_even
    print()
    print(
        f"  Break-even CAPEX ({be.target_payback_years} y): "
        f"{fmt_currency(be.break_even_capex, placeholder='n/a')}"
    )
    print(f"  Break-even price_buy:  {fmt_float(be.break_even_price_buy, placeholder='n/a')}")

    mc = result.monte_carlo
    if mc is not None:
        print()
        print(
            f"  MC payback P10/P50/P90: {mc.payback.p10:.1f} / "
            f"{mc.payback.p50:.1f} / {mc.payback.p90:.1f} years"
        )
        if mc.payback.prob_under_target is not None:
            print(
                f"  MC P(payback ≤ {mc.target_payback_years:g} y): "
                f"{fmt_pct(mc.payback.prob_under_target)} %"
            )

    kwp = result.kwp_optimization
    if kwp is not None:
        print()
        print(f"  Best size by NPV:      {kwp.recommended_kwp_npv:g} kWp")
        print(f"  Best size by payback:  {kwp.recommended_kwp_payback:g} kWp")

    for insight in result.insights:
        print(f"  [{insight.type}] {insight.text}")

    print("=" * 60)
    print()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Parse CLI arguments and run the simulation."""
    parser = _build_parser()
    args = parser.parse_args()

    # Configure logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    sys.exit(run(args))


if __name__ == "__main__":
    main()
