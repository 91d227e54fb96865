"""Monte Carlo risk sampling of the annual yield.

Each trial draws a standard-normal variate ``Z`` with the Box–Muller
transform and evaluates the cashflow engine with the yield replaced by
``max(0, E_y + SD_y × Z)``. The economic parameters stay fixed, so the
spread of the results reflects the year-to-year variability of the solar
resource reported by PVGIS.

A trial that never pays back is recorded with the sentinel payback
``analysis_years + 1`` so that percentiles and histograms operate on a fully
numeric sample. A trial without NPV (zero discount rate) is recorded as 0.

Public API
----------
MCStatistics        – P10 / P50 / P90 of a sampled metric.
PaybackStatistics   – Payback percentiles plus probability under target.
Histogram           – Equal-width histogram (edges + counts).
MCResult            – Complete Monte Carlo output.
run_monte_carlo     – Main entry point.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace

import numpy as np

from pv_yield_model.config.defaults import (
    DEFAULT_MC_TRIALS,
    MC_HISTOGRAM_BINS,
    MC_PERCENTILES,
    MC_UNIFORM_FLOOR,
)
from pv_yield_model.finance.cashflow import EconomicsParams, compute_finance
from pv_yield_model.pv.yield_data import YieldTotals

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MCStatistics:
    """Linear-interpolated percentiles of a sampled metric."""

    p10: float
    p50: float
    p90: float


@dataclass(frozen=True)
class PaybackStatistics(MCStatistics):
    """Payback percentiles (years, sentinel included).

    Attributes
    ----------
    prob_under_target:
        Fraction of trials with a payback within the target, or None when no
        target was given.
    """

    prob_under_target: float | None = None


@dataclass(frozen=True)
class Histogram:
    """Equal-width histogram: ``len(edges) == len(counts) + 1``."""

    edges: list[float]
    counts: list[int]


@dataclass(frozen=True)
class HistogramBins:
    payback: Histogram
    npv: Histogram


@dataclass(frozen=True)
class MCResult:
    """Complete Monte Carlo output.

    Attributes
    ----------
    n_trials:
        Number of trials run.
    target_payback_years:
        Payback target used for ``payback.prob_under_target`` (or None).
    payback:
        Payback statistics in years.
    npv:
        NPV statistics.
    histogram_bins:
        Payback and NPV histograms.
    """

    n_trials: int
    target_payback_years: float | None
    payback: PaybackStatistics
    npv: MCStatistics
    histogram_bins: HistogramBins


# ---------------------------------------------------------------------------
# Sampling and statistics helpers
# ---------------------------------------------------------------------------


def standard_normal(rng: np.random.Generator) -> float:
    """Draw one N(0, 1) sample with the Box–Muller transform.

    A first uniform draw of exactly 0 is replaced by a tiny positive value
    so that ``log(u1)`` stays finite.
    """
    u1 = float(rng.random())
    u2 = float(rng.random())
    if u1 <= 0:
        u1 = MC_UNIFORM_FLOOR
    return math.sqrt(-2 * math.log(u1)) * math.cos(2 * math.pi * u2)


def percentile(sorted_values: np.ndarray, p: float) -> float:
    """Linear-interpolated percentile of an ascending sample.

    The position is ``p × (n − 1)``; values at the neighbouring integer
    positions are interpolated. An empty sample yields 0.
    """
    n = len(sorted_values)
    if n == 0:
        return 0.0
    idx = p * (n - 1)
    lo = math.floor(idx)
    hi = math.ceil(idx)
    if lo == hi:
        return float(sorted_values[lo])
    return float(sorted_values[lo] + (idx - lo) * (sorted_values[hi] - sorted_values[lo]))


def build_histogram(values: np.ndarray, num_bins: int = MC_HISTOGRAM_BINS) -> Histogram:
    """Bin *values* into *num_bins* equal-width bins between min and max.

    The maximum falls into the last bin. If all values are equal a single
    bin ``[v, v]`` holds every sample.
    """
    if len(values) == 0:
        return Histogram(edges=[0.0] * (num_bins + 1), counts=[0] * num_bins)

    lo = float(np.min(values))
    hi = float(np.max(values))
    if lo == hi:
        return Histogram(edges=[lo, lo], counts=[int(len(values))])

    span = hi - lo
    bins = np.floor((values - lo) / span * num_bins).astype(int)
    bins = np.minimum(bins, num_bins - 1)
    counts = np.bincount(bins, minlength=num_bins)

    edges = [lo + (span * i) / num_bins for i in range(num_bins + 1)]
    return Histogram(edges=edges, counts=[int(c) for c in counts])


def _compute_statistics(sorted_values: np.ndarray) -> MCStatistics:
    p10, p50, p90 = (percentile(sorted_values, p) for p in MC_PERCENTILES)
    return MCStatistics(p10=p10, p50=p50, p90=p90)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------


def run_monte_carlo(
    totals: YieldTotals,
    economics: EconomicsParams,
    n_trials: int = DEFAULT_MC_TRIALS,
    target_payback_years: float | None = None,
    rng: np.random.Generator | None = None,
) -> MCResult:
    """Sample the yield uncertainty and aggregate payback / NPV risk.

    Parameters
    ----------
    totals:
        Normalised annual yield (``E_y`` and ``SD_y`` are used).
    economics:
        Economic parameters, fixed across trials.
    n_trials:
        Number of independent yield samples.
    target_payback_years:
        Optional payback target; when set, the share of trials paying back
        within the target is reported.
    rng:
        Random source. Defaults to a freshly seeded
        ``numpy.random.default_rng()``; pass a seeded generator for
        reproducible results.

    Returns
    -------
    MCResult
        Percentiles, probability under target and histograms.
    """
    if rng is None:
        rng = np.random.default_rng()

    never_payback = economics.analysis_years + 1
    n_trials = max(0, n_trials)

    payback_samples = np.empty(n_trials, dtype=float)
    npv_samples = np.empty(n_trials, dtype=float)

    for i in range(n_trials):
        z = standard_normal(rng)
        sampled = replace(totals, E_y=max(0.0, totals.E_y + totals.SD_y * z))
        fin = compute_finance(sampled, economics)
        payback_samples[i] = fin.payback_years if fin.payback_years is not None else never_payback
        npv_samples[i] = fin.npv if fin.npv is not None else 0.0

    payback_stats = _compute_statistics(np.sort(payback_samples))
    npv_stats = _compute_statistics(np.sort(npv_samples))

    prob_under_target: float | None = None
    if target_payback_years is not None:
        under = int(
            np.count_nonzero((payback_samples <= target_payback_years) & (payback_samples < never_payback))
        )
        prob_under_target = under / n_trials if n_trials > 0 else 0.0

    histogram_bins = HistogramBins(
        payback=build_histogram(payback_samples),
        npv=build_histogram(npv_samples),
    )

    logger.info(
        "Monte Carlo: %d trials, payback P10/P50/P90 = %.1f/%.1f/%.1f years.",
        n_trials,
        payback_stats.p10,
        payback_stats.p50,
        payback_stats.p90,
    )

    return MCResult(
        n_trials=n_trials,
        target_payback_years=target_payback_years,
        payback=PaybackStatistics(
            p10=payback_stats.p10,
            p50=payback_stats.p50,
            p90=payback_stats.p90,
            prob_under_target=prob_under_target,
        ),
        npv=npv_stats,
        histogram_bins=histogram_bins,
    )
