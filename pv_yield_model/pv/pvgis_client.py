"""PVGIS API client – fetch monthly and annual PV yield estimates.

Uses the EU PVGIS REST API, ``PVcalc`` endpoint, to compute the expected
production of a grid-connected PV system, optionally with the terrain horizon
fetched from the ``printhorizon`` endpoint.

Key behaviour
-------------
- API version ``v5_3``; the ``PVGIS-NSRDB`` radiation database is only served
  by ``v5_2``.
- Caches the raw JSON response on disk (``~/.pv_yield_cache/``) keyed by a
  SHA-256 hash of the URL and query parameters, so repeated runs with the
  same inputs never hit the network.
- Retries up to :data:`~pv_yield_model.config.defaults.PVGIS_RETRY_MAX`
  attempts with capped exponential backoff on HTTP 429/529, 5xx, timeouts
  and connection errors.
- Keeps at least
  :data:`~pv_yield_model.config.defaults.PVGIS_MIN_REQUEST_INTERVAL_S`
  between two live requests.

Typical usage::

    from pv_yield_model.pv.pvgis_client import PVGISClient
    client = PVGISClient()
    result = client.fetch_pvcalc(request.location, request.pv)
    result.totals.E_y   # kWh/year
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any

import requests

from pv_yield_model.config.defaults import (
    PVGIS_API_ROOT_URL,
    PVGIS_API_VERSION,
    PVGIS_API_VERSION_NSRDB,
    PVGIS_CACHE_DIR,
    PVGIS_HORIZON_ENDPOINT,
    PVGIS_MIN_REQUEST_INTERVAL_S,
    PVGIS_NSRDB_DATABASE,
    PVGIS_OUTPUT_FORMAT,
    PVGIS_PVCALC_ENDPOINT,
    PVGIS_REQUEST_TIMEOUT_S,
    PVGIS_RETRY_BACKOFF_FACTOR,
    PVGIS_RETRY_BACKOFF_MAX_S,
    PVGIS_RETRY_MAX,
)
from pv_yield_model.config.loader import LocationConfig, PVConfig
from pv_yield_model.pv.yield_data import PVGISYield, parse_pvcalc_response, to_number

logger = logging.getLogger(__name__)

# HTTP status codes that warrant a retry (rate-limit, overload and server errors)
_RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({429, 529})


def _is_retryable(status_code: int) -> bool:
    return status_code in _RETRYABLE_STATUS_CODES or 500 <= status_code < 600


class PVGISError(RuntimeError):
    """Raised when the PVGIS API returns an error that cannot be retried."""


def api_version(raddatabase: str | None) -> str:
    """Return the PVGIS API version serving *raddatabase*."""
    if raddatabase == PVGIS_NSRDB_DATABASE:
        return PVGIS_API_VERSION_NSRDB
    return PVGIS_API_VERSION


def build_query(params: dict[str, Any]) -> dict[str, Any]:
    """Normalise query parameters for PVGIS.

    Booleans become ``1``/``0``, ``None`` values are dropped and JSON output
    is forced (``browser=0`` disables the HTML download wrapper).
    """
    query: dict[str, Any] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            query[key] = 1 if value else 0
        else:
            query[key] = value
    query["outputformat"] = PVGIS_OUTPUT_FORMAT
    query["browser"] = 0
    return query


def build_pvcalc_params(
    location: LocationConfig,
    pv: PVConfig,
    userhorizon: list[float] | None = None,
) -> dict[str, Any]:
    """Return the (un-normalised) query parameters for ``PVcalc``.

    Tilt and aspect are only sent when PVGIS is not asked to optimise them
    and both are known.
    """
    params: dict[str, Any] = {
        "lat": location.lat,
        "lon": location.lon,
        "peakpower": pv.peakpower_kw,
        "loss": pv.loss_percent,
        "usehorizon": pv.usehorizon,
        "pvtechchoice": pv.pvtechchoice,
        "mountingplace": pv.mountingplace,
        "optimalangles": pv.optimalangles,
    }
    if not pv.optimalangles and pv.angle_deg is not None and pv.aspect_deg is not None:
        params["angle"] = pv.angle_deg
        params["aspect"] = pv.aspect_deg
    if userhorizon:
        params["userhorizon"] = ",".join(f"{h:g}" for h in userhorizon)
    if pv.raddatabase is not None and pv.raddatabase.strip():
        params["raddatabase"] = pv.raddatabase
    return params


class PVGISClient:
    """Thin client for the PVGIS ``PVcalc`` and ``printhorizon`` endpoints.

    Parameters
    ----------
    cache_dir:
        Directory for persistent JSON response cache.  Defaults to
        ``~/.pv_yield_cache``.  Pass ``None`` to disable caching entirely
        (useful in tests).
    root_url:
        PVGIS API root URL (without version).  Override for testing.
    timeout:
        HTTP request timeout in seconds.
    max_retries:
        Maximum number of HTTP attempts per request.
    backoff_factor:
        Base wait (seconds) for exponential backoff.  The wait after failed
        attempt *k* is ``min(backoff_factor × 2^k, backoff_max)``.
    backoff_max:
        Upper bound of a single backoff wait in seconds.
    min_interval_s:
        Minimum time between two live requests.
    """

    def __init__(
        self,
        cache_dir: str | Path | None = PVGIS_CACHE_DIR,
        root_url: str = PVGIS_API_ROOT_URL,
        timeout: int = PVGIS_REQUEST_TIMEOUT_S,
        max_retries: int = PVGIS_RETRY_MAX,
        backoff_factor: float = PVGIS_RETRY_BACKOFF_FACTOR,
        backoff_max: float = PVGIS_RETRY_BACKOFF_MAX_S,
        min_interval_s: float = PVGIS_MIN_REQUEST_INTERVAL_S,
    ) -> None:
        self._root_url = root_url.rstrip("/") + "/"
        self._timeout = timeout
        self._max_retries = max_retries
        self._backoff_factor = backoff_factor
        self._backoff_max = backoff_max
        self._min_interval_s = min_interval_s
        self._last_request_at: float | None = None

        if cache_dir is None:
            self._cache_dir: Path | None = None
        else:
            self._cache_dir = Path(cache_dir).expanduser()
            self._cache_dir.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def fetch_pvcalc(self, location: LocationConfig, pv: PVConfig) -> PVGISYield:
        """Fetch the monthly and annual yield of a PV system.

        When ``pv.usehorizon`` is set, the terrain horizon is fetched first and
        sent as ``userhorizon``; if that call fails PVGIS falls back to its own
        elevation model.

        Raises
        ------
        PVGISError
            When the API returns a non-retryable error or all retries are
            exhausted.
        """
        userhorizon = None
        if pv.usehorizon:
            try:
                userhorizon = self.fetch_horizon_profile(location.lat, location.lon)
            except (PVGISError, requests.RequestException) as exc:
                logger.warning(
                    "Horizon profile unavailable (%s); PVGIS will use its own DEM", exc
                )

        params = build_pvcalc_params(location, pv, userhorizon)
        raw = self._get_with_cache(PVGIS_PVCALC_ENDPOINT, params, pv.raddatabase)
        return parse_pvcalc_response(raw)

    def fetch_horizon_profile(self, lat: float, lon: float) -> list[float]:
        """Return horizon heights (degrees) ordered by azimuth from north.

        Raises
        ------
        PVGISError
            When the request fails or the response has no horizon profile.
        """
        raw = self._get_with_cache(PVGIS_HORIZON_ENDPOINT, {"lat": lat, "lon": lon}, None)
        try:
            profile = raw["outputs"]["horizon_profile"]
        except (KeyError, TypeError) as exc:
            raise PVGISError(
                "Unexpected PVGIS response structure: missing 'outputs.horizon_profile' key."
            ) from exc
        heights = [to_number(point.get("H_hor")) for point in profile]
        logger.debug("Horizon profile for (%.4f, %.4f): %d points", lat, lon, len(heights))
        return heights

    def endpoint_url(self, endpoint: str, raddatabase: str | None = None) -> str:
        return f"{self._root_url}{api_version(raddatabase)}/{endpoint}"

    # ------------------------------------------------------------------
    # Cache helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _cache_key(url: str, query: dict[str, Any]) -> str:
        """Return a 32-char SHA-256 hex digest for *url* and *query*."""
        canonical = json.dumps({"url": url, "params": query}, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode()).hexdigest()[:32]

    def _cache_path(self, url: str, query: dict[str, Any]) -> Path | None:
        """Return the cache file ``Path``, or ``None`` if caching is disabled."""
        if self._cache_dir is None:
            return None
        return self._cache_dir / f"pvgis_{self._cache_key(url, query)}.json"

    def _get_with_cache(
        self,
        endpoint: str,
        params: dict[str, Any],
        raddatabase: str | None,
    ) -> dict:
        """Return parsed JSON, served from disk cache when available."""
        url = self.endpoint_url(endpoint, raddatabase)
        query = build_query(params)
        cache_file = self._cache_path(url, query)

        if cache_file is not None and cache_file.exists():
            cached = self._read_cache(cache_file)
            if cached is not None:
                logger.info("PVGIS cache hit: %s", cache_file)
                return cached

        logger.info("PVGIS cache miss – fetching %s", endpoint)
        raw = self._fetch(url, query)

        if cache_file is not None:
            self._write_cache(cache_file, raw)

        return raw

    @staticmethod
    def _read_cache(cache_file: Path) -> dict | None:
        """Load a cache file; an unreadable one is deleted and treated as a miss."""
        try:
            with cache_file.open("r", encoding="utf-8") as fh:
                return json.load(fh)
        except (OSError, ValueError) as exc:
            logger.warning("Discarding unreadable PVGIS cache %s (%s)", cache_file, exc)
            cache_file.unlink(missing_ok=True)
            return None

    @staticmethod
    def _write_cache(cache_file: Path, raw: dict) -> None:
        """Write *raw* to a temporary file and move it into place."""
        logger.debug("Writing PVGIS cache: %s", cache_file)
        fd, tmp_name = tempfile.mkstemp(
            dir=cache_file.parent, prefix=cache_file.stem, suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(raw, fh)
            os.replace(tmp_name, cache_file)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    # ------------------------------------------------------------------
    # HTTP with throttling and retry/backoff
    # ------------------------------------------------------------------

    def _throttle(self) -> None:
        """Sleep so that live requests are at least ``min_interval_s`` apart."""
        if self._last_request_at is not None:
            elapsed = time.monotonic() - self._last_request_at
            if elapsed < self._min_interval_s:
                time.sleep(self._min_interval_s - elapsed)
        self._last_request_at = time.monotonic()

    def _backoff(self, attempt: int) -> float:
        return min(self._backoff_factor * (2**attempt), self._backoff_max)

    def _fetch(self, url: str, query: dict[str, Any]) -> dict:
        """Execute the HTTP GET with exponential backoff retry."""
        last_exc: Exception | None = None

        for attempt in range(1, self._max_retries + 1):
            try:
                logger.debug(
                    "PVGIS request attempt %d/%d: %s",
                    attempt,
                    self._max_retries,
                    url,
                )
                self._throttle()
                resp = requests.get(url, params=query, timeout=self._timeout)

                if resp.status_code == 200:
                    try:
                        return resp.json()
                    except ValueError as exc:
                        raise PVGISError(
                            f"PVGIS returned a non-JSON response: {resp.text[:300]}"
                        ) from exc

                if _is_retryable(resp.status_code):
                    last_exc = PVGISError(
                        f"HTTP {resp.status_code} from PVGIS after {attempt} attempt(s)"
                    )
                    if attempt < self._max_retries:
                        wait = self._backoff(attempt)
                        logger.warning(
                            "PVGIS HTTP %d on attempt %d/%d – retrying in %.1fs",
                            resp.status_code,
                            attempt,
                            self._max_retries,
                            wait,
                        )
                        time.sleep(wait)
                    continue

                # Non-retryable client error (4xx except 429)
                try:
                    err_body = resp.json()
                    detail = (
                        err_body.get("message")
                        or err_body.get("description")
                        or str(err_body)
                    )
                except (ValueError, AttributeError):
                    detail = resp.text[:300]
                raise PVGISError(f"PVGIS API error (HTTP {resp.status_code}): {detail}")

            except (requests.Timeout, requests.ConnectionError) as exc:
                last_exc = exc
                if attempt < self._max_retries:
                    wait = self._backoff(attempt)
                    logger.warning(
                        "PVGIS %s on attempt %d/%d – retrying in %.1fs",
                        type(exc).__name__,
                        attempt,
                        self._max_retries,
                        wait,
                    )
                    time.sleep(wait)

        raise PVGISError(
            f"PVGIS request failed after {self._max_retries} attempt(s)."
        ) from last_exc
