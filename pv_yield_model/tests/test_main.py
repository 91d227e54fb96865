"""Tests for the CLI entry point (main.py).

The PVGIS client is replaced by a ``MagicMock`` returning the parsed
``pvcalc_response`` fixture; outputs go to ``tmp_path``.
"""

from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest

from pv_yield_model.main import _build_parser, run
from pv_yield_model.pv.pvgis_client import PVGISClient, PVGISError
from pv_yield_model.pv.yield_data import parse_pvcalc_response


@pytest.fixture
def request_file(tmp_path, full_request_dict):
    path = tmp_path / "home.json"
    path.write_text(json.dumps(full_request_dict), encoding="utf-8")
    return path


@pytest.fixture
def client(pvcalc_response):
    mock = MagicMock()
    mock.fetch_pvcalc.return_value = parse_pvcalc_response(pvcalc_response)
    return mock


def _args(*argv: str):
    return _build_parser().parse_args(list(argv))


class TestParser:
    def test_defaults(self):
        args = _args("--request", "r.json")
        assert args.request == "r.json"
        assert args.output is None
        assert args.no_mc is False
        assert args.trials is None
        assert args.seed is None
        assert args.dry_run is False

    def test_request_required(self):
        with pytest.raises(SystemExit):
            _args()


class TestRun:
    def test_dry_run(self, request_file, client, capsys):
        assert run(_args("--request", str(request_file), "--dry-run"), client=client) == 0
        assert "validated successfully" in capsys.readouterr().out
        client.fetch_pvcalc.assert_not_called()

    def test_missing_request_returns_1(self, tmp_path, client):
        assert run(_args("--request", str(tmp_path / "missing.json")), client=client) == 1

    def test_invalid_request_returns_1(self, tmp_path, client):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"location": {"lat": 0, "lon": 0}}), encoding="utf-8")
        assert run(_args("--request", str(path)), client=client) == 1

    def test_full_run_writes_outputs(self, tmp_path, request_file, client, capsys):
        out = tmp_path / "out"
        code = run(_args("--request", str(request_file), "--output", str(out)), client=client)
        assert code == 0

        run_dir = out / "vienna_home"
        for suffix in (
            "result.json",
            "summary.csv",
            "cashflows.csv",
            "sensitivity_2d.csv",
            "kwp_curve.csv",
            "monte_carlo.csv",
        ):
            assert (run_dir / f"vienna_home_{suffix}").exists(), suffix

        stdout = capsys.readouterr().out
        assert "Simulation: vienna_home" in stdout
        assert "Shading applied:       suburban" in stdout

    def test_no_mc_skips_monte_carlo(self, tmp_path, request_file, client):
        out = tmp_path / "out"
        run(_args("--request", str(request_file), "--output", str(out), "--no-mc"), client=client)
        run_dir = out / "vienna_home"
        assert not (run_dir / "vienna_home_monte_carlo.csv").exists()
        data = json.loads((run_dir / "vienna_home_result.json").read_text(encoding="utf-8"))
        assert data["monte_carlo"] is None

    def test_trials_override(self, tmp_path, request_file, client):
        out = tmp_path / "out"
        argv = ("--request", str(request_file), "--output", str(out), "--trials", "50")
        run(_args(*argv), client=client)
        data = json.loads(
            (out / "vienna_home" / "vienna_home_result.json").read_text(encoding="utf-8")
        )
        assert data["monte_carlo"]["n_trials"] == 50

    def test_pvgis_error_returns_1(self, tmp_path, request_file):
        failing = MagicMock()
        failing.fetch_pvcalc.side_effect = PVGISError("HTTP 503")
        argv = ("--request", str(request_file), "--output", str(tmp_path / "out"))
        assert run(_args(*argv), client=failing) == 1

    def test_non_json_pvgis_body_returns_1(self, tmp_path, request_file):
        resp = MagicMock()
        resp.status_code = 200
        resp.json.side_effect = ValueError("Expecting value")
        resp.text = "<html>maintenance</html>"
        live = PVGISClient(cache_dir=None, max_retries=1, min_interval_s=0.0)
        argv = ("--request", str(request_file), "--output", str(tmp_path / "out"))
        with patch("requests.get", return_value=resp):
            assert run(_args(*argv), client=live) == 1

    def test_corrupt_cache_is_refetched(self, tmp_path, request_file, pvcalc_response):
        resp = MagicMock()
        resp.status_code = 200
        resp.json.return_value = pvcalc_response
        cache_dir = tmp_path / "cache"
        live = PVGISClient(cache_dir=cache_dir, max_retries=1, min_interval_s=0.0)
        argv = ("--request", str(request_file), "--output", str(tmp_path / "out"), "--no-mc")
        with patch("requests.get", return_value=resp):
            assert run(_args(*argv), client=live) == 0
        for cache_file in cache_dir.glob("*.json"):
            cache_file.write_text('{"outputs": {"tot', encoding="utf-8")

        with patch("requests.get", return_value=resp) as mock_get:
            assert run(_args(*argv), client=live) == 0
        assert mock_get.called
