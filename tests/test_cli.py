import json

import pandas as pd
import pytest

from cityweather.cli import batch_main, daily_main, healthcheck_main
from cityweather.storage.db import init_db
from cityweather.storage.repository import WeatherRepository

BASE_URL = "https://cdo.test/api/v2"


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("NOAA_CDO_TOKEN", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    return tmp_path


def _write_config(path, *, token="cli-token"):
    providers = {"noaa_cdo": {"baseUrl": BASE_URL, "retryDelaySeconds": 0, "rateLimitCooldownSeconds": 0}}
    if token:
        providers["noaa_cdo"]["token"] = token
    path.write_text(
        json.dumps(
            {
                "database": {"url": f"sqlite:///{path.parent / 'weather.db'}"},
                "providers": providers,
                "logging": {"dir": str(path.parent / "logs")},
                "locations": {
                    "Chicago, IL": {"lat": 41.8781, "lon": -87.6298},
                    "Durham, NC": {"lat": 35.994, "lon": -78.8986},
                },
            }
        ),
        encoding="utf-8",
    )
    return path


def _mock_cdo(requests_mock, *, token_status=200):
    requests_mock.get(f"{BASE_URL}/datasets", status_code=token_status, json={"results": []})
    requests_mock.get(f"{BASE_URL}/stations", json={"results": [{"id": "GHCND:X", "name": "SOMEWHERE"}]})
    requests_mock.get(f"{BASE_URL}/data", json={"results": [{"datatype": "TMAX", "value": 64}]})


def test_missing_token_exits_1(workdir):
    config = _write_config(workdir / "config.json", token=None)
    assert batch_main([f"--config={config}"]) == 1


def test_rejected_token_exits_1(workdir, requests_mock):
    config = _write_config(workdir / "config.json")
    _mock_cdo(requests_mock, token_status=401)

    assert batch_main([f"--config={config}", "--source=config"]) == 1
    assert not any("/stations" in request.url for request in requests_mock.request_history)


def test_batch_run_writes_records_and_report(workdir, requests_mock):
    config = _write_config(workdir / "config.json")
    _mock_cdo(requests_mock)
    report = workdir / "reports" / "run.csv"

    code = batch_main(
        [f"--config={config}", "--source=config", "--retries=0", "--concurrency=2", f"--report={report}"]
    )

    assert code == 0
    frame = pd.read_csv(report)
    assert list(frame["location"]) == ["Chicago, IL", "Durham, NC"]
    assert set(frame["status"]) == {"succeeded"}
    repository = WeatherRepository(init_db(f"sqlite:///{workdir / 'weather.db'}"))
    assert repository.count_records() == 2


def test_item_failures_still_exit_0(workdir, requests_mock):
    config = _write_config(workdir / "config.json")
    requests_mock.get(f"{BASE_URL}/datasets", json={"results": []})
    requests_mock.get(f"{BASE_URL}/stations", status_code=500, text="boom")

    assert batch_main([f"--config={config}", "--source=config", "--retries=1"]) == 0


def test_empty_database_exits_1(workdir, requests_mock):
    config = _write_config(workdir / "config.json")
    _mock_cdo(requests_mock)
    assert batch_main([f"--config={config}", "--limit=1"]) == 1


def test_daily_update_writes_dated_log(workdir, requests_mock):
    config = _write_config(workdir / "config.json")
    _mock_cdo(requests_mock)
    repository = WeatherRepository(init_db(f"sqlite:///{workdir / 'weather.db'}"))
    repository.add_cities([{"name": "Durham", "display_name": "Durham, NC", "latitude": 35.994, "longitude": -78.8986}])

    assert daily_main([f"--config={config}"]) == 0
    logs = list((workdir / "logs").glob("weather-update-*.log"))
    assert len(logs) == 1
    assert "Weather update finished" in logs[0].read_text(encoding="utf-8")
    assert repository.count_records() == 1


def test_unwritable_log_file_exits_1(workdir):
    config = _write_config(workdir / "config.json")
    blocker = workdir / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")

    assert batch_main([f"--config={config}", f"--log-file={blocker / 'run.log'}"]) == 1


def _write_token_only_config(path, locations):
    path.write_text(
        json.dumps(
            {
                "providers": {"noaa_cdo": {"baseUrl": BASE_URL, "token": "cli-token"}},
                "locations": locations,
            }
        ),
        encoding="utf-8",
    )
    return path


def test_healthcheck_from_config_needs_no_database(workdir, requests_mock):
    config = _write_token_only_config(workdir / "config.json", {"Chicago, IL": {"lat": 41.8781, "lon": -87.6298}})
    _mock_cdo(requests_mock)

    assert healthcheck_main([f"--config={config}", "--source=config"]) == 0


def test_healthcheck_reports_missing_station(workdir, requests_mock):
    config = _write_token_only_config(workdir / "config.json", {"Durham, NC": {"lat": 35.994, "lon": -78.8986}})
    requests_mock.get(f"{BASE_URL}/datasets", json={"results": []})
    requests_mock.get(f"{BASE_URL}/stations", json={"results": []})

    assert healthcheck_main([f"--config={config}"]) == 1


def test_healthcheck_store_error_exits_1(workdir, requests_mock):
    blocker = workdir / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    config = workdir / "config.json"
    config.write_text(
        json.dumps(
            {
                "database": {"url": f"sqlite:///{blocker / 'weather.db'}"},
                "providers": {"noaa_cdo": {"baseUrl": BASE_URL, "token": "cli-token"}},
            }
        ),
        encoding="utf-8",
    )
    _mock_cdo(requests_mock)

    assert healthcheck_main([f"--config={config}", "--source=database"]) == 1
