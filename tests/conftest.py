"""Test configuration and shared fixtures."""

import json
import pytest
import httpx
from fastapi.testclient import TestClient

from config.models import InfluxConfig, ServiceConfig
from relay.client import InfluxRelay
from service.api.dashboard_api import create_app

BASE_URL = "http://influx.test:8086/api/v2"


class FakeInflux:
    """Stand-in for the InfluxDB HTTP API that records every request."""

    def __init__(self):
        self.requests = []
        self.status_code = 200
        self.body = "#datatype,string\n,result,table,_value\n,_result,0,sensor-1\n"
        self.headers = {"content-type": "text/csv; charset=utf-8"}
        self.error = None

    def respond(self, status_code, body, content_type="text/csv; charset=utf-8"):
        self.status_code = status_code
        self.body = body
        self.headers = {"content-type": content_type}

    def fail_with(self, error):
        self.error = error

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, text=self.body, headers=self.headers)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def last_query(self) -> str:
        return self.last_request.content.decode("utf-8")


@pytest.fixture
def temp_data_dir(tmp_path):
    """Temporary directory holding the settings file."""
    return tmp_path


@pytest.fixture
def settings_path(temp_data_dir):
    return temp_data_dir / "settings.json"


@pytest.fixture
def influx_config():
    return InfluxConfig(
        base_url=BASE_URL,
        bucket="sensors",
        organization="acme",
        token="secret-token",
    )


@pytest.fixture
def fake_influx():
    return FakeInflux()


@pytest.fixture
def relay(influx_config, fake_influx):
    return InfluxRelay(influx_config, transport=httpx.MockTransport(fake_influx.handler))


@pytest.fixture
def service_config(settings_path):
    return ServiceConfig(settings_path=settings_path, static_dir=None)


@pytest.fixture
def client(influx_config, service_config, relay):
    app = create_app(influx_config, service_config, relay=relay)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sample_settings():
    return {
        "measurements": {
            "temperature": {"color": "#ff0000", "unit": "C", "chart": {"type": "line"}},
        },
        "dashboard": {"refreshInterval": 10000, "theme": "light"},
    }


@pytest.fixture
def read_settings_file():
    """Load a settings file straight from disk."""
    def _read(path):
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    return _read
