"""End-to-end tests of the dashboard HTTP API against a fake InfluxDB."""

import json
import httpx
import pytest
from fastapi.testclient import TestClient

from config.models import InfluxConfig, ServiceConfig
from service.api.dashboard_api import create_app


class TestQueryRelay:

    def test_config_exposes_bucket_and_org_only(self, client):
        response = client.get("/api/config")
        assert response.status_code == 200
        assert response.json() == {"bucket": "sensors", "organization": "acme"}

    def test_raw_query_relays_status_and_body(self, client, fake_influx):
        flux = 'from(bucket: "sensors") |> range(start: -1h)'
        response = client.post("/api/query", json={"query": flux})

        assert response.status_code == 200
        assert response.text == fake_influx.body
        assert response.headers["content-type"].startswith("text/csv")
        assert fake_influx.last_query == flux

    def test_raw_query_requires_query_text(self, client, fake_influx):
        response = client.post("/api/query", json={})
        assert response.status_code == 400
        assert "query" in response.json()["error"]

        response = client.post("/api/query", json={"query": ""})
        assert response.status_code == 400
        assert fake_influx.requests == []

    def test_buckets_relays_json(self, client, fake_influx):
        buckets = {"buckets": [{"id": "1", "name": "sensors"}]}
        fake_influx.respond(200, json.dumps(buckets), "application/json")

        response = client.get("/api/buckets")

        assert response.status_code == 200
        assert response.json() == buckets
        assert fake_influx.last_request.url.path == "/api/v2/buckets"

    def test_devices(self, client, fake_influx):
        response = client.get("/api/devices")

        assert response.status_code == 200
        assert response.text == fake_influx.body
        assert 'schema.tagValues(bucket: "sensors", tag: "device_name")' in fake_influx.last_query

    def test_measurements_without_device_uses_schema(self, client, fake_influx):
        client.get("/api/measurements")
        assert 'schema.measurements(bucket: "sensors")' in fake_influx.last_query

    def test_measurements_with_device_uses_filtered_range(self, client, fake_influx):
        client.get("/api/measurements", params={"device": "boiler-1"})

        query = fake_influx.last_query
        assert "range(start: -30d)" in query
        assert 'r.device_name == "boiler-1"' in query
        assert "schema.measurements" not in query

    def test_fields_and_tags(self, client, fake_influx):
        client.get("/api/fields/temperature")
        assert 'schema.measurementFieldKeys(bucket: "sensors", measurement: "temperature")' in fake_influx.last_query

        client.get("/api/tags/temperature")
        assert 'schema.measurementTagKeys(bucket: "sensors", measurement: "temperature")' in fake_influx.last_query

    @pytest.mark.parametrize(
        "method,path,kwargs",
        [
            ("post", "/api/query", {"json": {"query": "buckets()"}}),
            ("get", "/api/buckets", {}),
            ("get", "/api/devices", {}),
            ("get", "/api/measurements", {}),
            ("get", "/api/fields/temperature", {}),
            ("get", "/api/tags/temperature", {}),
        ],
    )
    def test_upstream_401_is_relayed(self, client, fake_influx, method, path, kwargs):
        fake_influx.respond(401, '{"code":"unauthorized","message":"unauthorized access"}', "application/json")

        response = getattr(client, method)(path, **kwargs)

        assert response.status_code == 401
        assert response.json() == {"error": '{"code":"unauthorized","message":"unauthorized access"}'}

    def test_upstream_bad_request_is_relayed(self, client, fake_influx):
        fake_influx.respond(400, "error @1:1-1:5: undefined identifier nope", "application/json")

        response = client.post("/api/query", json={"query": "nope"})

        assert response.status_code == 400
        assert response.json() == {"error": "error @1:1-1:5: undefined identifier nope"}

    def test_transport_failure_is_500(self, client, fake_influx):
        fake_influx.fail_with(httpx.ConnectError("Connection refused"))

        response = client.get("/api/devices")

        assert response.status_code == 500
        assert response.json() == {"error": "Connection refused"}


class TestSettings:

    def test_first_boot_writes_defaults(self, client, settings_path, read_settings_file):
        assert read_settings_file(settings_path) == {
            "measurements": {},
            "dashboard": {"refreshInterval": 30000, "theme": "dark"},
        }
        assert client.get("/api/settings").json() == read_settings_file(settings_path)

    def test_replace_then_read_round_trip(self, client, sample_settings):
        response = client.post("/api/settings", json=sample_settings)
        assert response.status_code == 200
        assert response.json() == {"success": True}

        assert client.get("/api/settings").json() == sample_settings

    def test_replace_rejects_non_object(self, client):
        response = client.post("/api/settings", json=[1, 2, 3])
        assert response.status_code == 400
        assert "error" in response.json()

    def test_patch_new_measurement(self, client):
        response = client.patch("/api/settings/measurement/humidity", json={"color": "blue"})

        assert response.status_code == 200
        assert response.json() == {"success": True, "settings": {"color": "blue"}}
        assert client.get("/api/settings").json()["measurements"] == {"humidity": {"color": "blue"}}

    def test_patch_existing_measurement_is_shallow(self, client, sample_settings):
        client.post("/api/settings", json=sample_settings)

        response = client.patch(
            "/api/settings/measurement/temperature",
            json={"unit": "F", "chart": {"stacked": True}},
        )

        assert response.json()["settings"] == {
            "color": "#ff0000",
            "unit": "F",
            "chart": {"stacked": True},
        }
        document = client.get("/api/settings").json()
        assert document["dashboard"] == sample_settings["dashboard"]

    def test_unreadable_settings_is_500(self, client, settings_path):
        settings_path.write_text("{broken", encoding="utf-8")

        response = client.get("/api/settings")
        assert response.status_code == 500
        assert "not valid JSON" in response.json()["error"]

        response = client.patch("/api/settings/measurement/x", json={"a": 1})
        assert response.status_code == 500

    def test_missing_settings_is_500(self, client, settings_path):
        settings_path.unlink()

        response = client.get("/api/settings")
        assert response.status_code == 500
        assert "not found" in response.json()["error"]


class TestAppWiring:

    def test_health(self, client):
        body = client.get("/api/health").json()
        assert body["status"] == "healthy"
        assert body["settings_readable"] is True
        assert body["upstream_configured"] is True

    def test_health_degraded_without_upstream_config(self, service_config, relay):
        app = create_app(InfluxConfig(), service_config, relay=relay)
        with TestClient(app) as client:
            body = client.get("/api/health").json()
        assert body["status"] == "degraded"
        assert body["upstream_configured"] is False

    def test_unknown_route_error_envelope(self, client):
        response = client.get("/api/nope")
        assert response.status_code == 404
        assert response.json()["error"] == "Resource not found"

    def test_cors_allows_any_origin_by_default(self, client):
        response = client.get("/api/config", headers={"Origin": "http://dashboard.local"})
        assert response.headers["access-control-allow-origin"] == "*"

    def test_serves_static_dashboard(self, influx_config, settings_path, relay, tmp_path):
        static_dir = tmp_path / "public"
        static_dir.mkdir()
        (static_dir / "index.html").write_text("<h1>dashboard</h1>", encoding="utf-8")
        config = ServiceConfig(settings_path=settings_path, static_dir=static_dir)

        app = create_app(influx_config, config, relay=relay)
        with TestClient(app) as client:
            assert client.get("/").text == "<h1>dashboard</h1>"
            assert client.get("/api/config").json()["bucket"] == "sensors"
