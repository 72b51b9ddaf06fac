"""
Unit tests for the grants service HTTP surface.
"""

import pytest
from fastapi.testclient import TestClient

from service_grants.app.main import GrantService
from service_grants.app.persistence import MemoryGrantStore


class TestGrantService:
    """Test cases for GrantService."""

    @pytest.fixture
    def store(self):
        return MemoryGrantStore()

    @pytest.fixture
    def make_client(self, make_config, upstream, store):
        def _make(**overrides):
            service = GrantService(make_config(**overrides), store=store,
                                   transport=upstream.transport())
            return TestClient(service.app)
        return _make

    @pytest.fixture
    def client(self, make_client):
        with make_client() as client:
            yield client

    def test_health_check(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "grants"
        assert data["status"] == "ok"
        assert data["dependencies"] == {"grant_store": "ok"}

    def test_metrics_endpoint(self, client):
        client.get("/", params={"purchaseId": "12345", "principal": "alice"})

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "grant_decisions_total" in response.text
        assert "upstream_requests_total" in response.text

    def test_preview_is_plain_text(self, client, store):
        response = client.get("/", params={"purchaseId": "12345", "principal": "alice"})

        assert response.status_code == 202
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == "User 'alice' will be granted access to 'Asset Pack' if request sent with POST"
        assert store.grants == {}

    def test_form_post_grants_access(self, client, store, upstream):
        response = client.post("/", data={"purchaseId": "12345", "principal": "alice"})

        assert response.status_code == 200
        assert response.text.startswith("Success! Login to ")
        assert store.grants == {"12345": "42"}
        assert upstream.mutation_calls("grant") == [("grant", "group/asset-pack", "42")]

    @pytest.mark.parametrize("method", ["GET", "POST", "PUT", "PATCH", "DELETE"])
    def test_unknown_path_is_empty_bad_request(self, client, method):
        response = client.request(method, "/somewhere", params={"purchaseId": "12345"})

        assert response.status_code == 400
        assert response.text == ""

    @pytest.mark.parametrize("method", ["PUT", "PATCH", "DELETE"])
    def test_other_methods_preview(self, client, store, upstream, method):
        response = client.request(method, "/", params={"purchaseId": "12345", "principal": "alice"})

        assert response.status_code == 202
        assert "if request sent with POST" in response.text
        assert store.grants == {}
        assert upstream.mutations == []

    def test_other_methods_follow_field_rules(self, client):
        response = client.request("DELETE", "/", params={"principal": "alice"})

        assert response.status_code == 400
        assert response.text == "purchase identifier required"

    def test_request_metrics_use_route_templates(self, make_config, upstream, store):
        service = GrantService(make_config(), store=store, transport=upstream.transport())

        with TestClient(service.app) as client:
            for i in range(20):
                client.get(f"/junk{i}")
                client.post(f"/junk/{i}/deeper")
            client.get("/", params={"purchaseId": "12345", "principal": "alice"})
            client.get("/health")

        endpoints = {
            sample.labels["endpoint"]
            for family in service.metrics.registry.collect()
            for sample in family.samples
            if sample.name == "http_requests_total"
        }
        assert endpoints == {"/{path:path}", "/", "/health"}
        assert service.metrics.registry.get_sample_value(
            "http_requests_total",
            {"method": "GET", "endpoint": "/{path:path}", "status_code": "400"}) == 20.0

    def test_validation_error_message(self, client):
        response = client.get("/", params={"purchaseId": "abc", "principal": "alice"})

        assert response.status_code == 400
        assert response.text == "invalid purchase id format"

    def test_success_redirects_when_configured(self, make_client):
        with make_client(success_redirect_url="https://shop.example.com/thanks") as client:
            response = client.post("/", data={"purchaseId": "12345", "principal": "alice"},
                                   follow_redirects=False)

        assert response.status_code == 301
        assert response.headers["location"] == "https://shop.example.com/thanks?repo=group%2Fasset-pack"

    def test_preview_does_not_redirect(self, make_client):
        with make_client(success_redirect_url="https://shop.example.com/thanks") as client:
            response = client.get("/", params={"purchaseId": "12345", "principal": "alice"},
                                  follow_redirects=False)

        assert response.status_code == 202

    def test_cors_allows_configured_origin(self, client):
        response = client.get("/", params={"purchaseId": "12345", "principal": "alice"},
                              headers={"Origin": "https://shop.example.com"})

        assert response.headers["access-control-allow-origin"] == "https://shop.example.com"

    def test_cors_ignores_other_origins(self, client):
        response = client.get("/", params={"purchaseId": "12345", "principal": "alice"},
                              headers={"Origin": "https://evil.example.com"})

        assert "access-control-allow-origin" not in response.headers

    def test_unreachable_upstream_is_server_error(self, client, upstream, store):
        upstream.unreachable.add("purchases")

        response = client.post("/", data={"purchaseId": "12345", "principal": "alice"})

        assert response.status_code == 500
        assert store.grants == {}

    def test_refunded_purchase_is_forbidden(self, client, upstream):
        upstream.purchases["12345"][0]["refunded"] = "Yes"

        response = client.post("/", data={"purchaseId": "12345", "principal": "alice"})

        assert response.status_code == 403
        assert response.text == "refunded"
