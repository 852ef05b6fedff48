"""Endpoint tests through the FastAPI TestClient (model mocked)."""

import pytest

from revodev.flows.prompts import CONTACT_PHONE

ENDPOINTS = {
    "/api/electrical-advice": {"question": "What cable for my AC?"},
    "/api/troubleshooting-advice": {"problemDescription": "Lights flicker"},
    "/api/accessory-recommendation": {"needs": "I need switches for my bedroom"},
    "/api/energy-savings-estimator": {"appliancesDescription": "2 fans 10hrs/day"},
    "/api/project-planner": {"projectDescription": "Install an extra socket"},
}


class TestDegradedMode:

    @pytest.mark.parametrize("path, body", list(ENDPOINTS.items()))
    def test_canned_response_without_credentials(self, make_client, offline_llm, path, body):
        client = make_client(offline_llm)
        resp = client.post(path, json=body)
        assert resp.status_code == 200
        assert resp.headers["X-Revodev-Outcome"] == "degraded"
        assert CONTACT_PHONE in resp.text
        offline_llm.generate.assert_not_called()

    def test_recommendation_end_to_end(self, make_client, offline_llm):
        client = make_client(offline_llm)
        resp = client.post("/api/accessory-recommendation", json={"needs": "I need switches for my bedroom"})
        data = resp.json()
        assert isinstance(data["accessories"], list)
        assert len(data["accessories"]) > 0
        assert CONTACT_PHONE in data["justification"]


class TestValidation:

    def test_empty_question(self, make_client, live_llm):
        client = make_client(live_llm)
        resp = client.post("/api/electrical-advice", json={"question": ""})
        assert resp.status_code == 400
        assert resp.json() == {"answer": "Please provide a valid question."}
        live_llm.generate.assert_not_called()

    def test_invalid_json(self, make_client, live_llm):
        client = make_client(live_llm)
        resp = client.post(
            "/api/troubleshooting-advice",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 400
        assert "troubleshootingSteps" in resp.json()
        assert resp.headers["X-Revodev-Outcome"] == "validation_failed"

    def test_empty_body(self, make_client, live_llm):
        client = make_client(live_llm)
        resp = client.post("/api/project-planner")
        assert resp.status_code == 400
        assert "projectName" in resp.json()


class TestLiveAnswers:

    def test_success_camel_case(self, make_client, live_llm):
        client = make_client(live_llm)
        resp = client.post("/api/electrical-advice", json={"question": "What cable for sockets?"})
        assert resp.status_code == 200
        assert resp.json() == {"answer": "Use a 2.5mm² copper cable for sockets."}
        assert resp.headers["X-Revodev-Outcome"] == "success"

    def test_provider_failure_returns_shaped_apology(self, make_client, live_llm):
        live_llm.generate.side_effect = RuntimeError("groq exploded: key=sk-secret")
        client = make_client(live_llm)
        resp = client.post("/api/troubleshooting-advice", json={"problemDescription": "No power"})
        assert resp.status_code == 200
        assert resp.headers["X-Revodev-Outcome"] == "error"
        data = resp.json()
        assert CONTACT_PHONE in data["troubleshootingSteps"]
        assert "sk-secret" not in resp.text
        assert "groq exploded" not in resp.text


class TestRateLimiting:

    def test_429_after_limit(self, make_client, live_llm):
        client = make_client(live_llm)
        for _ in range(3):
            assert client.post("/api/electrical-advice", json={"question": "hi"}).status_code == 200

        resp = client.post("/api/electrical-advice", json={"question": "hi"})
        assert resp.status_code == 429
        assert int(resp.headers["Retry-After"]) > 0
        assert "exceeded the request limit" in resp.json()["answer"]
        assert live_llm.generate.await_count == 3

    def test_limit_shared_across_capabilities(self, make_client, live_llm):
        client = make_client(live_llm)
        client.post("/api/electrical-advice", json={"question": "hi"})
        client.post("/api/troubleshooting-advice", json={"problemDescription": "x"})
        client.post("/api/project-planner", json={"projectDescription": "x"})
        resp = client.post("/api/accessory-recommendation", json={"needs": "x"})
        assert resp.status_code == 429
        assert resp.json()["accessories"] == []

    def test_rotating_forwarded_header_ignored_by_default(self, make_client, live_llm):
        client = make_client(live_llm)
        codes = [
            client.post("/api/electrical-advice", json={"question": "hi"},
                        headers={"X-Forwarded-For": f"10.0.0.{i}", "X-Real-IP": f"10.1.0.{i}"}).status_code
            for i in range(10)
        ]
        assert codes == [200] * 3 + [429] * 7
        assert live_llm.generate.await_count == 3


class TestTrustedProxy:

    def test_first_forwarded_address_used(self, make_client, live_llm):
        client = make_client(live_llm, trust_proxy_headers=True)
        for i in range(3):
            client.post("/api/electrical-advice", json={"question": "hi"},
                        headers={"X-Forwarded-For": f"41.58.1.3, 10.0.0.{i}"})
        resp = client.post("/api/electrical-advice", json={"question": "hi"},
                           headers={"X-Forwarded-For": "41.58.1.3"})
        assert resp.status_code == 429

    def test_other_client_unaffected(self, make_client, live_llm):
        client = make_client(live_llm, trust_proxy_headers=True)
        for _ in range(4):
            client.post("/api/electrical-advice", json={"question": "hi"}, headers={"X-Forwarded-For": "41.58.1.4"})
        resp = client.post("/api/electrical-advice", json={"question": "hi"}, headers={"X-Forwarded-For": "41.58.1.5"})
        assert resp.status_code == 200

    def test_real_ip_fallback(self, make_client, live_llm):
        client = make_client(live_llm, trust_proxy_headers=True)
        for _ in range(3):
            client.post("/api/electrical-advice", json={"question": "hi"}, headers={"X-Real-IP": "41.58.1.6"})
        assert client.post("/api/electrical-advice", json={"question": "hi"}).status_code == 200
        resp = client.post("/api/electrical-advice", json={"question": "hi"}, headers={"X-Real-IP": "41.58.1.6"})
        assert resp.status_code == 429


class TestOtherEndpoints:

    @pytest.mark.parametrize("path", list(ENDPOINTS))
    def test_liveness(self, make_client, offline_llm, path):
        resp = make_client(offline_llm).get(path)
        assert resp.status_code == 200
        assert resp.text == f"Revodev {path.rsplit('/', 1)[-1]} API is running."

    def test_health_degraded(self, make_client, offline_llm):
        data = make_client(offline_llm).get("/health").json()
        assert data["status"] == "degraded"
        assert data["components"]["llm"] == "unconfigured"

    def test_health_ok(self, make_client, live_llm):
        data = make_client(live_llm).get("/health").json()
        assert data["status"] == "healthy"
        assert data["rate_limited_clients"] == 0

    def test_root(self, make_client, offline_llm):
        resp = make_client(offline_llm).get("/")
        assert resp.json() == {"status": "ok", "service": "revodev-api"}

    def test_energy_consumption(self, make_client, offline_llm):
        resp = make_client(offline_llm).post("/api/energy-consumption", json={
            "appliances": [{"name": "Fan", "watts": 75, "hoursPerDay": 10}],
            "period": "day",
            "tariff": 100,
        })
        assert resp.status_code == 200
        data = resp.json()
        assert data["totalKWh"] == 0.75
        assert data["totalCost"] == 75.0
        assert data["breakdown"] == [{"name": "Fan", "kWh": 0.75}]

    def test_energy_consumption_invalid(self, make_client, offline_llm):
        resp = make_client(offline_llm).post("/api/energy-consumption", json={
            "appliances": [{"name": "Fan", "watts": -5, "hoursPerDay": 10}],
        })
        assert resp.status_code == 422
