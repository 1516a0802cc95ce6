import json

from fastapi.testclient import TestClient

from fincraft.api.app import create_app
from fincraft.config import Settings
from fincraft.errors import GENERIC_FAILURE_MESSAGE, ServiceUnavailable, UpstreamEmptyResponse


def _client(settings, model_client):
    return TestClient(create_app(settings=settings, client=model_client))


def test_generate_portfolio_success(profile, settings, recommendation_text, grounding, fake_client_factory):
    api = _client(settings, fake_client_factory(text=recommendation_text, grounding=grounding))
    r = api.post("/generate-portfolio", json={"profile": profile, "marketContext": "", "spendingData": ""},
                 headers={"x-correlation-id": "corr-abc"})
    assert r.status_code == 200
    body = r.json()
    assert body["recommended_portfolio"][0]["allocation"] == "50%"
    assert body["transparencyMetadata"]["overallConfidence"] > 0


def test_missing_profile_is_400(settings, fake_client_factory):
    api = _client(settings, fake_client_factory(text="{}"))
    r = api.post("/generate-portfolio", json={"marketContext": "x"})
    assert r.status_code == 400
    assert r.json() == {"error": "User profile is required"}


def test_non_json_body_is_400(settings, fake_client_factory):
    api = _client(settings, fake_client_factory(text="{}"))
    r = api.post("/generate-portfolio", content="not json", headers={"content-type": "application/json"})
    assert r.status_code == 400
    assert "error" in r.json()


def test_invalid_profile_is_400(profile, settings, fake_client_factory):
    profile["country"] = "Atlantis"
    api = _client(settings, fake_client_factory(text="{}"))
    r = api.post("/generate-portfolio", json={"profile": profile})
    assert r.status_code == 400
    assert r.json()["error"].startswith("Invalid profile:")


def test_missing_api_key_is_500(profile):
    api = _client(Settings(api_key=None), None)
    r = api.post("/generate-portfolio", json={"profile": profile})
    assert r.status_code == 500
    assert r.json() == {"error": "Server configuration error: API key not found"}


def test_empty_model_text_is_502(profile, settings, fake_client_factory):
    api = _client(settings, fake_client_factory(exc=UpstreamEmptyResponse("empty")))
    r = api.post("/generate-portfolio", json={"profile": profile})
    assert r.status_code == 502
    assert r.json() == {"error": "Empty response from AI"}


def test_unparsable_model_text_is_502(profile, settings, fake_client_factory):
    api = _client(settings, fake_client_factory(text="Sorry, I can't do that."))
    r = api.post("/generate-portfolio", json={"profile": profile})
    assert r.status_code == 502
    assert r.json() == {"error": "Invalid JSON received from AI"}


def test_missing_portfolio_is_502(profile, settings, recommendation, fake_client_factory):
    del recommendation["recommended_portfolio"]
    api = _client(settings, fake_client_factory(text=json.dumps(recommendation)))
    r = api.post("/generate-portfolio", json={"profile": profile})
    assert r.status_code == 502


def test_service_failure_is_generic_500(profile, settings, fake_client_factory):
    api = _client(settings, fake_client_factory(exc=ServiceUnavailable("timeout")))
    r = api.post("/generate-portfolio", json={"profile": profile})
    assert r.status_code == 500
    assert r.json() == {"error": GENERIC_FAILURE_MESSAGE}


def test_unexpected_exception_is_generic_500(profile, settings, fake_client_factory):
    api = _client(settings, fake_client_factory(exc=RuntimeError("boom")))
    r = api.post("/generate-portfolio", json={"profile": profile})
    assert r.status_code == 500
    assert "boom" not in r.text
    assert r.json() == {"error": GENERIC_FAILURE_MESSAGE}


def test_health_reports_configuration(settings, fake_client_factory):
    api = _client(settings, fake_client_factory())
    body = api.get("/health").json()
    assert body["status"] == "ok"
    assert body["api_key_configured"] is True
    assert body["grounding_enabled"] is True
