import json

import numpy as np
import pytest

from fincraft.config import Settings
from fincraft.errors import (
    ConfigurationError,
    InputValidationError,
    InvalidResponseFormat,
    ServiceUnavailable,
)
from fincraft.pipeline import parse_request, run_pipeline


def test_pipeline_grounded_happy_path(profile, settings, recommendation_text, grounding, fake_client_factory):
    client = fake_client_factory(text=recommendation_text, grounding=grounding)
    out = run_pipeline({"profile": profile, "marketContext": "Rates steady"}, client, settings,
                       rng=np.random.default_rng(3))

    assert len(client.calls) == 1
    assert client.calls[0]["grounding_enabled"] is True
    assert "Rates steady" in client.calls[0]["prompt"]
    assert out["risk_profile"] == "Aggressive"
    assert len(out["citations"]) == 3
    assert out["transparencyMetadata"]["evidenceGraph"]


def test_pipeline_ungrounded(profile, recommendation_text, fake_client_factory):
    settings = Settings(api_key="k", grounding_enabled=False, include_rationale=False)
    client = fake_client_factory(text="```json\n" + recommendation_text + "\n```")
    out = run_pipeline({"profile": profile}, client, settings)
    assert client.calls[0]["grounding_enabled"] is False
    assert "Google Search" not in client.calls[0]["prompt"]
    assert list(out["transparencyMetadata"]) == ["synthesisMethod"]


def test_missing_key_wins_over_missing_profile():
    with pytest.raises(ConfigurationError):
        run_pipeline({}, None, Settings())


def test_missing_profile_is_input_error():
    with pytest.raises(InputValidationError):
        parse_request({"marketContext": "x"})
    with pytest.raises(InputValidationError):
        parse_request({"profile": None})
    with pytest.raises(InputValidationError):
        parse_request("not an object")


def test_invalid_profile_reports_path(profile):
    profile["riskTolerance"] = "Reckless"
    with pytest.raises(InputValidationError) as e:
        parse_request({"profile": profile})
    assert e.value.public_message.startswith("Invalid profile:")
    assert "$.profile.riskTolerance" in e.value.public_message


def test_blank_numbers_are_accepted(profile):
    profile["age"] = ""
    profile["income"] = None
    req = parse_request({"profile": profile, "spendingData": None})
    assert req["spendingData"] == ""


def test_model_errors_propagate(profile, settings, fake_client_factory):
    with pytest.raises(ServiceUnavailable):
        run_pipeline({"profile": profile}, fake_client_factory(exc=ServiceUnavailable("down")), settings)
    with pytest.raises(InvalidResponseFormat):
        run_pipeline({"profile": profile}, fake_client_factory(text="sorry"), settings)


def test_output_is_json_serializable(profile, settings, recommendation_text, grounding, fake_client_factory):
    out = run_pipeline({"profile": profile}, fake_client_factory(text=recommendation_text, grounding=grounding),
                       settings)
    assert json.loads(json.dumps(out)) == out


def test_model_echoing_metadata_still_succeeds(profile, settings, recommendation, grounding, fake_client_factory):
    recommendation["transparencyMetadata"] = "n/a"
    recommendation["expected_return"] = 9.5
    recommendation["model_rationale"] = {"summary": "s", "key_factors": []}
    client = fake_client_factory(text=json.dumps(recommendation), grounding=grounding)
    out = run_pipeline({"profile": profile}, client, settings, rng=np.random.default_rng(1))
    assert out["expected_return"] == 9.5
    assert out["transparencyMetadata"]["modelRationale"]["summary"] == "s"
    assert out["transparencyMetadata"]["synthesisMethod"]


def test_null_sectors_profile_is_accepted(profile):
    profile["preferences"]["sectors"] = None
    assert parse_request({"profile": profile})["profile"]["preferences"]["sectors"] is None
