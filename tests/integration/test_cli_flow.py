import json

import pytest
from typer.testing import CliRunner
from unittest.mock import MagicMock

from agrohub.infrastructure.config.settings import set_config_for_testing
from agrohub.main import app, reset_dependencies

from conftest import FakeAIModel, StatusError

KENYA_JSON = json.dumps({"country": "Kenya", "currencyCode": "KES", "currencySymbol": "KSh", "regionName": "Nairobi"})
PRICE_JSON = json.dumps({"suggestedPrice": "KES 80 - 95 per kg", "reasoning": "Short rains", "trends": "Rising"})
WEATHER_JSON = json.dumps({"outlook": "Wet week", "advice": ["Stake tomatoes"], "riskLevel": "Medium"})

_KEY_VARS = ("AGROHUB_API_KEY", "API_KEY", "GEMINI_API_KEY", "GOOGLE_API_KEY")


@pytest.fixture(autouse=True)
def cli_environment(mocker, monkeypatch):
    """Memory cache, no real config files, no real logging setup."""
    for name in _KEY_VARS:
        monkeypatch.delenv(name, raising=False)
    mocker.patch('agrohub.main.load_configuration')
    mocker.patch('agrohub.main.setup_logging')
    set_config_for_testing({
        "cache.backend": "memory",
        "ai.provider": "gemini",
        "retry.initial_backoff_s": 0,
    })
    reset_dependencies()
    yield
    reset_dependencies()


@pytest.fixture
def fake_model(mocker):
    model = FakeAIModel()
    mocker.patch('agrohub.main.create_ai_model', return_value=model)
    return model


def test_location_json_flow(runner: CliRunner, fake_model: FakeAIModel):
    fake_model.replies = [KENYA_JSON]

    result = runner.invoke(app, ["location", "--json", "--", "-1.2921", "36.8219"])

    assert result.exit_code == 0, f"CLI command failed: {result.stdout}"
    assert json.loads(result.stdout)["currencyCode"] == "KES"
    assert "latitude -1.2921" in fake_model.calls[0][0]


def test_location_is_served_from_cache_on_second_call(runner: CliRunner, fake_model: FakeAIModel):
    fake_model.replies = [KENYA_JSON]

    first = runner.invoke(app, ["location", "--json", "--", "-1.29", "36.82"])
    second = runner.invoke(app, ["location", "--", "-1.31", "36.84"])

    assert first.exit_code == 0
    assert second.exit_code == 0, f"CLI command failed: {second.stdout}"
    assert "cached" in second.stdout
    assert fake_model.call_count == 1


def test_missing_api_key_still_answers_with_fallback(runner: CliRunner):
    # Real Gemini client, no key: the call fails before any network traffic
    result = runner.invoke(app, ["location", "--json", "0.35", "32.58"])

    assert result.exit_code == 0, f"CLI command failed: {result.stdout}"
    assert json.loads(result.stdout) == {
        "country": "Uganda", "currencyCode": "UGX", "currencySymbol": "USh", "regionName": "Kampala",
    }


def test_price_fallback_after_rate_limit(runner: CliRunner, fake_model: FakeAIModel):
    fake_model.replies = [StatusError("quota", status=429)]

    first = runner.invoke(app, ["price", "Beans", "--currency", "TZS", "--region", "Arusha, Tanzania", "--json"])
    second = runner.invoke(app, ["weather", "Arusha", "--json"])

    assert first.exit_code == 0, f"CLI command failed: {first.stdout}"
    assert json.loads(first.stdout)["suggestedPrice"] == "TZS 12,500 - 14,800"
    assert json.loads(second.stdout)["riskLevel"] == "Low"
    # the tripped guard kept the weather call off the network
    assert fake_model.call_count == 1


def test_dashboard_with_coordinates(runner: CliRunner, mocker):
    replies = {"location_info": KENYA_JSON, "price_suggestion": PRICE_JSON, "weather_advice": WEATHER_JSON}
    model = MagicMock()

    async def generate_structured(prompt, schema):
        return MagicMock(text=replies[schema.name], latency_ms=None, token_usage=None)

    model.generate_structured.side_effect = generate_structured
    mocker.patch('agrohub.main.create_ai_model', return_value=model)

    result = runner.invoke(app, ["dashboard", "--lat", "-1.29", "--lng", "36.82", "--crop", "Onions", "--json"])

    assert result.exit_code == 0, f"CLI command failed: {result.stdout}"
    payload = json.loads(result.stdout)
    assert payload["region"] == "Nairobi, Kenya"
    assert payload["currency"] == "KES"
    assert payload["cropName"] == "Onions"
    assert payload["price"]["suggestedPrice"] == "KES 80 - 95 per kg"
    assert payload["usedFallback"] == {"price": False, "weather": False}


def test_dashboard_defaults_when_upstream_unavailable(runner: CliRunner):
    result = runner.invoke(app, ["dashboard", "--json"])

    assert result.exit_code == 0, f"CLI command failed: {result.stdout}"
    payload = json.loads(result.stdout)
    assert payload["region"] == "Nairobi, Kenya"
    assert payload["price"]["suggestedPrice"] == "KES 12,500 - 14,800"
    assert payload["usedFallback"] == {"price": True, "weather": True}


def test_clear_cache_flow(runner: CliRunner, fake_model: FakeAIModel):
    fake_model.replies = [KENYA_JSON]
    runner.invoke(app, ["location", "--json", "1.0", "1.0"])

    result = runner.invoke(app, ["clear-cache"])

    assert result.exit_code == 0, f"CLI command failed: {result.stdout}"
    assert "1 entries removed" in result.stdout


def test_initialization_failure_exits_with_error(runner: CliRunner, mocker):
    mocker.patch('agrohub.main.create_ai_model', side_effect=ValueError("Unknown AI provider 'x'"))

    result = runner.invoke(app, ["weather", "Gulu"])

    assert result.exit_code == 1
