from pathlib import Path

import pytest

from agrohub.infrastructure.config import settings
from agrohub.infrastructure.config.settings import (
    get_api_key, get_base_url, get_cache_backend, get_cache_dir, get_cache_namespace, get_config,
    get_default_model, get_default_provider, get_quota_cooldown_seconds, get_request_timeout,
    get_retry_policy, load_configuration, set_config_for_testing,
)

_ENV_VARS = (
    "AGROHUB_API_KEY", "API_KEY", "AGROHUB_AI_API_KEY", "AI_API_KEY",
    "AGROHUB_AI_PROVIDER", "AI_PROVIDER", "AGROHUB_AI_MODEL", "AI_MODEL",
    "AGROHUB_RETRY_MAX_RETRIES", "RETRY_MAX_RETRIES",
    "GEMINI_API_KEY", "GOOGLE_API_KEY", "OPENAI_API_KEY", "GROQ_API_KEY",
)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(settings, "_config", {})
    monkeypatch.setattr(settings, "_loaded", False)
    monkeypatch.chdir(tmp_path)


def _write_yaml(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_without_any_configuration(tmp_path):
    load_configuration(config_file=tmp_path / "missing.yaml")

    assert get_default_provider() == "gemini"
    assert get_api_key() is None
    assert get_default_model() is None
    assert get_base_url() is None
    assert get_request_timeout() is None
    assert get_retry_policy() == {"max_retries": 1, "initial_delay": 2.0, "factor": 2.0}
    assert get_quota_cooldown_seconds() == 300.0
    assert get_cache_backend() == "disk"
    assert get_cache_namespace() == "agrohub_loc_v2"


def test_yaml_nested_and_flat_keys(tmp_path):
    config_file = _write_yaml(tmp_path / "config.yaml", (
        "ai:\n"
        "  provider: Groq\n"
        "  groq:\n"
        "    model: llama-3.1-8b-instant\n"
        "retry:\n"
        "  max_retries: 3\n"
        "quota.cooldown_seconds: 60\n"
    ))

    load_configuration(config_file=config_file)

    assert get_default_provider() == "groq"
    assert get_default_model() == "llama-3.1-8b-instant"
    assert get_retry_policy()["max_retries"] == 3
    assert get_quota_cooldown_seconds() == 60.0


def test_non_mapping_yaml_is_ignored(tmp_path):
    config_file = _write_yaml(tmp_path / "config.yaml", "- just\n- a list\n")

    load_configuration(config_file=config_file)

    assert get_default_provider() == "gemini"


def test_environment_overrides_yaml(tmp_path, monkeypatch):
    config_file = _write_yaml(tmp_path / "config.yaml", "ai:\n  model: from-yaml\n")
    monkeypatch.setenv("AGROHUB_AI_MODEL", "from-env")

    load_configuration(config_file=config_file)

    assert get_default_model() == "from-env"


def test_environment_values_are_coerced(monkeypatch):
    monkeypatch.setenv("AGROHUB_RETRY_MAX_RETRIES", "4")
    monkeypatch.setenv("AGROHUB_FEATURE_FLAG", "true")
    monkeypatch.setenv("AGROHUB_RATIO", "0.5")

    assert get_config("retry.max_retries") == 4
    assert get_config("feature.flag") is True
    assert get_config("ratio") == 0.5


def test_test_config_has_highest_priority(monkeypatch):
    monkeypatch.setenv("AGROHUB_AI_PROVIDER", "openai")
    set_config_for_testing({"ai.provider": "groq"})

    assert get_default_provider() == "groq"


def test_provider_specific_api_key(monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "google-key")
    monkeypatch.setenv("GROQ_API_KEY", "groq-key")

    assert get_api_key("gemini") == "google-key"
    assert get_api_key("groq") == "groq-key"
    assert get_api_key("openai") is None


def test_generic_api_key_wins(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "gemini-key")
    monkeypatch.setenv("AGROHUB_API_KEY", "generic-key")

    assert get_api_key("gemini") == "generic-key"


def test_dotenv_file_is_loaded(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("GEMINI_API_KEY=from-dotenv\n", encoding="utf-8")

    load_configuration(config_file=tmp_path / "missing.yaml", env_file=env_file)

    assert get_api_key("gemini") == "from-dotenv"


def test_dotenv_does_not_override_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "from-env")
    env_file = tmp_path / ".env"
    env_file.write_text("GEMINI_API_KEY=from-dotenv\n", encoding="utf-8")

    load_configuration(config_file=tmp_path / "missing.yaml", env_file=env_file)

    assert get_api_key("gemini") == "from-env"


def test_load_is_idempotent_unless_forced(tmp_path):
    config_file = _write_yaml(tmp_path / "config.yaml", "ai:\n  provider: openai\n")
    load_configuration(config_file=tmp_path / "missing.yaml")
    load_configuration(config_file=config_file)
    assert get_default_provider() == "gemini"

    load_configuration(config_file=config_file, force=True)
    assert get_default_provider() == "openai"


def test_cache_settings(tmp_path):
    set_config_for_testing({"cache.backend": "MEMORY", "cache.dir": str(tmp_path / "c"), "cache.namespace": "ns_v9"})

    assert get_cache_backend() == "memory"
    assert get_cache_dir() == tmp_path / "c"
    assert get_cache_namespace() == "ns_v9"


def test_find_dotenv_path_searches_upwards(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text("X=1\n", encoding="utf-8")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    monkeypatch.chdir(nested)

    assert settings.find_dotenv_path() == tmp_path / ".env"
