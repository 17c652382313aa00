import json

from libs.common.settings import DEFAULT_DEV_ORIGINS, Settings, validate_environment


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.app_env == "test"
    assert settings.rate_limit_max == 100
    assert settings.rate_limit_window == 60000
    assert settings.max_request_bytes == 10 * 1024 * 1024
    assert settings.cors_origins == ["http://localhost:3000"]


def test_empty_allowed_origins_falls_back_to_dev_origins():
    settings = Settings(_env_file=None, allowed_origins=" , ")

    assert settings.cors_origins == DEFAULT_DEV_ORIGINS


def test_allowed_origins_are_split_and_trimmed():
    settings = Settings(_env_file=None, allowed_origins="https://a.example.com, https://b.example.com")

    assert settings.cors_origins == ["https://a.example.com", "https://b.example.com"]


def test_environment_overrides_defaults(monkeypatch):
    monkeypatch.setenv("RATE_LIMIT_MAX", "5")
    monkeypatch.setenv("OPENAI_API_KEY", "env-key")

    settings = Settings(_env_file=None)

    assert settings.rate_limit_max == 5
    assert settings.openai_api_key == "env-key"


def test_node_env_selects_environment(monkeypatch):
    monkeypatch.delenv("APP_ENV")
    monkeypatch.setenv("NODE_ENV", "production")

    settings = Settings(_env_file=None)

    assert settings.is_production
    assert not settings.is_development


def test_runtime_config_wins_over_environment(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "env-key")
    monkeypatch.setenv("CLOUD_RUNTIME_CONFIG", json.dumps({
        "openai": {"api_key": "config-key"},
        "security": {"rate_limit_max": "7", "rate_limit_window": 1000},
        "app": {"allowed_origins": "https://app.example.com"},
    }))

    settings = Settings(_env_file=None)

    assert settings.openai_api_key == "config-key"
    assert settings.rate_limit_max == 7
    assert settings.rate_limit_window == 1000
    assert settings.cors_origins == ["https://app.example.com"]


def test_invalid_runtime_config_is_ignored(monkeypatch):
    monkeypatch.setenv("CLOUD_RUNTIME_CONFIG", "{not json")
    monkeypatch.setenv("RAPIDAPI_KEY", "env-rapid")

    settings = Settings(_env_file=None)

    assert settings.rapidapi_key == "env-rapid"


def test_runtime_config_file(monkeypatch, tmp_path):
    config_path = tmp_path / ".runtimeconfig.json"
    config_path.write_text(json.dumps({"rapidapi": {"key": "file-key"}}))
    monkeypatch.setenv("RUNTIME_CONFIG_PATH", str(config_path))

    settings = Settings(_env_file=None)

    assert settings.rapidapi_key == "file-key"


def test_init_kwargs_win_over_runtime_config(monkeypatch):
    monkeypatch.setenv("CLOUD_RUNTIME_CONFIG", json.dumps({"rapidapi": {"key": "config-key"}}))

    settings = Settings(_env_file=None, rapidapi_key="explicit")

    assert settings.rapidapi_key == "explicit"


def test_missing_required_keys_are_reported_not_fatal():
    settings = Settings(_env_file=None)

    assert settings.missing_required() == ["OPENAI_API_KEY", "RAPIDAPI_KEY"]
    assert validate_environment(settings) == ["OPENAI_API_KEY", "RAPIDAPI_KEY"]


def test_nothing_missing_when_keys_present():
    settings = Settings(_env_file=None, openai_api_key="a", rapidapi_key="b")

    assert validate_environment(settings) == []
