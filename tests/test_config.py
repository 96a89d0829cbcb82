import json

from financeflow.config import Settings, load_settings


def test_defaults_without_file_or_env():
    assert load_settings(env={}) == Settings()


def test_file_values_override_defaults(tmp_path):
    path = tmp_path / "financeflow.json"
    path.write_text(json.dumps({
        "forecast_url": "http://example.test/predict",
        "forecast_timeout": "2.5",
        "unknown": "ignored",
    }), encoding="utf-8")

    settings = load_settings(path, env={})

    assert settings.forecast_url == "http://example.test/predict"
    assert settings.forecast_timeout == 2.5
    assert settings.seed_path == Settings().seed_path


def test_env_wins_over_file(tmp_path):
    path = tmp_path / "financeflow.json"
    path.write_text(json.dumps({"log_level": "DEBUG"}), encoding="utf-8")

    settings = load_settings(path, env={"FINANCEFLOW_LOG_LEVEL": "WARNING", "FINANCEFLOW_FORECAST_TIMEOUT": "1"})

    assert settings.log_level == "WARNING"
    assert settings.forecast_timeout == 1.0


def test_missing_file_is_ignored(tmp_path):
    assert load_settings(tmp_path / "nope.json", env={}) == Settings()

