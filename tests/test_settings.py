import pytest

from utils.settings import RelaySettings

ENV_VARS = (
    "HOST",
    "PORT",
    "FRONTEND_URL",
    "DISCORD_WEBHOOK_URL",
    "DISCORD_NOTIFICATIONS_ENABLED",
    "ALERT_TIMEOUT_SECONDS",
    "REQUIRED_DETECTIONS",
    "TIME_WINDOW_SECONDS",
    "TRACKING_OBJECT",
    "MAX_DETECTIONS",
    "DATABASE_DIR",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = RelaySettings.from_env(load_env_file=False)
    assert settings.required_count == 10
    assert settings.window_seconds == 10.0
    assert settings.tracked_class == "person"
    assert settings.port == 5000
    assert settings.discord_webhook_url is None
    assert settings.notifications_enabled is True


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("REQUIRED_DETECTIONS", "5")
    monkeypatch.setenv("TIME_WINDOW_SECONDS", "2.5")
    monkeypatch.setenv("TRACKING_OBJECT", "car")
    monkeypatch.setenv("DISCORD_WEBHOOK_URL", "https://example.test/hook")
    monkeypatch.setenv("DISCORD_NOTIFICATIONS_ENABLED", "off")

    settings = RelaySettings.from_env(load_env_file=False)

    assert settings.port == 8080
    assert settings.required_count == 5
    assert settings.window_seconds == 2.5
    assert settings.tracked_class == "car"
    assert settings.discord_webhook_url == "https://example.test/hook"
    assert settings.notifications_enabled is False


@pytest.mark.parametrize(
    "name, value",
    [("PORT", "http"), ("REQUIRED_DETECTIONS", "ten"), ("DISCORD_NOTIFICATIONS_ENABLED", "maybe")],
)
def test_invalid_values_fail_fast(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=name):
        RelaySettings.from_env(load_env_file=False)
