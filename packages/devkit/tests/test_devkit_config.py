from devkit.config import load_settings


def test_load_settings_reads_env(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgresql://example")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    settings = load_settings("geocode-api")

    assert settings.SERVICE_NAME == "geocode-api"
    assert settings.DATABASE_URL == "postgresql://example"
    assert settings.LOG_LEVEL == "debug"


def test_load_settings_defaults_without_env(monkeypatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    settings = load_settings("geocode-api")

    assert settings.DATABASE_URL is None
    assert settings.LOG_LEVEL == "INFO"
