import pytest

from vroom_ors.config import Settings


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("https://a.example, https://b.example", ("https://a.example", "https://b.example")),
        ('["https://a.example"]', ("https://a.example",)),
        ("*", ("*",)),
    ],
)
def test_allowed_origins_from_env(monkeypatch: pytest.MonkeyPatch, raw, expected):
    monkeypatch.setenv("FRONTEND_ALLOWED_ORIGINS", raw)
    assert Settings().frontend_allowed_origins == expected


def test_service_urls_lose_trailing_slash(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("ORS_BASE_URL", "https://ors.example/ors/")
    monkeypatch.setenv("VROOM_ENDPOINT", "http://vroom.example:3000/")

    settings = Settings()

    assert settings.ors_base_url == "https://ors.example/ors"
    assert settings.vroom_endpoint == "http://vroom.example:3000"


def test_defaults(monkeypatch: pytest.MonkeyPatch):
    for name in ("ORS_MAX_RETRIES", "ORS_BACKOFF_SECONDS", "MATRIX_MAX_CONCURRENCY", "DEFAULT_PROFILE"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.ors_max_retries == 3
    assert settings.ors_backoff_seconds == 2.0
    assert settings.matrix_max_concurrency == 10
    assert settings.default_profile == "driving-car"
