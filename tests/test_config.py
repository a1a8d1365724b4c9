"""Tests for shared configuration helpers."""

from shared import config


def test_auth_required_defaults_to_false_in_dev(monkeypatch) -> None:
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.delenv("AUTH_REQUIRED", raising=False)

    assert config.auth_required() is False


def test_auth_required_defaults_to_true_in_prod(monkeypatch) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.delenv("AUTH_REQUIRED", raising=False)

    assert config.auth_required() is True


def test_auth_required_explicit_value_wins(monkeypatch) -> None:
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.setenv("AUTH_REQUIRED", "true")

    assert config.auth_required() is True

    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.setenv("AUTH_REQUIRED", "0")

    assert config.auth_required() is False


def test_mongodb_defaults(monkeypatch) -> None:
    monkeypatch.delenv("MONGODB_URI", raising=False)
    monkeypatch.delenv("MONGODB_DATABASE", raising=False)
    monkeypatch.delenv("MONGODB_COLLECTION", raising=False)
    monkeypatch.delenv("MONGODB_TIMEOUT_MS", raising=False)

    assert config.mongodb_uri() is None
    assert config.mongodb_database() == "finance-management"
    assert config.mongodb_collection() == "personal-finance"
    assert config.mongodb_timeout_ms() == 5000


def test_mongodb_timeout_invalid_value_warns_and_uses_default(monkeypatch, caplog) -> None:
    monkeypatch.setenv("MONGODB_TIMEOUT_MS", "soon")

    assert config.mongodb_timeout_ms() == 5000
    assert "mongodb_timeout_ms_invalid" in caplog.text


def test_cors_allow_origins_parses_comma_separated_list(monkeypatch) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://a.com, https://b.com")

    assert config.cors_allow_origins() == ["https://a.com", "https://b.com"]


def test_cors_allow_origins_allows_all_in_dev(monkeypatch) -> None:
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.delenv("CORS_ALLOW_ORIGINS", raising=False)

    assert config.cors_allow_origins() == ["*"]


def test_cors_allow_origins_warns_and_defaults_to_empty_in_prod(monkeypatch, caplog) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.delenv("CORS_ALLOW_ORIGINS", raising=False)
    monkeypatch.delenv("UI_ORIGIN", raising=False)

    assert config.cors_allow_origins() == []
    assert "cors_allow_origins_empty_in_prod" in caplog.text


def test_port_defaults_to_3000(monkeypatch) -> None:
    monkeypatch.delenv("PORT", raising=False)

    assert config.port() == 3000
