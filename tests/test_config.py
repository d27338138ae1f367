"""Tests for settings and connection profile resolution."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from mongowrapper.config.settings import Settings
from mongowrapper.config.storage.mongo import get_connection_config, get_mongo_config
from mongowrapper.config.storage.static import (
    get_active_profile_name,
    load_connection_profiles,
    resolve_connection_config,
)
from mongowrapper.services.connection.descriptor import build


def _write_profiles(tmp_path: Path, data: dict) -> Path:
    path = tmp_path / "static.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("PORT", "HOST", "SERVER_SSL_CERT_FILE", "SERVER_SSL_KEY_FILE", "MONGO_PROFILE"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.host == "0.0.0.0"
    assert settings.port == 1324
    assert settings.server_ssl_cert_file == ""
    assert settings.server_ssl_key_file == ""
    assert settings.mongo_profile == "active"
    assert "debug" not in Settings.model_fields


def test_server_tls_ignores_client_ssl_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SERVER_SSL_CERT_FILE", raising=False)
    monkeypatch.delenv("SERVER_SSL_KEY_FILE", raising=False)
    monkeypatch.setenv("SSL_CERT_FILE", "/etc/ssl/certs/ca-certificates.crt")
    monkeypatch.setenv("SSL_KEY_FILE", "/etc/ssl/private/client.key")

    settings = Settings(_env_file=None)

    assert settings.server_ssl_cert_file == ""
    assert settings.server_ssl_key_file == ""

    monkeypatch.setenv("SERVER_SSL_CERT_FILE", "/srv/tls/cert.pem")
    monkeypatch.setenv("SERVER_SSL_KEY_FILE", "/srv/tls/key.pem")

    settings = Settings(_env_file=None)

    assert settings.server_ssl_cert_file == "/srv/tls/cert.pem"
    assert settings.server_ssl_key_file == "/srv/tls/key.pem"


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MONGO_USERNAME", "alice")
    monkeypatch.setenv("MONGO_SVR_STRING", "true")
    monkeypatch.setenv("PORT", "8080")

    settings = Settings(_env_file=None)

    assert settings.mongo_username == "alice"
    assert settings.mongo_svr_string is True
    assert settings.port == 8080


def test_bundled_local_profile_is_active() -> None:
    profiles = load_connection_profiles()

    assert get_active_profile_name() == "local"
    local = profiles["local"]
    assert local.host == "127.0.0.1:27017"
    assert local.login_database == "isengart"
    assert build(local).uri == "mongodb://127.0.0.1:27017/isengart"


def test_bundled_x509_profile_builds_tls_uri() -> None:
    uri = build(load_connection_profiles()["x509"]).uri

    assert "authSource=$external" in uri
    assert "tls=true" in uri
    assert "tlsCAFile=%2Fetc%2Fssl%2Fmongo%2Fca.pem" in uri
    assert uri.endswith("&authMechanism=MONGODB-X509")


def test_resolve_merges_overrides_and_ignores_none(tmp_path: Path) -> None:
    path = _write_profiles(
        tmp_path,
        {"active": "dev", "profiles": {"dev": {"username": "dev", "host": "h:1", "loginDatabase": "a"}}},
    )

    config = resolve_connection_config("active", {"password": "pw", "host": None}, path=path)

    assert config.username == "dev"
    assert config.password == "pw"
    assert config.host == "h:1"
    assert build(config).uri == "mongodb://dev:pw@h:1/a"


def test_resolve_unknown_profile_raises(tmp_path: Path) -> None:
    path = _write_profiles(tmp_path, {"profiles": {}})

    with pytest.raises(ValueError, match="Unknown connection profile"):
        resolve_connection_config("missing", path=path)


def test_active_profile_defaults_to_local(tmp_path: Path) -> None:
    path = _write_profiles(tmp_path, {"profiles": {}})

    assert get_active_profile_name(path) == "local"


def test_connection_config_from_settings_overrides() -> None:
    settings = Settings(
        _env_file=None,
        mongo_username="bob",
        mongo_password="p@ss",
        mongo_host="h:27017",
        mongo_login_database="db1",
    )

    config = get_connection_config(settings)

    assert build(config).uri == "mongodb://bob:p%40ss@h:27017/db1"


def test_explicit_uri_setting_short_circuits() -> None:
    settings = Settings(_env_file=None, mongo_connection_uri="mongodb://elsewhere:1/x")

    descriptor = build(get_connection_config(settings))

    assert descriptor.uri == "mongodb://elsewhere:1/x"
    assert descriptor.uses_explicit_uri is True


def test_mongo_config_exposes_client_parameters() -> None:
    settings = Settings(_env_file=None, mongo_driver="mock", mongo_collection="users", mongo_max_pool_size=7)

    cfg = get_mongo_config(settings)

    assert cfg["driver"] == "mock"
    assert cfg["database"] == "isengart"
    assert cfg["collection"] == "users"
    assert cfg["max_pool_size"] == 7
