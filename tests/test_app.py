"""Tests for the FastAPI app wiring."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from mongowrapper.config.settings import Settings
from mongowrapper.main import create_app
from mongowrapper.resources.mongo.client import create_driver, create_handle, open_default_handle
from mongowrapper.resources.mongo.drivers import MockDriver, MotorDriver
from mongowrapper.resources.mongo.handle import HandleState
from mongowrapper.services.connection.errors import InvalidConfigError, InvalidNameError


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


def _settings(**kwargs) -> Settings:  # type: ignore[no-untyped-def]
    base = {
        "_env_file": None,
        "mongo_driver": "mock",
        "mongo_username": "bob",
        "mongo_password": "p@ss",
        "mongo_host": "h:27017",
        "mongo_login_database": "db1",
        "mongo_collection": "users",
    }
    base.update(kwargs)
    return Settings(**base)


def test_create_driver_uses_settings() -> None:
    assert isinstance(create_driver(_settings()), MockDriver)
    assert isinstance(create_driver(_settings(mongo_driver="motor")), MotorDriver)
    with pytest.raises(InvalidConfigError):
        create_driver(_settings(mongo_driver="bogus"))


def test_create_handle_rejects_unknown_profile() -> None:
    with pytest.raises(InvalidConfigError):
        create_handle(_settings(mongo_profile="nope"))


@pytest.mark.anyio
async def test_open_default_handle_selects_database_and_collection() -> None:
    driver = MockDriver()

    handle = await open_default_handle(_settings(mongo_database="app"), driver)

    assert handle.state is HandleState.OPEN
    assert handle.uri == "mongodb://bob:p%40ss@h:27017/db1"
    assert handle.database_name == "app"
    assert handle.collection_name == "users"


@pytest.mark.anyio
async def test_open_default_handle_closes_session_on_rejected_database() -> None:
    driver = MockDriver()

    with pytest.raises(InvalidNameError):
        await open_default_handle(_settings(mongo_database="bad name"), driver)

    assert len(driver.sessions) == 1
    assert driver.open_sessions == []


class _BrokenSelectDriver(MockDriver):
    def get_database(self, session, name):  # type: ignore[no-untyped-def]
        raise ValueError("unexpected driver failure")


@pytest.mark.anyio
async def test_open_default_handle_closes_session_on_unexpected_error() -> None:
    driver = _BrokenSelectDriver()

    with pytest.raises(ValueError):
        await open_default_handle(_settings(), driver)

    assert driver.open_sessions == []


def test_app_lifecycle_and_health() -> None:
    driver = MockDriver()
    app = create_app(_settings(), driver)

    with TestClient(app) as client:
        assert client.get("/health").json() == {"status": "ok"}

        ready = client.get("/ready")
        assert ready.status_code == 200
        assert ready.json()["mongo"] == {"ok": True, "error": None}

        info = client.get("/connection").json()
        assert info == {
            "state": "open",
            "database": "isengart",
            "collection": "users",
            "uri": "mongodb://bob:***@h:27017/db1",
        }

        assert client.get("/ids/507f1f77bcf86cd799439011").json() == {"id": "507f1f77bcf86cd799439011"}
        assert client.get("/ids/nope").status_code == 400

    assert driver.open_sessions == []


def test_app_starts_degraded_when_mongo_unreachable() -> None:
    app = create_app(_settings(), MockDriver(fail_connect=True))

    with TestClient(app) as client:
        ready = client.get("/ready")
        assert ready.status_code == 503
        assert ready.json()["mongo"] == {"ok": False, "error": "not_configured"}

        assert client.get("/connection").status_code == 503
        assert client.get("/health").status_code == 200
        assert client.get("/ids/507f1f77bcf86cd799439011").json() == {"id": "507f1f77bcf86cd799439011"}
        assert client.get("/ids/nope").status_code == 400


def test_ready_reports_lost_connection() -> None:
    driver = MockDriver()
    app = create_app(_settings(), driver)

    with TestClient(app) as client:
        driver.fail_connect = True
        ready = client.get("/ready")

    assert ready.status_code == 503
    assert ready.json()["mongo"]["error"] == "connection_failed"


def test_app_starts_degraded_when_database_name_is_rejected() -> None:
    driver = MockDriver()
    app = create_app(_settings(mongo_database="bad name"), driver)

    with TestClient(app) as client:
        ready = client.get("/ready")
        assert ready.status_code == 503
        assert ready.json()["mongo"] == {"ok": False, "error": "not_configured"}
        assert client.get("/ids/507f1f77bcf86cd799439011").status_code == 200

    assert driver.open_sessions == []
