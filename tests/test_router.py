"""Integration tests for twofa/router.py and the verification guard.

The real FastAPI app is used with get_settings/get_engine overridden, so
routes run against the in-memory settings manager and the fake mailer.
Identity comes from JWTs signed with the test secret, like the host would
issue them. The app lifespan creates the settings table in a per-test SQLite
file configured through the environment.
"""

from __future__ import annotations

import pyotp
import pytest
import jwt
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from twofa import dependencies
from twofa.app import create_app
from twofa.config import get_settings
from twofa.db import engine as db_engine
from twofa.dependencies import get_engine, verification_guard
from twofa.store import USER_SETTING


def _token(settings, user) -> str:
    return jwt.encode(
        {
            "sub": str(user.id),
            "preferred_username": user.username,
            "email": user.email,
            "language": user.language,
            "groups": [g.model_dump() for g in user.groups],
        },
        settings.secret_key,
        algorithm=settings.token_algorithm.value,
    )


def _auth(settings, user) -> dict[str, str]:
    return {"Authorization": f"Bearer {_token(settings, user)}"}


def _clear_caches():
    for cached in (
        get_settings,
        db_engine.get_engine,
        db_engine.get_sessionmaker,
        dependencies.get_mailer,
        dependencies.get_registry,
    ):
        cached.cache_clear()


@pytest.fixture
def environment(monkeypatch, tmp_path, settings):
    monkeypatch.setenv("TWOFA_SECRET_KEY", settings.secret_key)
    monkeypatch.setenv("TWOFA_DB_URL", f"sqlite:///{tmp_path / 'twofa.db'}")
    _clear_caches()
    yield
    _clear_caches()


@pytest.fixture
def app(environment, settings, engine) -> FastAPI:
    app = create_app()

    @app.get("/dashboard", dependencies=[Depends(verification_guard)])
    async def dashboard():
        return {"ok": True}

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_engine] = lambda: engine
    return app


@pytest.fixture
def client(app) -> TestClient:
    with TestClient(app, follow_redirects=False) as client:
        yield client


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


def test_check_requires_authentication(client):
    assert client.get("/twofa/check").status_code == 401


def test_invalid_token_is_rejected(client):
    resp = client.get("/twofa/check", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_token_from_cookie(client, settings, admin_user):
    cookie = f"{settings.cookie_name}={_token(settings, admin_user)}"
    assert client.get("/twofa/check", headers={"Cookie": cookie}).status_code == 200


# ---------------------------------------------------------------------------
# Check page
# ---------------------------------------------------------------------------


def test_check_status_without_driver(client, settings, plain_user):
    resp = client.get("/twofa/check", headers=_auth(settings, plain_user))

    assert resp.status_code == 200
    assert resp.json() == {"required": False, "driver": None, "driver_name": None, "info": None}


def test_check_flow(client, settings, engine, admin_user, mailer):
    headers = _auth(settings, admin_user)
    assert engine.enable_verifying(admin_user) is True

    status = client.get("/twofa/check", headers=headers).json()
    assert status["required"] is True
    assert status["driver"] == "email"

    assert client.post("/twofa/check", json={"code": "x"}, headers=headers).status_code == 400

    resp = client.post("/twofa/check", json={"code": mailer.last_code}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert client.get("/twofa/check", headers=headers).json()["required"] is False


def test_resend_issues_new_code(client, settings, engine, admin_user, mailer):
    resp = client.post("/twofa/check/resend", headers=_auth(settings, admin_user))

    assert resp.status_code == 200
    assert len(mailer.sent) == 1
    assert engine.is_verifying_required(admin_user) is True


def test_check_locks_after_too_many_invalid_codes(client, settings, engine, admin_user, mailer):
    headers = _auth(settings, admin_user)
    engine.enable_verifying(admin_user)
    code = mailer.last_code

    for _ in range(settings.max_code_attempts - 1):
        assert client.post("/twofa/check", json={"code": "x"}, headers=headers).status_code == 400
    assert client.post("/twofa/check", json={"code": "x"}, headers=headers).status_code == 429
    assert client.post("/twofa/check", json={"code": code}, headers=headers).status_code == 429
    assert client.get("/dashboard", headers=headers).status_code == 303

    assert client.post("/twofa/check/resend", headers=headers).status_code == 200
    resp = client.post("/twofa/check", json={"code": mailer.last_code}, headers=headers)
    assert resp.status_code == 200


def test_resend_without_driver_fails(client, settings, plain_user):
    assert client.post("/twofa/check/resend", headers=_auth(settings, plain_user)).status_code == 400


# ---------------------------------------------------------------------------
# Guard
# ---------------------------------------------------------------------------


def test_guard_redirects_pending_user(client, settings, engine, admin_user):
    engine.enable_verifying(admin_user)

    resp = client.get("/dashboard", headers=_auth(settings, admin_user))

    assert resp.status_code == 303
    assert resp.headers["location"] == settings.check_route


def test_guard_passes_verified_and_guest_users(client, settings, admin_user):
    assert client.get("/dashboard").status_code == 200
    assert client.get("/dashboard", headers=_auth(settings, admin_user)).status_code == 200


# ---------------------------------------------------------------------------
# User settings
# ---------------------------------------------------------------------------


def test_user_settings_of_regular_user(client, settings, plain_user):
    data = client.get("/twofa/user-settings", headers=_auth(settings, plain_user)).json()

    assert data["driver"] is None
    assert data["is_enforced"] is False
    assert list(data["options"]) == ["", "email", "google_authenticator"]
    assert data["code_length"] == 6


def test_enforced_user_settings(client, settings, admin_user):
    data = client.get("/twofa/user-settings", headers=_auth(settings, admin_user)).json()

    assert data["driver"] == "email"
    assert data["is_enforced"] is True
    assert "" not in data["options"]


def test_enforced_user_cannot_disable(client, settings, admin_user):
    resp = client.post("/twofa/user-settings", json={"driver": None}, headers=_auth(settings, admin_user))
    assert resp.status_code == 400


def test_unknown_driver_is_rejected(client, settings, plain_user):
    resp = client.post("/twofa/user-settings", json={"driver": "sms"}, headers=_auth(settings, plain_user))
    assert resp.status_code == 400


def test_changing_driver_clears_pending_code(client, settings, engine, staff_user):
    headers = _auth(settings, staff_user)
    assert client.post("/twofa/user-settings", json={"driver": "email"}, headers=headers).json()["driver"] == "email"
    engine.enable_verifying(staff_user)

    resp = client.post("/twofa/user-settings", json={"driver": ""}, headers=headers)

    assert resp.status_code == 200
    assert resp.json()["driver"] is None
    assert engine.get_user_settings(staff_user).get(USER_SETTING) is None
    assert engine.is_verifying_required(staff_user) is False


# ---------------------------------------------------------------------------
# Authenticator provisioning
# ---------------------------------------------------------------------------


def test_totp_provisioning(client, settings, engine, staff_user):
    headers = _auth(settings, staff_user)
    assert client.get("/twofa/totp/code", headers=headers).status_code == 404

    setup = client.post("/twofa/totp/request-code", headers=headers).json()
    assert setup["provisioning_uri"].startswith("otpauth://totp/")
    assert client.get("/twofa/totp/code", headers=headers).json()["secret"] == setup["secret"]

    totp = pyotp.TOTP(setup["secret"])
    resp = client.post(
        "/twofa/user-settings",
        json={"driver": "google_authenticator", "code": totp.now()},
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.json()["driver"] == "google_authenticator"
    assert engine.enable_verifying(staff_user) is True

    assert client.post("/twofa/check", json={"code": totp.now()}, headers=headers).status_code == 200


def test_enforced_user_cannot_select_unprovisioned_authenticator(client, settings, engine, admin_user):
    headers = _auth(settings, admin_user)

    resp = client.post("/twofa/user-settings", json={"driver": "google_authenticator"}, headers=headers)

    assert resp.status_code == 400
    assert engine.get_driver_id(admin_user) == "email"
    assert engine.enable_verifying(admin_user) is True
    assert engine.is_verifying_required(admin_user) is True


def test_authenticator_selection_needs_valid_code(client, settings, engine, admin_user):
    headers = _auth(settings, admin_user)
    secret = client.post("/twofa/totp/request-code", headers=headers).json()["secret"]
    code = pyotp.TOTP(secret).now()
    wrong = "000000" if code != "000000" else "111111"

    for body in ({"driver": "google_authenticator"}, {"driver": "google_authenticator", "code": wrong}):
        assert client.post("/twofa/user-settings", json=body, headers=headers).status_code == 400
    assert engine.get_driver_id(admin_user) == "email"

    resp = client.post(
        "/twofa/user-settings",
        json={"driver": "google_authenticator", "code": code},
        headers=headers,
    )
    assert resp.status_code == 200
    assert engine.get_driver_id(admin_user) == "google_authenticator"


def test_totp_routes_need_enabled_driver(environment, settings, make_engine, staff_user):
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_engine] = lambda: make_engine(enabled_drivers="email")

    with TestClient(app) as client:
        resp = client.post("/twofa/totp/request-code", headers=_auth(settings, staff_user))

    assert resp.status_code == 404


def test_list_drivers(client):
    data = client.get("/twofa/drivers").json()

    assert data["default_driver"] == "email"
    assert [d["id"] for d in data["drivers"]] == ["email", "google_authenticator"]
    assert all(d["installed"] and d["enabled"] for d in data["drivers"])


# ---------------------------------------------------------------------------
# Default wiring
# ---------------------------------------------------------------------------


def test_default_app_creates_settings_store(environment, registry, mailer, staff_user, admin_user):
    settings = get_settings()
    app = create_app()
    app.dependency_overrides[dependencies.get_registry] = lambda: registry

    with TestClient(app) as client:
        staff = _auth(settings, staff_user)
        resp = client.post("/twofa/user-settings", json={"driver": "email"}, headers=staff)
        assert resp.status_code == 200
        assert client.get("/twofa/user-settings", headers=staff).json()["driver"] == "email"

        admin = _auth(settings, admin_user)
        assert client.post("/twofa/check/resend", headers=admin).status_code == 200
        assert client.get("/twofa/check", headers=admin).json()["required"] is True
        resp = client.post("/twofa/check", json={"code": mailer.last_code}, headers=admin)
        assert resp.status_code == 200
        assert client.get("/twofa/check", headers=admin).json()["required"] is False
