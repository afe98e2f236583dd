"""
tests/conftest.py -- Shared fixtures for the 2FA tests.

This module provides:
  - FakeMailer: records composed mails instead of talking to SMTP
  - settings / registry / policy / engine built on an in-memory settings manager
  - groups and users covering admin, regular and group-less accounts
  - make_engine(): engine factory for tests that change module settings
"""

from __future__ import annotations

import uuid
from typing import Any

import pytest

from twofa.config import Settings
from twofa.drivers import DriverRegistry, default_registry
from twofa.engine import VerificationEngine
from twofa.policy import EnforcementPolicy
from twofa.schema import Group, User
from twofa.store import InMemorySettingsManager

# ---------------------------------------------------------------------------
# Mail fakes
# ---------------------------------------------------------------------------


class FakeMessage:
    def __init__(self, mailer: "FakeMailer", views: dict[str, str], variables: dict[str, Any]):
        self.mailer = mailer
        self.views = views
        self.variables = variables
        self.to: str | None = None
        self.subject: str | None = None

    def set_to(self, to: str) -> "FakeMessage":
        self.to = to
        return self

    def set_subject(self, subject: str) -> "FakeMessage":
        self.subject = subject
        return self

    def send(self) -> bool:
        if self.mailer.fail:
            return False
        self.mailer.sent.append(self)
        return True


class FakeMailer:
    def __init__(self):
        self.sent: list[FakeMessage] = []
        self.fail = False

    def compose(self, views: dict[str, str], variables: dict[str, Any]) -> FakeMessage:
        return FakeMessage(self, views, variables)

    @property
    def last_code(self) -> str:
        return self.sent[-1].variables["code"]


# ---------------------------------------------------------------------------
# Module fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return Settings(secret_key="test-secret-key", totp_issuer="twofa-tests")


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def registry(settings: Settings, mailer: FakeMailer) -> DriverRegistry:
    return default_registry(settings, mailer)


@pytest.fixture
def settings_manager() -> InMemorySettingsManager:
    return InMemorySettingsManager()


@pytest.fixture
def policy(settings: Settings, registry: DriverRegistry) -> EnforcementPolicy:
    return EnforcementPolicy(settings, registry)


@pytest.fixture
def engine(
    settings: Settings,
    policy: EnforcementPolicy,
    settings_manager: InMemorySettingsManager,
) -> VerificationEngine:
    return VerificationEngine(settings, policy, settings_manager)


@pytest.fixture
def make_engine(settings: Settings, registry: DriverRegistry, settings_manager: InMemorySettingsManager):
    """Build an engine whose module settings differ from the defaults."""

    def _make(**overrides) -> VerificationEngine:
        module_settings = settings.model_copy(update=overrides)
        return VerificationEngine(
            module_settings,
            EnforcementPolicy(module_settings, registry),
            settings_manager,
        )

    return _make


# ---------------------------------------------------------------------------
# Users and groups
# ---------------------------------------------------------------------------


@pytest.fixture
def admin_group() -> Group:
    return Group(id="1", name="Administrators", is_admin_group=True)


@pytest.fixture
def staff_group() -> Group:
    return Group(id="2", name="Staff")


@pytest.fixture
def admin_user(admin_group: Group) -> User:
    return User(
        id=uuid.uuid4(),
        username="admin",
        email="admin@example.com",
        language="de",
        groups=[admin_group],
    )


@pytest.fixture
def staff_user(staff_group: Group) -> User:
    return User(
        id=uuid.uuid4(),
        username="staff",
        email="staff@example.com",
        groups=[staff_group],
    )


@pytest.fixture
def plain_user() -> User:
    return User(id=uuid.uuid4(), username="plain", email="plain@example.com")
