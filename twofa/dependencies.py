# (c) Copyright Datacraft, 2026
"""FastAPI dependencies wiring the 2FA module together."""
import logging
from functools import lru_cache

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from .config import Settings, get_settings
from .db.engine import get_db
from .db.store import SqlSettingsManager
from .drivers import DriverRegistry, default_registry
from .engine import VerificationEngine
from .mail import Mailer, SmtpMailer
from .policy import EnforcementPolicy
from .schema import User
from .store import SettingsManager
from .utils import get_current_user

logger = logging.getLogger(__name__)


@lru_cache()
def get_mailer() -> Mailer:
	return SmtpMailer(get_settings())


@lru_cache()
def get_registry() -> DriverRegistry:
	return default_registry(get_settings(), get_mailer())


def get_policy(
	settings: Settings = Depends(get_settings),
	registry: DriverRegistry = Depends(get_registry),
) -> EnforcementPolicy:
	return EnforcementPolicy(settings, registry)


def get_settings_manager(db: Session = Depends(get_db)) -> SettingsManager:
	return SqlSettingsManager(db)


def get_engine(
	settings: Settings = Depends(get_settings),
	policy: EnforcementPolicy = Depends(get_policy),
	settings_manager: SettingsManager = Depends(get_settings_manager),
) -> VerificationEngine:
	return VerificationEngine(settings, policy, settings_manager)


def get_locale(request: Request) -> str | None:
	"""First language of the Accept-Language header."""
	header = request.headers.get("Accept-Language")
	if not header:
		return None
	return header.split(",")[0].split(";")[0].strip() or None


def verification_guard(
	request: Request,
	user: User | None = Depends(get_current_user),
	engine: VerificationEngine = Depends(get_engine),
) -> User | None:
	"""Redirect to the check page while a verifying code is pending.

	Add to the dependencies of every route of the host application.
	"""
	if user is None or engine.policy.is_twofa_check_url(request.url.path):
		return user

	if engine.is_verifying_required(user):
		raise HTTPException(
			status_code=status.HTTP_303_SEE_OTHER,
			detail="Two-factor verification required",
			headers={"Location": engine.settings.check_route},
		)

	return user
