# (c) Copyright Datacraft, 2026
"""2FA API endpoints."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from . import schema
from .dependencies import get_engine, get_locale
from .drivers import GoogleAuthenticatorDriver
from .engine import VerificationEngine
from .i18n import translate
from .store import USER_SETTING, SettingStore, get_setting, set_setting
from .utils import require_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/twofa", tags=["2FA"])


def _google_authenticator(engine: VerificationEngine) -> GoogleAuthenticatorDriver:
	driver = engine.policy.registry.get(GoogleAuthenticatorDriver.id)
	if (
		not isinstance(driver, GoogleAuthenticatorDriver)
		or GoogleAuthenticatorDriver.id not in engine.policy.get_enabled_drivers()
	):
		raise HTTPException(
			status_code=status.HTTP_404_NOT_FOUND,
			detail="Authenticator app driver is not enabled",
		)
	return driver


def _confirm_authenticator(
	engine: VerificationEngine,
	user: schema.User,
	settings: SettingStore,
	code: str | None,
) -> None:
	"""Refuse the authenticator driver until the app shows a valid code."""
	driver = _google_authenticator(engine)

	if not get_setting(settings, GoogleAuthenticatorDriver.SECRET_SETTING):
		raise HTTPException(
			status_code=status.HTTP_400_BAD_REQUEST,
			detail="Request an authenticator code before selecting this driver",
		)

	if not code or not driver.check_code(user, settings, code, engine.hash_code):
		raise HTTPException(
			status_code=status.HTTP_400_BAD_REQUEST,
			detail="Authenticator code is not valid",
		)


@router.get("/check", response_model=schema.CheckStatusResponse)
async def get_check_status(
	user: schema.User = Depends(require_user),
	engine: VerificationEngine = Depends(get_engine),
	locale: str | None = Depends(get_locale),
) -> schema.CheckStatusResponse:
	"""Get the verification state of the current user."""
	driver = engine.get_driver(user)
	if driver is None:
		return schema.CheckStatusResponse(required=False)

	language = user.language or locale
	return schema.CheckStatusResponse(
		required=engine.is_verifying_required(user),
		driver=driver.id,
		driver_name=driver.name(language),
		info=driver.info(language),
	)


@router.post("/check", response_model=schema.CheckCodeResponse)
async def check_code(
	request: schema.CheckCodeRequest,
	user: schema.User = Depends(require_user),
	engine: VerificationEngine = Depends(get_engine),
) -> schema.CheckCodeResponse:
	"""Verify the pending code of the current user."""
	if not engine.consume_code(user, request.code):
		if engine.is_code_locked(user):
			raise HTTPException(
				status_code=status.HTTP_429_TOO_MANY_REQUESTS,
				detail="Too many invalid codes, please request a new code",
			)
		raise HTTPException(
			status_code=status.HTTP_400_BAD_REQUEST,
			detail="Verifying code is not valid!",
		)

	return schema.CheckCodeResponse(success=True, message="Verification successful")


@router.post("/check/resend", response_model=schema.CheckCodeResponse)
def resend_code(
	user: schema.User = Depends(require_user),
	engine: VerificationEngine = Depends(get_engine),
	locale: str | None = Depends(get_locale),
) -> schema.CheckCodeResponse:
	"""Issue a new verifying code."""
	if not engine.enable_verifying(user, locale):
		raise HTTPException(
			status_code=status.HTTP_400_BAD_REQUEST,
			detail="Verifying code could not be sent",
		)

	return schema.CheckCodeResponse(success=True, message="Verifying code sent")


@router.get("/user-settings", response_model=schema.UserSettingsResponse)
async def get_user_settings(
	user: schema.User = Depends(require_user),
	engine: VerificationEngine = Depends(get_engine),
	locale: str | None = Depends(get_locale),
) -> schema.UserSettingsResponse:
	"""Get 2FA settings of the current user."""
	policy = engine.policy
	is_enforced = policy.is_enforced_user(user)
	language = user.language or locale
	initial = {} if is_enforced else {
		"": translate("Disable two-factor authentication (not recommended)", language),
	}

	return schema.UserSettingsResponse(
		driver=engine.get_driver_id(user),
		is_enforced=is_enforced,
		options=policy.get_drivers_options(initial, only_enabled=True, locale=language),
		code_length=policy.get_code_length(),
	)


@router.post("/user-settings", response_model=schema.UserSettingsResponse)
async def save_user_settings(
	request: schema.UserSettingsRequest,
	user: schema.User = Depends(require_user),
	engine: VerificationEngine = Depends(get_engine),
	locale: str | None = Depends(get_locale),
) -> schema.UserSettingsResponse:
	"""Change the 2FA driver of the current user."""
	policy = engine.policy
	driver_id = request.driver or None

	if driver_id is None and policy.is_enforced_user(user):
		raise HTTPException(
			status_code=status.HTTP_400_BAD_REQUEST,
			detail="Two-factor authentication is enforced for your account",
		)

	if driver_id is not None and driver_id not in policy.get_enabled_drivers():
		raise HTTPException(
			status_code=status.HTTP_400_BAD_REQUEST,
			detail=f"Unknown 2FA driver: {driver_id}",
		)

	settings = engine.get_user_settings(user)
	previous = get_setting(settings, USER_SETTING)

	if driver_id == GoogleAuthenticatorDriver.id and driver_id != previous:
		_confirm_authenticator(engine, user, settings, request.code)

	if not set_setting(settings, USER_SETTING, driver_id):
		raise HTTPException(
			status_code=status.HTTP_400_BAD_REQUEST,
			detail="Settings could not be saved",
		)

	if driver_id != previous:
		# A code issued by the previous driver must not block the user
		engine.disable_verifying(user)
		logger.info(f"User {user.id} changed 2FA driver from {previous} to {driver_id}")

	return await get_user_settings(user=user, engine=engine, locale=locale)


@router.post("/totp/request-code", response_model=schema.TOTPSetupResponse)
async def request_totp_code(
	request: Request,
	user: schema.User = Depends(require_user),
	engine: VerificationEngine = Depends(get_engine),
) -> schema.TOTPSetupResponse:
	"""Generate a new authenticator secret for the current user."""
	driver = _google_authenticator(engine)
	setup = driver.request_code(user, engine.get_user_settings(user), request.url.hostname)

	if setup is None:
		raise HTTPException(
			status_code=status.HTTP_400_BAD_REQUEST,
			detail="Secret could not be saved",
		)

	return schema.TOTPSetupResponse.model_validate(setup)


@router.get("/totp/code", response_model=schema.TOTPSetupResponse)
async def get_totp_code(
	request: Request,
	user: schema.User = Depends(require_user),
	engine: VerificationEngine = Depends(get_engine),
) -> schema.TOTPSetupResponse:
	"""Get QR code and secret of the current authenticator setup."""
	driver = _google_authenticator(engine)
	setup = driver.get_qr_code_secret_key(user, engine.get_user_settings(user), request.url.hostname)

	if setup is None:
		raise HTTPException(
			status_code=status.HTTP_404_NOT_FOUND,
			detail="No authenticator secret requested yet",
		)

	return schema.TOTPSetupResponse.model_validate(setup)


@router.get("/drivers", response_model=schema.DriversResponse)
async def list_drivers(
	engine: VerificationEngine = Depends(get_engine),
	locale: str | None = Depends(get_locale),
) -> schema.DriversResponse:
	"""List implemented drivers with their state."""
	policy = engine.policy
	enabled = policy.get_enabled_drivers()
	installed = policy.drivers_installed_map()

	return schema.DriversResponse(
		default_driver=policy.default_driver,
		drivers=[
			schema.DriverOption(
				id=driver_id,
				name=name,
				installed=installed[driver_id],
				enabled=driver_id in enabled,
			)
			for driver_id, name in policy.get_drivers_options(locale=locale).items()
		],
	)
