# (c) Copyright Datacraft, 2026
"""Driver checking codes of TOTP authenticator apps."""
import importlib.util
import logging
from typing import TYPE_CHECKING

from twofa.schema import User
from twofa.store import SettingStore, get_setting, set_setting

from .base import BaseDriver, CodeHasher

if TYPE_CHECKING:
	from twofa.totp import TOTPManager, TOTPSetup

logger = logging.getLogger(__name__)


class GoogleAuthenticatorDriver(BaseDriver):
	"""Verifies codes computed by an authenticator app from a shared secret."""

	id = "google_authenticator"
	title = "Google Authenticator"
	description = (
		"Open the two-factor authentication app on your device to view "
		"your authentication code and verify your identity."
	)

	# Setting name for secret code per user
	SECRET_SETTING = "twofaGoogleAuthSecret"

	def __init__(self, issuer: str | None = None):
		self.issuer = issuer
		self._manager: "TOTPManager | None" = None

	def is_installed(self) -> bool:
		# pyotp computes the codes, qrcode renders provisioning images
		return all(
			importlib.util.find_spec(name) is not None
			for name in ("pyotp", "qrcode")
		)

	@property
	def manager(self) -> "TOTPManager":
		if self._manager is None:
			from twofa.totp import TOTPManager
			self._manager = TOTPManager()
		return self._manager

	def send(
		self,
		user: User | None,
		settings: SettingStore,
		code: str,
		locale: str | None = None,
	) -> bool:
		if not self.before_send(user):
			return False

		if not get_setting(settings, self.SECRET_SETTING):
			# No QR code was generated yet, user cannot use this driver
			logger.info(f"User {user.id} has no authenticator secret yet")
			return False

		return True

	def check_code(
		self,
		user: User,
		settings: SettingStore,
		code: str,
		hash_code: CodeHasher,
	) -> bool:
		secret = get_setting(settings, self.SECRET_SETTING)
		if not secret or not code:
			return False

		return self.manager.verify_code(secret, code)

	def get_issuer(self, host: str | None) -> str:
		return self.issuer or host or "twofa"

	def request_code(
		self,
		user: User,
		settings: SettingStore,
		host: str | None = None,
	) -> "TOTPSetup | None":
		"""Generate and store a new secret for the user.

		Returns:
			Provisioning data, None if the secret could not be stored
		"""
		secret = self.manager.generate_secret()

		if not set_setting(settings, self.SECRET_SETTING, secret):
			return None

		logger.info(f"New authenticator secret generated for user {user.id}")

		return self.get_qr_code_secret_key(user, settings, host)

	def get_qr_code_secret_key(
		self,
		user: User,
		settings: SettingStore,
		host: str | None = None,
	) -> "TOTPSetup | None":
		"""Get provisioning data of the stored secret, None if not provisioned."""
		secret = get_setting(settings, self.SECRET_SETTING)

		if not secret:
			return None

		return self.manager.setup(user.username, secret, self.get_issuer(host))
