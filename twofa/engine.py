# (c) Copyright Datacraft, 2026
"""Two-factor verification engine.

Decides per request whether a user has to enter a verifying code, issues
codes through the resolved driver and checks submitted ones.

A pending verification is the presence of the ``twofaCode`` setting. It
holds an HMAC of the issued code, never the code itself.
"""
import hashlib
import hmac
import logging
from uuid import UUID

from .config import Settings
from .drivers import BaseDriver
from .policy import EnforcementPolicy
from .schema import User
from .store import (
	ATTEMPTS_SETTING,
	CODE_SETTING,
	SettingsManager,
	SettingStore,
	get_setting,
	set_setting,
)

logger = logging.getLogger(__name__)


class VerificationEngine:
	"""Issues and checks second factor codes of users."""

	def __init__(
		self,
		settings: Settings,
		policy: EnforcementPolicy,
		settings_manager: SettingsManager,
	):
		self.settings = settings
		self.policy = policy
		self.settings_manager = settings_manager

	def get_user_settings(self, user: User | None) -> SettingStore | None:
		if user is None:
			return None
		return self.settings_manager.for_user(user.id)

	def hash_code(self, user_id: UUID, code: str) -> str:
		"""Keyed hash of a verifying code, bound to the user."""
		return hmac.new(
			self.settings.secret_key.encode(),
			f"{user_id}:{code.strip()}".encode(),
			hashlib.sha256,
		).hexdigest()

	def get_driver_id(self, user: User | None) -> str | None:
		return self.policy.resolve_driver_setting(user, self.get_user_settings(user))

	def get_driver(self, user: User | None) -> BaseDriver | None:
		"""Get the 2FA driver of the user, None if 2FA is not active."""
		driver_id = self.get_driver_id(user)
		if not self.policy.registry.is_installed(driver_id):
			return None
		return self.policy.registry.get(driver_id)

	def get_code(self, user: User | None) -> str | None:
		"""Get the stored hash of the pending code."""
		settings = self.get_user_settings(user)
		if settings is None:
			return None
		return get_setting(settings, CODE_SETTING)

	def enable_verifying(self, user: User | None, locale: str | None = None) -> bool:
		"""Issue a verifying code for the user.

		Returns:
			True if a code was sent and is now pending
		"""
		driver = self.get_driver(user)
		if driver is None:
			# Wrong driver or user has no enabled 2FA
			return False

		settings = self.get_user_settings(user)
		code = driver.generate_code(self.policy.get_code_length())

		if not driver.send(user, settings, code, locale):
			logger.warning(f"2FA driver {driver.id} could not send a code to user {user.id}")
			return False

		# Stored hash flags that the code form must be displayed
		if not set_setting(settings, CODE_SETTING, self.hash_code(user.id, code)):
			return False
		set_setting(settings, ATTEMPTS_SETTING)

		logger.info(f"Verifying code issued for user {user.id} by {driver.id}")
		return True

	def disable_verifying(self, user: User | None) -> bool:
		"""Remove the pending code of the user.

		Returns:
			False if the settings store cannot be written
		"""
		settings = self.get_user_settings(user)
		if settings is None:
			return False

		if not set_setting(settings, CODE_SETTING) or not set_setting(settings, ATTEMPTS_SETTING):
			return False

		logger.info(f"Pending verifying code cleared for user {user.id}")
		return True

	def is_verifying_required(self, user: User | None) -> bool:
		"""Check if the user must enter a verifying code before going on."""
		return self.get_driver(user) is not None and self.get_code(user) is not None

	def is_valid_code(self, user: User | None, code: str) -> bool:
		"""Check the submitted code; the pending code is left in place."""
		driver = self.get_driver(user)

		if driver is None:
			# Don't restrict the user if no proper driver is selected
			return True

		return driver.check_code(user, self.get_user_settings(user), code, self.hash_code)

	def get_failed_attempts(self, user: User | None) -> int:
		"""Number of invalid codes submitted since the pending code was issued."""
		settings = self.get_user_settings(user)
		if settings is None:
			return 0
		return int(get_setting(settings, ATTEMPTS_SETTING) or 0)

	def is_code_locked(self, user: User | None) -> bool:
		"""Check if the pending code is spent by too many invalid attempts.

		A locked user stays challenged and has to request a new code.
		"""
		return self.get_failed_attempts(user) >= self.settings.max_code_attempts

	def consume_code(self, user: User | None, code: str) -> bool:
		"""Check the submitted code and clear the pending code on success."""
		if self.is_code_locked(user):
			logger.warning(f"Verifying code of user {user.id} is locked after too many attempts")
			return False

		if not self.is_valid_code(user, code):
			logger.info(f"Invalid verifying code submitted by user {user.id if user else None}")
			if user is not None:
				set_setting(
					self.get_user_settings(user),
					ATTEMPTS_SETTING,
					str(self.get_failed_attempts(user) + 1),
				)
			return False

		if user is not None and not self.disable_verifying(user):
			return False

		return True
