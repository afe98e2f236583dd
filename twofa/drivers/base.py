# (c) Copyright Datacraft, 2026
"""Base class of 2FA drivers."""
import hmac
import secrets
from abc import ABC, abstractmethod
from typing import Callable
from uuid import UUID

from twofa.i18n import translate
from twofa.schema import User
from twofa.store import CODE_SETTING, SettingStore, get_setting

CodeHasher = Callable[[UUID, str], str]


def generate_numeric_code(length: int = 6) -> str:
	"""Generate a random numeric verifying code."""
	return "".join(str(secrets.randbelow(10)) for _ in range(length))


class BaseDriver(ABC):
	"""Strategy to issue and check a second authentication factor."""

	id: str = ""
	title: str = ""
	description: str = ""

	def name(self, locale: str | None = None) -> str:
		"""Human readable driver name."""
		return translate(self.title, locale)

	def info(self, locale: str | None = None) -> str:
		"""Hint shown on the code check page."""
		return translate(self.description, locale)

	def is_installed(self) -> bool:
		"""Check if this driver can be used in the current environment."""
		return True

	def generate_code(self, length: int = 6) -> str:
		return generate_numeric_code(length)

	def before_send(self, user: User | None) -> bool:
		return user is not None

	@abstractmethod
	def send(
		self,
		user: User | None,
		settings: SettingStore,
		code: str,
		locale: str | None = None,
	) -> bool:
		"""Deliver the verifying code to the user.

		Args:
			user: Authenticated user, None for guests
			settings: Settings of the user
			code: Generated verifying code
			locale: Preferred language of the message

		Returns:
			True if the user is able to enter a code now
		"""

	def check_code(
		self,
		user: User,
		settings: SettingStore,
		code: str,
		hash_code: CodeHasher,
	) -> bool:
		"""Compare the submitted code against the stored pending hash."""
		stored = get_setting(settings, CODE_SETTING)
		if not stored or not code:
			return False

		return hmac.compare_digest(hash_code(user.id, code), stored)
