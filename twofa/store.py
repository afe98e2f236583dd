# (c) Copyright Datacraft, 2026
"""Per-user settings storage used by the 2FA module."""

import logging
from typing import Protocol
from uuid import UUID

from .exceptions import SettingStoreError

logger = logging.getLogger(__name__)

# Well-known setting names
USER_SETTING = "twofaDriver"
CODE_SETTING = "twofaCode"
ATTEMPTS_SETTING = "twofaCodeAttempts"


class SettingStore(Protocol):
	"""Key/value settings of a single user.

	Implementations raise ``SettingStoreError`` when the backing storage
	cannot be reached.
	"""

	def get(self, name: str) -> str | None:
		...

	def set(self, name: str, value: str) -> None:
		...

	def delete(self, name: str) -> None:
		...


class SettingsManager(Protocol):
	"""Hands out settings stores scoped to a user."""

	def for_user(self, user_id: UUID) -> SettingStore:
		...


class InMemorySettingStore:
	"""Dict backed settings of one user."""

	def __init__(self, values: dict[str, str] | None = None):
		self.values = values if values is not None else {}

	def get(self, name: str) -> str | None:
		return self.values.get(name)

	def set(self, name: str, value: str) -> None:
		self.values[name] = value

	def delete(self, name: str) -> None:
		self.values.pop(name, None)


class InMemorySettingsManager:
	"""Settings of all users kept in process memory."""

	def __init__(self):
		self._users: dict[UUID, dict[str, str]] = {}

	def for_user(self, user_id: UUID) -> InMemorySettingStore:
		return InMemorySettingStore(self._users.setdefault(user_id, {}))


def get_setting(store: SettingStore, name: str) -> str | None:
	"""Read a setting, degrading to None when the store is unreachable."""
	try:
		return store.get(name)
	except SettingStoreError as e:
		logger.warning(f"Cannot read setting {name}: {e}")
		return None


def set_setting(store: SettingStore, name: str, value: str | None = None) -> bool:
	"""Store a setting; an empty value removes it.

	Returns:
		False if the store is unreachable
	"""
	try:
		if not value:
			store.delete(name)
		else:
			store.set(name, value)
	except SettingStoreError as e:
		logger.warning(f"Cannot write setting {name}: {e}")
		return False

	return True
