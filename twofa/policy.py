# (c) Copyright Datacraft, 2026
"""Group based 2FA enforcement and driver resolution."""
import logging
from typing import Iterable

from .config import Settings
from .drivers import DriverRegistry
from .schema import Group, User
from .store import USER_SETTING, SettingStore, get_setting

logger = logging.getLogger(__name__)


def split_ids(value: str) -> list[str]:
	return [item.strip() for item in value.split(",") if item.strip()]


class EnforcementPolicy:
	"""Module level 2FA configuration.

	Decides which drivers may be used and which users must use one.
	"""

	def __init__(self, settings: Settings, registry: DriverRegistry):
		self.settings = settings
		self.registry = registry

	@property
	def default_driver(self) -> str:
		return self.settings.default_driver

	@property
	def drivers(self) -> list[str]:
		"""Implemented drivers known to the registry."""
		return [d for d in self.settings.drivers if d in self.registry]

	def get_enabled_drivers(self) -> list[str]:
		"""Get enabled drivers which are installed properly."""
		enabled = self.settings.enabled_drivers
		if enabled is None:
			enabled_ids = self.drivers
		else:
			enabled_ids = split_ids(enabled)

		return [
			driver_id for driver_id in enabled_ids
			if self.registry.is_installed(driver_id)
		]

	def get_code_length(self) -> int:
		return self.settings.code_length

	def get_enforced_groups(self, groups: Iterable[Group]) -> list[str]:
		"""Get ids of the groups enforced to use 2FA.

		Args:
			groups: Groups to pick administrative ones from when
				enforcement was never configured
		"""
		enforced = self.settings.enforced_groups
		if enforced is None:
			# Enforce all administrative groups by default
			return [group.id for group in groups if group.is_admin_group]

		return split_ids(enforced)

	def is_enforced_user(self, user: User | None) -> bool:
		"""Check if at least one group of the user is enforced to 2FA."""
		if user is None:
			return False

		enforced_groups = self.get_enforced_groups(user.groups)
		if not enforced_groups:
			return False

		return not user.group_ids.isdisjoint(enforced_groups)

	def resolve_driver_setting(self, user: User | None, settings: SettingStore | None) -> str | None:
		"""Get the driver id the user has to verify with.

		A valid choice of the user always wins; enforced users without one
		fall back to the default driver.
		"""
		if user is None or settings is None:
			return None

		driver_id = get_setting(settings, USER_SETTING)

		if driver_id not in self.get_enabled_drivers():
			driver_id = None

		if not driver_id and self.is_enforced_user(user):
			return self.default_driver

		return driver_id

	def get_drivers_options(
		self,
		options: dict[str, str] | None = None,
		only_enabled: bool = False,
		locale: str | None = None,
	) -> dict[str, str]:
		"""Get driver choices for settings forms.

		Args:
			options: Initial options, e.g. a "none" choice
			only_enabled: Only list enabled drivers instead of all implemented
			locale: Language of the driver names

		Returns:
			Mapping of driver id to driver name
		"""
		options = dict(options or {})
		driver_ids = self.get_enabled_drivers() if only_enabled else self.drivers
		for driver_id in driver_ids:
			options[driver_id] = self.registry.require(driver_id).name(locale)
		return options

	def drivers_installed_map(self) -> dict[str, bool]:
		return {d: self.registry.is_installed(d) for d in self.drivers}

	def is_twofa_check_url(self, path: str) -> bool:
		"""Check if the requested path is already the 2FA check page."""
		return path.rstrip("/") == self.settings.check_route.rstrip("/")
