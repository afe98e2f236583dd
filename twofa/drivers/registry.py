# (c) Copyright Datacraft, 2026
"""Registry of available 2FA drivers."""
import logging

from twofa.config import Settings
from twofa.exceptions import DriverNotFound
from twofa.mail import Mailer

from .base import BaseDriver
from .email import EmailDriver
from .google_authenticator import GoogleAuthenticatorDriver

logger = logging.getLogger(__name__)


class DriverRegistry:
	"""Maps driver ids to driver instances.

	Installation status is evaluated once, when a driver is registered.
	"""

	def __init__(self):
		self._drivers: dict[str, BaseDriver] = {}
		self._installed: dict[str, bool] = {}

	def register(self, driver: BaseDriver) -> BaseDriver:
		if not driver.id:
			raise DriverNotFound(f"{type(driver).__name__} has no id")

		installed = driver.is_installed()
		if not installed:
			logger.warning(f"2FA driver {driver.id} is not installed")

		self._drivers[driver.id] = driver
		self._installed[driver.id] = installed
		return driver

	def get(self, driver_id: str | None) -> BaseDriver | None:
		if not driver_id:
			return None
		return self._drivers.get(driver_id)

	def require(self, driver_id: str) -> BaseDriver:
		driver = self.get(driver_id)
		if driver is None:
			raise DriverNotFound(f"Unknown 2FA driver: {driver_id}")
		return driver

	def is_installed(self, driver_id: str | None) -> bool:
		return self._installed.get(driver_id, False)

	def ids(self) -> list[str]:
		return list(self._drivers)

	def __contains__(self, driver_id: object) -> bool:
		return driver_id in self._drivers


def default_registry(settings: Settings, mailer: Mailer) -> DriverRegistry:
	"""Registry with the drivers shipped with the module."""
	registry = DriverRegistry()
	registry.register(EmailDriver(mailer, default_language=settings.default_language))
	registry.register(GoogleAuthenticatorDriver(issuer=settings.totp_issuer))
	return registry
