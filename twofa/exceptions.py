# (c) Copyright Datacraft, 2026
"""Two-factor authentication errors."""


class TwofaError(Exception):
	"""Base 2FA error."""
	pass


class SettingStoreError(TwofaError):
	"""Settings store is unreachable or failed to persist a value."""
	pass


class DriverNotFound(TwofaError):
	"""No driver is registered under the requested id."""
	pass


class DispatchError(TwofaError):
	"""Verifying code could not be delivered."""
	pass
