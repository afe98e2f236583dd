# (c) Copyright Datacraft, 2026
"""Optional two-factor authentication for user accounts."""

from .config import Settings, get_settings
from .drivers import (
	BaseDriver,
	DriverRegistry,
	EmailDriver,
	GoogleAuthenticatorDriver,
	default_registry,
)
from .engine import VerificationEngine
from .exceptions import DispatchError, DriverNotFound, SettingStoreError, TwofaError
from .policy import EnforcementPolicy
from .store import (
	CODE_SETTING,
	USER_SETTING,
	InMemorySettingsManager,
	InMemorySettingStore,
	SettingsManager,
	SettingStore,
)

__all__ = [
	"Settings",
	"get_settings",
	"BaseDriver",
	"DriverRegistry",
	"EmailDriver",
	"GoogleAuthenticatorDriver",
	"default_registry",
	"VerificationEngine",
	"EnforcementPolicy",
	"TwofaError",
	"SettingStoreError",
	"DriverNotFound",
	"DispatchError",
	"CODE_SETTING",
	"USER_SETTING",
	"SettingStore",
	"SettingsManager",
	"InMemorySettingStore",
	"InMemorySettingsManager",
]
