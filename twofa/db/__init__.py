# (c) Copyright Datacraft, 2026
"""Database module for the 2FA settings store."""
from .orm import UserSetting
from .base import Base
from .store import SqlSettingStore, SqlSettingsManager

__all__ = [
	'Base',
	'UserSetting',
	'SqlSettingStore',
	'SqlSettingsManager',
]
