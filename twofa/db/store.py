# (c) Copyright Datacraft, 2026
"""SQLAlchemy backed settings store."""
import logging
from uuid import UUID

from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from twofa.exceptions import SettingStoreError

from .orm import UserSetting

logger = logging.getLogger(__name__)


class SqlSettingStore:
	"""Settings of one user kept in the ``user_settings`` table."""

	def __init__(self, db: Session, user_id: UUID, module_id: str = "twofa"):
		self.db = db
		self.user_id = user_id
		self.module_id = module_id

	def get(self, name: str) -> str | None:
		try:
			return self.db.scalar(
				select(UserSetting.value).where(
					UserSetting.user_id == self.user_id,
					UserSetting.module_id == self.module_id,
					UserSetting.name == name,
				)
			)
		except SQLAlchemyError as e:
			raise SettingStoreError(str(e)) from e

	def set(self, name: str, value: str) -> None:
		try:
			setting = self.db.scalar(
				select(UserSetting).where(
					UserSetting.user_id == self.user_id,
					UserSetting.module_id == self.module_id,
					UserSetting.name == name,
				)
			)
			if setting is None:
				setting = UserSetting(
					user_id=self.user_id,
					module_id=self.module_id,
					name=name,
				)
				self.db.add(setting)
			setting.value = value
			self.db.commit()
		except SQLAlchemyError as e:
			self.db.rollback()
			raise SettingStoreError(str(e)) from e

	def delete(self, name: str) -> None:
		try:
			self.db.execute(
				delete(UserSetting).where(
					UserSetting.user_id == self.user_id,
					UserSetting.module_id == self.module_id,
					UserSetting.name == name,
				)
			)
			self.db.commit()
		except SQLAlchemyError as e:
			self.db.rollback()
			raise SettingStoreError(str(e)) from e


class SqlSettingsManager:
	"""Hands out ``SqlSettingStore`` instances bound to one session."""

	def __init__(self, db: Session, module_id: str = "twofa"):
		self.db = db
		self.module_id = module_id

	def for_user(self, user_id: UUID) -> SqlSettingStore:
		return SqlSettingStore(self.db, user_id, self.module_id)
