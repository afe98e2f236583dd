# (c) Copyright Datacraft, 2026
"""Settings persistence models."""
import uuid
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import String, Text, Uuid, DateTime, Index, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


def utc_now() -> datetime:
	return datetime.now(timezone.utc)


class UserSetting(Base):
	"""Setting value stored for a user by a module."""

	__tablename__ = "user_settings"

	id: Mapped[UUID] = mapped_column(
		Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
	)
	user_id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)
	module_id: Mapped[str] = mapped_column(String(100), nullable=False, default="twofa")
	name: Mapped[str] = mapped_column(String(100), nullable=False)
	value: Mapped[str | None] = mapped_column(Text, nullable=True)
	created_at: Mapped[datetime] = mapped_column(
		DateTime(timezone=True), server_default=func.now()
	)
	updated_at: Mapped[datetime] = mapped_column(
		DateTime(timezone=True), server_default=func.now(), onupdate=utc_now
	)

	__table_args__ = (
		UniqueConstraint("user_id", "module_id", "name", name="uq_user_setting"),
		Index("idx_user_setting_user", "user_id", "module_id"),
	)

	def __repr__(self):
		return f"UserSetting({self.user_id}: {self.name})"
