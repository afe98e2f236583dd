# (c) Copyright Datacraft, 2026
"""Outbound mail for verifying codes."""
import asyncio
import logging
from typing import Any, Protocol

from fastapi_mail import ConnectionConfig, FastMail, MessageSchema
from fastapi_mail.errors import ConnectionErrors
from fastapi_mail.schemas import MessageType, MultipartSubtypeEnum
from jinja2 import Environment, PackageLoader, select_autoescape
from pydantic import ValidationError

from .config import Settings
from .exceptions import DispatchError

logger = logging.getLogger(__name__)


class Message(Protocol):
	"""Composed mail ready to be sent."""

	def set_to(self, to: str) -> "Message":
		...

	def set_subject(self, subject: str) -> "Message":
		...

	def send(self) -> bool:
		...


class Mailer(Protocol):
	"""Composes messages from templates."""

	def compose(self, views: dict[str, str], variables: dict[str, Any]) -> Message:
		...


class SmtpMessage:
	"""HTML message with a plain text alternative."""

	def __init__(self, mailer: "SmtpMailer", html: str | None, text: str | None):
		self.mailer = mailer
		self.html = html
		self.text = text
		self.to: str | None = None
		self.subject = ""

	def set_to(self, to: str) -> "SmtpMessage":
		self.to = to
		return self

	def set_subject(self, subject: str) -> "SmtpMessage":
		self.subject = subject
		return self

	def build(self) -> MessageSchema:
		if not self.to:
			raise DispatchError("Message has no recipient")

		try:
			if self.html:
				return MessageSchema(
					subject=self.subject,
					recipients=[self.to],
					body=self.html,
					alternative_body=self.text,
					subtype=MessageType.html,
					multipart_subtype=MultipartSubtypeEnum.alternative,
				)
			return MessageSchema(
				subject=self.subject,
				recipients=[self.to],
				body=self.text or "",
				subtype=MessageType.plain,
			)
		except ValidationError as e:
			raise DispatchError(f"Invalid message: {e}") from e

	def send(self) -> bool:
		"""Send the message.

		Returns:
			True if the mail server accepted the message
		"""
		try:
			self.mailer.deliver(self.build())
		except (DispatchError, ConnectionErrors) as e:
			logger.warning(f"Failed to send mail to {self.to}: {e}")
			return False

		return True


class SmtpMailer:
	"""Renders Jinja2 mail views and sends them with fastapi-mail."""

	def __init__(self, settings: Settings, env: Environment | None = None):
		self.settings = settings
		self.env = env or Environment(
			loader=PackageLoader("twofa", "templates"),
			autoescape=select_autoescape(["html"]),
		)
		self.config = ConnectionConfig(
			MAIL_USERNAME=settings.smtp_username or "",
			MAIL_PASSWORD=settings.smtp_password or "",
			MAIL_FROM=settings.mail_from,
			MAIL_PORT=settings.smtp_port,
			MAIL_SERVER=settings.smtp_host,
			MAIL_STARTTLS=settings.smtp_use_tls,
			MAIL_SSL_TLS=False,
			USE_CREDENTIALS=bool(settings.smtp_username),
			TIMEOUT=30,
		)

	def render(self, view: str | None, variables: dict[str, Any]) -> str | None:
		if view is None:
			return None
		return self.env.get_template(view).render(**variables)

	def compose(self, views: dict[str, str], variables: dict[str, Any]) -> SmtpMessage:
		return SmtpMessage(
			self,
			html=self.render(views.get("html"), variables),
			text=self.render(views.get("text"), variables),
		)

	def deliver(self, message: MessageSchema) -> None:
		"""Send a message, blocking until the server answered.

		Must be called outside of a running event loop, e.g. from a sync
		route which FastAPI runs in its threadpool.
		"""
		asyncio.run(FastMail(self.config).send_message(message))
