# (c) Copyright Datacraft, 2026
"""Driver sending verifying codes by e-mail."""
import logging

from twofa.i18n import translate
from twofa.mail import Mailer
from twofa.schema import User
from twofa.store import SettingStore

from .base import BaseDriver

logger = logging.getLogger(__name__)


class EmailDriver(BaseDriver):
	"""Sends a random code to the e-mail address of the user."""

	id = "email"
	title = "E-mail"
	description = "Please find a verifying code sent to your email-address."

	VIEWS = {
		"html": "mails/verifying_code.html",
		"text": "mails/verifying_code.txt",
	}

	def __init__(self, mailer: Mailer, default_language: str = "en"):
		self.mailer = mailer
		self.default_language = default_language

	def send(
		self,
		user: User | None,
		settings: SettingStore,
		code: str,
		locale: str | None = None,
	) -> bool:
		if not self.before_send(user):
			return False

		if not user.email:
			logger.warning(f"User {user.id} has no e-mail address for 2FA code")
			return False

		# Users language wins over the request locale
		language = user.language or locale or self.default_language

		subject = translate("Two-Factor Authentication", language)
		message = self.mailer.compose(self.VIEWS, {
			"user": user,
			"code": code,
			"subject": subject,
			"greeting": translate("Hello {name},", language).format(name=user.username),
			"intro": translate("Your verifying code to log in:", language),
			"outro": translate("If you did not try to log in, please change your password.", language),
		})
		message.set_to(user.email)
		message.set_subject(subject)

		sent = message.send()
		if sent:
			logger.info(f"Verifying code mailed to user {user.id}")
		return sent
