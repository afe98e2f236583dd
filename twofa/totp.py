# (c) Copyright Datacraft, 2026
"""TOTP (Time-based One-Time Password) helpers."""

import base64
import io
from dataclasses import dataclass

import pyotp
import qrcode

# Authenticator apps only agree with us on 6 digit codes
TOTP_DIGITS = 6
TOTP_INTERVAL = 30


@dataclass
class TOTPSetup:
	"""Provisioning data for an authenticator app."""
	secret: str
	provisioning_uri: str
	qr_code_base64: str


class TOTPManager:
	"""Manages TOTP operations."""

	def __init__(self, valid_window: int = 1):
		"""Initialize TOTP manager.

		Args:
			valid_window: Number of intervals accepted before/after current
		"""
		self.valid_window = valid_window

	def generate_secret(self) -> str:
		"""Generate a new random base32 secret (160 bits)."""
		return pyotp.random_base32(length=32)

	def get_totp(self, secret: str) -> pyotp.TOTP:
		return pyotp.TOTP(secret, digits=TOTP_DIGITS, interval=TOTP_INTERVAL)

	def generate_provisioning_uri(self, account: str, secret: str, issuer: str) -> str:
		"""Generate otpauth:// URI for authenticator apps.

		Args:
			account: Account label, usually the username
			secret: Base32-encoded secret
			issuer: Issuer name, usually the host name

		Returns:
			otpauth:// URI string
		"""
		return self.get_totp(secret).provisioning_uri(
			name=account,
			issuer_name=issuer,
		)

	def generate_qr_code(
		self,
		provisioning_uri: str,
		box_size: int = 10,
		border: int = 4,
	) -> str:
		"""Generate QR code image as base64.

		Args:
			provisioning_uri: otpauth:// URI
			box_size: Size of each QR code box
			border: Border size in boxes

		Returns:
			Base64-encoded PNG image
		"""
		qr = qrcode.QRCode(
			version=1,
			error_correction=qrcode.constants.ERROR_CORRECT_L,
			box_size=box_size,
			border=border,
		)
		qr.add_data(provisioning_uri)
		qr.make(fit=True)

		img = qr.make_image(fill_color="black", back_color="white")

		buffer = io.BytesIO()
		img.save(buffer, format="PNG")
		buffer.seek(0)

		return base64.b64encode(buffer.read()).decode("utf-8")

	def setup(self, account: str, secret: str, issuer: str) -> TOTPSetup:
		"""Build provisioning data for an existing secret."""
		provisioning_uri = self.generate_provisioning_uri(account, secret, issuer)
		return TOTPSetup(
			secret=secret,
			provisioning_uri=provisioning_uri,
			qr_code_base64=self.generate_qr_code(provisioning_uri),
		)

	def verify_code(self, secret: str, code: str) -> bool:
		"""Verify a TOTP code against the current and adjacent windows."""
		# Clean the code (remove spaces, dashes)
		code = code.replace(" ", "").replace("-", "")

		if not code.isdigit() or len(code) != TOTP_DIGITS:
			return False

		return self.get_totp(secret).verify(code, valid_window=self.valid_window)
