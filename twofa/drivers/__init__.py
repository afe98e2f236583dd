# (c) Copyright Datacraft, 2026
"""Two-factor authentication drivers."""

from .base import BaseDriver, CodeHasher, generate_numeric_code
from .email import EmailDriver
from .google_authenticator import GoogleAuthenticatorDriver
from .registry import DriverRegistry, default_registry

__all__ = [
	"BaseDriver",
	"CodeHasher",
	"generate_numeric_code",
	"EmailDriver",
	"GoogleAuthenticatorDriver",
	"DriverRegistry",
	"default_registry",
]
