import logging

from functools import lru_cache
from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)


class Algs(str, Enum):
    HS256 = "HS256"
    HS384 = "HS384"
    HS512 = "HS512"
    RS256 = "RS256"
    RS384 = "RS384"
    RS512 = "RS512"
    ES256 = "ES256"
    ES384 = "ES384"
    ES512 = "ES512"


class Settings(BaseSettings):
    secret_key: str
    db_url: str = "sqlite:///./twofa.db"

    token_algorithm: Algs = Algs.HS256
    cookie_name: str = "access_token"

    # Driver settings
    default_driver: str = Field(default="email", description="Driver used for users from enforced groups")
    drivers: list[str] = Field(
        default=["email", "google_authenticator"],
        description="Implemented drivers, in display order",
    )
    # None means "never configured": all implemented drivers are enabled.
    enabled_drivers: str | None = Field(default=None, description="Comma-joined enabled driver ids")
    # None means "never configured": all administrative groups are enforced.
    enforced_groups: str | None = Field(default=None, description="Comma-joined enforced group ids")
    code_length: int = Field(gt=0, default=6, description="Length of e-mailed verifying codes")
    max_code_attempts: int = Field(gt=0, default=5, description="Invalid codes accepted before a new code must be requested")

    # TOTP settings
    totp_issuer: str | None = Field(default=None, description="Issuer shown in authenticator apps")

    # Mail settings
    mail_from: str = Field(default="noreply@example.com", description="Sender of verifying code mails")
    smtp_host: str = "localhost"
    smtp_port: int = 25
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_use_tls: bool = False

    default_language: str = "en"
    check_route: str = "/twofa/check"

    model_config = SettingsConfigDict(env_prefix='twofa_')


@lru_cache()
def get_settings():
    return Settings()
