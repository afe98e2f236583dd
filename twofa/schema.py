# (c) Copyright Datacraft, 2026
from uuid import UUID
from pydantic import BaseModel, ConfigDict


class Group(BaseModel):
    id: str
    name: str = ""
    is_admin_group: bool = False

    # Config
    model_config = ConfigDict(from_attributes=True)


class User(BaseModel):
    id: UUID
    username: str
    email: str | None = None
    language: str = ""
    groups: list[Group] = []

    model_config = ConfigDict(from_attributes=True)

    @property
    def group_ids(self) -> set[str]:
        return {group.id for group in self.groups}


class TokenData(BaseModel):
    sub: str  # same as `user_id`
    preferred_username: str  # standard claim for `username`
    email: str | None = None
    language: str = ""
    groups: list[Group] = []

    model_config = ConfigDict(from_attributes=True)

    def to_user(self) -> User:
        return User(
            id=UUID(self.sub),
            username=self.preferred_username,
            email=self.email,
            language=self.language,
            groups=self.groups,
        )


# 2FA Schemas


class CheckStatusResponse(BaseModel):
    """Verification state of the current user."""
    required: bool
    driver: str | None = None
    driver_name: str | None = None
    info: str | None = None


class CheckCodeRequest(BaseModel):
    """Request to verify a pending code."""
    code: str


class CheckCodeResponse(BaseModel):
    """Response from code verification."""
    success: bool
    message: str | None = None


class DriverOption(BaseModel):
    """A selectable 2FA driver."""
    id: str
    name: str
    installed: bool = True
    enabled: bool = True


class DriversResponse(BaseModel):
    """Implemented drivers."""
    default_driver: str
    drivers: list[DriverOption]


class UserSettingsResponse(BaseModel):
    """2FA settings of the current user."""
    driver: str | None = None
    is_enforced: bool
    options: dict[str, str]
    code_length: int


class UserSettingsRequest(BaseModel):
    """Request to change the 2FA driver of the current user."""
    driver: str | None = None
    # Current authenticator app code, confirms the provisioned secret
    code: str | None = None


class TOTPSetupResponse(BaseModel):
    """Response with TOTP provisioning data."""
    secret: str
    provisioning_uri: str
    qr_code_base64: str

    model_config = ConfigDict(from_attributes=True)
