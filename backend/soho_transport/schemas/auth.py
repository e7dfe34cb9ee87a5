from email_validator import EmailNotValidError, validate_email
from pydantic import Field, ValidationInfo, field_validator
from typing import Any, List, Optional

from soho_transport.models.user import PLATE_BOUND_ROLES, REGISTRABLE_ROLES, UserRole
from soho_transport.schemas.common import CamelModel, CamelResponse, clean_digits, clean_text, is_blank


def clean_email(value: Any) -> str:
    """Trim, lowercase and check the address shape"""
    value = clean_text(value, "email").lower()
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise ValueError("Invalid email format.")
    return value


def clean_number_plate(value: Any, required: bool = True) -> Optional[str]:
    value = clean_text(
        value, "numberPlate", min_length=3, max_length=20, required=required,
        length_message="numberPlate must be between 3 and 20 characters.",
    )
    return value.upper() if value else None


class UserRegister(CamelModel):
    first_name: str
    last_name: str
    email: str
    phone_number: str
    role: str
    # Declared after role so the validator can see it
    number_plate: Optional[str] = Field(default=None, validate_default=True)
    password: str

    @field_validator("first_name", mode="before")
    @classmethod
    def check_first_name(cls, v):
        return clean_text(v, "firstName")

    @field_validator("last_name", mode="before")
    @classmethod
    def check_last_name(cls, v):
        return clean_text(v, "lastName")

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, v):
        return clean_email(v)

    @field_validator("phone_number", mode="before")
    @classmethod
    def check_phone_number(cls, v):
        return clean_digits(v, "phoneNumber")

    @field_validator("role", mode="before")
    @classmethod
    def check_role(cls, v):
        v = clean_text(v, "role")
        if v not in {role.value for role in REGISTRABLE_ROLES}:
            raise ValueError("Invalid role selected.")
        return v

    @field_validator("password", mode="before")
    @classmethod
    def check_password(cls, v):
        if is_blank(v):
            raise ValueError("password is required.")
        if not isinstance(v, str) or not 6 <= len(v) <= 255:
            raise ValueError("Password must be between 6 and 255 characters.")
        return v

    @field_validator("number_plate", mode="before")
    @classmethod
    def check_number_plate(cls, v, info: ValidationInfo):
        """numberPlate is only validated for roles bound to a vehicle"""
        if info.data.get("role") not in {r.value for r in PLATE_BOUND_ROLES}:
            return None
        if is_blank(v):
            raise ValueError("numberPlate is required for Driver and Bus Assistant.")
        return clean_number_plate(v)

    @property
    def user_role(self) -> UserRole:
        return UserRole(self.role)


class UserLogin(CamelModel):
    email: str
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, v):
        return clean_email(v)

    @field_validator("password", mode="before")
    @classmethod
    def check_password(cls, v):
        if is_blank(v):
            raise ValueError("password is required.")
        if not isinstance(v, str) or len(v) > 255:
            raise ValueError("password is invalid.")
        return v


class RefreshTokenRequest(CamelModel):
    """Refresh token may come in the body or the refreshToken cookie"""
    refresh_token: Optional[str] = None

    @field_validator("refresh_token", mode="before")
    @classmethod
    def check_refresh_token(cls, v):
        if v is None:
            return None
        if not isinstance(v, str) or not v.strip():
            raise ValueError("refreshToken cannot be empty.")
        return v.strip()


# ============================================
# Responses
# ============================================

class RegisteredUser(CamelResponse):
    email: str
    role: UserRole


class AuthenticatedUser(CamelResponse):
    id: int
    first_name: str
    last_name: str
    email: str
    role: UserRole
    number_plate: Optional[str] = None


class AuthSession(CamelResponse):
    """Token pair plus the user summary shown on the dashboards"""
    access_token: str
    refresh_token: str
    user: AuthenticatedUser

    @property
    def email(self) -> str:
        return self.user.email

    @property
    def role(self) -> UserRole:
        return self.user.role


class TokenClaims(CamelResponse):
    """Decoded access token claims"""
    sub: str
    email: str
    role: str

    @property
    def user_id(self) -> int:
        return int(self.sub)


class NumberPlateList(CamelResponse):
    number_plates: List[str]
