# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Auth request/response schemas."""
from typing import Optional

from pydantic import Field, field_validator

from devtrack.schemas import CamelModel

BCRYPT_MAX_BYTES = 72


def _normalise_email(v: str) -> str:
    v = v.strip().lower()
    local, _, domain = v.partition("@")
    if not local or "." not in domain:
        raise ValueError("email must be a valid address")
    return v


class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=6, max_length=128)
    role: Optional[str] = Field(default=None, max_length=64)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be blank")
        return v

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        return _normalise_email(v)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        # bcrypt only reads the first 72 bytes and newer releases refuse more.
        if len(v.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValueError(f"password cannot be longer than {BCRYPT_MAX_BYTES} bytes")
        return v


class LoginRequest(CamelModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        return v.strip().lower()


class UserOut(CamelModel):
    id: str
    name: str
    email: str
    role: str
    created_at: Optional[str] = None


class AuthResponse(CamelModel):
    token: str
    user: UserOut
