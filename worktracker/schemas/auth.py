from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional

from .common import known_department


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    full_name: str = Field(min_length=1)
    department: Optional[str] = None

    @field_validator('department')
    @classmethod
    def validate_department(cls, v):
        return known_department(v)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    role: str


class AccessTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class RoleUpdateRequest(BaseModel):
    role: str = Field(pattern="^(admin|user)$")
