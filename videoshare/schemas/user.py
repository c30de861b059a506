from datetime import datetime
from pydantic import BaseModel


class Identity(BaseModel):
    """What a successful sign-in yields. Never carries the password hash."""
    id: str
    email: str


class RegisterRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class SessionUser(BaseModel):
    id: str
    email: str | None = None


class SessionData(BaseModel):
    user: SessionUser
    expires: datetime
