from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    # Stored in user_metadata; the signup trigger copies it into profiles.username
    username: Optional[str] = Field(default=None, min_length=1, max_length=39, pattern=r"^[A-Za-z0-9_.-]+$")


class RegisterResponse(BaseModel):
    user_id: str
    email: str
    message: str
