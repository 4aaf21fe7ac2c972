# food_delivery_api/app/schemas/user.py
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
import re

def password_strength_validator(password: str) -> str:
    if len(password) < 8:
        raise ValueError('Password must be at least 8 characters long')
    if not re.search(r"[a-zA-Z]", password):
        raise ValueError('Password must contain at least one letter')
    if not re.search(r"[0-9]", password):
        raise ValueError('Password must contain at least one digit')
    return password

class UserProfile(BaseModel):
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    username: Optional[str] = Field(None, max_length=50)
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = Field(None, max_length=255)
    age: Optional[int] = Field(None, ge=0, le=150)

class RegisterRequest(UserProfile):
    email: EmailStr
    password: str = Field(..., min_length=8)
    @field_validator('password')
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        return password_strength_validator(v)

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class UserUpdate(UserProfile):
    """Profile patch; empty values leave the stored field untouched."""

    @field_validator('age')
    @classmethod
    def zero_age_is_empty(cls, v: Optional[int]) -> Optional[int]:
        # 0 is what clients send for "not provided"
        return v or None

class User(UserProfile):
    id: int
    email: EmailStr
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

# --- Password flows ---
class PasswordResetEmailRequest(BaseModel):
    email: EmailStr

class PasswordResetRequest(BaseModel):
    email: EmailStr
    reset_code: str = Field(..., min_length=1, max_length=32)
    new_password: str = Field(..., min_length=8)
    @field_validator('new_password')
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        return password_strength_validator(v)

class ChangePasswordRequest(BaseModel):
    old_password: str
    new_password: str = Field(..., min_length=8)
    @field_validator('new_password')
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        return password_strength_validator(v)
# --- End password flows ---
