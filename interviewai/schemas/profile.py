"""
Pydantic schemas for profile/settings endpoints.
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, field_validator


class ProfileResponse(BaseModel):
    """Schema for the authenticated user's profile."""
    id: int
    full_name: str
    email: str
    created_at: Optional[datetime] = None
    access_token: Optional[str] = Field(None, description="Fresh token, set when the email changed")
    
    model_config = {"from_attributes": True}


class ProfileUpdateRequest(BaseModel):
    """Profile edit from the settings view. Omitted fields are left unchanged."""
    full_name: Optional[str] = Field(None, max_length=100, description="Display name, 1-100 characters")
    email: Optional[EmailStr] = Field(None, description="New email address")

    @field_validator("full_name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        if len(v) > 100:
            raise ValueError("Name must be less than 100 characters")
        return v

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, v):
        return v.strip() if isinstance(v, str) else v
