"""Profile request/response schemas."""

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class PrivacySettings(BaseModel):
    data_sharing: bool = False
    analytics: bool = False


class PrivacySettingsPatch(BaseModel):
    data_sharing: Optional[bool] = None
    analytics: Optional[bool] = None

    model_config = ConfigDict(extra="forbid")


class ProfileCreate(BaseModel):
    """Parent self-registration."""

    display_name: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    date_of_birth: Optional[date] = None
    preferred_language: Optional[str] = Field(None, min_length=2, max_length=10)
    # Accepted only so child registration can be rejected explicitly.
    is_child: bool = False


class ProfileUpdate(BaseModel):
    display_name: Optional[str] = Field(None, min_length=1, max_length=100)
    date_of_birth: Optional[date] = None
    privacy_settings: Optional[PrivacySettingsPatch] = None
    preferred_language: Optional[str] = Field(None, min_length=2, max_length=10)

    model_config = ConfigDict(extra="forbid")

    def to_patch(self) -> dict:
        patch = self.model_dump(exclude_unset=True)
        if self.privacy_settings is not None:
            patch["privacy_settings"] = self.privacy_settings.model_dump(
                exclude_none=True
            )
        return patch


class ProfileResponse(BaseModel):
    id: uuid.UUID
    display_name: str
    email: Optional[str] = None
    date_of_birth: Optional[date] = None
    is_child: bool
    parent_consent_given: bool
    parent_consent_date: Optional[datetime] = None
    privacy_settings: PrivacySettings
    preferred_language: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
