"""Family (relationship registry and onboarding) schemas."""

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.fitness_service.models.enums import RelationshipKind
from services.fitness_service.schemas.profile import ProfileResponse


class ChildOnboardRequest(BaseModel):
    display_name: str = Field(..., min_length=1, max_length=100)
    date_of_birth: Optional[date] = None
    relationship_type: RelationshipKind = RelationshipKind.PARENT
    preferred_language: Optional[str] = Field(None, min_length=2, max_length=10)


class RelationshipResponse(BaseModel):
    id: uuid.UUID
    parent_id: uuid.UUID
    child_id: uuid.UUID
    relationship_type: RelationshipKind
    consent_given: bool
    consent_date: Optional[datetime] = None
    active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ChildOnboardResponse(BaseModel):
    child: ProfileResponse
    relationship: RelationshipResponse


class AdminLinkRequest(BaseModel):
    """Administrative link, e.g. re-attaching an orphaned child."""

    parent_id: uuid.UUID
    child_id: uuid.UUID
    consent_given: bool
    relationship_type: RelationshipKind = RelationshipKind.GUARDIAN


class AccountClosedResponse(BaseModel):
    auth_user_id: str
    closed: bool
