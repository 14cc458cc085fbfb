"""Profile model: parent accounts and the child profiles they manage."""

import uuid
from datetime import date, datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.fitness_service.models.types import GUID, JSONDict
from sqlalchemy import Boolean, CheckConstraint, Date, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column


def default_privacy_settings() -> dict:
    return {"data_sharing": False, "analytics": False}


class Profile(Base):
    """A parent (has a login) or a child (no login, managed by a parent).

    Every family-scoped table references ``profiles.id``; deleting a profile
    cascades to its relationships and records.
    """

    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(GUID, primary_key=True, default=uuid.uuid4)
    # Identity provider login. NULL for children.
    auth_user_id: Mapped[Optional[str]] = mapped_column(
        String, unique=True, index=True, nullable=True
    )
    email: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    display_name: Mapped[str] = mapped_column(String, nullable=False)
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    is_child: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Consent
    parent_consent_given: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    parent_consent_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    privacy_settings: Mapped[dict] = mapped_column(
        JSONDict, default=default_privacy_settings, nullable=False
    )
    preferred_language: Mapped[str] = mapped_column(
        String, default="en", nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    __table_args__ = (
        CheckConstraint(
            "NOT is_child OR auth_user_id IS NULL",
            name="child_without_login",
        ),
        Index("ix_profiles_is_child", "is_child"),
    )

    @property
    def data_sharing(self) -> bool:
        return bool((self.privacy_settings or {}).get("data_sharing", False))

    @property
    def analytics(self) -> bool:
        return bool((self.privacy_settings or {}).get("analytics", False))

    @property
    def usable_for_family_writes(self) -> bool:
        """Children need recorded parental consent before any data is written."""
        return not self.is_child or self.parent_consent_given

    def __repr__(self) -> str:
        kind = "child" if self.is_child else "parent"
        return f"<Profile {self.id} {kind}>"
