"""Relationship registry model: parent-to-child links with consent metadata."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.fitness_service.models.enums import RelationshipKind, enum_values
from services.fitness_service.models.types import GUID
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    UniqueConstraint,
)
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column


class ParentChildRelationship(Base):
    """Owned by the parent; the child may read its own rows.

    One row per (parent, child) pair. Deactivation flips ``active`` instead of
    deleting, so the unique pair constraint also gives "at most one active".
    """

    __tablename__ = "parent_child_relationships"

    id: Mapped[uuid.UUID] = mapped_column(GUID, primary_key=True, default=uuid.uuid4)
    parent_id: Mapped[uuid.UUID] = mapped_column(
        GUID, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    child_id: Mapped[uuid.UUID] = mapped_column(
        GUID, ForeignKey("profiles.id", ondelete="CASCADE"), index=True, nullable=False
    )
    relationship_type: Mapped[RelationshipKind] = mapped_column(
        SAEnum(
            RelationshipKind,
            name="relationship_kind_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=RelationshipKind.PARENT,
        nullable=False,
    )
    consent_given: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    consent_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=True
    )
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    deactivated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    __table_args__ = (
        UniqueConstraint("parent_id", "child_id", name="uq_parent_child_pair"),
        CheckConstraint("parent_id != child_id", name="no_self_link"),
        Index("ix_parent_child_active_parent", "parent_id", "active"),
    )

    def __repr__(self) -> str:
        return (
            f"<ParentChildRelationship parent={self.parent_id} "
            f"child={self.child_id} active={self.active}>"
        )
