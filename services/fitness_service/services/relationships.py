"""Relationship registry operations.

Linking and deactivation go through the policy evaluator like every other
mutation. ``is_active_parent_of`` is the plain lookup the evaluator itself
uses and is re-exported here as part of the registry's surface.
"""

import uuid
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.fitness_service.errors import (
    AuthorizationError,
    ConflictError,
    ValidationError,
)
from services.fitness_service.models import (
    ParentChildRelationship,
    Profile,
    RelationshipKind,
)
from services.fitness_service.policies import (
    Operation,
    RequestContext,
    authorize,
    is_active_parent_of,
    resolve_requester,
    scoped_select,
)
from sqlalchemy import exists, inspect, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

__all__ = [
    "children_of",
    "deactivate",
    "has_active_parent",
    "is_active_parent_of",
    "link_child",
    "link_new_child",
    "parents_of",
]


async def has_active_parent(db: AsyncSession, child_id: uuid.UUID) -> bool:
    result = await db.execute(
        select(
            exists().where(
                ParentChildRelationship.child_id == child_id,
                ParentChildRelationship.active.is_(True),
            )
        )
    )
    return bool(result.scalar())


async def _write_link(
    db: AsyncSession,
    ctx: RequestContext,
    *,
    parent_id: uuid.UUID,
    child_id: uuid.UUID,
    kind: RelationshipKind,
    commit: bool,
) -> ParentChildRelationship:
    result = await db.execute(
        select(ParentChildRelationship)
        .where(
            ParentChildRelationship.parent_id == parent_id,
            ParentChildRelationship.child_id == child_id,
        )
        .with_for_update()
    )
    existing = result.scalar_one_or_none()
    if existing is not None and existing.active:
        raise ConflictError("An active relationship already exists for this pair")

    now = utc_now()
    candidate = ParentChildRelationship(
        parent_id=parent_id,
        child_id=child_id,
        relationship_type=kind,
        consent_given=True,
        consent_date=now,
        active=True,
    )
    await authorize(db, ctx, Operation.INSERT, candidate)

    if existing is not None:
        existing.relationship_type = kind
        existing.consent_given = True
        existing.consent_date = now
        existing.active = True
        existing.deactivated_at = None
        relationship = existing
    else:
        relationship = candidate
        db.add(relationship)

    try:
        await db.flush()
    except IntegrityError as exc:
        raise ConflictError(
            "An active relationship already exists for this pair"
        ) from exc

    if commit:
        await db.commit()
        await db.refresh(relationship)

    logger.info(
        "Linked child %s to parent %s (relationship %s)",
        child_id,
        parent_id,
        relationship.id,
    )
    return relationship


async def link_child(
    db: AsyncSession,
    ctx: RequestContext,
    *,
    parent_id: uuid.UUID,
    child_id: uuid.UUID,
    consent: bool,
    kind: RelationshipKind = RelationshipKind.PARENT,
    commit: bool = True,
) -> ParentChildRelationship:
    """Administratively link (or re-link) two existing profiles.

    Service role only. This is the one way an orphaned child, or a child
    whose link was deactivated, becomes reachable by a parent again.
    Raises ValidationError without consent, ConflictError if the pair is
    already actively linked.
    """
    if not ctx.is_service_role:
        raise AuthorizationError()
    if not consent:
        raise ValidationError("Parental consent is required to link a child")
    if parent_id == child_id:
        raise ValidationError("A profile cannot be linked to itself")

    parent = await db.get(Profile, parent_id)
    if parent is None or parent.is_child:
        raise ValidationError("Parent must be an existing parent profile")
    child = await db.get(Profile, child_id)
    if child is None or not child.is_child:
        raise ValidationError("Child must be an existing child profile")

    return await _write_link(
        db, ctx, parent_id=parent_id, child_id=child_id, kind=kind, commit=commit
    )


async def link_new_child(
    db: AsyncSession,
    ctx: RequestContext,
    *,
    parent_id: uuid.UUID,
    child: Profile,
    kind: RelationshipKind = RelationshipKind.PARENT,
) -> ParentChildRelationship:
    """Link a child profile that is being created in this transaction.

    ``child`` must have been added to ``db`` and not flushed yet. A child
    that already exists in the database can't be claimed through here. The
    child and its link are flushed together but not committed.
    """
    state = inspect(child)
    if not state.pending or state.session is not db.sync_session:
        raise AuthorizationError()
    if not child.is_child or not child.parent_consent_given:
        raise ValidationError("Child profile must carry recorded parental consent")

    await db.flush()
    return await _write_link(
        db, ctx, parent_id=parent_id, child_id=child.id, kind=kind, commit=False
    )


async def deactivate(
    db: AsyncSession,
    ctx: RequestContext,
    *,
    parent_id: uuid.UUID,
    child_id: uuid.UUID,
) -> Optional[ParentChildRelationship]:
    """Deactivate the active link. Only the parent on the link may do this.

    Returns None (and changes nothing) when no active link exists.
    """
    if not ctx.is_service_role:
        identity = await resolve_requester(db, ctx)
        if identity is None or identity.profile_id != parent_id:
            raise AuthorizationError()

    result = await db.execute(
        select(ParentChildRelationship)
        .where(
            ParentChildRelationship.parent_id == parent_id,
            ParentChildRelationship.child_id == child_id,
            ParentChildRelationship.active.is_(True),
        )
        .with_for_update()
    )
    relationship = result.scalar_one_or_none()
    if relationship is None:
        return None

    await authorize(db, ctx, Operation.UPDATE, relationship)

    relationship.active = False
    relationship.deactivated_at = utc_now()
    await db.commit()
    await db.refresh(relationship)

    logger.info(
        "Deactivated relationship %s (parent %s, child %s)",
        relationship.id,
        parent_id,
        child_id,
    )
    return relationship


async def children_of(
    db: AsyncSession, ctx: RequestContext, parent_id: uuid.UUID
) -> list[ParentChildRelationship]:
    query = await scoped_select(db, ctx, ParentChildRelationship)
    result = await db.execute(
        query.where(
            ParentChildRelationship.parent_id == parent_id,
            ParentChildRelationship.active.is_(True),
        ).order_by(ParentChildRelationship.created_at)
    )
    return list(result.scalars().all())


async def parents_of(
    db: AsyncSession, ctx: RequestContext, child_id: uuid.UUID
) -> list[ParentChildRelationship]:
    query = await scoped_select(db, ctx, ParentChildRelationship)
    result = await db.execute(
        query.where(
            ParentChildRelationship.child_id == child_id,
            ParentChildRelationship.active.is_(True),
        ).order_by(ParentChildRelationship.created_at)
    )
    return list(result.scalars().all())
