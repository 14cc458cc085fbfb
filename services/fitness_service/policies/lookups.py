"""Relationship lookups used by table policies.

These are plain queries against ``parent_child_relationships``. They never
call the evaluator, which is what lets policies on other tables depend on
them without recursion.
"""

import uuid

from services.fitness_service.models import ParentChildRelationship
from sqlalchemy import Select, exists, select
from sqlalchemy.ext.asyncio import AsyncSession


def active_children_query(parent_id: uuid.UUID) -> Select:
    """Sub-select of child ids actively linked to ``parent_id``."""
    return select(ParentChildRelationship.child_id).where(
        ParentChildRelationship.parent_id == parent_id,
        ParentChildRelationship.active.is_(True),
    )


async def is_active_parent_of(
    db: AsyncSession, parent_id: uuid.UUID, child_id: uuid.UUID
) -> bool:
    if parent_id == child_id:
        return False
    result = await db.execute(
        select(
            exists().where(
                ParentChildRelationship.parent_id == parent_id,
                ParentChildRelationship.child_id == child_id,
                ParentChildRelationship.active.is_(True),
            )
        )
    )
    return bool(result.scalar())
