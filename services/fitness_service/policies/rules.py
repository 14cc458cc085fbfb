"""Declarative per-table access rules.

Each family-scoped table gets one ``TablePolicy``. A policy names its owner
column, any extra columns that grant read access, which operations an active
parent may perform on a child's rows, and optionally a custom insert check.

Policies state which other tables they read. Registration rejects a policy
that reads its own table; that is the shape that recurses forever when the
rule is evaluated as part of reading the same table.
"""

import uuid
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, FrozenSet, Optional, Tuple, Type

from libs.db.base import Base
from services.fitness_service.errors import PolicyDefinitionError
from services.fitness_service.models import (
    ExerciseProgress,
    ExerciseSession,
    ParentChildRelationship,
    Profile,
    UserAchievement,
    UserAdventure,
    UserProgress,
)
from services.fitness_service.policies.context import (
    Operation,
    RequestContext,
    RequesterIdentity,
)
from services.fitness_service.policies.lookups import (
    active_children_query,
    is_active_parent_of,
)
from sqlalchemy import ColumnElement, or_
from sqlalchemy.ext.asyncio import AsyncSession

RELATIONSHIP_TABLE = ParentChildRelationship.__tablename__

InsertCheck = Callable[
    [AsyncSession, RequestContext, Optional[RequesterIdentity], Base],
    Awaitable[bool],
]


@dataclass(frozen=True)
class TablePolicy:
    model: Type[Base]
    owner_column: str
    reader_columns: Tuple[str, ...] = ()
    parent_operations: FrozenSet[Operation] = frozenset()
    insert_check: Optional[InsertCheck] = None
    # Tables read by ``insert_check`` beyond the relationship registry.
    extra_references: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def table(self) -> str:
        return self.model.__tablename__

    @property
    def references(self) -> FrozenSet[str]:
        refs = set(self.extra_references)
        if self.parent_operations:
            refs.add(RELATIONSHIP_TABLE)
        return frozenset(refs)

    def owner_of(self, row: Base) -> uuid.UUID:
        return getattr(row, self.owner_column)

    def read_clause(self, profile_id: uuid.UUID) -> ColumnElement[bool]:
        """SQL filter matching exactly the rows this profile may read."""
        owner = getattr(self.model, self.owner_column)
        terms = [owner == profile_id]
        terms.extend(getattr(self.model, col) == profile_id for col in self.reader_columns)
        if Operation.SELECT in self.parent_operations:
            terms.append(owner.in_(active_children_query(profile_id)))
        return or_(*terms)

    async def allows_existing(
        self,
        db: AsyncSession,
        identity: Optional[RequesterIdentity],
        operation: Operation,
        row: Base,
    ) -> bool:
        if identity is None:
            return False
        owner = self.owner_of(row)
        if owner == identity.profile_id:
            return True
        if operation is Operation.SELECT and any(
            getattr(row, col) == identity.profile_id for col in self.reader_columns
        ):
            return True
        if operation in self.parent_operations:
            return await is_active_parent_of(db, identity.profile_id, owner)
        return False

    async def allows_insert(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        identity: Optional[RequesterIdentity],
        row: Base,
    ) -> bool:
        if self.insert_check is not None:
            return await self.insert_check(db, ctx, identity, row)
        if identity is None:
            return False
        owner = self.owner_of(row)
        if owner == identity.profile_id:
            return True
        if Operation.INSERT in self.parent_operations:
            return await is_active_parent_of(db, identity.profile_id, owner)
        return False


_REGISTRY: Dict[Type[Base], TablePolicy] = {}


def register_policy(policy: TablePolicy) -> TablePolicy:
    if policy.table in policy.references:
        raise PolicyDefinitionError(
            f"Policy for '{policy.table}' references its own table"
        )
    if policy.model in _REGISTRY:
        raise PolicyDefinitionError(f"Policy for '{policy.table}' already registered")
    _REGISTRY[policy.model] = policy
    return policy


def get_policy(model: Type[Base]) -> TablePolicy:
    try:
        return _REGISTRY[model]
    except KeyError:
        raise PolicyDefinitionError(
            f"No policy registered for '{model.__tablename__}'"
        ) from None


def registered_policies() -> Tuple[TablePolicy, ...]:
    return tuple(_REGISTRY.values())


# ---------------------------------------------------------------------------
# Insert checks
# ---------------------------------------------------------------------------


async def _check_profile_insert(
    db: AsyncSession,
    ctx: RequestContext,
    identity: Optional[RequesterIdentity],
    row: Profile,
) -> bool:
    if not row.is_child:
        # Self-registration: a login may only create its own profile.
        return row.auth_user_id is not None and row.auth_user_id == ctx.auth_user_id
    return (
        identity is not None
        and not identity.is_child
        and row.auth_user_id is None
        and bool(row.parent_consent_given)
    )


async def _check_relationship_insert(
    db: AsyncSession,
    ctx: RequestContext,
    identity: Optional[RequesterIdentity],
    row: ParentChildRelationship,
) -> bool:
    return (
        identity is not None
        and not identity.is_child
        and row.parent_id == identity.profile_id
        and bool(row.consent_given)
    )


# ---------------------------------------------------------------------------
# Table policies
# ---------------------------------------------------------------------------

PROFILE_POLICY = register_policy(
    TablePolicy(
        model=Profile,
        owner_column="id",
        parent_operations=frozenset({Operation.SELECT, Operation.UPDATE}),
        insert_check=_check_profile_insert,
    )
)

# Reads of the registry never consult the registry itself: owner or child only.
RELATIONSHIP_POLICY = register_policy(
    TablePolicy(
        model=ParentChildRelationship,
        owner_column="parent_id",
        reader_columns=("child_id",),
        insert_check=_check_relationship_insert,
    )
)

_FAMILY_RECORD_OPERATIONS = frozenset(
    {Operation.SELECT, Operation.INSERT, Operation.DELETE}
)

for _model in (
    ExerciseSession,
    UserProgress,
    ExerciseProgress,
    UserAdventure,
    UserAchievement,
):
    register_policy(
        TablePolicy(
            model=_model,
            owner_column="profile_id",
            parent_operations=_FAMILY_RECORD_OPERATIONS,
        )
    )

del _model
