"""Integration tests for the relationship registry."""

import uuid

import pytest
from services.fitness_service.errors import (
    AuthorizationError,
    ConflictError,
    ValidationError,
)
from services.fitness_service.models import ParentChildRelationship, RelationshipKind
from services.fitness_service.policies import RequestContext
from services.fitness_service.services.relationships import (
    children_of,
    deactivate,
    has_active_parent,
    is_active_parent_of,
    link_child,
    link_new_child,
    parents_of,
)
from services.fitness_service.services.records import get_progress
from sqlalchemy import func, select
from tests.factories import ChildProfileFactory


async def _relationship_count(db_session) -> int:
    result = await db_session.execute(
        select(func.count()).select_from(ParentChildRelationship)
    )
    return result.scalar_one()


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_is_active_parent_of(db_session, family):
    assert await is_active_parent_of(db_session, family.parent.id, family.child.id)
    assert not await is_active_parent_of(
        db_session, family.stranger.id, family.child.id
    )
    assert not await is_active_parent_of(db_session, family.child.id, family.parent.id)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_children_and_parents_listing(db_session, family):
    children = await children_of(db_session, family.parent_ctx, family.parent.id)
    assert [rel.child_id for rel in children] == [family.child.id]

    parents = await parents_of(db_session, family.parent_ctx, family.child.id)
    assert [rel.parent_id for rel in parents] == [family.parent.id]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_strangers_cannot_list_other_families(db_session, family):
    assert await children_of(db_session, family.stranger_ctx, family.parent.id) == []
    assert await parents_of(db_session, family.stranger_ctx, family.child.id) == []


# ---------------------------------------------------------------------------
# link_child
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_link_requires_consent(db_session, family):
    with pytest.raises(ValidationError):
        await link_child(
            db_session,
            RequestContext.service(),
            parent_id=family.stranger.id,
            child_id=family.child.id,
            consent=False,
        )
    assert await _relationship_count(db_session) == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_link_rejects_duplicate_active_pair(db_session, family):
    with pytest.raises(ConflictError):
        await link_child(
            db_session,
            RequestContext.service(),
            parent_id=family.parent.id,
            child_id=family.child.id,
            consent=True,
        )


@pytest.mark.asyncio
@pytest.mark.integration
async def test_link_rejects_self_link(db_session, family):
    with pytest.raises(ValidationError):
        await link_child(
            db_session,
            RequestContext.service(),
            parent_id=family.parent.id,
            child_id=family.parent.id,
            consent=True,
        )


@pytest.mark.asyncio
@pytest.mark.integration
async def test_second_guardian_via_service_link(db_session, family):
    relationship = await link_child(
        db_session,
        RequestContext.service(),
        parent_id=family.stranger.id,
        child_id=family.child.id,
        consent=True,
        kind=RelationshipKind.GUARDIAN,
    )

    assert relationship.active
    assert relationship.relationship_type == RelationshipKind.GUARDIAN
    assert await is_active_parent_of(db_session, family.stranger.id, family.child.id)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_parent_cannot_claim_child_of_another_family(db_session, family):
    with pytest.raises(AuthorizationError):
        await link_child(
            db_session,
            family.stranger_ctx,
            parent_id=family.stranger.id,
            child_id=family.child.id,
            consent=True,
        )
    assert not await is_active_parent_of(
        db_session, family.stranger.id, family.child.id
    )


@pytest.mark.asyncio
@pytest.mark.integration
async def test_parent_cannot_link_on_behalf_of_someone_else(db_session, family):
    orphan = ChildProfileFactory.create()
    db_session.add(orphan)
    await db_session.commit()

    with pytest.raises(AuthorizationError):
        await link_child(
            db_session,
            family.stranger_ctx,
            parent_id=family.parent.id,
            child_id=orphan.id,
            consent=True,
        )


@pytest.mark.asyncio
@pytest.mark.integration
async def test_link_requires_parent_profile(db_session, family):
    with pytest.raises(ValidationError):
        await link_child(
            db_session,
            RequestContext.service(),
            parent_id=family.child.id,
            child_id=family.parent.id,
            consent=True,
        )


@pytest.mark.asyncio
@pytest.mark.integration
async def test_relinking_reactivates_existing_row(db_session, family):
    await deactivate(
        db_session,
        family.parent_ctx,
        parent_id=family.parent.id,
        child_id=family.child.id,
    )
    assert not await has_active_parent(db_session, family.child.id)

    relationship = await link_child(
        db_session,
        RequestContext.service(),
        parent_id=family.parent.id,
        child_id=family.child.id,
        consent=True,
    )

    assert relationship.id == family.relationship.id
    assert relationship.active
    assert relationship.deactivated_at is None
    assert await _relationship_count(db_session) == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_deactivated_child_cannot_be_claimed_by_another_parent(
    db_session, family
):
    child_id = family.child.id
    stranger_id = family.stranger.id
    stranger_ctx = family.stranger_ctx
    await deactivate(
        db_session,
        family.parent_ctx,
        parent_id=family.parent.id,
        child_id=child_id,
    )
    assert not await has_active_parent(db_session, child_id)

    with pytest.raises(AuthorizationError):
        await link_child(
            db_session,
            stranger_ctx,
            parent_id=stranger_id,
            child_id=child_id,
            consent=True,
        )

    assert not await is_active_parent_of(db_session, stranger_id, child_id)
    assert await get_progress(db_session, stranger_ctx, child_id) is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_parent_cannot_relink_a_deactivated_child_themselves(
    db_session, family
):
    parent_id = family.parent.id
    child_id = family.child.id
    parent_ctx = family.parent_ctx
    await deactivate(db_session, parent_ctx, parent_id=parent_id, child_id=child_id)

    with pytest.raises(AuthorizationError):
        await link_child(
            db_session,
            parent_ctx,
            parent_id=parent_id,
            child_id=child_id,
            consent=True,
        )
    assert not await has_active_parent(db_session, child_id)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unknown_parent_and_foreign_parent_are_denied_alike(
    db_session, family
):
    for parent_id in (uuid.uuid4(), family.parent.id):
        with pytest.raises(AuthorizationError):
            await link_child(
                db_session,
                family.stranger_ctx,
                parent_id=parent_id,
                child_id=family.child.id,
                consent=True,
            )


@pytest.mark.asyncio
@pytest.mark.integration
async def test_service_link_requires_existing_child(db_session, family):
    with pytest.raises(ValidationError):
        await link_child(
            db_session,
            RequestContext.service(),
            parent_id=family.parent.id,
            child_id=uuid.uuid4(),
            consent=True,
        )


# ---------------------------------------------------------------------------
# link_new_child
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_link_new_child_rejects_an_existing_profile(db_session, family):
    child_id = family.child.id
    stranger_id = family.stranger.id
    stranger_ctx = family.stranger_ctx
    await deactivate(
        db_session,
        family.parent_ctx,
        parent_id=family.parent.id,
        child_id=child_id,
    )

    with pytest.raises(AuthorizationError):
        await link_new_child(
            db_session,
            stranger_ctx,
            parent_id=stranger_id,
            child=family.child,
        )
    assert not await is_active_parent_of(db_session, stranger_id, child_id)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_link_new_child_links_a_pending_profile(db_session, family):
    child = ChildProfileFactory.create(display_name="Newborn")
    db_session.add(child)

    relationship = await link_new_child(
        db_session,
        family.stranger_ctx,
        parent_id=family.stranger.id,
        child=child,
    )
    await db_session.commit()

    assert relationship.active
    assert relationship.child_id == child.id
    assert await is_active_parent_of(db_session, family.stranger.id, child.id)


# ---------------------------------------------------------------------------
# deactivate
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_only_the_parent_may_deactivate(db_session, family):
    with pytest.raises(AuthorizationError):
        await deactivate(
            db_session,
            family.stranger_ctx,
            parent_id=family.parent.id,
            child_id=family.child.id,
        )
    assert await is_active_parent_of(db_session, family.parent.id, family.child.id)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_deactivate_marks_row_inactive(db_session, family):
    relationship = await deactivate(
        db_session,
        family.parent_ctx,
        parent_id=family.parent.id,
        child_id=family.child.id,
    )

    assert relationship is not None
    assert not relationship.active
    assert relationship.deactivated_at is not None
    assert not await is_active_parent_of(db_session, family.parent.id, family.child.id)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_deactivating_missing_link_is_a_no_op(db_session, family):
    other_child = ChildProfileFactory.create()
    db_session.add(other_child)
    await db_session.commit()

    result = await deactivate(
        db_session,
        family.parent_ctx,
        parent_id=family.parent.id,
        child_id=other_child.id,
    )
    assert result is None
