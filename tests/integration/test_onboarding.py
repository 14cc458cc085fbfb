"""Integration tests for child onboarding.

Onboarding commits a child profile, its relationship row and its progress
aggregate together. Failure tests capture ids up front because a rollback
expires every loaded instance.
"""

import uuid
from datetime import date

import pytest
from services.fitness_service.errors import (
    AtomicityError,
    AuthorizationError,
    ValidationError,
)
from services.fitness_service.models import (
    ParentChildRelationship,
    Profile,
    RelationshipKind,
    UserProgress,
    default_privacy_settings,
)
from services.fitness_service.policies import RequestContext
from services.fitness_service.services import onboarding as onboarding_module
from services.fitness_service.services.onboarding import onboard_child
from services.fitness_service.services.profiles import create_profile, get_profile
from services.fitness_service.services.relationships import is_active_parent_of
from sqlalchemy import func, select
from tests.conftest import ctx_for

TODAY = date(2026, 6, 1)


async def _count(db_session, model, *criteria) -> int:
    query = select(func.count()).select_from(model)
    if criteria:
        query = query.where(*criteria)
    result = await db_session.execute(query)
    return result.scalar_one()


@pytest.mark.asyncio
@pytest.mark.integration
async def test_onboard_child_creates_profile_link_and_progress(db_session, family):
    result = await onboard_child(
        db_session,
        family.parent_ctx,
        parent_id=family.parent.id,
        display_name="  Nia  ",
        date_of_birth=date(2017, 3, 14),
        today=TODAY,
    )

    child = result.child
    assert child.is_child
    assert child.auth_user_id is None
    assert child.display_name == "Nia"
    assert child.parent_consent_given
    assert child.parent_consent_date is not None
    assert child.privacy_settings == default_privacy_settings()
    assert child.preferred_language == family.parent.preferred_language

    relationship = result.relationship
    assert relationship.parent_id == family.parent.id
    assert relationship.child_id == child.id
    assert relationship.active
    assert relationship.consent_given
    assert relationship.relationship_type == RelationshipKind.PARENT
    assert await is_active_parent_of(db_session, family.parent.id, child.id)

    progress = (
        await db_session.execute(
            select(UserProgress).where(UserProgress.profile_id == child.id)
        )
    ).scalar_one()
    assert progress.weekly_points_goal == 50
    assert progress.monthly_goal_exercises == 15
    assert progress.total_points == 0
    assert progress.current_streak_days == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_onboarded_child_is_visible_to_parent_only(db_session, family):
    result = await onboard_child(
        db_session,
        family.parent_ctx,
        parent_id=family.parent.id,
        display_name="Kofi",
        today=TODAY,
    )

    assert await get_profile(db_session, family.parent_ctx, result.child.id) is not None
    assert await get_profile(db_session, family.stranger_ctx, result.child.id) is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_service_role_can_onboard_with_guardian_kind(db_session, family):
    result = await onboard_child(
        db_session,
        RequestContext.service(),
        parent_id=family.stranger.id,
        display_name="Ama",
        kind=RelationshipKind.GUARDIAN,
        today=TODAY,
    )
    assert result.relationship.relationship_type == RelationshipKind.GUARDIAN
    assert result.relationship.parent_id == family.stranger.id


@pytest.mark.asyncio
@pytest.mark.integration
async def test_onboarding_requires_display_name(db_session, family):
    with pytest.raises(ValidationError):
        await onboard_child(
            db_session,
            family.parent_ctx,
            parent_id=family.parent.id,
            display_name="   ",
        )


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize("date_of_birth", [date(2024, 1, 1), date(2000, 1, 1)])
async def test_onboarding_rejects_out_of_range_age(db_session, family, date_of_birth):
    with pytest.raises(ValidationError):
        await onboard_child(
            db_session,
            family.parent_ctx,
            parent_id=family.parent.id,
            display_name="Too young or old",
            date_of_birth=date_of_birth,
            today=TODAY,
        )
    assert await _count(db_session, Profile) == 3


@pytest.mark.asyncio
@pytest.mark.integration
async def test_onboarding_rejects_child_as_parent(db_session, family):
    with pytest.raises(ValidationError):
        await onboard_child(
            db_session,
            RequestContext.service(),
            parent_id=family.child.id,
            display_name="Grandchild",
            today=TODAY,
        )


@pytest.mark.asyncio
@pytest.mark.integration
async def test_onboarding_for_missing_parent(db_session, family):
    with pytest.raises(ValidationError):
        await onboard_child(
            db_session,
            RequestContext.service(),
            parent_id=uuid.uuid4(),
            display_name="Nobody's",
            today=TODAY,
        )


@pytest.mark.asyncio
@pytest.mark.integration
async def test_onboarding_on_behalf_of_another_parent_is_denied(db_session, family):
    with pytest.raises(AuthorizationError):
        await onboard_child(
            db_session,
            family.stranger_ctx,
            parent_id=family.parent.id,
            display_name="Not yours",
            today=TODAY,
        )
    assert await _count(db_session, Profile) == 3


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unknown_parent_is_denied_like_a_foreign_one(db_session, family):
    for parent_id in (uuid.uuid4(), family.parent.id):
        with pytest.raises(AuthorizationError):
            await onboard_child(
                db_session,
                family.stranger_ctx,
                parent_id=parent_id,
                display_name="Not yours",
                today=TODAY,
            )
    assert await _count(db_session, Profile) == 3


@pytest.mark.asyncio
@pytest.mark.integration
async def test_caller_without_profile_cannot_onboard(db_session, family):
    with pytest.raises(AuthorizationError):
        await onboard_child(
            db_session,
            ctx_for("auth-without-profile"),
            parent_id=family.parent.id,
            display_name="Orphan",
            today=TODAY,
        )


@pytest.mark.asyncio
@pytest.mark.integration
async def test_failed_link_leaves_no_partial_rows(db_session, family, monkeypatch):
    parent_id = family.parent.id
    parent_ctx = family.parent_ctx

    async def _broken_link(*args, **kwargs):
        raise RuntimeError("relationship insert failed")

    monkeypatch.setattr(onboarding_module, "link_new_child", _broken_link)

    with pytest.raises(AtomicityError):
        await onboard_child(
            db_session,
            parent_ctx,
            parent_id=parent_id,
            display_name="Half made",
            today=TODAY,
        )

    assert await _count(db_session, Profile, Profile.is_child.is_(True)) == 1
    assert await _count(db_session, Profile, Profile.display_name == "Half made") == 0
    assert (
        await _count(
            db_session,
            ParentChildRelationship,
            ParentChildRelationship.parent_id == parent_id,
        )
        == 1
    )
    assert await _count(db_session, UserProgress) == 3


@pytest.mark.asyncio
@pytest.mark.integration
async def test_registering_a_child_directly_is_rejected(db_session):
    with pytest.raises(ValidationError):
        await create_profile(
            db_session,
            ctx_for("auth-kid"),
            display_name="Kid",
            is_child=True,
        )
    assert await _count(db_session, Profile) == 0
    assert await _count(db_session, UserProgress) == 0
