"""Child onboarding: one transaction creating the child profile, its link to
the parent and the child's progress aggregate."""

import uuid
from dataclasses import dataclass
from datetime import date
from typing import Optional

from libs.common.config import get_settings
from libs.common.datetime_utils import local_today, utc_now
from libs.common.logging import get_logger
from services.fitness_service.errors import (
    AtomicityError,
    AuthorizationError,
    FitnessError,
    ValidationError,
)
from services.fitness_service.models import (
    ParentChildRelationship,
    Profile,
    RelationshipKind,
    default_privacy_settings,
)
from services.fitness_service.policies import (
    Operation,
    RequestContext,
    authorize,
    resolve_requester,
)
from services.fitness_service.services.profiles import check_child_age
from services.fitness_service.services.progress import ensure_progress
from services.fitness_service.services.relationships import link_new_child
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


@dataclass
class OnboardingResult:
    child: Profile
    relationship: ParentChildRelationship


async def onboard_child(
    db: AsyncSession,
    ctx: RequestContext,
    *,
    parent_id: uuid.UUID,
    display_name: str,
    date_of_birth: Optional[date] = None,
    kind: RelationshipKind = RelationshipKind.PARENT,
    preferred_language: Optional[str] = None,
    today: Optional[date] = None,
) -> OnboardingResult:
    """Create a consented child profile linked to ``parent_id``.

    Either the child profile, its relationship row and its progress row all
    exist afterwards, or none of them do.
    """
    name = (display_name or "").strip()
    if not name:
        raise ValidationError("Display name is required")
    check_child_age(date_of_birth, today or local_today())

    if not ctx.is_service_role:
        identity = await resolve_requester(db, ctx)
        if identity is None or identity.profile_id != parent_id:
            raise AuthorizationError()

    parent = await db.get(Profile, parent_id)
    if parent is None or parent.is_child:
        raise ValidationError("Parent must be an existing parent profile")

    now = utc_now()
    child = Profile(
        auth_user_id=None,
        display_name=name,
        date_of_birth=date_of_birth,
        is_child=True,
        parent_consent_given=True,
        parent_consent_date=now,
        privacy_settings=default_privacy_settings(),
        preferred_language=preferred_language
        or parent.preferred_language
        or get_settings().DEFAULT_LANGUAGE,
    )
    await authorize(db, ctx, Operation.INSERT, child)

    try:
        db.add(child)
        relationship = await link_new_child(
            db, ctx, parent_id=parent_id, child=child, kind=kind
        )
        await ensure_progress(db, profile_id=child.id, is_child=True)
        await db.commit()
    except FitnessError:
        await db.rollback()
        raise
    except Exception as exc:
        await db.rollback()
        logger.exception("Onboarding a child for parent %s failed", parent_id)
        raise AtomicityError() from exc

    await db.refresh(child)
    await db.refresh(relationship)

    logger.info(
        "Onboarded child %s for parent %s (relationship %s)",
        child.id,
        parent_id,
        relationship.id,
    )
    return OnboardingResult(child=child, relationship=relationship)
