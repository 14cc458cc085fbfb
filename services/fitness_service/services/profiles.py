"""Profile operations: self-registration, reads, updates and account closure."""

import uuid
from datetime import date
from typing import Any, Optional

from libs.common.config import get_settings
from libs.common.datetime_utils import age_on, local_today
from libs.common.logging import get_logger
from services.fitness_service.errors import (
    AuthorizationError,
    ConflictError,
    ValidationError,
)
from services.fitness_service.models import (
    ParentChildRelationship,
    Profile,
    default_privacy_settings,
)
from services.fitness_service.policies import (
    Operation,
    RequestContext,
    RequesterIdentity,
    authorize,
    resolve_requester,
    scoped_select,
)
from services.fitness_service.services.progress import ensure_progress
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

PATCHABLE_FIELDS = frozenset(
    {"display_name", "date_of_birth", "privacy_settings", "preferred_language"}
)
PRIVACY_KEYS = frozenset(default_privacy_settings())


def _clean_display_name(value: Optional[str]) -> str:
    name = (value or "").strip()
    if not name:
        raise ValidationError("Display name is required")
    return name


def _validate_privacy(patch: dict) -> None:
    unknown = set(patch) - PRIVACY_KEYS
    if unknown:
        raise ValidationError(
            f"Unknown privacy settings: {', '.join(sorted(unknown))}"
        )


def _merge_privacy(current: Optional[dict], patch: dict) -> dict:
    _validate_privacy(patch)
    merged = dict(default_privacy_settings())
    merged.update(current or {})
    merged.update({key: bool(value) for key, value in patch.items()})
    return merged


def check_child_age(date_of_birth: Optional[date], today: date) -> None:
    """Reject a child date of birth outside the configured age window."""
    if date_of_birth is None:
        return
    settings = get_settings()
    age = age_on(date_of_birth, today)
    if not settings.CHILD_MIN_AGE <= age <= settings.CHILD_MAX_AGE:
        raise ValidationError(
            f"Child must be between {settings.CHILD_MIN_AGE} and "
            f"{settings.CHILD_MAX_AGE} years old"
        )


async def create_profile(
    db: AsyncSession,
    ctx: RequestContext,
    *,
    display_name: str,
    email: Optional[str] = None,
    date_of_birth: Optional[date] = None,
    preferred_language: Optional[str] = None,
    is_child: bool = False,
    auth_user_id: Optional[str] = None,
) -> Profile:
    """Register a parent profile for the caller's login.

    Consent is never set here, so a child profile can't be created through
    this path; children are created by onboarding only.
    """
    name = _clean_display_name(display_name)
    if is_child:
        raise ValidationError(
            "Child profiles require recorded parental consent; "
            "add children through family onboarding"
        )

    login = auth_user_id or ctx.auth_user_id
    if login is None:
        raise ValidationError("A login is required to register a profile")

    existing = await db.execute(select(Profile.id).where(Profile.auth_user_id == login))
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("A profile already exists for this login")

    profile = Profile(
        auth_user_id=login,
        email=email,
        display_name=name,
        date_of_birth=date_of_birth,
        is_child=False,
        parent_consent_given=False,
        privacy_settings=default_privacy_settings(),
        preferred_language=preferred_language or get_settings().DEFAULT_LANGUAGE,
    )
    await authorize(db, ctx, Operation.INSERT, profile)

    db.add(profile)
    try:
        await db.flush()
        await ensure_progress(db, profile_id=profile.id, is_child=False)
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise ConflictError("A profile already exists for this login") from exc
    await db.refresh(profile)

    if login == ctx.auth_user_id:
        ctx.remember(RequesterIdentity(profile_id=profile.id, is_child=False))

    logger.info("Created profile %s for auth user %s", profile.id, login)
    return profile


async def get_profile(
    db: AsyncSession, ctx: RequestContext, profile_id: uuid.UUID
) -> Optional[Profile]:
    """Return the profile if the caller may see it, otherwise None."""
    query = await scoped_select(db, ctx, Profile)
    result = await db.execute(query.where(Profile.id == profile_id))
    return result.scalar_one_or_none()


async def get_my_profile(db: AsyncSession, ctx: RequestContext) -> Optional[Profile]:
    identity = await resolve_requester(db, ctx)
    if identity is None:
        return None
    return await get_profile(db, ctx, identity.profile_id)


async def list_profiles(db: AsyncSession, ctx: RequestContext) -> list[Profile]:
    query = await scoped_select(db, ctx, Profile)
    result = await db.execute(query.order_by(Profile.is_child, Profile.created_at))
    return list(result.scalars().all())


async def update_profile(
    db: AsyncSession,
    ctx: RequestContext,
    profile_id: uuid.UUID,
    patch: dict[str, Any],
) -> Profile:
    """Apply ``patch`` to a profile the caller owns or parents.

    A missing profile and a forbidden one raise the same AuthorizationError.
    """
    unknown = set(patch) - PATCHABLE_FIELDS
    if unknown:
        raise ValidationError(
            f"Fields cannot be updated: {', '.join(sorted(unknown))}"
        )

    changes: dict[str, Any] = {}
    if "display_name" in patch:
        changes["display_name"] = _clean_display_name(patch["display_name"])
    if "date_of_birth" in patch:
        changes["date_of_birth"] = patch["date_of_birth"]
    if "preferred_language" in patch:
        language = (patch["preferred_language"] or "").strip()
        if not language:
            raise ValidationError("Preferred language cannot be empty")
        changes["preferred_language"] = language
    privacy_patch = patch.get("privacy_settings") or {}
    _validate_privacy(privacy_patch)

    result = await db.execute(
        select(Profile).where(Profile.id == profile_id).with_for_update()
    )
    profile = result.scalar_one_or_none()
    if profile is None:
        raise AuthorizationError()
    await authorize(db, ctx, Operation.UPDATE, profile)
    if profile.is_child and "date_of_birth" in changes:
        check_child_age(changes["date_of_birth"], local_today())

    for key, value in changes.items():
        setattr(profile, key, value)
    if privacy_patch:
        profile.privacy_settings = _merge_privacy(
            profile.privacy_settings, privacy_patch
        )

    await db.commit()
    await db.refresh(profile)

    logger.info(
        "Updated profile %s fields=%s", profile.id, ",".join(sorted(patch))
    )
    return profile


async def close_account(
    db: AsyncSession, ctx: RequestContext, auth_user_id: str
) -> bool:
    """Delete the login's profile and, by cascade, everything it owns.

    Children whose only active parent was this profile are left orphaned.
    Returns False when the login has no profile.
    """
    if not ctx.is_service_role:
        raise AuthorizationError()

    result = await db.execute(select(Profile).where(Profile.auth_user_id == auth_user_id))
    profile = result.scalar_one_or_none()
    if profile is None:
        return False

    await authorize(db, ctx, Operation.DELETE, profile)

    children = await db.execute(
        select(ParentChildRelationship.child_id).where(
            ParentChildRelationship.parent_id == profile.id,
            ParentChildRelationship.active.is_(True),
        )
    )
    child_ids = list(children.scalars().all())

    profile_id = profile.id
    await db.delete(profile)
    await db.commit()

    orphaned = 0
    for child_id in child_ids:
        still_linked = await db.execute(
            select(ParentChildRelationship.id).where(
                ParentChildRelationship.child_id == child_id,
                ParentChildRelationship.active.is_(True),
            )
        )
        if still_linked.first() is None:
            orphaned += 1

    logger.info(
        "Closed account for auth user %s (profile %s, orphaned children=%d)",
        auth_user_id,
        profile_id,
        orphaned,
    )
    return True
