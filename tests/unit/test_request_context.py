"""Unit tests for request context construction and requester resolution."""

import uuid
from types import SimpleNamespace

import pytest
from libs.auth.models import AuthUser
from libs.common.retry import RetryPolicy
from services.fitness_service.policies import RequestContext, resolve_requester
from services.fitness_service.policies import identity as identity_module
from sqlalchemy.exc import OperationalError


class _Result:
    def __init__(self, row):
        self._row = row

    def one_or_none(self):
        return self._row


class FlakySession:
    """Stands in for AsyncSession: fails ``failures`` times, then answers."""

    def __init__(self, row, failures=0):
        self.row = row
        self.failures = failures
        self.executed = 0
        self.rollbacks = 0

    async def execute(self, _stmt):
        self.executed += 1
        if self.failures:
            self.failures -= 1
            raise OperationalError("SELECT", {}, Exception("connection reset"))
        return _Result(self.row)

    async def rollback(self):
        self.rollbacks += 1


@pytest.fixture(autouse=True)
def fast_retry(monkeypatch):
    monkeypatch.setattr(
        identity_module,
        "lookup_retry_policy",
        lambda: RetryPolicy(max_attempts=3, base_delay=0.0),
    )


@pytest.mark.unit
def test_context_from_auth_user():
    user = AuthUser(sub="auth-123", role="authenticated")
    ctx = RequestContext.for_user(user)
    assert ctx.auth_user_id == "auth-123"
    assert not ctx.is_service_role
    assert not ctx.is_resolved


@pytest.mark.unit
def test_service_context():
    ctx = RequestContext.service()
    assert ctx.is_service_role
    assert ctx.auth_user_id is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_resolution_is_cached_for_the_request():
    profile_id = uuid.uuid4()
    db = FlakySession(SimpleNamespace(id=profile_id, is_child=False))
    ctx = RequestContext(auth_user_id="auth-1")

    first = await resolve_requester(db, ctx)
    second = await resolve_requester(db, ctx)

    assert first.profile_id == profile_id
    assert second is first
    assert db.executed == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_unknown_login_resolves_to_none():
    db = FlakySession(None)
    ctx = RequestContext(auth_user_id="nobody")

    assert await resolve_requester(db, ctx) is None
    assert ctx.is_resolved


@pytest.mark.asyncio
@pytest.mark.unit
async def test_transient_failures_are_retried():
    profile_id = uuid.uuid4()
    db = FlakySession(SimpleNamespace(id=profile_id, is_child=False), failures=2)
    ctx = RequestContext(auth_user_id="auth-1")

    identity = await resolve_requester(db, ctx)

    assert identity.profile_id == profile_id
    assert db.executed == 3
    assert db.rollbacks == 2


@pytest.mark.asyncio
@pytest.mark.unit
async def test_persistent_failure_propagates():
    db = FlakySession(None, failures=5)
    ctx = RequestContext(auth_user_id="auth-1")

    with pytest.raises(OperationalError):
        await resolve_requester(db, ctx)
    assert db.executed == 3
    assert not ctx.is_resolved
