"""Request-scoped authorization context.

A ``RequestContext`` is created once per request from the caller's JWT and
passed explicitly to every evaluator and service call. Nothing about the
caller lives in module or process state.
"""

import enum
import uuid
from dataclasses import dataclass, field
from typing import Optional

from libs.auth.models import AuthUser


class Operation(str, enum.Enum):
    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class Decision(str, enum.Enum):
    ALLOW = "allow"
    DENY = "deny"


@dataclass(frozen=True)
class RequesterIdentity:
    """The profile behind a login, as resolved by the privileged lookup."""

    profile_id: uuid.UUID
    is_child: bool


@dataclass
class RequestContext:
    auth_user_id: Optional[str]
    role: str = "authenticated"
    _identity: Optional[RequesterIdentity] = field(default=None, repr=False)
    _resolved: bool = field(default=False, repr=False)

    @classmethod
    def for_user(cls, user: AuthUser) -> "RequestContext":
        return cls(auth_user_id=user.user_id, role=user.role)

    @classmethod
    def service(cls) -> "RequestContext":
        """Context for internal callers; bypasses row policies."""
        return cls(auth_user_id=None, role="service_role")

    @property
    def is_service_role(self) -> bool:
        return self.role == "service_role"

    @property
    def is_resolved(self) -> bool:
        return self._resolved

    @property
    def identity(self) -> Optional[RequesterIdentity]:
        return self._identity

    def remember(self, identity: Optional[RequesterIdentity]) -> None:
        """Cache the resolved identity for the rest of this request."""
        self._identity = identity
        self._resolved = True
