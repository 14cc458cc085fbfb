from services.fitness_service.policies.context import (  # noqa: F401
    Decision,
    Operation,
    RequestContext,
    RequesterIdentity,
)
from services.fitness_service.policies.evaluator import (  # noqa: F401
    authorize,
    decide,
    scoped_select,
    visible_clause,
)
from services.fitness_service.policies.identity import resolve_requester  # noqa: F401
from services.fitness_service.policies.lookups import (  # noqa: F401
    active_children_query,
    is_active_parent_of,
)
from services.fitness_service.policies.rules import (  # noqa: F401
    TablePolicy,
    get_policy,
    register_policy,
    registered_policies,
)

__all__ = [
    "Decision",
    "Operation",
    "RequestContext",
    "RequesterIdentity",
    "TablePolicy",
    "active_children_query",
    "authorize",
    "decide",
    "get_policy",
    "is_active_parent_of",
    "register_policy",
    "registered_policies",
    "resolve_requester",
    "scoped_select",
    "visible_clause",
]
