"""Per-request authentication and authorization middleware."""

from app.gate.cache import PrincipalCache
from app.gate.middleware import AuthorizationGate, GateContext, Rejection, RequestState
from app.gate.rules import AccessRule, AccessRules, default_access_rules

__all__ = [
    "AccessRule",
    "AccessRules",
    "AuthorizationGate",
    "GateContext",
    "PrincipalCache",
    "Rejection",
    "RequestState",
    "default_access_rules",
]
