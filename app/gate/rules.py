"""Static route table: method + path pattern -> permissions required ("any of")."""

from dataclasses import dataclass

# Maps HTTP methods to the permission verb they require on a resource.
METHOD_VERBS = {"POST": "CREATE", "GET": "READ", "PUT": "UPDATE", "DELETE": "DELETE"}

# Path segment -> permission noun.
PROTECTED_RESOURCES = {"users": "USER", "roles": "ROLE", "permissions": "PERMISSION"}


@dataclass(frozen=True)
class AccessRule:
    """
    required empty means the route needs a valid identity and nothing more.

    Patterns are Ant-style: '*' matches one path segment, a trailing '**'
    matches zero or more segments.
    """

    method: str
    pattern: str
    required: frozenset[str]

    def matches(self, method: str, path: str) -> bool:
        return method == self.method and match_path(self.pattern, path)


def _segments(path: str) -> list[str]:
    return [s for s in path.split("/") if s]


def match_path(pattern: str, path: str) -> bool:
    pattern_parts = _segments(pattern)
    path_parts = _segments(path)
    for i, part in enumerate(pattern_parts):
        if part == "**":
            return True
        if i >= len(path_parts):
            return False
        if part != "*" and part != path_parts[i]:
            return False
    return len(pattern_parts) == len(path_parts)


class AccessRules:
    """Ordered rule list; the first match wins, unlisted routes are identity-only."""

    def __init__(self, rules: list[AccessRule], public_patterns: list[str]) -> None:
        self.rules = list(rules)
        self.public_patterns = list(public_patterns)

    def is_public(self, path: str) -> bool:
        return any(match_path(pattern, path) for pattern in self.public_patterns)

    def required_for(self, method: str, path: str) -> frozenset[str]:
        for rule in self.rules:
            if rule.matches(method, path):
                return rule.required
        return frozenset()


def default_access_rules(api_prefix: str) -> AccessRules:
    """Route table for the users, roles and permissions resources under api_prefix."""
    prefix = api_prefix.rstrip("/")
    rules = [
        # Own profile: any authenticated user.
        AccessRule("GET", f"{prefix}/users/me", frozenset()),
        # Removing a permission from a role edits the role, it does not delete it.
        AccessRule("DELETE", f"{prefix}/roles/*/permissions/*", frozenset({"UPDATE_ROLE"})),
    ]
    for segment, noun in PROTECTED_RESOURCES.items():
        for method, verb in METHOD_VERBS.items():
            if segment == "users":
                # Role and permission administrators also manage user accounts.
                required = frozenset(f"{verb}_{n}" for n in PROTECTED_RESOURCES.values())
            else:
                required = frozenset({f"{verb}_{noun}"})
            rules.append(AccessRule(method, f"{prefix}/{segment}/**", required))
    public = [
        "/",
        f"{prefix}/auth/**",
        f"{prefix}/health/**",
        "/docs/**",
        "/redoc",
        "/openapi.json",
    ]
    return AccessRules(rules, public)
