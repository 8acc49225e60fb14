"""Authorization policy: one role → permission table and a single decision function.

Every protected operation names exactly one Action. Which permissions satisfy
an action is declared once here, so routes never carry their own role lists.
Ownership is encoded by the caller picking DELETE_OWN_CONTENT or
DELETE_ANY_CONTENT, which keeps decide() a pure function of (role, action).
"""

from enum import Enum

from app.schemas.auth import Role, parse_role


class Permission(str, Enum):
    READ = "read"
    WRITE = "write"
    MODERATE = "moderate"
    DELETE = "delete"
    DELETE_OWN = "delete_own"
    REVIEW_QUEUE = "review_queue"


class Action(str, Enum):
    CREATE_CONTENT = "create_content"
    LIST_CONTENT = "list_content"
    LIST_PENDING = "list_pending"
    VALIDATE_CONTENT = "validate_content"
    DELETE_OWN_CONTENT = "delete_own_content"
    DELETE_ANY_CONTENT = "delete_any_content"


class Decision(str, Enum):
    ALLOW = "allow"
    DENY = "deny"


ROLE_PERMISSIONS: dict[Role, frozenset[Permission]] = {
    Role.ADMIN: frozenset(
        {Permission.READ, Permission.WRITE, Permission.DELETE, Permission.REVIEW_QUEUE}
    ),
    Role.MODERATOR: frozenset(
        {
            Permission.READ,
            Permission.WRITE,
            Permission.MODERATE,
            Permission.DELETE_OWN,
            Permission.REVIEW_QUEUE,
        }
    ),
    Role.USER: frozenset({Permission.READ, Permission.WRITE, Permission.DELETE_OWN}),
}

# Holding any one of the listed permissions is enough.
ACTION_REQUIREMENTS: dict[Action, frozenset[Permission]] = {
    Action.CREATE_CONTENT: frozenset({Permission.WRITE}),
    Action.LIST_CONTENT: frozenset({Permission.READ}),
    Action.LIST_PENDING: frozenset({Permission.MODERATE, Permission.REVIEW_QUEUE}),
    Action.VALIDATE_CONTENT: frozenset({Permission.MODERATE}),
    Action.DELETE_OWN_CONTENT: frozenset({Permission.DELETE_OWN, Permission.DELETE}),
    Action.DELETE_ANY_CONTENT: frozenset({Permission.DELETE}),
}


def permissions_for(role: Role | str) -> frozenset[Permission]:
    """Permissions granted to role; empty for anything that is not a known Role."""
    parsed = parse_role(role)
    if parsed is None:
        return frozenset()
    return ROLE_PERMISSIONS.get(parsed, frozenset())


def decide(role: Role | str, action: Action | str) -> Decision:
    """Allow iff role holds a permission that satisfies action. Unknown roles or actions are denied."""
    try:
        action = Action(action)
    except ValueError:
        return Decision.DENY
    required = ACTION_REQUIREMENTS.get(action)
    if not required:
        return Decision.DENY
    if permissions_for(role) & required:
        return Decision.ALLOW
    return Decision.DENY


def is_allowed(role: Role | str, action: Action | str) -> bool:
    return decide(role, action) is Decision.ALLOW


def delete_action_for(caller_username: str, author_username: str) -> Action:
    """Pick the delete action matching the caller's relationship to the post."""
    if caller_username == author_username:
        return Action.DELETE_OWN_CONTENT
    return Action.DELETE_ANY_CONTENT
