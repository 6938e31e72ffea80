"""Roles, actions and the fixed role -> action table used for every access decision."""

from enum import Enum


class Role(str, Enum):
    USER = "USER"
    WRITER = "WRITER"
    ADMIN = "ADMIN"
    MODERATOR = "MODERATOR"
    SUPERADMIN = "SUPERADMIN"


class AccountStatus(str, Enum):
    ACTIVE = "ACTIVE"
    BANNED = "BANNED"


class Action(str, Enum):
    COMMENT_CREATE = "comment:create"
    COMMENT_READ_HIDDEN = "comment:read_hidden"
    COMMENT_READ_OWN_HIDDEN = "comment:read_own_hidden"
    COMMENT_UPDATE_OWN = "comment:update_own"
    COMMENT_UPDATE_ANY = "comment:update_any"
    COMMENT_DELETE_OWN = "comment:delete_own"
    COMMENT_DELETE_ANY = "comment:delete_any"
    COMMENT_MODERATE = "comment:moderate"
    COMMENT_VIEW_OTHERS_HISTORY = "comment:view_others_history"
    USER_MANAGE = "user:manage"
    USER_MANAGE_PRIVILEGED = "user:manage_privileged"


_BASE_ACTIONS = frozenset({Action.COMMENT_CREATE})

_MODERATOR_ACTIONS = _BASE_ACTIONS | {
    Action.COMMENT_READ_HIDDEN,
    Action.COMMENT_DELETE_ANY,
    Action.COMMENT_MODERATE,
    Action.COMMENT_VIEW_OTHERS_HISTORY,
}

# Nobody edits someone else's comment; COMMENT_UPDATE_ANY is intentionally granted to no role.
ROLE_PERMISSIONS: dict[Role, frozenset[Action]] = {
    Role.USER: _BASE_ACTIONS,
    Role.WRITER: _BASE_ACTIONS,
    Role.MODERATOR: frozenset(_MODERATOR_ACTIONS),
    Role.ADMIN: frozenset(_MODERATOR_ACTIONS | {Action.USER_MANAGE}),
    Role.SUPERADMIN: frozenset(
        _BASE_ACTIONS | {Action.USER_MANAGE, Action.USER_MANAGE_PRIVILEGED}
    ),
}

# Actions a resource owner holds on their own resource, whatever their role.
OWNER_PERMISSIONS: frozenset[Action] = frozenset(
    {
        Action.COMMENT_READ_OWN_HIDDEN,
        Action.COMMENT_UPDATE_OWN,
        Action.COMMENT_DELETE_OWN,
    }
)

# Roles whose assignment or removal needs USER_MANAGE_PRIVILEGED.
PRIVILEGED_ROLES = frozenset({Role.ADMIN, Role.SUPERADMIN})


def can(role: Role | None, action: Action, *, is_owner: bool = False) -> bool:
    """Return True if a caller with this role (and ownership) may perform the action."""
    if is_owner and action in OWNER_PERMISSIONS:
        return True
    if role is None:
        return False
    return action in ROLE_PERMISSIONS[role]


def roles_with(action: Action) -> frozenset[Role]:
    """All roles granted the action by the table (ownership not considered)."""
    return frozenset(r for r, actions in ROLE_PERMISSIONS.items() if action in actions)
