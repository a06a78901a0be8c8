"""
Role and Capability Constants

Roles carried in caller tokens and the capability set each one grants.
Capability names follow the WordPress convention (``manage_options``,
``edit_posts``, ...), since proxy targets check them by name.
"""

from enum import Enum


class RoleName(str, Enum):
    """Enumeration of caller roles."""

    SUBSCRIBER = "subscriber"
    AUTHOR = "author"
    EDITOR = "editor"
    ADMINISTRATOR = "administrator"


# Capabilities
MANAGE_OPTIONS = "manage_options"
EDIT_POSTS = "edit_posts"
EDIT_USERS = "edit_users"
EDIT_TERMS = "edit_terms"

ALL_CAPABILITIES = frozenset({MANAGE_OPTIONS, EDIT_POSTS, EDIT_USERS, EDIT_TERMS})

# Role capabilities with inheritance flattened
ROLE_CAPABILITIES: dict[RoleName, frozenset[str]] = {
    RoleName.SUBSCRIBER: frozenset(),
    RoleName.AUTHOR: frozenset({EDIT_POSTS}),
    RoleName.EDITOR: frozenset({EDIT_POSTS, EDIT_TERMS}),
    RoleName.ADMINISTRATOR: ALL_CAPABILITIES,
}


def get_role_capabilities(role: str | None) -> frozenset[str]:
    """
    Return the capabilities granted to a role.

    Unknown or missing roles grant nothing.
    """
    if not role:
        return frozenset()
    try:
        return ROLE_CAPABILITIES[RoleName(role)]
    except ValueError:
        return frozenset()


def edit_capability_for(object_type: str) -> str:
    """Capability required to change meta of an object type (``post`` -> ``edit_posts``)."""
    return f"edit_{object_type}s"
