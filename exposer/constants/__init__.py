"""Constants package for Route Exposer."""

from .roles import (
    ALL_CAPABILITIES,
    EDIT_POSTS,
    EDIT_TERMS,
    EDIT_USERS,
    MANAGE_OPTIONS,
    ROLE_CAPABILITIES,
    RoleName,
    edit_capability_for,
    get_role_capabilities,
)

__all__ = [
    "RoleName",
    "ROLE_CAPABILITIES",
    "ALL_CAPABILITIES",
    "MANAGE_OPTIONS",
    "EDIT_POSTS",
    "EDIT_USERS",
    "EDIT_TERMS",
    "get_role_capabilities",
    "edit_capability_for",
]
