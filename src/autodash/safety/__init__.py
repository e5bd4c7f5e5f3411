"""Access-control checks applied to generated queries."""

from autodash.safety.permissions import (
    PermissionSet,
    PermissionVerdict,
    check_query_permissions,
    has_full_permission,
    query_permissions,
)

__all__ = [
    "PermissionSet",
    "PermissionVerdict",
    "check_query_permissions",
    "has_full_permission",
    "query_permissions",
]
