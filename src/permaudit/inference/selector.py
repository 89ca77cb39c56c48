"""
Least-privilege permission selection.

Narrows the permissions a catalog entry declares for a method down to
the candidates an application should be granted. Selection is an
ordered chain of filters; the first stage producing a non-empty list
wins.
"""

from __future__ import annotations

from typing import Callable, Iterable, Sequence

from permaudit.models import PermissionDescriptor, ScopeType

PermissionFilter = Callable[[PermissionDescriptor], bool]


def is_application_scope(permission: PermissionDescriptor) -> bool:
    """Application permissions only; delegated ones are never recommended."""
    return permission.scope_type is ScopeType.APPLICATION


def is_least_privilege(permission: PermissionDescriptor) -> bool:
    """Permissions the catalog flags as least privileged."""
    return permission.scope_type is ScopeType.APPLICATION and permission.is_least_privilege


# Stages tried in order
LEAST_PRIVILEGE_CHAIN: tuple[PermissionFilter, ...] = (
    is_least_privilege,
    is_application_scope,
)


def first_non_empty(
    permissions: Sequence[PermissionDescriptor],
    stages: Iterable[PermissionFilter],
) -> list[PermissionDescriptor]:
    """
    Apply filter stages in order and return the first non-empty result.

    Args:
        permissions: Permissions to filter
        stages: Filters in precedence order

    Returns:
        Permissions kept by the first productive stage, or an empty list
    """
    for stage in stages:
        selected = [p for p in permissions if stage(p)]
        if selected:
            return selected
    return []


def select_least_privilege(
    permissions: Sequence[PermissionDescriptor],
) -> list[PermissionDescriptor]:
    """
    Select candidate permissions for one matched activity.

    Application-scope permissions flagged least-privilege are preferred;
    when none is flagged, every application-scope permission is a
    candidate.

    Args:
        permissions: Permissions declared for the activity's method

    Returns:
        Candidate permissions in catalog order
    """
    return first_non_empty(permissions, LEAST_PRIVILEGE_CHAIN)
