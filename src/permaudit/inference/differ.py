"""
Permission diff between current and optimal assignments.
"""

from __future__ import annotations

from typing import Iterable

from permaudit.models import OptimalPermissionSet, PermissionAnalysis


def flatten_permission_names(names: Iterable[str | None]) -> frozenset[str]:
    """Drop None and blank values and deduplicate permission names."""
    return frozenset(n.strip() for n in names if n and n.strip())


def diff_permissions(
    current_permissions: Iterable[str | None],
    optimal_set: OptimalPermissionSet,
) -> PermissionAnalysis:
    """
    Compare current permissions with the optimal set, by name only.

    Args:
        current_permissions: Permission names currently assigned
        optimal_set: Result of the optimal set builder

    Returns:
        PermissionAnalysis with excess (current - optimal) and
        required (optimal - current) permissions
    """
    current = flatten_permission_names(current_permissions)
    optimal = flatten_permission_names(optimal_set.permission_names)

    return PermissionAnalysis(
        current_permissions=current,
        optimal_permissions=optimal,
        excess_permissions=current - optimal,
        required_permissions=optimal - current,
        matched_all_activity=not optimal_set.unmatched,
    )
