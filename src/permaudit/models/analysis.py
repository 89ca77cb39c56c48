"""
Analysis result models for Graph Permission Audit.

These are the intermediate and final products of the inference engine:
per-activity catalog matches, permission coverage, the greedy optimal
permission set, and the diff against currently assigned permissions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Tuple

from permaudit.models.activity import ActivityRecord, Generation
from permaudit.models.permission import PermissionDescriptor, ScopeType

# (METHOD, generation value, tokenized path)
ActivityId = Tuple[str, str, str]


def format_activity_id(activity_id: ActivityId) -> str:
    """Render an activity identifier as "GET v1 /users/{id}"."""
    return " ".join(activity_id)


@dataclass
class ActivityMatch:
    """
    Result of matching one activity against the catalog.

    Attributes:
        activity: The input activity
        generation: Generation inferred from the URI
        tokenized_path: Tokenized path below the API root, None if the URI
            could not be canonicalized
        matched_endpoint: Catalog template that matched, if any
        candidate_permissions: Least-privilege application permissions
        error: Canonicalization error message, if the URI was rejected
    """

    activity: ActivityRecord
    generation: Generation = Generation.UNKNOWN
    tokenized_path: str | None = None
    matched_endpoint: str | None = None
    candidate_permissions: list[PermissionDescriptor] = field(default_factory=list)
    error: str | None = None

    @property
    def is_matched(self) -> bool:
        """An activity counts as matched only when some permission can cover it."""
        return self.matched_endpoint is not None and bool(self.candidate_permissions)

    @property
    def activity_id(self) -> ActivityId:
        """Stable identifier used for coverage accounting."""
        return (
            self.activity.method,
            self.generation.value,
            self.tokenized_path if self.tokenized_path is not None else self.activity.uri,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "activity": self.activity.to_dict(),
            "generation": self.generation.value,
            "tokenized_path": self.tokenized_path,
            "matched_endpoint": self.matched_endpoint,
            "candidate_permissions": [p.to_dict() for p in self.candidate_permissions],
            "is_matched": self.is_matched,
            "error": self.error,
        }


@dataclass
class CoverageEntry:
    """
    Activities a single permission would authorize.

    Attributes:
        permission: Permission name
        scope_type: Scope type of the permission
        is_least_privilege: Catalog least-privilege flag
        covered_activity_ids: Activities the permission covers
    """

    permission: str
    scope_type: ScopeType
    is_least_privilege: bool = False
    covered_activity_ids: set[ActivityId] = field(default_factory=set)

    @property
    def key(self) -> tuple[str, ScopeType]:
        """Aggregation key."""
        return (self.permission, self.scope_type)

    @property
    def coverage(self) -> int:
        """Number of activities covered."""
        return len(self.covered_activity_ids)


@dataclass(frozen=True)
class SelectedPermission:
    """
    A permission chosen by the greedy set cover.

    Attributes:
        permission: Permission name
        scope_type: Scope type of the permission
        is_least_privilege: Catalog least-privilege flag
        activities_covered: Activities newly covered when selected
        covered_activity_ids: The newly covered activity identifiers
    """

    permission: str
    scope_type: ScopeType
    is_least_privilege: bool
    activities_covered: int
    covered_activity_ids: frozenset[ActivityId] = frozenset()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "permission": self.permission,
            "scope_type": self.scope_type.value,
            "is_least_privilege": self.is_least_privilege,
            "activities_covered": self.activities_covered,
            "covered_activities": sorted(
                format_activity_id(a) for a in self.covered_activity_ids
            ),
        }


@dataclass(frozen=True)
class OptimalPermissionSet:
    """
    Minimal covering permission set for one application.

    Attributes:
        selected: Permissions in selection order
        unmatched: Activities the catalog could not explain
        total_activities: Number of input activities
        matched_activities: Number of matched activities
    """

    selected: tuple[SelectedPermission, ...] = ()
    unmatched: tuple[ActivityRecord, ...] = ()
    total_activities: int = 0
    matched_activities: int = 0

    @property
    def permission_names(self) -> list[str]:
        """Selected permission names, deduplicated, in selection order."""
        return list(dict.fromkeys(s.permission for s in self.selected))

    @property
    def covered_activity_ids(self) -> set[ActivityId]:
        """Union of activities covered by the selected permissions."""
        covered: set[ActivityId] = set()
        for selection in self.selected:
            covered |= selection.covered_activity_ids
        return covered

    @property
    def match_percentage(self) -> float:
        """Percentage of activities matched to the catalog."""
        if self.total_activities == 0:
            return 100.0
        return (self.matched_activities / self.total_activities) * 100

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "selected": [s.to_dict() for s in self.selected],
            "unmatched": [a.to_dict() for a in self.unmatched],
            "total_activities": self.total_activities,
            "matched_activities": self.matched_activities,
            "match_percentage": round(self.match_percentage, 2),
        }


@dataclass(frozen=True)
class PermissionAnalysis:
    """
    Diff of optimal versus currently assigned permissions.

    Attributes:
        current_permissions: Permission names currently assigned
        optimal_permissions: Permission names selected by set cover
        excess_permissions: Held but not needed (current - optimal)
        required_permissions: Needed but not held (optimal - current)
        matched_all_activity: True when no activity was left unmatched
    """

    current_permissions: frozenset[str] = frozenset()
    optimal_permissions: frozenset[str] = frozenset()
    excess_permissions: frozenset[str] = frozenset()
    required_permissions: frozenset[str] = frozenset()
    matched_all_activity: bool = True

    @property
    def is_least_privileged(self) -> bool:
        """Whether the current assignment holds nothing beyond the optimal set."""
        return not self.excess_permissions

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "current_permissions": sorted(self.current_permissions),
            "optimal_permissions": sorted(self.optimal_permissions),
            "excess_permissions": sorted(self.excess_permissions),
            "required_permissions": sorted(self.required_permissions),
            "matched_all_activity": self.matched_all_activity,
        }


@dataclass
class ApplicationAnalysis:
    """
    Complete analysis output for one application.

    Attributes:
        app_id: Application (client) ID
        display_name: Application name
        principal_id: Service principal object ID
        optimal_set: Greedy set cover result
        analysis: Diff against current permissions
        matches: Per-activity match details
    """

    app_id: str
    display_name: str
    principal_id: str
    optimal_set: OptimalPermissionSet
    analysis: PermissionAnalysis
    matches: list[ActivityMatch] = field(default_factory=list)

    @property
    def unmatched_activities(self) -> list[ActivityRecord]:
        """Activities with no covering permission."""
        return list(self.optimal_set.unmatched)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the shape consumed by report renderers."""
        return {
            "app_id": self.app_id,
            "display_name": self.display_name,
            "principal_id": self.principal_id,
            "optimal_permissions": sorted(self.analysis.optimal_permissions),
            "current_permissions": sorted(self.analysis.current_permissions),
            "excess_permissions": sorted(self.analysis.excess_permissions),
            "required_permissions": sorted(self.analysis.required_permissions),
            "unmatched_activities": [a.to_dict() for a in self.unmatched_activities],
            "matched_all_activity": self.analysis.matched_all_activity,
            "optimal_set": self.optimal_set.to_dict(),
        }
