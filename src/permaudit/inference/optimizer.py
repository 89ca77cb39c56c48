"""
Optimal permission set construction.

Aggregates the candidate permissions of every matched activity of one
application and picks a small covering set with the greedy set-cover
heuristic. Minimum set cover is NP-hard; the greedy result is an
approximation, but a reproducible one: candidates are ordered by
descending coverage, then permission name, then scope type.
"""

from __future__ import annotations

import logging
from typing import Iterable

from permaudit.models import (
    ActivityId,
    ActivityMatch,
    CoverageEntry,
    OptimalPermissionSet,
    SelectedPermission,
)

logger = logging.getLogger(__name__)


def build_coverage(matches: Iterable[ActivityMatch]) -> list[CoverageEntry]:
    """
    Build one coverage entry per (permission, scope type).

    Args:
        matches: Matched activities with their candidate permissions

    Returns:
        Coverage entries in first-seen order
    """
    coverage: dict[tuple, CoverageEntry] = {}

    for match in matches:
        if not match.is_matched:
            continue
        activity_id = match.activity_id
        for permission in match.candidate_permissions:
            entry = coverage.get(permission.key)
            if entry is None:
                entry = CoverageEntry(
                    permission=permission.name,
                    scope_type=permission.scope_type,
                    is_least_privilege=permission.is_least_privilege,
                )
                coverage[permission.key] = entry
            elif permission.is_least_privilege:
                entry.is_least_privilege = True
            entry.covered_activity_ids.add(activity_id)

    return list(coverage.values())


def order_coverage(entries: Iterable[CoverageEntry]) -> list[CoverageEntry]:
    """Order candidates for greedy selection."""
    return sorted(
        entries,
        key=lambda e: (-e.coverage, e.permission, e.scope_type.value),
    )


def select_cover(
    entries: Iterable[CoverageEntry],
    targets: set[ActivityId],
) -> list[SelectedPermission]:
    """
    Greedily select permissions until every target activity is covered.

    Entries are visited once in coverage order; an entry is kept when it
    covers at least one activity not covered yet.

    Args:
        entries: Coverage entries
        targets: Activity identifiers to cover

    Returns:
        Selected permissions in selection order
    """
    uncovered = set(targets)
    selected: list[SelectedPermission] = []

    for entry in order_coverage(entries):
        if not uncovered:
            break
        newly_covered = entry.covered_activity_ids & uncovered
        if not newly_covered:
            continue
        selected.append(
            SelectedPermission(
                permission=entry.permission,
                scope_type=entry.scope_type,
                is_least_privilege=entry.is_least_privilege,
                activities_covered=len(newly_covered),
                covered_activity_ids=frozenset(newly_covered),
            )
        )
        uncovered -= newly_covered

    if uncovered:
        logger.warning(f"{len(uncovered)} matched activities could not be covered")

    return selected


def build_optimal_set(matches: list[ActivityMatch]) -> OptimalPermissionSet:
    """
    Compute the minimal covering permission set for one application.

    Args:
        matches: One ActivityMatch per input activity

    Returns:
        OptimalPermissionSet with the selected permissions, the
        unmatched activities and matched/total counts
    """
    matched = [m for m in matches if m.is_matched]
    unmatched = tuple(m.activity for m in matches if not m.is_matched)

    if not matched:
        return OptimalPermissionSet(
            selected=(),
            unmatched=unmatched,
            total_activities=len(matches),
            matched_activities=0,
        )

    targets = {m.activity_id for m in matched}
    selected = select_cover(build_coverage(matched), targets)

    logger.debug(
        f"Selected {len(selected)} permissions covering {len(targets)} "
        f"activity shapes ({len(unmatched)} unmatched)"
    )

    return OptimalPermissionSet(
        selected=tuple(selected),
        unmatched=unmatched,
        total_activities=len(matches),
        matched_activities=len(matched),
    )
