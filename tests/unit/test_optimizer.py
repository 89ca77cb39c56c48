"""
Unit tests for the greedy optimal permission set.
"""

from __future__ import annotations

import pytest

from permaudit.inference.optimizer import (
    build_coverage,
    build_optimal_set,
    order_coverage,
    select_cover,
)
from permaudit.models import (
    ActivityMatch,
    ActivityRecord,
    CoverageEntry,
    Generation,
    PermissionDescriptor,
    ScopeType,
)

GRAPH = "https://graph.microsoft.com"


def _app(name: str, least: bool = False) -> PermissionDescriptor:
    return PermissionDescriptor(name, ScopeType.APPLICATION, least)


def _match(method: str, path: str, candidates, endpoint: str | None = "template") -> ActivityMatch:
    return ActivityMatch(
        activity=ActivityRecord(method, f"{GRAPH}/v1.0{path}"),
        generation=Generation.V1,
        tokenized_path=path,
        matched_endpoint=endpoint,
        candidate_permissions=list(candidates),
    )


class TestBuildCoverage:
    """Tests for coverage aggregation."""

    def test_aggregates_by_permission(self):
        """Test one entry per permission across activities."""
        matches = [
            _match("GET", "/users", [_app("User.Read.All", True)]),
            _match("GET", "/users/{id}", [_app("User.Read.All", True)]),
            _match("POST", "/users/{id}/sendMail", [_app("Mail.Send", True)]),
        ]
        coverage = {e.permission: e for e in build_coverage(matches)}

        assert coverage["User.Read.All"].coverage == 2
        assert coverage["Mail.Send"].coverage == 1

    def test_duplicate_activity_counted_once(self):
        """Test repeated activities share one activity identifier."""
        matches = [
            _match("GET", "/users/{id}", [_app("User.Read.All", True)]),
            _match("GET", "/users/{id}", [_app("User.Read.All", True)]),
        ]
        assert build_coverage(matches)[0].coverage == 1

    def test_least_privilege_flag_upgraded(self):
        """Test a permission flagged anywhere is flagged in aggregate."""
        matches = [
            _match("GET", "/groups", [_app("Group.Read.All")]),
            _match("GET", "/groups/{id}", [_app("Group.Read.All", True)]),
        ]
        assert build_coverage(matches)[0].is_least_privilege

    def test_unmatched_ignored(self):
        """Test unmatched activities contribute nothing."""
        matches = [_match("GET", "/devices", [_app("Device.Read.All")], endpoint=None)]
        assert build_coverage(matches) == []


class TestOrderCoverage:
    """Tests for candidate ordering."""

    def test_coverage_then_name(self):
        """Test higher coverage first and names break ties."""
        low = CoverageEntry("A.Read", ScopeType.APPLICATION, covered_activity_ids={("GET", "v1", "/a")})
        zed = CoverageEntry(
            "Z.Read",
            ScopeType.APPLICATION,
            covered_activity_ids={("GET", "v1", "/a"), ("GET", "v1", "/b")},
        )
        mid = CoverageEntry(
            "M.Read",
            ScopeType.APPLICATION,
            covered_activity_ids={("GET", "v1", "/a"), ("GET", "v1", "/b")},
        )
        ordered = order_coverage([low, zed, mid])
        assert [e.permission for e in ordered] == ["M.Read", "Z.Read", "A.Read"]

    def test_scope_breaks_name_tie(self):
        """Test scope type orders entries with the same name and coverage."""
        ids = {("GET", "v1", "/a")}
        delegated = CoverageEntry("X", ScopeType.DELEGATED, covered_activity_ids=set(ids))
        application = CoverageEntry("X", ScopeType.APPLICATION, covered_activity_ids=set(ids))
        ordered = order_coverage([delegated, application])
        assert [e.scope_type for e in ordered] == [ScopeType.APPLICATION, ScopeType.DELEGATED]


class TestSelectCover:
    """Tests for the greedy selection."""

    def test_skips_redundant_permissions(self):
        """Test permissions adding no new coverage are not selected."""
        a, b = ("GET", "v1", "/a"), ("GET", "v1", "/b")
        entries = [
            CoverageEntry("Wide", ScopeType.APPLICATION, covered_activity_ids={a, b}),
            CoverageEntry("Narrow", ScopeType.APPLICATION, covered_activity_ids={a}),
        ]
        selected = select_cover(entries, {a, b})

        assert [s.permission for s in selected] == ["Wide"]
        assert selected[0].activities_covered == 2
        assert selected[0].covered_activity_ids == frozenset({a, b})

    def test_counts_only_new_coverage(self):
        """Test activities_covered counts only newly covered activities."""
        a, b, c = ("GET", "v1", "/a"), ("GET", "v1", "/b"), ("GET", "v1", "/c")
        entries = [
            CoverageEntry("First", ScopeType.APPLICATION, covered_activity_ids={a, b}),
            CoverageEntry("Second", ScopeType.APPLICATION, covered_activity_ids={b, c}),
        ]
        selected = select_cover(entries, {a, b, c})

        assert [(s.permission, s.activities_covered) for s in selected] == [
            ("First", 2),
            ("Second", 1),
        ]

    def test_empty_targets(self):
        """Test nothing is selected when there is nothing to cover."""
        entries = [CoverageEntry("A", ScopeType.APPLICATION, covered_activity_ids={("GET", "v1", "/a")})]
        assert select_cover(entries, set()) == []


class TestBuildOptimalSet:
    """Tests for build_optimal_set()."""

    def test_tie_break_by_name(self):
        """Test equally good permissions are chosen alphabetically."""
        matches = [
            _match("GET", "/a", [_app("Zeta.Read"), _app("Alpha.Read")]),
            _match("GET", "/b", [_app("Zeta.Read"), _app("Alpha.Read")]),
        ]
        result = build_optimal_set(matches)

        assert result.permission_names == ["Alpha.Read"]
        assert result.selected[0].activities_covered == 2

    def test_wider_permission_wins(self):
        """Test a permission covering more activities is chosen first."""
        matches = [
            _match("GET", "/groups", [_app("Group.Read.All"), _app("Directory.Read.All")]),
            _match("GET", "/groups/{id}/members", [_app("GroupMember.Read.All", True)]),
            _match("GET", "/users", [_app("Directory.Read.All")]),
        ]
        result = build_optimal_set(matches)

        assert result.permission_names == ["Directory.Read.All", "GroupMember.Read.All"]

    def test_covers_every_matched_activity(self):
        """Test the selected permissions cover exactly the matched activities."""
        matches = [
            _match("GET", "/users", [_app("User.Read.All", True)]),
            _match("GET", "/users/{id}/messages", [_app("Mail.ReadBasic.All", True), _app("Mail.Read", True)]),
            _match("POST", "/users/{id}/sendMail", [_app("Mail.Send", True)]),
            _match("GET", "/devices", [], endpoint=None),
        ]
        result = build_optimal_set(matches)

        assert result.covered_activity_ids == {m.activity_id for m in matches if m.is_matched}
        assert result.matched_activities == 3
        assert result.total_activities == 4
        assert [a.uri for a in result.unmatched] == [f"{GRAPH}/v1.0/devices"]

    def test_every_selection_adds_coverage(self):
        """Test no selected permission is redundant at selection time."""
        matches = [
            _match("GET", "/a", [_app("P1"), _app("P2")]),
            _match("GET", "/b", [_app("P2"), _app("P3")]),
            _match("GET", "/c", [_app("P3")]),
        ]
        result = build_optimal_set(matches)

        assert all(s.activities_covered >= 1 for s in result.selected)
        assert sum(s.activities_covered for s in result.selected) == 3

    def test_nothing_matched(self):
        """Test an application with no matched activity gets an empty set."""
        matches = [_match("GET", "/devices", [], endpoint=None)]
        result = build_optimal_set(matches)

        assert result.selected == ()
        assert result.matched_activities == 0
        assert result.match_percentage == 0.0

    def test_no_activity(self):
        """Test an empty activity list yields an empty, fully matched set."""
        result = build_optimal_set([])

        assert result.selected == ()
        assert result.unmatched == ()
        assert result.match_percentage == pytest.approx(100.0)

    def test_deterministic(self):
        """Test the result does not depend on activity order."""
        matches = [
            _match("GET", "/a", [_app("B.Read"), _app("A.Read")]),
            _match("GET", "/b", [_app("C.Read")]),
            _match("GET", "/c", [_app("A.Read"), _app("C.Read")]),
        ]
        forward = build_optimal_set(matches)
        backward = build_optimal_set(list(reversed(matches)))

        assert forward.permission_names == backward.permission_names
