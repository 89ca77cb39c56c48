"""
Unit tests for the permission diff.
"""

from __future__ import annotations

from permaudit.inference.differ import diff_permissions, flatten_permission_names
from permaudit.models import (
    ActivityRecord,
    OptimalPermissionSet,
    ScopeType,
    SelectedPermission,
)


def _optimal(*names: str, unmatched=()) -> OptimalPermissionSet:
    return OptimalPermissionSet(
        selected=tuple(
            SelectedPermission(n, ScopeType.APPLICATION, True, 1) for n in names
        ),
        unmatched=tuple(unmatched),
        total_activities=len(names) + len(unmatched),
        matched_activities=len(names),
    )


class TestFlattenPermissionNames:
    """Tests for flatten_permission_names()."""

    def test_drops_null_and_blank(self):
        """Test None and blank names are ignored."""
        assert flatten_permission_names(["Mail.Send", None, "", "  "]) == {"Mail.Send"}

    def test_deduplicates(self):
        """Test duplicate names collapse."""
        assert flatten_permission_names(["Mail.Send", "Mail.Send ", "User.Read.All"]) == {
            "Mail.Send",
            "User.Read.All",
        }


class TestDiffPermissions:
    """Tests for diff_permissions()."""

    def test_excess_and_required(self):
        """Test set differences in both directions."""
        result = diff_permissions(
            ["Directory.Read.All", "Mail.Send"],
            _optimal("User.Read.All", "Mail.Send"),
        )

        assert result.excess_permissions == {"Directory.Read.All"}
        assert result.required_permissions == {"User.Read.All"}
        assert result.optimal_permissions == {"User.Read.All", "Mail.Send"}
        assert not result.is_least_privileged

    def test_exact_match(self):
        """Test an application holding exactly the optimal set."""
        result = diff_permissions(["User.Read.All"], _optimal("User.Read.All"))

        assert result.excess_permissions == frozenset()
        assert result.required_permissions == frozenset()
        assert result.is_least_privileged

    def test_no_activity(self):
        """Test every current permission is excess without activity."""
        result = diff_permissions(["Mail.Send"], _optimal())

        assert result.optimal_permissions == frozenset()
        assert result.excess_permissions == {"Mail.Send"}
        assert result.matched_all_activity

    def test_unmatched_activity_reported(self):
        """Test matched_all_activity is false when activities stay unmatched."""
        unmatched = [ActivityRecord("GET", "https://graph.microsoft.com/v1.0/devices")]
        result = diff_permissions([], _optimal(unmatched=unmatched))

        assert not result.matched_all_activity

    def test_compares_names_only(self):
        """Test the same name under another scope type is not excess."""
        optimal = OptimalPermissionSet(
            selected=(SelectedPermission("User.Read.All", ScopeType.DELEGATED, False, 1),),
            total_activities=1,
            matched_activities=1,
        )
        result = diff_permissions(["User.Read.All"], optimal)

        assert result.excess_permissions == frozenset()

    def test_partition_of_current(self):
        """Test current permissions split into kept and excess."""
        current = ["A", "B", "C", None]
        result = diff_permissions(current, _optimal("B", "D"))

        kept = result.current_permissions & result.optimal_permissions
        assert kept | result.excess_permissions == result.current_permissions
        assert not kept & result.excess_permissions
        assert result.required_permissions == {"D"}

    def test_to_dict_sorted(self):
        """Test dictionary output uses sorted lists."""
        result = diff_permissions(["Z", "A"], _optimal())
        assert result.to_dict()["excess_permissions"] == ["A", "Z"]
