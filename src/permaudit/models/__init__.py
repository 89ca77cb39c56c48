"""
Data models for Graph Permission Audit.

This package provides the core data models used by the inference engine:

- ActivityRecord / ApplicationActivity: observed API activity per application
- CanonicalUri: de-aliased activity URI with its API generation
- PermissionDescriptor / CatalogEntry: typed permission catalog records
- ActivityMatch, OptimalPermissionSet, PermissionAnalysis: analysis results
"""

from permaudit.models.activity import (
    ActivityRecord,
    ApplicationActivity,
    CanonicalUri,
    Generation,
    ID_PLACEHOLDER,
    VERSION_LABELS,
)
from permaudit.models.permission import (
    CatalogEntry,
    PermissionDescriptor,
    ScopeType,
)
from permaudit.models.analysis import (
    ActivityId,
    ActivityMatch,
    ApplicationAnalysis,
    CoverageEntry,
    OptimalPermissionSet,
    PermissionAnalysis,
    SelectedPermission,
    format_activity_id,
)

__all__ = [
    # Activity module
    "ActivityRecord",
    "ApplicationActivity",
    "CanonicalUri",
    "Generation",
    "ID_PLACEHOLDER",
    "VERSION_LABELS",
    # Permission module
    "CatalogEntry",
    "PermissionDescriptor",
    "ScopeType",
    # Analysis module
    "ActivityId",
    "ActivityMatch",
    "ApplicationAnalysis",
    "CoverageEntry",
    "OptimalPermissionSet",
    "PermissionAnalysis",
    "SelectedPermission",
    "format_activity_id",
]
