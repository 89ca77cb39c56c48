"""
Activity data models for Graph Permission Audit.

This module defines the observed API activity handed to the inference
engine and the canonical form an activity URI is reduced to before it
is compared with the permission catalog.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Generation(Enum):
    """API generation an endpoint belongs to."""

    V1 = "v1"
    BETA = "beta"
    UNKNOWN = "unknown"

    @property
    def version_label(self) -> str:
        """Path segment that identifies this generation under the API host."""
        labels = {
            Generation.V1: "v1.0",
            Generation.BETA: "beta",
            Generation.UNKNOWN: "",
        }
        return labels[self]

    @classmethod
    def from_label(cls, label: str) -> Generation:
        """
        Resolve a generation from a version label or generation value.

        Args:
            label: "v1.0", "v1", "beta" (case-insensitive)

        Returns:
            Matching Generation, UNKNOWN if the label is not recognized
        """
        normalized = (label or "").strip().lower()
        if normalized in ("v1.0", "v1"):
            return cls.V1
        if normalized == "beta":
            return cls.BETA
        return cls.UNKNOWN


# Placeholder substituted for identifier-like path segments
ID_PLACEHOLDER = "{id}"

# Segment labels that are never treated as identifiers
VERSION_LABELS = frozenset(
    g.version_label for g in Generation if g is not Generation.UNKNOWN
)


@dataclass(frozen=True)
class ActivityRecord:
    """
    One observed (HTTP method, URI) pair for an application.

    Attributes:
        method: HTTP method, stored upper-case
        uri: Raw request URI as reported by telemetry
    """

    method: str
    uri: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", (self.method or "").strip().upper())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"method": self.method, "uri": self.uri}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ActivityRecord:
        """Create from dictionary."""
        return cls(method=data["method"], uri=data["uri"])


@dataclass(frozen=True)
class CanonicalUri:
    """
    A de-aliased, fully qualified activity URI.

    Attributes:
        absolute_uri: Fully qualified URI without query or fragment
        path: Path below the API root (e.g. "/users/{id}"), empty when
            the generation is unknown
        generation: API generation inferred from the URI prefix
    """

    absolute_uri: str
    path: str
    generation: Generation

    @property
    def is_known_generation(self) -> bool:
        """Whether the URI belongs to one of the catalogued generations."""
        return self.generation is not Generation.UNKNOWN

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "absolute_uri": self.absolute_uri,
            "path": self.path,
            "generation": self.generation.value,
        }


@dataclass
class ApplicationActivity:
    """
    Everything the engine needs to analyze a single application.

    Attributes:
        app_id: Application (client) ID, required
        display_name: Human-readable application name
        principal_id: Service principal object ID
        activities: Unique activity records observed for the application
        current_permissions: Permission names currently assigned; may
            contain duplicates or None values from the directory source
    """

    app_id: str
    display_name: str = ""
    principal_id: str = ""
    activities: list[ActivityRecord] = field(default_factory=list)
    current_permissions: list[str | None] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "app_id": self.app_id,
            "display_name": self.display_name,
            "principal_id": self.principal_id,
            "activities": [a.to_dict() for a in self.activities],
            "current_permissions": list(self.current_permissions),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ApplicationActivity:
        """Create from dictionary."""
        return cls(
            app_id=data.get("app_id", ""),
            display_name=data.get("display_name", ""),
            principal_id=data.get("principal_id", ""),
            activities=[
                ActivityRecord.from_dict(a) for a in data.get("activities", [])
            ],
            current_permissions=list(data.get("current_permissions", [])),
        )
