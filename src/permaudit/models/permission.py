"""
Permission catalog data models for Graph Permission Audit.

The catalog maps Graph endpoint templates and HTTP methods to the
permissions that authorize them. Records are parsed into strongly
typed descriptors at load time so malformed data fails fast.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from permaudit.models.activity import Generation


class ScopeType(Enum):
    """Consent context a permission applies to."""

    APPLICATION = "Application"
    DELEGATED = "Delegated"

    @classmethod
    def parse(cls, value: str) -> ScopeType:
        """
        Parse a catalog scope type.

        The permissions service reports delegated scopes as
        "DelegatedWork" or "DelegatedPersonal"; both collapse to DELEGATED.

        Raises:
            ValueError: If the value is not a recognized scope type
        """
        if not isinstance(value, str):
            raise ValueError(f"Scope type must be a string, got {value!r}")
        normalized = value.strip().lower()
        if normalized == "application":
            return cls.APPLICATION
        if normalized.startswith("delegated"):
            return cls.DELEGATED
        raise ValueError(f"Unknown scope type: {value!r}")


@dataclass(frozen=True)
class PermissionDescriptor:
    """
    A permission offered by the catalog for one endpoint and method.

    Attributes:
        name: Permission name (e.g. "User.Read.All")
        scope_type: Application or Delegated
        is_least_privilege: Catalog flag marking the narrowest option
        extra: Remaining catalog metadata (isAdmin, consentDisplayName...)
    """

    name: str
    scope_type: ScopeType
    is_least_privilege: bool = False
    extra: Mapping[str, Any] = field(
        default_factory=dict, compare=False, hash=False
    )

    @property
    def key(self) -> tuple[str, ScopeType]:
        """Identity of the permission for coverage aggregation."""
        return (self.name, self.scope_type)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the catalog record shape."""
        data = dict(self.extra)
        data.update({
            "value": self.name,
            "scopeType": self.scope_type.value,
            "isLeastPrivilege": self.is_least_privilege,
        })
        return data

    @classmethod
    def from_record(cls, record: Any) -> PermissionDescriptor:
        """
        Parse a catalog permission record.

        Args:
            record: Mapping with at least "value" and "scopeType"

        Returns:
            Parsed descriptor

        Raises:
            ValueError: If required fields are missing or malformed
        """
        if not isinstance(record, dict):
            raise ValueError(f"Permission record must be an object, got {record!r}")

        name = record.get("value")
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"Permission record missing 'value': {record!r}")
        if "scopeType" not in record:
            raise ValueError(f"Permission record missing 'scopeType': {record!r}")

        least = record.get("isLeastPrivilege", False)
        if not isinstance(least, bool):
            raise ValueError(
                f"'isLeastPrivilege' must be a boolean for {name}: {least!r}"
            )

        extra = {
            k: v
            for k, v in record.items()
            if k not in ("value", "scopeType", "isLeastPrivilege")
        }

        return cls(
            name=name.strip(),
            scope_type=ScopeType.parse(record["scopeType"]),
            is_least_privilege=least,
            extra=MappingProxyType(extra),
        )


@dataclass(frozen=True)
class CatalogEntry:
    """
    One endpoint template of the catalog with its per-method permissions.

    Attributes:
        endpoint_template: Template as published (e.g. "/users/{user-id}")
        generation: API generation the entry belongs to
        method_permissions: HTTP method -> permissions authorizing it
    """

    endpoint_template: str
    generation: Generation
    method_permissions: Mapping[str, tuple[PermissionDescriptor, ...]] = field(
        default_factory=dict, compare=False, hash=False
    )

    @property
    def methods(self) -> list[str]:
        """HTTP methods declared for the endpoint."""
        return list(self.method_permissions.keys())

    def permissions_for(self, method: str) -> tuple[PermissionDescriptor, ...] | None:
        """
        Get the permissions declared for a method.

        Returns:
            Tuple of descriptors, or None if the method is not declared
        """
        return self.method_permissions.get(method.upper())

    def to_dict(self) -> dict[str, Any]:
        """Convert to the catalog record shape."""
        return {
            "Endpoint": self.endpoint_template,
            "Version": self.generation.version_label,
            "Method": {
                method: [p.to_dict() for p in permissions]
                for method, permissions in self.method_permissions.items()
            },
        }
