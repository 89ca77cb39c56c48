"""
Coverage statistics for a permission catalog.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from permaudit.catalog.loader import PermissionCatalog
from permaudit.models import Generation


@dataclass(frozen=True)
class CatalogSummary:
    """
    Summary statistics for one generation of the catalog.

    Attributes:
        generation: API generation
        total_endpoints: Endpoint templates in the catalog
        total_methods: Endpoint/method combinations
        total_permissions: Permission descriptors across all methods
        endpoints_with_permissions: Endpoints with at least one permission
    """

    generation: Generation
    total_endpoints: int = 0
    total_methods: int = 0
    total_permissions: int = 0
    endpoints_with_permissions: int = 0

    @property
    def coverage_percent(self) -> float:
        """Share of endpoints with at least one permission."""
        if self.total_endpoints == 0:
            return 0.0
        return round((self.endpoints_with_permissions / self.total_endpoints) * 100, 2)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "generation": self.generation.value,
            "total_endpoints": self.total_endpoints,
            "total_methods": self.total_methods,
            "total_permissions": self.total_permissions,
            "endpoints_with_permissions": self.endpoints_with_permissions,
            "coverage_percent": self.coverage_percent,
        }


def summarize_catalog(catalog: PermissionCatalog) -> dict[Generation, CatalogSummary]:
    """
    Compute coverage statistics for every generation of a catalog.

    Args:
        catalog: Loaded permission catalog

    Returns:
        Map of generation -> CatalogSummary
    """
    summaries: dict[Generation, CatalogSummary] = {}

    for generation in catalog.generations:
        entries = catalog.entries(generation)
        summaries[generation] = CatalogSummary(
            generation=generation,
            total_endpoints=len(entries),
            total_methods=sum(len(e.method_permissions) for e in entries),
            total_permissions=sum(
                len(p) for e in entries for p in e.method_permissions.values()
            ),
            endpoints_with_permissions=sum(
                1 for e in entries if any(e.method_permissions.values())
            ),
        )

    return summaries
