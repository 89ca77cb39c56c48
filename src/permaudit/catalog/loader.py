"""
Permission catalog loader for Graph Permission Audit.

Loads the per-generation permission maps (one JSON document per API
generation, as written by the permissions extractor) into an immutable
catalog shared read-only by every analysis.
"""

from __future__ import annotations

import json
import logging
import os
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping

from permaudit.models import (
    CatalogEntry,
    Generation,
    PermissionDescriptor,
)

logger = logging.getLogger(__name__)

CATALOG_GENERATIONS = (Generation.V1, Generation.BETA)


class CatalogLoadError(Exception):
    """Exception raised when the permission catalog cannot be loaded."""

    def __init__(self, message: str, source_path: str | None = None):
        self.source_path = source_path
        prefix = f"{source_path}: " if source_path else ""
        super().__init__(f"{prefix}{message}")


class PermissionCatalog:
    """
    Read-only permission catalog for both API generations.

    Entries are kept per generation in source order. The catalog is
    shared by reference between analyses and never mutated.
    """

    def __init__(self, entries: Iterable[CatalogEntry]):
        """
        Initialize the catalog.

        Args:
            entries: Catalog entries of any catalogued generation
        """
        by_generation: dict[Generation, list[CatalogEntry]] = {
            g: [] for g in CATALOG_GENERATIONS
        }
        for entry in entries:
            if entry.generation not in by_generation:
                raise CatalogLoadError(
                    f"Entry {entry.endpoint_template!r} has no catalog generation"
                )
            by_generation[entry.generation].append(entry)

        self._entries: Mapping[Generation, tuple[CatalogEntry, ...]] = MappingProxyType(
            {g: tuple(e) for g, e in by_generation.items()}
        )

    def __len__(self) -> int:
        return sum(len(e) for e in self._entries.values())

    def __iter__(self) -> Iterator[CatalogEntry]:
        for generation in CATALOG_GENERATIONS:
            yield from self._entries[generation]

    @property
    def generations(self) -> tuple[Generation, ...]:
        """Generations held by the catalog."""
        return CATALOG_GENERATIONS

    def entries(self, generation: Generation) -> tuple[CatalogEntry, ...]:
        """Get all entries of a generation in source order."""
        return self._entries.get(generation, ())

    @classmethod
    def from_records(
        cls,
        v1_records: Any,
        beta_records: Any,
    ) -> PermissionCatalog:
        """
        Build a catalog from already decoded permission map documents.

        Args:
            v1_records: Decoded v1.0 permission map
            beta_records: Decoded beta permission map

        Raises:
            CatalogLoadError: If either document is malformed
        """
        entries = parse_catalog_records(v1_records, Generation.V1)
        entries.extend(parse_catalog_records(beta_records, Generation.BETA))
        return cls(entries)


def parse_catalog_records(
    records: Any,
    generation: Generation,
    source_path: str | None = None,
) -> list[CatalogEntry]:
    """
    Parse a decoded permission map document.

    Args:
        records: List of {"Endpoint", "Method": {METHOD: [permission]}}
        generation: Generation the document describes
        source_path: Origin of the document, for error messages

    Returns:
        Parsed catalog entries in document order

    Raises:
        CatalogLoadError: If the document or any record is malformed
    """
    if not isinstance(records, list):
        raise CatalogLoadError(
            f"Permission map for {generation.value} must be a list of endpoints",
            source_path,
        )

    entries: list[CatalogEntry] = []
    for position, record in enumerate(records):
        try:
            entries.append(_parse_entry(record, generation))
        except ValueError as e:
            raise CatalogLoadError(f"Record {position}: {e}", source_path) from e

    return entries


def _parse_entry(record: Any, generation: Generation) -> CatalogEntry:
    """Parse a single endpoint record."""
    if not isinstance(record, dict):
        raise ValueError(f"endpoint record must be an object, got {type(record).__name__}")

    endpoint = record.get("Endpoint")
    if not isinstance(endpoint, str) or not endpoint.strip():
        raise ValueError("missing 'Endpoint'")

    version = record.get("Version")
    if version and Generation.from_label(str(version)) != generation:
        logger.warning(
            f"Endpoint {endpoint} declares version {version!r} "
            f"inside the {generation.value} permission map"
        )

    methods = record.get("Method")
    if not isinstance(methods, dict):
        raise ValueError(f"'Method' of {endpoint} must be an object")

    method_permissions: dict[str, tuple[PermissionDescriptor, ...]] = {}
    for method, permissions in methods.items():
        if not isinstance(permissions, list):
            raise ValueError(f"permissions for {method} {endpoint} must be a list")
        method_permissions[str(method).upper()] = tuple(
            PermissionDescriptor.from_record(p) for p in permissions
        )

    return CatalogEntry(
        endpoint_template=endpoint.strip(),
        generation=generation,
        method_permissions=MappingProxyType(method_permissions),
    )


def read_permission_map(path: str) -> Any:
    """
    Read and decode a permission map JSON file.

    Raises:
        CatalogLoadError: If the file is missing or not valid JSON
    """
    path = os.path.expanduser(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        raise CatalogLoadError("File not found", path)
    except json.JSONDecodeError as e:
        raise CatalogLoadError(f"Invalid JSON ({e})", path) from e
    except UnicodeDecodeError as e:
        raise CatalogLoadError(f"Invalid encoding ({e})", path) from e
    except OSError as e:
        raise CatalogLoadError(f"Cannot read file ({e})", path) from e


def load_catalog(v1_path: str, beta_path: str) -> PermissionCatalog:
    """
    Load the permission catalog for both API generations.

    Args:
        v1_path: Path of the v1.0 permission map
        beta_path: Path of the beta permission map

    Returns:
        Immutable PermissionCatalog

    Raises:
        CatalogLoadError: If either map is missing or unparsable
    """
    entries: list[CatalogEntry] = []
    for generation, path in ((Generation.V1, v1_path), (Generation.BETA, beta_path)):
        if not path:
            raise CatalogLoadError(f"No permission map configured for {generation.value}")
        try:
            records = read_permission_map(path)
            parsed = parse_catalog_records(records, generation, path)
        except CatalogLoadError as e:
            logger.error(f"Failed to load {generation.value} permission map: {e}")
            raise
        logger.info(f"Loaded {len(parsed)} {generation.value} endpoints from {path}")
        entries.extend(parsed)

    return PermissionCatalog(entries)
