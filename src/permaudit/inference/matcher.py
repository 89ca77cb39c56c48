"""
Catalog matching for tokenized activity paths.

Builds a per-generation index of tokenized catalog templates once, then
looks up (method, tokenized path, generation) triples against it.
"""

from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import Mapping

from permaudit.catalog.loader import PermissionCatalog
from permaudit.inference.tokenizer import tokenize_template
from permaudit.models import (
    CatalogEntry,
    Generation,
    ID_PLACEHOLDER,
    PermissionDescriptor,
)

logger = logging.getLogger(__name__)

_GUID_RE = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)
_ADDRESS_RE = re.compile(r"[A-Za-z0-9._%+'-]+@[A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)+")


def normalize_activity_path(path: str) -> str:
    """
    Replace residual GUIDs and user@domain values with the placeholder.

    Tokenized paths normally carry no such values any more; catalog
    templates that predate the tokenizer conventions may still meet
    paths where they survive inside a segment.
    """
    path = _GUID_RE.sub(ID_PLACEHOLDER, path)
    return _ADDRESS_RE.sub(ID_PLACEHOLDER, path)


class CatalogMatcher:
    """
    Matches tokenized activity paths against the permission catalog.

    Each generation is matched only against its own catalog. When more
    than one template shares a tokenized shape, the first template in
    catalog order that declares the requested method wins.
    """

    def __init__(self, catalog: PermissionCatalog):
        """
        Initialize the matcher and index the catalog.

        Args:
            catalog: Loaded permission catalog, shared read-only
        """
        self.catalog = catalog
        index: dict[Generation, dict[str, list[CatalogEntry]]] = {}

        for generation in catalog.generations:
            shapes: dict[str, list[CatalogEntry]] = {}
            for entry in catalog.entries(generation):
                shapes.setdefault(tokenize_template(entry.endpoint_template), []).append(entry)
            index[generation] = shapes
            logger.debug(
                f"Indexed {len(catalog.entries(generation))} {generation.value} "
                f"templates into {len(shapes)} endpoint shapes"
            )

        self._index: Mapping[Generation, Mapping[str, tuple[CatalogEntry, ...]]] = (
            MappingProxyType({
                g: MappingProxyType({k: tuple(v) for k, v in shapes.items()})
                for g, shapes in index.items()
            })
        )

    def lookup(self, generation: Generation, path: str) -> tuple[CatalogEntry, ...]:
        """
        Find catalog entries whose tokenized template equals a path.

        Args:
            generation: Generation to search
            path: Tokenized activity path

        Returns:
            Matching entries in catalog order, empty when none match
        """
        shapes = self._index.get(generation)
        if not shapes or not path:
            return ()
        return shapes.get(normalize_activity_path(path), ())

    def match(
        self,
        method: str,
        path: str,
        generation: Generation,
    ) -> tuple[CatalogEntry | None, tuple[PermissionDescriptor, ...]]:
        """
        Match an activity and return the permissions declared for its method.

        Args:
            method: HTTP method
            path: Tokenized activity path
            generation: Activity generation

        Returns:
            Tuple of (matched entry or None, declared permissions). The
            permissions are empty when nothing matched or when the
            endpoint does not declare the method.
        """
        entries = self.lookup(generation, path)
        if not entries:
            return None, ()

        for entry in entries:
            permissions = entry.permissions_for(method)
            if permissions is not None:
                return entry, permissions

        logger.debug(f"Endpoint {entries[0].endpoint_template} has no {method} permissions")
        return entries[0], ()
