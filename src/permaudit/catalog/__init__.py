"""
Permission catalog for Graph Permission Audit.

This package provides:

- PermissionCatalog: immutable per-generation endpoint/permission catalog
- load_catalog: load the v1.0 and beta permission maps, failing fast
- summarize_catalog: coverage statistics per generation
- OpenAPI helpers to list the endpoints a permission map should cover
"""

from permaudit.catalog.loader import (
    CATALOG_GENERATIONS,
    CatalogLoadError,
    PermissionCatalog,
    load_catalog,
    parse_catalog_records,
    read_permission_map,
)
from permaudit.catalog.summary import CatalogSummary, summarize_catalog
from permaudit.catalog.openapi import (
    HTTP_METHODS,
    build_catalog_skeleton,
    extract_endpoints,
    load_openapi_document,
    validate_openapi_document,
)

__all__ = [
    # Loader
    "CATALOG_GENERATIONS",
    "CatalogLoadError",
    "PermissionCatalog",
    "load_catalog",
    "parse_catalog_records",
    "read_permission_map",
    # Summary
    "CatalogSummary",
    "summarize_catalog",
    # OpenAPI
    "HTTP_METHODS",
    "build_catalog_skeleton",
    "extract_endpoints",
    "load_openapi_document",
    "validate_openapi_document",
]
