"""
Endpoint extraction from Microsoft Graph OpenAPI documents.

The permission maps are built by walking the published OpenAPI
descriptions of each API generation and attaching the permissions for
every endpoint and method. This module covers the offline half of that
process: reading and validating the document and producing catalog
skeleton records whose permission lists are filled in afterwards.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import yaml

from permaudit.catalog.loader import CatalogLoadError
from permaudit.models import Generation

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "post", "put", "patch", "delete", "head", "options")


def validate_openapi_document(doc: Any, source_path: str | None = None) -> None:
    """
    Validate the parts of an OpenAPI document endpoint extraction relies on.

    Raises:
        CatalogLoadError: If the document is empty or has no paths
    """
    if not doc or not isinstance(doc, dict):
        raise CatalogLoadError("Invalid or empty OpenAPI document", source_path)
    if "openapi" not in doc and "swagger" not in doc:
        raise CatalogLoadError("Not an OpenAPI document", source_path)
    if not isinstance(doc.get("paths"), dict):
        raise CatalogLoadError("No valid paths found in OpenAPI document", source_path)


def load_openapi_document(path: str) -> dict[str, Any]:
    """
    Load and validate an OpenAPI YAML document.

    Args:
        path: Path to openapi.yaml

    Returns:
        Parsed document

    Raises:
        CatalogLoadError: If the file is missing, unparsable or invalid
    """
    path = os.path.expanduser(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            doc = yaml.safe_load(f)
    except FileNotFoundError:
        raise CatalogLoadError("File not found", path)
    except yaml.YAMLError as e:
        raise CatalogLoadError(f"Invalid YAML ({e})", path) from e

    validate_openapi_document(doc, path)
    return doc


def extract_endpoints(doc: dict[str, Any]) -> list[dict[str, Any]]:
    """
    List the endpoints of an OpenAPI document with their HTTP methods.

    Path items that carry only a description, or no operation at all,
    are skipped.

    Returns:
        List of {"endpoint": path, "methods": ["GET", ...]} in document order
    """
    endpoints: list[dict[str, Any]] = []

    for path_url, path_item in (doc.get("paths") or {}).items():
        if not isinstance(path_item, dict):
            continue
        if len(path_item) == 1 and "description" in path_item:
            continue

        methods = [
            m.upper() for m in HTTP_METHODS if isinstance(path_item.get(m), dict)
        ]
        if methods:
            endpoints.append({"endpoint": path_url, "methods": methods})

    logger.debug(f"Extracted {len(endpoints)} endpoints from OpenAPI document")
    return endpoints


def build_catalog_skeleton(
    doc: dict[str, Any],
    generation: Generation,
) -> list[dict[str, Any]]:
    """
    Build permission map records with empty permission lists.

    Args:
        doc: Validated OpenAPI document
        generation: Generation the document describes

    Returns:
        Records in the permission map layout read by the catalog loader
    """
    return [
        {
            "Endpoint": e["endpoint"],
            "Version": generation.version_label,
            "Method": {m: [] for m in e["methods"]},
        }
        for e in extract_endpoints(doc)
    ]
