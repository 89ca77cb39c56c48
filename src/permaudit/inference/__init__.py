"""
Permission demand inference for Graph Permission Audit.

This package infers the least-privilege application permissions an
application needs from its observed Microsoft Graph activity:

- UriCanonicalizer: de-aliases activity URIs (/me, user@domain segments)
- tokenize / tokenize_template: reduce URIs and templates to endpoint shapes
- CatalogMatcher: looks up endpoint shapes in the permission catalog
- select_least_privilege: narrows catalog permissions to candidates
- build_optimal_set: greedy set cover over all activities of an application
- diff_permissions: excess and missing permissions versus current ones
- PermissionAnalyzer: runs the pipeline per application and per batch
"""

from __future__ import annotations

from permaudit.inference.canonicalizer import (
    InvalidUriError,
    UriCanonicalizer,
    canonicalize_uri,
)
from permaudit.inference.tokenizer import (
    is_identifier_segment,
    normalize_template,
    tokenize,
    tokenize_endpoint,
    tokenize_template,
)
from permaudit.inference.matcher import CatalogMatcher, normalize_activity_path
from permaudit.inference.selector import (
    LEAST_PRIVILEGE_CHAIN,
    first_non_empty,
    is_application_scope,
    is_least_privilege,
    select_least_privilege,
)
from permaudit.inference.optimizer import (
    build_coverage,
    build_optimal_set,
    order_coverage,
    select_cover,
)
from permaudit.inference.differ import diff_permissions, flatten_permission_names
from permaudit.inference.analyzer import (
    ApplicationSkippedError,
    BatchAnalysisResult,
    PermissionAnalyzer,
    SkippedApplication,
    run_analysis,
)

__all__ = [
    # Canonicalizer
    "InvalidUriError",
    "UriCanonicalizer",
    "canonicalize_uri",
    # Tokenizer
    "is_identifier_segment",
    "normalize_template",
    "tokenize",
    "tokenize_endpoint",
    "tokenize_template",
    # Matcher
    "CatalogMatcher",
    "normalize_activity_path",
    # Selector
    "LEAST_PRIVILEGE_CHAIN",
    "first_non_empty",
    "is_application_scope",
    "is_least_privilege",
    "select_least_privilege",
    # Optimizer
    "build_coverage",
    "build_optimal_set",
    "order_coverage",
    "select_cover",
    # Differ
    "diff_permissions",
    "flatten_permission_names",
    # Analyzer
    "ApplicationSkippedError",
    "BatchAnalysisResult",
    "PermissionAnalyzer",
    "SkippedApplication",
    "run_analysis",
]
