"""
Graph Permission Audit - least-privilege analysis for Microsoft Graph applications

Answers one question for every application: "Which Graph permissions does
this application actually need, judging by what it calls?"

Key Features:
- Pure, side-effect free inference engine: no network calls, no state
- Canonicalizes activity URIs (/me, user@domain segments, OData calls)
- Matches v1.0 and beta activity against independent permission catalogs
- Greedy set cover over least-privilege application permissions
- Excess and missing permissions per application

Quick Start:
    >>> from permaudit.catalog import load_catalog
    >>> from permaudit.inference import PermissionAnalyzer
    >>> from permaudit.models import ActivityRecord, ApplicationActivity
    >>>
    >>> catalog = load_catalog("permissions-v1.0.json", "permissions-beta.json")
    >>> analyzer = PermissionAnalyzer(catalog)
    >>> result = analyzer.analyze(ApplicationActivity(
    ...     app_id="00000000-0000-0000-0000-000000000001",
    ...     activities=[ActivityRecord("GET", "https://graph.microsoft.com/v1.0/users/42")],
    ...     current_permissions=["Directory.Read.All"],
    ... ))
    >>> print(sorted(result.analysis.excess_permissions))
"""

from __future__ import annotations

__version__ = "0.1.0"

# Core models
from permaudit.models import (
    ActivityMatch,
    ActivityRecord,
    ApplicationActivity,
    ApplicationAnalysis,
    CanonicalUri,
    CatalogEntry,
    Generation,
    OptimalPermissionSet,
    PermissionAnalysis,
    PermissionDescriptor,
    ScopeType,
    SelectedPermission,
)

# Catalog
from permaudit.catalog import (
    CatalogLoadError,
    PermissionCatalog,
    load_catalog,
    summarize_catalog,
)

# Inference
from permaudit.inference import (
    ApplicationSkippedError,
    BatchAnalysisResult,
    InvalidUriError,
    PermissionAnalyzer,
    run_analysis,
)

# Configuration
from permaudit.config import (
    AnalysisConfiguration,
    create_default_config,
    load_config_from_env,
)

# Observability
from permaudit.observability import configure_logging, get_logger

__all__ = [
    "__version__",
    # Models
    "ActivityMatch",
    "ActivityRecord",
    "ApplicationActivity",
    "ApplicationAnalysis",
    "CanonicalUri",
    "CatalogEntry",
    "Generation",
    "OptimalPermissionSet",
    "PermissionAnalysis",
    "PermissionDescriptor",
    "ScopeType",
    "SelectedPermission",
    # Catalog
    "CatalogLoadError",
    "PermissionCatalog",
    "load_catalog",
    "summarize_catalog",
    # Inference
    "ApplicationSkippedError",
    "BatchAnalysisResult",
    "InvalidUriError",
    "PermissionAnalyzer",
    "run_analysis",
    # Configuration
    "AnalysisConfiguration",
    "create_default_config",
    "load_config_from_env",
    # Observability
    "configure_logging",
    "get_logger",
]
