"""
Configuration management for Graph Permission Audit.
"""

from permaudit.config.analysis_config import (
    AnalysisConfiguration,
    CatalogConfig,
    DEFAULT_BETA_CATALOG,
    DEFAULT_GRAPH_BASE_URL,
    DEFAULT_MAX_WORKERS,
    DEFAULT_V1_CATALOG,
    create_default_config,
    load_config_from_env,
)

__all__ = [
    "AnalysisConfiguration",
    "CatalogConfig",
    "DEFAULT_BETA_CATALOG",
    "DEFAULT_GRAPH_BASE_URL",
    "DEFAULT_MAX_WORKERS",
    "DEFAULT_V1_CATALOG",
    "create_default_config",
    "load_config_from_env",
]
