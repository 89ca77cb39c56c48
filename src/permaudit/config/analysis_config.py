"""
Analysis configuration for Graph Permission Audit.

Provides configuration for catalog locations, the Graph API base URL,
batch concurrency and logging, loadable from JSON/YAML files or the
environment.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_GRAPH_BASE_URL = "https://graph.microsoft.com"
DEFAULT_V1_CATALOG = "permissions-v1.0.json"
DEFAULT_BETA_CATALOG = "permissions-beta.json"
DEFAULT_MAX_WORKERS = 4


@dataclass
class CatalogConfig:
    """Locations of the per-generation permission maps."""

    v1_path: str = DEFAULT_V1_CATALOG
    beta_path: str = DEFAULT_BETA_CATALOG

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "v1_path": self.v1_path,
            "beta_path": self.beta_path,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CatalogConfig:
        """Create from dictionary."""
        return cls(
            v1_path=data.get("v1_path", DEFAULT_V1_CATALOG),
            beta_path=data.get("beta_path", DEFAULT_BETA_CATALOG),
        )


@dataclass
class AnalysisConfiguration:
    """
    Configuration for a permission analysis run.

    Attributes:
        name: Configuration name
        graph_base_url: Scheme and host relative activity URIs resolve against
        catalog: Permission map locations
        max_workers: Worker threads for batch analysis (1 = sequential)
        log_level: Log level for the "permaudit" loggers
        log_format: "human" or "json"
    """

    name: str = "default"
    graph_base_url: str = DEFAULT_GRAPH_BASE_URL
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    max_workers: int = DEFAULT_MAX_WORKERS
    log_level: str = "INFO"
    log_format: str = "human"

    def validate(self) -> list[str]:
        """
        Validate configuration values.

        Returns:
            List of validation errors (empty if valid)
        """
        errors: list[str] = []
        if not self.graph_base_url.startswith(("http://", "https://")):
            errors.append(f"graph_base_url must be an http(s) URL: {self.graph_base_url}")
        if not self.catalog.v1_path:
            errors.append("catalog.v1_path is required")
        if not self.catalog.beta_path:
            errors.append("catalog.beta_path is required")
        if self.max_workers < 1:
            errors.append("max_workers must be at least 1")
        if self.log_format not in ("human", "json"):
            errors.append(f"log_format must be 'human' or 'json': {self.log_format}")
        return errors

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "graph_base_url": self.graph_base_url,
            "catalog": self.catalog.to_dict(),
            "max_workers": self.max_workers,
            "log_level": self.log_level,
            "log_format": self.log_format,
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnalysisConfiguration:
        """Create from dictionary."""
        return cls(
            name=data.get("name", "default"),
            graph_base_url=data.get("graph_base_url", DEFAULT_GRAPH_BASE_URL),
            catalog=CatalogConfig.from_dict(data.get("catalog", {})),
            max_workers=int(data.get("max_workers", DEFAULT_MAX_WORKERS)),
            log_level=data.get("log_level", "INFO"),
            log_format=data.get("log_format", "human"),
        )

    @classmethod
    def from_json(cls, json_str: str) -> AnalysisConfiguration:
        """Create from JSON string."""
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def from_file(cls, path: str) -> AnalysisConfiguration:
        """Load configuration from a JSON or YAML file."""
        path = os.path.expanduser(path)
        with open(path, "r", encoding="utf-8") as f:
            if path.endswith(".json"):
                return cls.from_dict(json.load(f))
            return cls.from_dict(yaml.safe_load(f) or {})

    def save(self, path: str) -> None:
        """Save configuration to a JSON or YAML file."""
        path = os.path.expanduser(path)
        Path(path).parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            if path.endswith(".json"):
                json.dump(self.to_dict(), f, indent=2)
            else:
                yaml.safe_dump(self.to_dict(), f, default_flow_style=False)


def load_config_from_env() -> AnalysisConfiguration:
    """
    Load configuration from environment variables.

    Environment variables:
        PERMAUDIT_CONFIG_FILE: Path to configuration file
        PERMAUDIT_V1_CATALOG: Path of the v1.0 permission map
        PERMAUDIT_BETA_CATALOG: Path of the beta permission map
        PERMAUDIT_GRAPH_BASE_URL: Graph API scheme and host
        PERMAUDIT_MAX_WORKERS: Worker threads for batch analysis
        PERMAUDIT_LOG_LEVEL: Log level
        PERMAUDIT_LOG_FORMAT: Log format (human, json)

    Returns:
        AnalysisConfiguration instance
    """
    config_file = os.getenv("PERMAUDIT_CONFIG_FILE")
    if config_file and os.path.exists(config_file):
        return AnalysisConfiguration.from_file(config_file)

    config = AnalysisConfiguration()

    v1_path = os.getenv("PERMAUDIT_V1_CATALOG")
    if v1_path:
        config.catalog.v1_path = v1_path

    beta_path = os.getenv("PERMAUDIT_BETA_CATALOG")
    if beta_path:
        config.catalog.beta_path = beta_path

    config.graph_base_url = os.getenv("PERMAUDIT_GRAPH_BASE_URL", config.graph_base_url)

    max_workers = os.getenv("PERMAUDIT_MAX_WORKERS")
    if max_workers:
        try:
            config.max_workers = int(max_workers)
        except ValueError:
            raise ValueError(f"PERMAUDIT_MAX_WORKERS must be an integer: {max_workers!r}")

    config.log_level = os.getenv("PERMAUDIT_LOG_LEVEL", config.log_level)
    config.log_format = os.getenv("PERMAUDIT_LOG_FORMAT", config.log_format)

    return config


def create_default_config() -> AnalysisConfiguration:
    """
    Create a default analysis configuration.

    Returns:
        AnalysisConfiguration with the public Graph endpoint and the
        permission maps in the working directory
    """
    return AnalysisConfiguration(
        name="default",
        graph_base_url=DEFAULT_GRAPH_BASE_URL,
        catalog=CatalogConfig(
            v1_path=DEFAULT_V1_CATALOG,
            beta_path=DEFAULT_BETA_CATALOG,
        ),
        max_workers=DEFAULT_MAX_WORKERS,
    )
