"""
Pytest configuration and fixtures for Graph Permission Audit tests.

This module provides a small but representative permission catalog and
activity fixtures shared by unit and integration tests.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pytest

from permaudit.catalog import PermissionCatalog
from permaudit.inference import PermissionAnalyzer
from permaudit.models import ActivityRecord, ApplicationActivity

GRAPH = "https://graph.microsoft.com"


def app_permission(name: str, least: bool = False, **extra: Any) -> dict[str, Any]:
    """Build an application-scope catalog permission record."""
    record = {"value": name, "scopeType": "Application", "isLeastPrivilege": least}
    record.update(extra)
    return record


def delegated_permission(name: str, least: bool = False) -> dict[str, Any]:
    """Build a delegated catalog permission record."""
    return {"value": name, "scopeType": "DelegatedWork", "isLeastPrivilege": least}


@pytest.fixture(autouse=True)
def restore_logging():
    """Restore the permaudit logger after a test reconfigures it."""
    logger = logging.getLogger("permaudit")
    handlers, level = list(logger.handlers), logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


# Sample data fixtures


@pytest.fixture
def v1_records() -> list[dict[str, Any]]:
    """Return a v1.0 permission map."""
    return [
        {
            "Endpoint": "/users",
            "Version": "v1.0",
            "Method": {
                "GET": [
                    delegated_permission("User.Read", least=True),
                    app_permission("User.Read.All", least=True, isAdmin=True),
                    app_permission("Directory.Read.All"),
                ],
            },
        },
        {
            "Endpoint": "/users/{user-id}",
            "Version": "v1.0",
            "Method": {
                "GET": [
                    app_permission("User.Read.All", least=True),
                    app_permission("Directory.Read.All"),
                ],
                "PATCH": [app_permission("User.ReadWrite.All", least=True)],
            },
        },
        {
            "Endpoint": "/users/{user-id}/messages",
            "Version": "v1.0",
            "Method": {
                "GET": [
                    app_permission("Mail.ReadBasic.All", least=True),
                    app_permission("Mail.Read"),
                ],
            },
        },
        {
            "Endpoint": "/users/{user-id}/sendMail",
            "Version": "v1.0",
            "Method": {"POST": [app_permission("Mail.Send", least=True)]},
        },
        {
            "Endpoint": "/users/{user-id}/events",
            "Version": "v1.0",
            "Method": {"GET": [delegated_permission("Calendars.Read", least=True)]},
        },
        {
            "Endpoint": "/groups",
            "Version": "v1.0",
            "Method": {
                "GET": [
                    app_permission("Group.Read.All"),
                    app_permission("Directory.Read.All"),
                ],
            },
        },
        {
            "Endpoint": "/groups/{group-id}/members",
            "Version": "v1.0",
            "Method": {
                "GET": [
                    app_permission("GroupMember.Read.All", least=True),
                    app_permission("Group.Read.All"),
                    app_permission("Directory.Read.All"),
                ],
            },
        },
        {
            "Endpoint": "/reports/getEmailActivityUserDetail(period='{period_value}')",
            "Version": "v1.0",
            "Method": {"GET": [app_permission("Reports.Read.All", least=True)]},
        },
        {
            "Endpoint": "/applications/{application-id}",
            "Version": "v1.0",
            "Method": {
                "GET": [],
                "DELETE": [app_permission("Application.ReadWrite.All", least=True)],
            },
        },
    ]


@pytest.fixture
def beta_records() -> list[dict[str, Any]]:
    """Return a beta permission map."""
    return [
        {
            "Endpoint": "/users/{user-id}",
            "Version": "beta",
            "Method": {"GET": [app_permission("User.Read.All", least=True)]},
        },
        {
            "Endpoint": "/security/alerts_v2",
            "Version": "beta",
            "Method": {"GET": [app_permission("SecurityAlert.Read.All", least=True)]},
        },
    ]


@pytest.fixture
def catalog(
    v1_records: list[dict[str, Any]],
    beta_records: list[dict[str, Any]],
) -> PermissionCatalog:
    """Return a PermissionCatalog built from the sample maps."""
    return PermissionCatalog.from_records(v1_records, beta_records)


@pytest.fixture
def analyzer(catalog: PermissionCatalog) -> PermissionAnalyzer:
    """Return a PermissionAnalyzer over the sample catalog."""
    return PermissionAnalyzer(catalog)


@pytest.fixture
def catalog_files(
    tmp_path: Path,
    v1_records: list[dict[str, Any]],
    beta_records: list[dict[str, Any]],
) -> tuple[str, str]:
    """Write the sample maps to disk and return (v1_path, beta_path)."""
    v1_path = tmp_path / "permissions-v1.0.json"
    beta_path = tmp_path / "permissions-beta.json"
    v1_path.write_text(json.dumps(v1_records), encoding="utf-8")
    beta_path.write_text(json.dumps(beta_records), encoding="utf-8")
    return str(v1_path), str(beta_path)


@pytest.fixture
def mail_application() -> ApplicationActivity:
    """Return an application that reads users and sends mail."""
    return ApplicationActivity(
        app_id="11111111-2222-3333-4444-555555555555",
        display_name="Mail Notifier",
        principal_id="99999999-8888-7777-6666-555555555555",
        activities=[
            ActivityRecord("GET", f"{GRAPH}/v1.0/users"),
            ActivityRecord("GET", f"{GRAPH}/v1.0/users/5a1b6c3d-1111-2222-3333-444455556666"),
            ActivityRecord("POST", f"{GRAPH}/v1.0/users/notifier@contoso.com/sendMail"),
        ],
        current_permissions=["Mail.Send", "User.Read.All", "Directory.ReadWrite.All"],
    )
