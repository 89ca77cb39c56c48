"""
Permission demand analysis for applications.

Runs the full inference pipeline: each activity is canonicalized,
tokenized, matched against the catalog and narrowed to least-privilege
candidates; the candidates of one application are reduced to a minimal
covering set, which is then diffed against the permissions the
application currently holds.

Applications are independent. The catalog is shared read-only, so a
batch may be analyzed on a thread pool.
"""

from __future__ import annotations

import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable

from permaudit.catalog.loader import PermissionCatalog, load_catalog
from permaudit.config.analysis_config import AnalysisConfiguration, DEFAULT_GRAPH_BASE_URL
from permaudit.inference.canonicalizer import InvalidUriError, UriCanonicalizer
from permaudit.inference.differ import diff_permissions
from permaudit.inference.matcher import CatalogMatcher
from permaudit.inference.optimizer import build_optimal_set
from permaudit.inference.selector import select_least_privilege
from permaudit.inference.tokenizer import tokenize_endpoint
from permaudit.models import (
    ActivityMatch,
    ActivityRecord,
    ApplicationActivity,
    ApplicationAnalysis,
    Generation,
    OptimalPermissionSet,
    PermissionAnalysis,
)
from permaudit.observability.logging import configure_logging, get_logger

logger = logging.getLogger(__name__)
audit_log = get_logger(__name__)


class ApplicationSkippedError(Exception):
    """Exception raised when an application record cannot be analyzed."""

    def __init__(self, message: str, app_id: str | None = None):
        self.app_id = app_id
        super().__init__(message)


@dataclass
class SkippedApplication:
    """An application left out of a batch, with the reason."""

    app_id: str
    reason: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"app_id": self.app_id, "reason": self.reason}


@dataclass
class BatchAnalysisResult:
    """
    Result of analyzing many applications.

    Attributes:
        run_id: Identifier of the run
        analyses: Analyses in input order
        skipped: Applications that could not be analyzed
        started_at: When the run started
        completed_at: When the run finished
    """

    run_id: str
    analyses: list[ApplicationAnalysis] = field(default_factory=list)
    skipped: list[SkippedApplication] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: datetime | None = None

    @property
    def analyzed_count(self) -> int:
        """Number of applications analyzed."""
        return len(self.analyses)

    @property
    def skipped_count(self) -> int:
        """Number of applications skipped."""
        return len(self.skipped)

    @property
    def duration_seconds(self) -> float:
        """Run duration in seconds."""
        if self.completed_at is None:
            return 0.0
        return (self.completed_at - self.started_at).total_seconds()

    @property
    def overprivileged(self) -> list[ApplicationAnalysis]:
        """Analyses holding at least one excess permission."""
        return [a for a in self.analyses if a.analysis.excess_permissions]

    def get(self, app_id: str) -> ApplicationAnalysis | None:
        """Get the analysis of an application by ID."""
        for analysis in self.analyses:
            if analysis.app_id == app_id:
                return analysis
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "run_id": self.run_id,
            "analyzed_count": self.analyzed_count,
            "skipped_count": self.skipped_count,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "analyses": [a.to_dict() for a in self.analyses],
            "skipped": [s.to_dict() for s in self.skipped],
        }


class PermissionAnalyzer:
    """
    Infers the application permissions observed activity requires.

    The analyzer holds no per-application state; one instance may be
    shared across threads.
    """

    def __init__(
        self,
        catalog: PermissionCatalog,
        graph_base_url: str = DEFAULT_GRAPH_BASE_URL,
    ):
        """
        Initialize the analyzer.

        Args:
            catalog: Loaded permission catalog
            graph_base_url: Scheme and host relative URIs resolve against
        """
        self.catalog = catalog
        self.canonicalizer = UriCanonicalizer(graph_base_url)
        self.matcher = CatalogMatcher(catalog)

    def match_activity(self, activity: ActivityRecord) -> ActivityMatch:
        """
        Match one activity against the catalog.

        Canonicalization failures are recorded on the returned match,
        which is then unmatched; they are never raised.

        Args:
            activity: Observed activity

        Returns:
            ActivityMatch with least-privilege candidate permissions
        """
        try:
            canonical = self.canonicalizer.canonicalize(activity.uri)
        except InvalidUriError as e:
            logger.debug(f"Dropping activity {activity.method} {activity.uri!r}: {e}")
            return ActivityMatch(activity=activity, error=str(e))

        tokenized = tokenize_endpoint(canonical)
        if canonical.generation is Generation.UNKNOWN:
            return ActivityMatch(
                activity=activity,
                generation=canonical.generation,
                tokenized_path=tokenized,
            )

        entry, permissions = self.matcher.match(
            activity.method, tokenized, canonical.generation
        )

        return ActivityMatch(
            activity=activity,
            generation=canonical.generation,
            tokenized_path=tokenized,
            matched_endpoint=entry.endpoint_template if entry else None,
            candidate_permissions=select_least_privilege(permissions),
        )

    def match_activities(self, activities: Iterable[ActivityRecord]) -> list[ActivityMatch]:
        """Match every activity of an application."""
        return [self.match_activity(a) for a in activities]

    def build_optimal_set(self, activities: Iterable[ActivityRecord]) -> OptimalPermissionSet:
        """
        Compute the minimal covering permission set for activities.

        Args:
            activities: Activities of one application

        Returns:
            OptimalPermissionSet
        """
        return build_optimal_set(self.match_activities(activities))

    def analyze_permissions(
        self,
        activities: Iterable[ActivityRecord],
        current_permissions: Iterable[str | None],
    ) -> PermissionAnalysis:
        """
        Diff the permissions activities need against those currently held.

        Args:
            activities: Activities of one application
            current_permissions: Permission names currently assigned

        Returns:
            PermissionAnalysis
        """
        return diff_permissions(current_permissions, self.build_optimal_set(activities))

    def analyze(self, application: ApplicationActivity) -> ApplicationAnalysis:
        """
        Analyze a single application.

        Args:
            application: Activities and current permissions of the application

        Returns:
            ApplicationAnalysis

        Raises:
            ApplicationSkippedError: If the record lacks its application ID
        """
        app_id = (application.app_id or "").strip()
        if not app_id:
            raise ApplicationSkippedError(
                "Application record has no app_id",
                app_id=None,
            )

        matches = self.match_activities(application.activities)
        optimal_set = build_optimal_set(matches)
        analysis = diff_permissions(application.current_permissions, optimal_set)

        audit_log.application_analyzed(
            app_id=app_id,
            optimal_count=len(analysis.optimal_permissions),
            excess_count=len(analysis.excess_permissions),
            unmatched_count=len(optimal_set.unmatched),
        )

        return ApplicationAnalysis(
            app_id=app_id,
            display_name=application.display_name,
            principal_id=application.principal_id,
            optimal_set=optimal_set,
            analysis=analysis,
            matches=matches,
        )

    def analyze_all(
        self,
        applications: Iterable[ApplicationActivity],
        max_workers: int | None = None,
    ) -> BatchAnalysisResult:
        """
        Analyze many applications, skipping invalid ones with a warning.

        Args:
            applications: Applications to analyze
            max_workers: Worker threads; None or 1 runs sequentially

        Returns:
            BatchAnalysisResult with analyses in input order
        """
        applications = list(applications)
        result = BatchAnalysisResult(run_id=str(uuid.uuid4())[:8])
        audit_log.analysis_started(result.run_id, len(applications))

        if max_workers and max_workers > 1 and len(applications) > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                outcomes = list(executor.map(self._analyze_or_skip, applications))
        else:
            outcomes = [self._analyze_or_skip(a) for a in applications]

        for outcome in outcomes:
            if isinstance(outcome, SkippedApplication):
                result.skipped.append(outcome)
            else:
                result.analyses.append(outcome)

        result.completed_at = datetime.now(timezone.utc)
        audit_log.analysis_completed(
            run_id=result.run_id,
            analyzed_count=result.analyzed_count,
            skipped_count=result.skipped_count,
            duration_seconds=result.duration_seconds,
        )
        return result

    def _analyze_or_skip(
        self, application: ApplicationActivity
    ) -> ApplicationAnalysis | SkippedApplication:
        try:
            return self.analyze(application)
        except ApplicationSkippedError as e:
            app_id = application.display_name or "<unknown>"
            audit_log.application_skipped(app_id, str(e))
            return SkippedApplication(app_id=app_id, reason=str(e))


def run_analysis(
    applications: Iterable[ApplicationActivity],
    config: AnalysisConfiguration | None = None,
) -> BatchAnalysisResult:
    """
    Load the catalog per configuration and analyze applications.

    Args:
        applications: Applications to analyze
        config: Analysis configuration, defaults apply when omitted

    Returns:
        BatchAnalysisResult

    Raises:
        CatalogLoadError: If either permission map cannot be loaded
        ValueError: If the configuration is invalid

    Example:
        >>> from permaudit.inference import run_analysis
        >>> result = run_analysis(applications)
        >>> for a in result.overprivileged:
        ...     print(a.app_id, sorted(a.analysis.excess_permissions))
    """
    config = config or AnalysisConfiguration()
    errors = config.validate()
    if errors:
        raise ValueError(f"Invalid analysis configuration: {'; '.join(errors)}")

    configure_logging(level=config.log_level, format=config.log_format)

    catalog = load_catalog(config.catalog.v1_path, config.catalog.beta_path)
    audit_log.catalog_loaded({
        g.value: len(catalog.entries(g)) for g in catalog.generations
    })

    analyzer = PermissionAnalyzer(catalog, graph_base_url=config.graph_base_url)
    return analyzer.analyze_all(applications, max_workers=config.max_workers)
