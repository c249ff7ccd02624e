"""Priority-ordered scope classifier with explicit scope override."""

import logging

from config.scopes import (
    BACKEND_KEYWORDS,
    DATABASE_KEYWORDS,
    FALLBACK_SCOPE,
    FEATURE_KEYWORDS,
    FRONTEND_KEYWORDS,
    FULLSTACK_KEYWORDS,
    LANDING_PAGE_KEYWORDS,
    OVERRIDE_CONFIDENCE,
    SCOPES,
    SINGLE_COMPONENT_EXCLUSIONS,
    SINGLE_COMPONENT_KEYWORDS,
)
from core.state import PromptAnalysis, ScopeDetectionResult, ScopeType
from utils.naming import has_keyword

logger = logging.getLogger(__name__)


def _matches(text, keywords):
    return [kw for kw in keywords if has_keyword(text, kw)]


def _from_table(scope, keywords, has_database=False, confidence=None):
    tier = SCOPES[scope]
    low, high = tier["expected_files"]
    database = tier["database"]
    if database == "detected":
        database = has_database
    return ScopeDetectionResult(
        type=ScopeType(scope),
        complexity=tier["complexity"],
        confidence=tier["confidence"] if confidence is None else confidence,
        expected_min=low,
        expected_max=high,
        include_frontend=tier["frontend"],
        include_backend=tier["backend"],
        include_database=bool(database),
        detected_keywords=tuple(keywords),
    )


class ScopeClassifier:
    """Labels a request with a scope tier.

    Tiers are checked in a fixed priority order and the first predicate that
    holds wins: single component, fullstack, backend, landing page,
    feature/dashboard. Nothing matching gives a low-confidence feature.
    """

    name = "classifier"

    def classify(self, text, analysis: PromptAnalysis | None = None,
                 override=None) -> ScopeDetectionResult:
        has_database = bool(_matches(text, DATABASE_KEYWORDS)) or bool(
            analysis and analysis.database
        )

        if override:
            scope = ScopeType(override).value
            logger.info("Scope forced to %s", scope)
            return _from_table(scope, [scope], has_database, OVERRIDE_CONFIDENCE)

        result = self._detect(text, has_database)
        logger.info("Scope %s (confidence %.2f, keywords %s)",
                    result.type.value, result.confidence, list(result.detected_keywords))
        return result

    def _detect(self, text, has_database):
        single = _matches(text, SINGLE_COMPONENT_KEYWORDS)
        if single and not _matches(text, SINGLE_COMPONENT_EXCLUSIONS):
            return _from_table("single-component", single)

        fullstack = _matches(text, FULLSTACK_KEYWORDS)
        frontend = _matches(text, FRONTEND_KEYWORDS)
        backend = _matches(text, BACKEND_KEYWORDS)
        database = _matches(text, DATABASE_KEYWORDS)

        if fullstack or (frontend and backend) or (backend and database):
            return _from_table("fullstack", fullstack + frontend + backend + database, has_database)

        if backend and not frontend:
            return _from_table("backend", backend + database, has_database)

        landing = _matches(text, LANDING_PAGE_KEYWORDS)
        if landing:
            return _from_table("landing-page", landing)

        feature = _matches(text, FEATURE_KEYWORDS)
        if feature:
            return _from_table("feature", feature)

        low, high = FALLBACK_SCOPE["expected_files"]
        return ScopeDetectionResult(
            type=ScopeType(FALLBACK_SCOPE["type"]),
            complexity=FALLBACK_SCOPE["complexity"],
            confidence=FALLBACK_SCOPE["confidence"],
            expected_min=low,
            expected_max=high,
            include_frontend=True,
            include_backend=False,
            include_database=False,
            detected_keywords=FALLBACK_SCOPE["keywords"],
        )


def classify(text, analysis=None, override=None):
    """Module-level shortcut for ScopeClassifier().classify()."""
    return ScopeClassifier().classify(text, analysis, override)
