"""Pipeline data models shared across all stages."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class ScopeType(str, Enum):
    SINGLE_COMPONENT = "single-component"
    FEATURE = "feature"
    PAGE = "page"
    BACKEND = "backend"
    FULLSTACK = "fullstack"
    LANDING_PAGE = "landing-page"


class ArtifactType(str, Enum):
    COMPONENT = "component"
    PAGE = "page"
    SERVICE = "service"
    MODEL = "model"
    UTIL = "util"
    CONFIG = "config"
    TEST = "test"


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class IssueCategory(str, Enum):
    SYNTAX = "syntax"
    TYPE = "type"
    DEPENDENCY = "dependency"
    CONTRACT = "contract"
    PERFORMANCE = "performance"


class PipelineStatus(str, Enum):
    PREPARED = "prepared"
    GENERATED = "generated"
    VALIDATED = "validated"
    OPTIMIZED = "optimized"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class GenerationRequest:
    prompt: str
    framework: str | None = None
    language: str | None = None
    context: dict = field(default_factory=dict)   # domain, style, complexity hint
    session_id: str = ""
    options: dict = field(default_factory=dict)   # include_tests, scope override


@dataclass(frozen=True)
class PromptAnalysis:
    original_prompt: str
    intent: str = "CREATE_APP"
    intent_confidence: float = 0.6
    entities: tuple[str, ...] = ()
    features: tuple[str, ...] = ()
    database: str | None = None
    domain: str = "general"
    complexity: str = "standard"
    framework: str = "react"
    style: str | None = None

    @property
    def main_entity(self) -> str:
        return self.entities[0] if self.entities else "Component"


@dataclass(frozen=True)
class ScopeDetectionResult:
    type: ScopeType
    complexity: str                 # simple|moderate|high|very_high
    confidence: float
    expected_min: int
    expected_max: int
    include_frontend: bool
    include_backend: bool
    include_database: bool
    detected_keywords: tuple[str, ...] = ()

    @property
    def expected_range(self) -> tuple[int, int]:
        return self.expected_min, self.expected_max

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "complexity": self.complexity,
            "confidence": self.confidence,
            "expected_file_count": {"min": self.expected_min, "max": self.expected_max},
            "should_include_frontend": self.include_frontend,
            "should_include_backend": self.include_backend,
            "should_include_database": self.include_database,
            "detected_keywords": list(self.detected_keywords),
        }


@dataclass
class ValidationIssue:
    severity: Severity
    category: IssueCategory
    message: str
    line: int | None = None
    suggestion: str = ""


@dataclass
class ValidationOutcome:
    passed: bool
    score: float
    issues: list[ValidationIssue] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: dict) -> "ValidationOutcome":
        """Build an outcome from a validator's ``{passed, score, issues}`` dict.

        Unknown severities fall back to ``warning`` and unknown categories to
        ``contract`` so a loose validator never breaks the stage.
        """
        issues = []
        for item in payload.get("issues") or []:
            if not isinstance(item, dict):
                issues.append(ValidationIssue(Severity.WARNING, IssueCategory.CONTRACT, str(item)))
                continue
            try:
                severity = Severity(item.get("severity", "warning"))
            except ValueError:
                severity = Severity.WARNING
            try:
                category = IssueCategory(item.get("category", "contract"))
            except ValueError:
                category = IssueCategory.CONTRACT
            issues.append(ValidationIssue(
                severity=severity,
                category=category,
                message=item.get("message", ""),
                line=item.get("line"),
                suggestion=item.get("suggestion", ""),
            ))
        return cls(
            passed=bool(payload.get("passed", False)),
            score=float(payload.get("score", 0) or 0),
            issues=issues,
        )

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity in (Severity.ERROR, Severity.CRITICAL)]


@dataclass
class SiblingFile:
    path: str
    content: str


@dataclass
class ArtifactMetadata:
    line_count: int = 0
    complexity: int = 1
    validated: bool | None = None       # None = never validated
    validation: ValidationOutcome | None = None
    revalidated: bool = False
    rewritten: bool = False
    fixes: list[str] = field(default_factory=list)
    optimized: bool = False
    optimizations: list[str] = field(default_factory=list)
    quality_score: float | None = None
    quality_metrics: dict = field(default_factory=dict)
    renamed_from: str | None = None
    siblings: list[SiblingFile] = field(default_factory=list)


@dataclass
class Artifact:
    name: str
    type: ArtifactType
    path: str                   # relative path e.g. "src/components/Button.tsx"
    body: str
    language: str = "typescript"
    dependencies: list[str] = field(default_factory=list)
    metadata: ArtifactMetadata = field(default_factory=ArtifactMetadata)

    @property
    def key(self) -> tuple[str, str]:
        return self.name, self.path

    @property
    def is_final(self) -> bool:
        return self.metadata.rewritten

    @property
    def score(self) -> float:
        if self.metadata.quality_score is not None:
            return self.metadata.quality_score
        if self.metadata.validation is not None:
            return self.metadata.validation.score
        return 0.0

    def to_dict(self, include_body=True) -> dict:
        meta = asdict(self.metadata)
        if self.metadata.validation is not None:
            meta["validation"] = {
                "passed": self.metadata.validation.passed,
                "score": self.metadata.validation.score,
                "issues": [
                    {
                        "severity": i.severity.value,
                        "category": i.category.value,
                        "message": i.message,
                        "line": i.line,
                        "suggestion": i.suggestion,
                    }
                    for i in self.metadata.validation.issues
                ],
            }
        data = {
            "name": self.name,
            "type": self.type.value,
            "path": self.path,
            "language": self.language,
            "dependencies": list(self.dependencies),
            "metadata": meta,
        }
        if include_body:
            data["body"] = self.body
        return data


@dataclass(frozen=True)
class StageResult(Generic[T]):
    success: bool
    data: T | None = None
    error: str | None = None
    warnings: tuple[str, ...] = ()

    @classmethod
    def ok(cls, data: T, warnings=()) -> "StageResult[T]":
        return cls(success=True, data=data, warnings=tuple(warnings))

    @classmethod
    def fail(cls, error: str, warnings=()) -> "StageResult[T]":
        return cls(success=False, error=error, warnings=tuple(warnings))


@dataclass
class Generation:
    """Output of the invoker: raw text, or files when a sub-generator returned them."""
    raw_text: str = ""
    files: list[dict] | None = None
    source: str = "provider"


@dataclass
class PipelineRun:
    request: GenerationRequest
    status: PipelineStatus = PipelineStatus.PREPARED
    history: list[PipelineStatus] = field(default_factory=list)
    analysis: PromptAnalysis | None = None
    scope: ScopeDetectionResult | None = None
    templates: list[dict] = field(default_factory=list)
    instruction: str = ""
    generation: Generation | None = None
    artifacts: list[Artifact] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    error: str | None = None


@dataclass
class PipelineResult:
    success: bool
    artifacts: list[Artifact] = field(default_factory=list)
    error: str | None = None
    status: PipelineStatus = PipelineStatus.FAILED
    scope: ScopeDetectionResult | None = None
    quality_score: float = 0.0
    dependencies: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    package_manifest: str = ""
    readme: str = ""
    generation_source: str = ""
    processing_time: float = 0.0

    def to_dict(self, include_body=True) -> dict[str, Any]:
        return {
            "success": self.success,
            "status": self.status.value,
            "error": self.error,
            "scope": self.scope.to_dict() if self.scope else None,
            "artifacts": [a.to_dict(include_body=include_body) for a in self.artifacts],
            "quality_score": self.quality_score,
            "dependencies": list(self.dependencies),
            "warnings": list(self.warnings),
            "package_manifest": self.package_manifest,
            "readme": self.readme,
            "generation_source": self.generation_source,
            "processing_time": self.processing_time,
        }
