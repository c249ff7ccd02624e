"""Validation stage: validate, rewrite on failure, revalidate once."""

import logging
from concurrent.futures import ThreadPoolExecutor

from agents.rewriter import CorrectiveRewriter
from agents.static_validator import StaticValidator
from config.defaults import DEFAULTS
from core.errors import ValidationError
from core.state import Artifact, StageResult, ValidationOutcome

logger = logging.getLogger(__name__)


class ValidationStage:
    """Lenient validation over all artifacts.

    Artifacts are validated concurrently. A failing artifact is rewritten and
    validated once more; if it still fails it is kept with the failure
    recorded. Validator errors become warnings, never stage failures.
    """

    name = "validation"

    def __init__(self, validator=None, rewriter=None, max_workers=None):
        self.validator = validator or StaticValidator()
        self.rewriter = rewriter or CorrectiveRewriter()
        self.max_workers = max_workers or DEFAULTS["max_workers"]

    def validate(self, artifact: Artifact) -> ValidationOutcome:
        try:
            payload = self.validator.validate({
                "code": artifact.body,
                "language": artifact.language,
                "options": {"path": artifact.path, "type": artifact.type.value},
            })
        except Exception as e:
            raise ValidationError(str(e), artifact.name) from e
        if not isinstance(payload, dict):
            raise ValidationError(f"validator returned {type(payload).__name__}", artifact.name)
        return ValidationOutcome.from_payload(payload)

    def run(self, artifacts: list[Artifact]) -> StageResult[list[Artifact]]:
        if not artifacts:
            return StageResult.ok([])
        workers = min(self.max_workers, len(artifacts))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            # map() yields in input order
            per_artifact = list(pool.map(self._process, artifacts))
        warnings = [w for ws in per_artifact for w in ws]
        passed = sum(1 for a in artifacts if a.metadata.validated)
        logger.info("Validation: %d/%d artifact(s) passed", passed, len(artifacts))
        return StageResult.ok(artifacts, warnings)

    def _process(self, artifact: Artifact) -> list[str]:
        try:
            outcome = self.validate(artifact)
            if not outcome.passed:
                self.rewriter.apply(artifact, outcome)
                outcome = self.validate(artifact)
                artifact.metadata.revalidated = True
        except ValidationError as e:
            logger.warning("Validation failed for %s: %s", artifact.name, e)
            artifact.metadata.validated = False
            return [f"validation: {artifact.name}: {e}"]

        artifact.metadata.validation = outcome
        artifact.metadata.validated = outcome.passed
        if not outcome.passed:
            messages = "; ".join(i.message for i in outcome.errors) or "failed"
            return [f"validation: {artifact.name} still failing after rewrite: {messages}"]
        return []
