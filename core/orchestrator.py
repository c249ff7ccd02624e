"""Pipeline orchestrator: Prepared -> Generated -> Validated -> Optimized -> Done."""

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor

from agents.composer import PromptComposer
from agents.extractor import ArtifactExtractor, measure
from agents.generator import GenerationInvoker
from agents.optimizer import CodeOptimizer, QualityAnalyzer
from agents.rewriter import CorrectiveRewriter
from agents.template_search import TemplateSearch
from agents.validation import ValidationStage
from config.defaults import PipelineConfig
from core.quality import (
    build_manifest,
    build_readme,
    collect_dependencies,
    count_warning,
    quality_score,
)
from core.state import (
    Artifact,
    GenerationRequest,
    PipelineResult,
    PipelineRun,
    PipelineStatus,
    StageResult,
)
from manager.analyzer import analyze_prompt
from manager.classifier import ScopeClassifier
from utils.naming import kebab

logger = logging.getLogger(__name__)

_TRANSITIONS = {
    PipelineStatus.PREPARED: {PipelineStatus.GENERATED, PipelineStatus.FAILED},
    PipelineStatus.GENERATED: {PipelineStatus.VALIDATED, PipelineStatus.FAILED},
    PipelineStatus.VALIDATED: {PipelineStatus.OPTIMIZED},
    PipelineStatus.OPTIMIZED: {PipelineStatus.DONE},
}


def _advance(run: PipelineRun, status: PipelineStatus):
    if status not in _TRANSITIONS.get(run.status, set()):
        raise RuntimeError(f"Illegal transition {run.status.value} -> {status.value}")
    run.history.append(run.status)
    run.status = status
    logger.info("Pipeline %s", status.value)


class PipelineOrchestrator:
    """Sequences the stages for one request at a time.

    Every collaborator is injected; defaults are built from the config.
    ``execute`` always returns a PipelineResult and never raises.
    """

    def __init__(self, config=None, classifier=None, composer=None, invoker=None,
                 extractor=None, validation=None, rewriter=None, optimizer=None,
                 analyzer=None, template_search=None):
        self.config = config or PipelineConfig.from_env()
        self.classifier = classifier or ScopeClassifier()
        self.composer = composer or PromptComposer()
        self.invoker = invoker or GenerationInvoker(config=self.config)
        self.extractor = extractor or ArtifactExtractor()
        self.rewriter = rewriter or CorrectiveRewriter()
        self.validation = validation or ValidationStage(
            rewriter=self.rewriter, max_workers=self.config.max_workers,
        )
        self.optimizer = optimizer or CodeOptimizer()
        self.analyzer = analyzer or QualityAnalyzer()
        self.template_search = template_search or TemplateSearch()

    def execute(self, request) -> PipelineResult:
        started = time.monotonic()
        if isinstance(request, str):
            request = GenerationRequest(prompt=request)
        run = PipelineRun(request=request)

        try:
            stage = self.prepare(run)
            if not stage.success:
                return self._fail(run, stage.error, started)

            stage = self.generate(run)
            if not stage.success:
                return self._fail(run, stage.error, started)

            self.validate(run)
            self.optimize(run)
            _advance(run, PipelineStatus.DONE)
        except Exception as e:
            logger.error("Pipeline failed: %s", e, exc_info=True)
            return self._fail(run, str(e), started)

        return self._result(run, started)

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def prepare(self, run: PipelineRun) -> StageResult[str]:
        """Analyze, classify, search prior art and compose the instruction."""
        request = run.request
        if not request.prompt or not request.prompt.strip():
            return StageResult.fail("Invalid request: prompt is required")

        run.analysis = analyze_prompt(request)
        run.scope = self.classifier.classify(
            request.prompt, run.analysis, override=request.options.get("scope"),
        )
        try:
            run.templates = self.template_search.search(run.analysis)
        except Exception as e:
            logger.warning("Template search failed: %s", e)
            run.templates = []
        run.instruction = self.composer.compose(
            request.prompt, run.analysis, run.scope, run.templates,
        )
        return StageResult.ok(run.instruction)

    def generate(self, run: PipelineRun) -> StageResult[list[Artifact]]:
        """Invoke the provider and extract artifacts."""
        try:
            run.generation = self.invoker.invoke(
                run.instruction, run.scope, run.analysis, run.request.options,
            )
        except Exception as e:
            logger.error("Generation failed: %s", e, exc_info=True)
            return StageResult.fail(f"Generation failed: {e}")

        if run.generation.files:
            artifacts = self.extractor.from_files(run.generation.files, run.analysis)
        else:
            artifacts = self.extractor.extract(run.generation.raw_text, run.analysis)

        if not artifacts:
            # only reachable from the Generated state
            _advance(run, PipelineStatus.GENERATED)
            return StageResult.fail("No artifacts could be extracted from the generated output")

        run.artifacts = artifacts
        _advance(run, PipelineStatus.GENERATED)
        warning = count_warning(len(artifacts), run.scope)
        if warning:
            run.warnings.append(warning)
        logger.info("Extracted %d artifact(s)", len(artifacts))
        return StageResult.ok(artifacts, [warning] if warning else [])

    def validate(self, run: PipelineRun):
        """Lenient validation; problems become warnings."""
        if self.config.enable_validation:
            try:
                stage = self.validation.run(run.artifacts)
                run.warnings.extend(stage.warnings)
            except Exception as e:
                logger.warning("Validation stage failed: %s", e)
                run.warnings.append(f"validation: {e}")
        else:
            logger.info("Validation skipped")
        _advance(run, PipelineStatus.VALIDATED)

    def optimize(self, run: PipelineRun):
        """Optional optimization and scoring, then the unconditional rewrite pass."""
        if self.config.enable_optimization or self.config.enable_quality_analysis:
            workers = max(1, min(self.config.max_workers, len(run.artifacts)))
            with ThreadPoolExecutor(max_workers=workers) as pool:
                per_artifact = list(pool.map(self._optimize_one, run.artifacts))
            run.warnings.extend(w for ws in per_artifact for w in ws)

        for artifact in run.artifacts:
            try:
                self.rewriter.apply(artifact)
            except Exception as e:
                logger.warning("Rewrite failed for %s: %s", artifact.name, e)
                run.warnings.append(f"rewrite: {artifact.name}: {e}")
        measure(run.artifacts)
        _advance(run, PipelineStatus.OPTIMIZED)

    def _optimize_one(self, artifact: Artifact) -> list[str]:
        warnings = []
        if self.config.enable_optimization:
            try:
                result = self.optimizer.optimize({"code": artifact.body})
                changes = result.get("changes") or []
                if changes:
                    artifact.body = result.get("optimizedCode", artifact.body)
                    artifact.metadata.optimized = True
                    artifact.metadata.optimizations = [c.get("type", "change") for c in changes]
            except Exception as e:
                logger.warning("Optimization failed for %s: %s", artifact.name, e)
                warnings.append(f"optimization: {artifact.name}: {e}")
        if self.config.enable_quality_analysis:
            try:
                result = self.analyzer.analyze({"code": artifact.body})
                artifact.metadata.quality_score = float(result.get("overallScore", 0))
                artifact.metadata.quality_metrics = dict(result.get("metrics") or {})
            except Exception as e:
                logger.warning("Quality analysis failed for %s: %s", artifact.name, e)
                warnings.append(f"quality: {artifact.name}: {e}")
        return warnings

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def _fail(self, run: PipelineRun, error, started):
        if run.status in (PipelineStatus.PREPARED, PipelineStatus.GENERATED):
            _advance(run, PipelineStatus.FAILED)
        run.error = error
        return PipelineResult(
            success=False,
            artifacts=[],
            error=error,
            status=PipelineStatus.FAILED,
            scope=run.scope,
            warnings=list(run.warnings),
            generation_source=run.generation.source if run.generation else "",
            processing_time=round(time.monotonic() - started, 3),
        )

    def _result(self, run: PipelineRun, started):
        """Aggregate a finished run. Aggregation problems become warnings."""
        project = kebab(run.analysis.main_entity) if run.analysis else "project"
        dependencies, score, manifest, readme = [], 0.0, "", ""
        try:
            dependencies = collect_dependencies(run.artifacts)
            score = quality_score(run.artifacts)
            manifest = build_manifest(project, dependencies)
            readme = build_readme(project, run.request.prompt, run.scope, run.artifacts)
        except Exception as e:
            logger.warning("Result aggregation failed: %s", e)
            run.warnings.append(f"aggregation: {e}")
        return PipelineResult(
            success=True,
            artifacts=run.artifacts,
            status=run.status,
            scope=run.scope,
            quality_score=score,
            dependencies=dependencies,
            warnings=list(run.warnings),
            package_manifest=manifest,
            readme=readme,
            generation_source=run.generation.source if run.generation else "",
            processing_time=round(time.monotonic() - started, 3),
        )

    def write_artifacts(self, result: PipelineResult, output_dir):
        """Write artifacts, README and manifest to disk. Returns written paths."""
        if not output_dir or not result.success:
            return []

        os.makedirs(output_dir, exist_ok=True)
        files = [(a.path, a.body) for a in result.artifacts]
        paths = {a.path for a in result.artifacts}
        if "README.md" not in paths and result.readme:
            files.append(("README.md", result.readme))
        if "package.json" not in paths and result.package_manifest:
            files.append(("package.json", result.package_manifest))

        written = []
        for path, content in files:
            full_path = os.path.join(output_dir, path)
            resolved = os.path.realpath(full_path)
            if not resolved.startswith(os.path.realpath(output_dir) + os.sep):
                raise ValueError(f"Path escapes output directory: {path}")
            os.makedirs(os.path.dirname(resolved), exist_ok=True)
            with open(resolved, "w") as fp:
                fp.write(content)
            written.append(path)
        return written
