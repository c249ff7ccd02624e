"""Artifact extractor: raw provider text -> named, pathed artifacts."""

import logging
import posixpath

from agents.strategies import (
    TEXT_STRATEGIES,
    ExtractionContext,
    StructuredPayloadStrategy,
    fallback_artifact,
    make_artifact,
    name_from_path,
    parse_payload,
)
from config.defaults import DEFAULTS
from config.rules import GENERIC_NAMES
from core.errors import ExtractionError
from core.quality import estimate_complexity, extract_dependencies
from core.state import Artifact, PromptAnalysis, SiblingFile
from utils.naming import detect_entity, rename_identifier, rename_references

logger = logging.getLogger(__name__)


class ArtifactExtractor:
    """Tries each strategy in order and keeps the first non-empty result.

    A JSON payload with recognised keys goes straight to the structured
    strategy. When nothing matches, the whole text becomes one artifact, so
    non-empty input always yields at least one artifact.
    """

    name = "extractor"

    def __init__(self, strategies=None, min_chars=None):
        self.strategies = [cls() for cls in TEXT_STRATEGIES] if strategies is None else strategies
        self.min_chars = DEFAULTS["min_section_chars"] if min_chars is None else min_chars

    def extract(self, raw_text, analysis: PromptAnalysis | None = None) -> list[Artifact]:
        if not raw_text:
            return []
        entity = analysis.main_entity if analysis else detect_entity("")
        ctx = ExtractionContext(entity=entity, min_chars=self.min_chars)

        artifacts = None
        if parse_payload(raw_text) is not None:
            artifacts = self._attempt(StructuredPayloadStrategy(), raw_text, ctx)
        if not artifacts:
            for strategy in self.strategies:
                artifacts = self._attempt(strategy, raw_text, ctx)
                if artifacts:
                    break
        if not artifacts:
            logger.debug("No strategy matched, using fallback artifact %s", entity)
            artifacts = [fallback_artifact(raw_text, ctx)]

        return self.finalize(artifacts, entity)

    def from_files(self, files, analysis: PromptAnalysis | None = None) -> list[Artifact]:
        """Artifacts from a sub-generator's ``[{path, content}]`` list."""
        entity = analysis.main_entity if analysis else detect_entity("")
        artifacts = [
            make_artifact(name_from_path(f["path"]), f["path"], f["content"])
            for f in files
        ]
        return self.finalize(artifacts, entity)

    def _attempt(self, strategy, raw_text, ctx):
        try:
            result = strategy.try_extract(raw_text, ctx)
        except ExtractionError as e:
            logger.debug("Strategy %s declined: %s", strategy.name, e)
            return None
        except Exception as e:
            logger.debug("Strategy %s raised %s, trying next", strategy.name, e)
            return None
        if result:
            logger.debug("Strategy %s extracted %d artifact(s)", strategy.name, len(result))
        return result

    def finalize(self, artifacts, entity):
        """Normalize names, make paths unique, attach siblings and metrics."""
        for artifact in artifacts:
            directory = posixpath.dirname(artifact.path)
            siblings = [o for o in artifacts if o is not artifact and posixpath.dirname(o.path) == directory]
            normalize_name(artifact, entity, siblings)
        return measure(dedupe_paths(artifacts))


def measure(artifacts):
    """Recompute dependencies, line count, complexity and sibling snapshots
    from the current bodies. Run again whenever a body changes."""
    for artifact in artifacts:
        artifact.dependencies = extract_dependencies(artifact.body)
        artifact.metadata.line_count = artifact.body.count("\n") + 1 if artifact.body else 0
        artifact.metadata.complexity = estimate_complexity(artifact.body)
        directory = posixpath.dirname(artifact.path)
        artifact.metadata.siblings = [
            SiblingFile(path=other.path, content=other.body)
            for other in artifacts
            if other is not artifact and posixpath.dirname(other.path) == directory
        ]
    return artifacts


def normalize_name(artifact: Artifact, entity, siblings=()):
    """Rename a generic-named artifact to the entity, whole identifiers only.

    Sibling artifacts in the same directory have their paths renamed, and
    their import specifiers and suffixed identifiers (``ItemProps``) follow
    so references keep pointing at the renamed file. Other text in a
    sibling is left alone.
    """
    base, dot, rest = artifact.name.partition(".")
    if base not in GENERIC_NAMES or base == entity or entity in GENERIC_NAMES:
        return artifact
    artifact.metadata.renamed_from = artifact.name
    artifact.name = entity + dot + rest
    artifact.path = rename_identifier(artifact.path, base, entity)
    artifact.body = rename_identifier(artifact.body, base, entity)
    for sibling in siblings:
        sibling.path = rename_identifier(sibling.path, base, entity)
        sibling.body = rename_references(sibling.body, base, entity)
    logger.debug("Renamed %s -> %s", artifact.metadata.renamed_from, artifact.name)
    return artifact


def dedupe_paths(artifacts):
    """Drop exact duplicates and suffix colliding paths so every path is unique."""
    seen = set()
    bodies = {}
    unique = []
    for artifact in artifacts:
        original = artifact.path
        if artifact.body in bodies.get(original, ()):
            continue
        bodies.setdefault(original, []).append(artifact.body)
        if original in seen:
            stem, ext = posixpath.splitext(original)
            counter = 2
            while f"{stem}-{counter}{ext}" in seen:
                counter += 1
            logger.warning("Duplicate path %s renamed to %s-%d%s", artifact.path, stem, counter, ext)
            artifact.path = f"{stem}-{counter}{ext}"
            artifact.name = f"{artifact.name}-{counter}"
        seen.add(artifact.path)
        unique.append(artifact)
    return unique
