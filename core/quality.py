"""Code metrics and result aggregation."""

import json
import re

from core.state import Artifact, ScopeDetectionResult

_IMPORT_RE = re.compile(
    r"""(?:^|\n)\s*import\s+(?:type\s+)?(?:[\w*\s{},$]+?\s+from\s+)?['"]([^'"\n]+)['"]"""
    r"""|\brequire\(\s*['"]([^'"\n]+)['"]\s*\)"""
)
_BRANCH_RE = re.compile(r"\b(?:if|else|for|while|switch|case)\b|&&|\|\|")


def package_name(specifier):
    """'react-dom/client' -> 'react-dom', '@scope/pkg/x' -> '@scope/pkg'."""
    parts = specifier.split("/")
    if specifier.startswith("@") and len(parts) > 1:
        return "/".join(parts[:2])
    return parts[0]


def extract_dependencies(code):
    """External packages imported by the code, first-seen order, no duplicates."""
    deps = []
    for match in _IMPORT_RE.finditer(code or ""):
        spec = match.group(1) or match.group(2)
        if spec.startswith((".", "/")):
            continue
        name = package_name(spec)
        if name and name not in deps:
            deps.append(name)
    return deps


def estimate_complexity(code):
    """McCabe-style estimate: one plus the number of branch points."""
    return 1 + len(_BRANCH_RE.findall(code or ""))


def quality_score(artifacts: list[Artifact]) -> float:
    """Mean of per-artifact scores; an unscored artifact counts as 0."""
    if not artifacts:
        return 0.0
    return round(sum(a.score for a in artifacts) / len(artifacts), 1)


def collect_dependencies(artifacts: list[Artifact]) -> list[str]:
    seen = []
    for artifact in artifacts:
        for dep in artifact.dependencies:
            if dep not in seen:
                seen.append(dep)
    return seen


def count_warning(count, scope: ScopeDetectionResult):
    """Warning text when the artifact count is outside the expected range, else None."""
    low, high = scope.expected_range
    if count < low:
        return f"Generated {count} artifact(s), expected at least {low} for {scope.type.value}"
    if count > high:
        return f"Generated {count} artifact(s), expected at most {high} for {scope.type.value}"
    return None


def build_manifest(project_name, dependencies):
    manifest = {
        "name": project_name,
        "version": "1.0.0",
        "private": True,
        "scripts": {"dev": "vite", "build": "vite build"},
        "dependencies": {dep: "latest" for dep in dependencies},
    }
    return json.dumps(manifest, indent=2)


def build_readme(title, request, scope: ScopeDetectionResult | None, artifacts: list[Artifact]):
    lines = [f"# {title}", "", request.strip(), ""]
    if scope is not None:
        lines += [f"Scope: {scope.type.value} ({scope.complexity})", ""]
    lines += ["## Files", ""]
    for artifact in artifacts:
        lines.append(f"- `{artifact.path}` ({artifact.type.value})")
    lines += ["", "## Getting started", "", "```bash", "npm install", "npm run dev", "```", ""]
    return "\n".join(lines)
