"""Optimizer and quality analyzer collaborators. No LLM calls."""

import math
import re

from core.quality import estimate_complexity

_NAMED_IMPORT_RE = re.compile(
    r"""^(?P<indent>[ \t]*)import\s+(?!type\s)(?P<clause>[^'";\n]+?)\s+from\s+(?P<quote>['"])(?P<spec>[^'"\n]+)(?P=quote)[ \t]*;?[ \t]*$"""
)
_VAR_RE = re.compile(r"(?<![\w$.])var\s+(?=[A-Za-z_$\[{])")
_TOKEN_RE = re.compile(r"[A-Za-z_$][\w$]*|\d+(?:\.\d+)?|[^\s\w]")
_ANY_RE = re.compile(r":\s*any\b|\bas\s+any\b")

# Default imports kept even when unreferenced (JSX needs React in scope).
_KEEP_DEFAULTS = {"React"}


def _uses(code, name):
    return re.search(r"(?<![\w$])" + re.escape(name) + r"(?![\w$])", code) is not None


def _parse_clause(clause):
    """Split an import clause into (default, namespace, [(imported, local)])."""
    default = namespace = None
    named = []
    brace = re.search(r"\{([^}]*)\}", clause)
    if brace:
        for part in brace.group(1).split(","):
            part = part.strip()
            if not part:
                continue
            pieces = re.split(r"\s+as\s+", part)
            named.append((part, pieces[-1].strip()))
        clause = clause[:brace.start()] + clause[brace.end():]
    for part in clause.split(","):
        part = part.strip()
        if not part:
            continue
        if part.startswith("*"):
            namespace = re.split(r"\s+as\s+", part)[-1].strip()
        else:
            default = part
    return default, namespace, named


class CodeOptimizer:
    """``optimize({code})`` -> ``{optimizedCode, changes}``."""

    name = "optimizer"

    def optimize(self, request):
        code = request.get("code") or ""
        changes = []
        lines = code.split("\n")
        result = []

        for line_num, line in enumerate(lines, 1):
            m = _NAMED_IMPORT_RE.match(line)
            if m:
                rest = "\n".join(lines[:line_num - 1] + lines[line_num:])
                line = self._prune_import(m, rest, line_num, changes)
                if line is None:
                    continue

            new_line = _VAR_RE.sub("let ", line)
            if new_line != line:
                changes.append({"type": "var_to_let", "description": "Replaced 'var' with 'let'",
                                "line": line_num})
                line = new_line
            result.append(line)

        return {"optimizedCode": "\n".join(result), "changes": changes}

    def _prune_import(self, m, rest, line_num, changes):
        default, namespace, named = _parse_clause(m.group("clause"))
        keep_default = default if default and (default in _KEEP_DEFAULTS or _uses(rest, default)) else None
        keep_namespace = namespace if namespace and _uses(rest, namespace) else None
        keep_named = [imported for imported, local in named if _uses(rest, local)]

        removed = ([default] if default and not keep_default else []) \
            + ([namespace] if namespace and not keep_namespace else []) \
            + [local for imported, local in named if imported not in keep_named]
        if not removed:
            return m.group(0)

        changes.append({
            "type": "unused_import",
            "description": f"Removed unused import(s): {', '.join(removed)}",
            "line": line_num,
        })
        parts = []
        if keep_default:
            parts.append(keep_default)
        if keep_namespace:
            parts.append(f"* as {keep_namespace}")
        if keep_named:
            parts.append("{ " + ", ".join(keep_named) + " }")
        if not parts:
            return None
        quote = m.group("quote")
        return f"{m.group('indent')}import {', '.join(parts)} from {quote}{m.group('spec')}{quote};"


class QualityAnalyzer:
    """``analyze({code})`` -> ``{overallScore, metrics}``.

    The score blends a maintainability index (Halstead volume, cyclomatic
    complexity, lines of code) with a type-coverage estimate.
    """

    name = "quality_analyzer"

    def analyze(self, request):
        code = request.get("code") or ""
        loc = sum(1 for line in code.split("\n")
                  if line.strip() and not line.strip().startswith(("//", "/*", "*")))
        complexity = estimate_complexity(code)
        tokens = _TOKEN_RE.findall(code)
        vocabulary = max(len(set(tokens)), 2)
        volume = max(len(tokens) * math.log2(vocabulary), 1.0)

        raw_mi = 171 - 5.2 * math.log(volume) - 0.23 * complexity - 16.2 * math.log(max(loc, 1))
        maintainability = max(0.0, min(100.0, raw_mi * 100 / 171))
        type_coverage = max(0, 100 - 10 * len(_ANY_RE.findall(code)))
        overall = round(0.7 * maintainability + 0.3 * type_coverage, 1) if loc else 0.0

        return {
            "overallScore": overall,
            "metrics": {
                "linesOfCode": loc,
                "complexity": complexity,
                "maintainability": round(maintainability, 1),
                "typeCoverage": type_coverage,
            },
        }
