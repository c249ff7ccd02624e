"""Corrective rewriter: ordered, idempotent fixes for the preview runtime.

Every fix is a pure ``str -> str`` function. They run in the order of
FIXES on every artifact, whether or not validation flagged the concern.
Import stripping runs last so earlier patterns still see the import lines.
"""

import logging
import re

from config.rules import DIAGNOSTIC_CALLS, FORBIDDEN_PACKAGES, STATEFUL_PRIMITIVES, TYPE_RELAX_PATTERNS
from core.state import Artifact, ValidationOutcome

logger = logging.getLogger(__name__)

_PRIMITIVE_RE = re.compile(r"\b(" + "|".join(STATEFUL_PRIMITIVES) + r")\s*<")


def strip_hook_generics(code):
    """useState<User[]>([]) -> useState([]). Nested type arguments are handled."""
    out = []
    pos = 0
    for match in _PRIMITIVE_RE.finditer(code):
        if match.start() < pos:
            continue
        depth = 0
        i = match.end() - 1           # at '<'
        end = None
        while i < len(code):
            ch = code[i]
            if ch == "<":
                depth += 1
            elif ch == ">" and code[i - 1] != "=":
                depth -= 1
                if depth == 0:
                    end = i
                    break
            elif ch == ";" or i - match.end() > 400:
                break
            i += 1
        if end is None:
            continue
        rest = code[end + 1:].lstrip()
        if not rest.startswith("("):
            continue
        out.append(code[pos:match.start()])
        out.append(match.group(1))
        pos = end + 1
    out.append(code[pos:])
    return "".join(out)


def relax_type_annotations(code):
    """Drop ``any`` annotations, ``as any`` casts and ``React.FC`` annotations."""
    for pattern, replacement in TYPE_RELAX_PATTERNS:
        code = pattern.sub(replacement, code)
    return code


_DIAGNOSTIC_RE = re.compile(
    r"^\s*(?:console\.(?:" + "|".join(DIAGNOSTIC_CALLS) + r")\s*\(.*\)\s*;?|debugger\s*;?)\s*$"
)
# A braceless control header; the next statement is its body.
_BRACELESS_HEADER_RE = re.compile(r"^\s*(?:\}\s*)?(?:(?:else\s+)?if|for|while)\b.*\)\s*$|^\s*(?:\}\s*)?else\s*$")


def strip_diagnostics(code):
    """Remove standalone console.log/debug/info/trace and debugger lines.

    A line that is the body of a braceless if/for/while/else is kept.
    """
    kept = []
    previous = ""
    for line in code.split("\n"):
        is_diagnostic = (
            _DIAGNOSTIC_RE.match(line) is not None
            and line.count("(") == line.count(")")
            and line.count(";") <= 1
        )
        if is_diagnostic and not _BRACELESS_HEADER_RE.match(previous):
            continue
        kept.append(line)
        if line.strip():
            previous = line
    return "\n".join(kept)


_DEFAULT_EXPORT_RE = re.compile(r"^[ \t]*export\s+default\b", re.MULTILINE)
_DEFAULT_EXPORT_NAME_RE = re.compile(r"^[ \t]*export\s+default\s+[\w$.]+\s*;?[ \t]*$")
_TOP_LEVEL_DECL_RE = re.compile(
    r"^(?:export\s+)?(?:async\s+)?(?:function|class|const|let)\s+([A-Z][a-z0-9][\w$]*)", re.MULTILINE,
)


def ensure_default_export(code):
    """Exactly one ``export default``; synthesize it from a top-level declaration."""
    matches = list(_DEFAULT_EXPORT_RE.finditer(code))
    if not matches:
        decl = _TOP_LEVEL_DECL_RE.search(code)
        if not decl:
            return code
        return code.rstrip("\n") + f"\n\nexport default {decl.group(1)};\n"
    if len(matches) == 1:
        return code

    lines = code.split("\n")
    seen = False
    result = []
    for line in lines:
        if _DEFAULT_EXPORT_RE.match(line):
            if not seen:
                seen = True
            elif _DEFAULT_EXPORT_NAME_RE.match(line):
                continue
            else:
                line = re.sub(r"export\s+default\s+", "", line, count=1)
        result.append(line)
    return "\n".join(result)


_FETCH_TEMPLATE_RE = re.compile(r"(\bfetch\s*\(\s*)`([^`]*)`")
_INTERPOLATION_RE = re.compile(r"\$\{([^{}]*)\}")
_SIMPLE_EXPR_RE = re.compile(r"[\w$.\[\]'\"]+")


def _quote(literal):
    return "'" + literal.replace("\\'", "'").replace("'", "\\'").replace("\n", "\\n") + "'"


def _concat_template(template):
    pieces = []
    pos = 0
    for match in _INTERPOLATION_RE.finditer(template):
        if match.start() > pos:
            pieces.append(_quote(template[pos:match.start()]))
        expr = match.group(1).strip()
        pieces.append(expr if _SIMPLE_EXPR_RE.fullmatch(expr) else f"({expr})")
        pos = match.end()
    if pos < len(template):
        pieces.append(_quote(template[pos:]))
    if not pieces:
        return "''"
    # a lone expression must stay a string
    if len(pieces) == 1 and not pieces[0].startswith("'"):
        pieces.insert(0, "''")
    return " + ".join(pieces)


def concat_fetch_urls(code):
    """fetch(`${API}/users/${id}`) -> fetch(API + '/users/' + id)."""
    return _FETCH_TEMPLATE_RE.sub(lambda m: m.group(1) + _concat_template(m.group(2)), code)


_IMPORT_RE = re.compile(
    r"""^[ \t]*import\s+(?:type\s+)?(?:[\w*$\s{},]+?\s+from\s+)?['"]([^'"\n]+)['"][ \t]*;?[ \t]*(?:\n|$)""",
    re.MULTILINE,
)


def _strip_imports(code, predicate):
    return _IMPORT_RE.sub(lambda m: "" if predicate(m.group(1)) else m.group(0), code)


def strip_relative_imports(code):
    """Remove imports of same-directory modules (``./x``)."""
    return _strip_imports(code, lambda spec: spec.startswith("./"))


def is_forbidden(specifier):
    return any(specifier == pkg or specifier.startswith(pkg + "/") for pkg in FORBIDDEN_PACKAGES)


def strip_forbidden_imports(code):
    """Remove imports of packages the sandbox does not provide."""
    return _strip_imports(code, is_forbidden)


FIXES = [
    ("hook_generics", strip_hook_generics),
    ("type_annotations", relax_type_annotations),
    ("diagnostics", strip_diagnostics),
    ("default_export", ensure_default_export),
    ("fetch_urls", concat_fetch_urls),
    ("relative_imports", strip_relative_imports),
    ("forbidden_imports", strip_forbidden_imports),
]


class CorrectiveRewriter:
    """Applies FIXES in order. ``rewrite(rewrite(x)) == rewrite(x)``."""

    name = "rewriter"

    def __init__(self, fixes=None):
        self.fixes = FIXES if fixes is None else fixes

    def rewrite(self, body, outcome: ValidationOutcome | None = None):
        if outcome is not None and not outcome.passed:
            logger.debug("Rewriting after %d validation error(s)", len(outcome.errors))
        return self._apply(body)[0]

    def _apply(self, body):
        applied = []
        for name, fix in self.fixes:
            fixed = fix(body)
            if fixed != body:
                applied.append(name)
                body = fixed
        return body, applied

    def apply(self, artifact: Artifact, outcome: ValidationOutcome | None = None) -> Artifact:
        """Rewrite an artifact's body in place and record which fixes changed it."""
        if outcome is not None and not outcome.passed:
            logger.debug("Rewriting %s after %d validation error(s)", artifact.name, len(outcome.errors))
        artifact.body, applied = self._apply(artifact.body)
        artifact.metadata.rewritten = True
        for name in applied:
            if name not in artifact.metadata.fixes:
                artifact.metadata.fixes.append(name)
        if applied:
            logger.debug("Fixes on %s: %s", artifact.name, applied)
        return artifact
