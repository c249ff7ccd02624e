"""Static validator: rule-based checks over a single artifact. No LLM calls."""

import re

from agents.rewriter import is_forbidden
from config.rules import VALIDATION_PATTERNS

_STRIP_RE = re.compile(
    r"//[^\n]*|/\*.*?\*/|'(?:\\.|[^'\\\n])*'|\"(?:\\.|[^\"\\\n])*\"|`(?:\\.|[^`\\])*`",
    re.DOTALL,
)
_PAIRS = {"{": "}", "[": "]", "(": ")"}
_IMPORT_SPEC_RE = re.compile(r"""^\s*import\s[^;]*?['"]([^'"\n]+)['"]""", re.MULTILINE)
_COMPONENT_DECL_RE = re.compile(r"^(?:export\s+)?(?:function|const)\s+[A-Z][a-z0-9][\w$]*", re.MULTILINE)
_JSX_RE = re.compile(r"/>|</[A-Za-z>]")

_SCRIPT_LANGUAGES = {"typescript", "javascript"}

_PENALTY = {"critical": 40, "error": 20, "warning": 5}


def _issue(severity, category, message, line=None, suggestion=""):
    return {
        "severity": severity,
        "category": category,
        "message": message,
        "line": line,
        "suggestion": suggestion,
    }


def score_issues(issues):
    """100 minus 40 per critical, 20 per error and 5 per warning, floored at 0."""
    penalty = sum(_PENALTY.get(i["severity"], 0) for i in issues)
    return max(0, 100 - penalty)


def check_balance(code):
    """Return an issue dict for the first unbalanced bracket, or None."""
    stripped = _STRIP_RE.sub("", code)
    stack = []
    closers = {v: k for k, v in _PAIRS.items()}
    for ch in stripped:
        if ch in _PAIRS:
            stack.append(ch)
        elif ch in closers:
            if not stack or stack[-1] != closers[ch]:
                return _issue("error", "syntax", f"Unexpected '{ch}'",
                              suggestion="Check bracket nesting")
            stack.pop()
    if stack:
        return _issue("error", "syntax", f"Unclosed '{stack[-1]}' ({len(stack)} open)",
                      suggestion=f"Add the missing '{_PAIRS[stack[-1]]}'")
    return None


class StaticValidator:
    """Validator collaborator: ``validate({code, language, options})`` -> ``{passed, score, issues}``.

    Passed means no error or critical issue. Only script languages get the
    line rules; other files are checked for emptiness alone.
    """

    name = "static_validator"

    def validate(self, request):
        code = request.get("code") or ""
        language = (request.get("language") or "typescript").lower()
        issues = []

        if not code.strip():
            issues.append(_issue("critical", "syntax", "Artifact body is empty",
                                 suggestion="Regenerate the file"))
        elif language in _SCRIPT_LANGUAGES:
            issues.extend(self._scan(code))

        passed = not any(i["severity"] in ("error", "critical") for i in issues)
        return {"passed": passed, "score": score_issues(issues), "issues": issues}

    def _scan(self, code):
        issues = []
        balance = check_balance(code)
        if balance:
            issues.append(balance)

        for line_num, line in enumerate(code.split("\n"), 1):
            for pattern, severity, category, message, suggestion in VALIDATION_PATTERNS:
                if pattern.search(line):
                    issues.append(_issue(severity, category, message, line_num, suggestion))

        for match in _IMPORT_SPEC_RE.finditer(code):
            if is_forbidden(match.group(1)):
                line_num = code.count("\n", 0, match.start(1)) + 1
                issues.append(_issue(
                    "error", "dependency",
                    f"Package '{match.group(1)}' is not available in the runtime",
                    line_num, "Remove the import and use plain React/CSS instead",
                ))

        if _JSX_RE.search(code) and _COMPONENT_DECL_RE.search(code) \
                and not re.search(r"^\s*export\s+default\b", code, re.MULTILINE):
            issues.append(_issue("warning", "contract", "Component has no default export",
                                 suggestion="Add 'export default <Component>'"))
        return issues
