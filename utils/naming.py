"""Naming utilities: entity detection, identifier renaming, slugs, output dirs."""

import os
import re

from config.defaults import DEFAULTS
from config.rules import DEFAULT_ENTITY, ENTITY_KEYWORDS, ENTITY_STOPWORDS, RENAME_SUFFIXES

BASE_DIR = os.path.dirname(os.path.dirname(__file__))

_CAPITALIZED_RE = re.compile(r"\b([A-Z][a-z]+)\b")


def keyword_regex(keyword, plural=False):
    """Whole-word pattern for a keyword; spaces match any run of whitespace."""
    body = r"\s+".join(re.escape(part) for part in keyword.split())
    suffix = "s?" if plural else ""
    return re.compile(r"(?<![\w-])" + body + suffix + r"(?![\w-])", re.IGNORECASE)


def has_keyword(text, keyword, plural=False):
    return keyword_regex(keyword, plural).search(text) is not None


def find_entities(text):
    """Return every canonical entity named in the text, in table order."""
    found = []
    for keyword, entity in ENTITY_KEYWORDS:
        if entity not in found and has_keyword(text, keyword, plural=True):
            found.append(entity)
    return found


def detect_entity(text):
    """Resolve the main entity of a request.

    The keyword table wins; otherwise the first capitalized word that is not
    a filler verb; otherwise the generic default.
    """
    found = find_entities(text)
    if found:
        return found[0]
    for word in _CAPITALIZED_RE.findall(text):
        if word.lower() not in ENTITY_STOPWORDS:
            return word
    return DEFAULT_ENTITY


def _identifier_regex(old, suffix_required=False):
    suffixes = "|".join(RENAME_SUFFIXES)
    optional = "" if suffix_required else "?"
    return re.compile(r"(?<![\w$])" + re.escape(old) + r"(" + suffixes + r")" + optional + r"(?![\w$])")


def rename_identifier(text, old, new):
    """Rename whole-word occurrences of ``old`` (and ``old`` + a known suffix).

    ``LineItem`` or ``ItemList`` are left alone when renaming ``Item``.
    """
    if not text or old == new:
        return text
    return _identifier_regex(old).sub(lambda m: new + (m.group(1) or ""), text)


_SPECIFIER_RE = re.compile(r"""(?P<quote>['"])(?P<spec>\.{1,2}/[^'"\n]*)(?P=quote)""")


def rename_references(text, old, new):
    """Rename what another file uses to reach ``old``: relative module
    specifiers and suffixed identifiers such as ``ItemProps``. A bare ``Item``
    in prose or an unrelated identifier is left alone.
    """
    if not text or old == new:
        return text
    text = _identifier_regex(old, suffix_required=True).sub(lambda m: new + m.group(1), text)
    return _SPECIFIER_RE.sub(
        lambda m: m.group("quote") + rename_identifier(m.group("spec"), old, new) + m.group("quote"),
        text,
    )


def slugify(text):
    """Convert text to a filesystem-safe slug."""
    text = text.lower().strip()
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[\s_-]+", "_", text)
    return text.strip("_")


def kebab(name):
    """'ProductCard' -> 'product-card'."""
    spaced = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "-", name)
    return re.sub(r"[^a-z0-9]+", "-", spaced.lower()).strip("-") or "project"


def extract_project_name(request):
    """Pull a short project name from the request text."""
    filler = {
        "build", "me", "a", "an", "the", "create", "make", "generate",
        "write", "for", "to", "with", "using", "that", "and", "app",
        "application", "component", "please", "can", "you", "i", "want",
        "need", "some", "new", "simple",
    }
    words = re.sub(r"[^\w\s]", "", request.lower()).split()
    meaningful = [w for w in words if w not in filler]
    name = "_".join(meaningful[:3]) if meaningful else "project"
    return slugify(name)


MAX_DEDUP = 1000


def _check_containment(path, base_dir):
    """Verify the resolved path stays within base_dir."""
    resolved = os.path.realpath(path)
    if not resolved.startswith(os.path.realpath(base_dir) + os.sep):
        raise ValueError(f"Generated output path escapes base directory: {path}")
    return resolved


def get_output_dir(scope, request, base_dir=None):
    """Return a deduplicated output directory for the given scope and request."""
    base_dir = base_dir or os.path.join(BASE_DIR, DEFAULTS["output_root"])
    project_name = extract_project_name(request)
    base = os.path.join(base_dir, slugify(scope) or "feature", project_name)
    _check_containment(base, base_dir)

    if not os.path.exists(base):
        return base

    for counter in range(2, MAX_DEDUP + 2):
        candidate = f"{base}_{counter}"
        if not os.path.exists(candidate):
            return candidate

    raise RuntimeError(f"Too many duplicate projects (>{MAX_DEDUP}) for: {project_name}")
