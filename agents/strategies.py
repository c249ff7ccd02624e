"""Extraction strategies.

Each strategy turns raw provider text into artifacts or declines by
returning None. A strategy that recognises its format but finds nothing
usable in it raises ExtractionError. The extractor tries them in order and keeps the first
non-empty answer.
"""

import json
import logging
import os
import posixpath
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

from config.defaults import DEFAULTS
from core.errors import ExtractionError
from core.state import Artifact, ArtifactType

logger = logging.getLogger(__name__)

_FENCE_LINE_RE = re.compile(r"^[ \t]*```")
_FENCE_STRIP_RE = re.compile(r"^[ \t]*```[^\n]*(?:\n|$)", re.MULTILINE)

_EXT_LANGUAGE = {
    ".ts": "typescript", ".tsx": "typescript", ".js": "javascript",
    ".jsx": "javascript", ".mjs": "javascript", ".css": "css",
    ".scss": "scss", ".json": "json", ".md": "markdown", ".html": "html",
    ".py": "python", ".prisma": "prisma", ".sql": "sql", ".yml": "yaml",
    ".yaml": "yaml", ".env": "text",
}

_LANGUAGE_ALIASES = {
    "ts": "typescript", "tsx": "typescript", "typescript": "typescript",
    "js": "javascript", "jsx": "javascript", "javascript": "javascript",
}

# Fenced blocks with these tags are shell instructions, not files.
_SKIP_LANGUAGES = {"bash", "sh", "shell", "console", "zsh", "powershell", "cmd", "text", "plaintext"}


def strip_fences(text):
    """Remove every code-fence delimiter line."""
    return _FENCE_STRIP_RE.sub("", text or "").strip()


def normalize_language(tag):
    tag = (tag or "").strip().lower()
    return _LANGUAGE_ALIASES.get(tag, tag or "typescript")


def guess_language(path):
    """Guess language from file extension."""
    _, ext = os.path.splitext(path)
    return _EXT_LANGUAGE.get(ext.lower(), "text")


def name_from_path(path):
    """'src/components/Button.types.ts' -> 'Button.types'."""
    base = posixpath.basename(path)
    return base.rsplit(".", 1)[0] if "." in base.lstrip(".") else base


def infer_type(path):
    """Pick an ArtifactType from path conventions."""
    lower = "/" + path.lower()
    base = posixpath.basename(lower)
    stem, ext = os.path.splitext(base)

    if ".test." in base or ".spec." in base or "/__tests__/" in lower or "/tests/" in lower:
        return ArtifactType.TEST
    if ext == ".json" or "/config/" in lower or base.startswith((".env", "tsconfig", "vite.config", "tailwind.config")):
        return ArtifactType.CONFIG
    if "/pages/" in lower or stem.endswith("page"):
        return ArtifactType.PAGE
    if any(p in lower for p in ("/models/", "/types/", "/schemas/")) or ".types." in base \
            or ".model." in base or ext == ".prisma":
        return ArtifactType.MODEL
    if any(p in lower for p in ("/services/", "/controllers/", "/routes/", "/middleware/", "/api/")) \
            or (stem in ("server", "app") and ext in (".ts", ".js")):
        return ArtifactType.SERVICE
    if any(p in lower for p in ("/utils/", "/hooks/", "/lib/", "/helpers/", "/mocks/", "/validators/", "/data/")) \
            or ".mock." in base or stem == "index":
        return ArtifactType.UTIL
    return ArtifactType.COMPONENT


def looks_like_jsx(code):
    return re.search(r"/>|</[A-Za-z>]", code) is not None


def component_path(name, language="typescript", code=""):
    if language == "css":
        return f"src/styles/{name}.css"
    if language == "json":
        return f"src/data/{name}.json"
    ext = ".tsx" if language == "typescript" else ".jsx"
    if code and not looks_like_jsx(code):
        ext = ".ts" if language == "typescript" else ".js"
    return f"src/components/{name}{ext}"


def make_artifact(name, path, body, language=None):
    return Artifact(
        name=name,
        type=infer_type(path),
        path=path,
        body=body,
        language=normalize_language(language) if language else guess_language(path),
    )


def section_body(section):
    """Body of a section that follows a marker or path comment.

    If a fence opens right after the header, the body is that block. If the
    header sat inside a fence, the body runs up to the closing fence.
    Otherwise the whole section is the body.
    """
    lines = section.split("\n")
    idx = 0
    while idx < len(lines) and not lines[idx].strip():
        idx += 1
    if idx < len(lines) and _FENCE_LINE_RE.match(lines[idx]):
        idx += 1
    body = []
    for line in lines[idx:]:
        if _FENCE_LINE_RE.match(line):
            break
        body.append(line)
    return "\n".join(body).strip()


@dataclass
class ExtractionContext:
    entity: str
    min_chars: int = DEFAULTS["min_section_chars"]


class ExtractionStrategy(ABC):
    name = "base"

    @abstractmethod
    def try_extract(self, text, ctx: ExtractionContext) -> list[Artifact] | None:
        ...


class MarkerStrategy(ExtractionStrategy):
    """``component:<name>:<lang>:<path>`` marker lines, body until the next marker."""

    name = "marker"

    MARKER_RE = re.compile(
        r"^[ \t]*(?://|#|<!--)?[ \t]*component:([\w.$-]+):([\w+#-]+):(\S+?)[ \t]*(?:-->)?[ \t]*$",
        re.MULTILINE,
    )

    def try_extract(self, text, ctx):
        markers = list(self.MARKER_RE.finditer(text))
        if not markers:
            return None
        artifacts = []
        for i, m in enumerate(markers):
            end = markers[i + 1].start() if i + 1 < len(markers) else len(text)
            body = section_body(text[m.end():end])
            if len(body) < ctx.min_chars:
                continue
            artifacts.append(make_artifact(m.group(1), m.group(3), body, m.group(2)))
        return artifacts or None


class PathCommentStrategy(ExtractionStrategy):
    """Sections introduced by a comment holding a relative path, e.g. ``// src/App.tsx``."""

    name = "path_comment"

    PATH_COMMENT_RE = re.compile(
        r"^[ \t]*(?://|#+|/\*|<!--)[ \t]*(?:(?:File|Path):[ \t]*)?"
        r"((?:[\w.@-]+/)+[\w.@-]+\.[A-Za-z]{1,6})[ \t]*(?:\*/|-->)?[ \t]*$",
        re.MULTILINE,
    )

    def try_extract(self, text, ctx):
        headers = list(self.PATH_COMMENT_RE.finditer(text))
        if not headers:
            return None
        artifacts = []
        for i, m in enumerate(headers):
            end = headers[i + 1].start() if i + 1 < len(headers) else len(text)
            body = section_body(text[m.end():end])
            if len(body) < ctx.min_chars:
                continue
            path = m.group(1)
            artifacts.append(make_artifact(name_from_path(path), path, body))
        return artifacts or None


class FencedBlockStrategy(ExtractionStrategy):
    """Fenced code blocks, each optionally labelled with a path.

    Handles the forms:
        ```src/Button.tsx          (path as info string)
        ```tsx src/Button.tsx      (language then path)
        ```typescript:Button.tsx   (language:path)
        ```tsx                     (path in a first-line comment, or on the
        // Button.tsx               line right before the fence)
    Undecorated blocks are named after the detected entity.
    """

    name = "fenced"

    BLOCK_RE = re.compile(r"```([\w.+#/:@-]*)(?:[ \t]+(\S+?))?[ \t]*\n(.*?)```", re.DOTALL)
    COMMENT_PATH_RE = re.compile(r"^(?://|#|/\*|<!--)\s*(?:File:\s*)?([\w./@-]+\.\w+)\s*(?:\*/|-->)?\s*\n")
    LABEL_RE = re.compile(r"^(?://|#+|\*\*|`)?\s*(?:File:\s*)?([\w./@-]+\.\w{1,6})\s*(?:\*\*|`)?:?\s*$")
    DECLARATION_RE = re.compile(
        r"^export\s+(?:default\s+)?(?:async\s+)?(?:function|class|const)\s+([A-Z][\w$]*)", re.MULTILINE,
    )

    def _label_before(self, text, start):
        preceding = text[:start].rstrip("\n").rsplit("\n", 1)[-1].strip()
        m = self.LABEL_RE.match(preceding)
        return m.group(1) if m else None

    def try_extract(self, text, ctx):
        artifacts = []
        used_names = set()
        undecorated = 0
        for match in self.BLOCK_RE.finditer(text):
            tag, second, content = match.group(1), match.group(2), match.group(3)
            language = None
            path = None

            if ":" in tag:
                language, path = tag.split(":", 1)
            elif "." in tag:
                path = tag
            else:
                language = tag
                if second and "." in second:
                    path = second
            if language and language.lower() in _SKIP_LANGUAGES:
                continue

            if not path:
                cm = self.COMMENT_PATH_RE.match(content)
                if cm:
                    path = cm.group(1).strip()
                    content = content[cm.end():]
            if not path:
                path = self._label_before(text, match.start())

            content = content.strip()
            if len(content) < ctx.min_chars:
                continue

            lang = normalize_language(language) if language else None
            if path:
                name = name_from_path(path)
            else:
                undecorated += 1
                name = ctx.entity
                if undecorated > 1 or name in used_names:
                    declared = self.DECLARATION_RE.search(content)
                    if declared and declared.group(1) not in used_names:
                        name = declared.group(1)
                    else:
                        name = f"{ctx.entity}{undecorated}"
                path = component_path(name, lang or "typescript", content)

            used_names.add(name)
            artifacts.append(make_artifact(name, path, content, lang))
        return artifacts or None


class DeclarationStrategy(ExtractionStrategy):
    """Top-level exported declarations in undelimited text.

    Text between consecutive declaration starts becomes one artifact; a lone
    declaration takes the whole text.
    """

    name = "declaration"

    DECLARATION_RE = re.compile(
        r"^(?:export\s+(?:default\s+)?(?:async\s+)?(?:function|class|const|let)\s+([A-Z][\w$]*)"
        r"|const\s+([A-Z][\w$]*)\s*:\s*React\.FC)",
        re.MULTILINE,
    )

    def try_extract(self, text, ctx):
        code = strip_fences(text)
        starts = list(self.DECLARATION_RE.finditer(code))
        if not starts:
            return None

        if len(starts) == 1:
            name = starts[0].group(1) or starts[0].group(2)
            return [make_artifact(name, component_path(name, code=code), code, "typescript")]

        by_name = {}
        for i, m in enumerate(starts):
            begin = 0 if i == 0 else m.start()
            end = starts[i + 1].start() if i + 1 < len(starts) else len(code)
            name = m.group(1) or m.group(2)
            body = code[begin:end].strip()
            if name in by_name:
                by_name[name] += "\n\n" + body
            else:
                by_name[name] = body
        return [
            make_artifact(name, component_path(name, code=body), body, "typescript")
            for name, body in by_name.items()
        ]


# JSON keys holding a single file body, and where that body goes.
_SINGLE_KEYS = {
    "server": ("Server", "src/server.ts"),
    "app": ("App", "src/app.ts"),
}

# JSON keys holding lists of {name, path, content}.
_ARRAY_KEYS = (
    "controllers", "services", "middleware", "models", "routes", "config",
    "utils", "validators",
)


def parse_payload(text):
    """Return the JSON object in ``text`` if it is a structured payload, else None."""
    stripped = (text or "").strip()
    if stripped.startswith("```"):
        stripped = strip_fences(stripped)
    if not (stripped.startswith("{") and stripped.endswith("}")):
        return None
    try:
        payload = json.loads(stripped)
    except json.JSONDecodeError:
        return None
    if not isinstance(payload, dict):
        return None
    known = set(_SINGLE_KEYS) | set(_ARRAY_KEYS) | {"files"}
    return payload if known & set(payload) else None


class StructuredPayloadStrategy(ExtractionStrategy):
    """A JSON object whose keys map directly to files."""

    name = "structured"

    def try_extract(self, text, ctx):
        payload = parse_payload(text)
        if payload is None:
            return None

        artifacts = []
        for key, (name, path) in _SINGLE_KEYS.items():
            body = payload.get(key)
            if isinstance(body, str) and body.strip():
                artifacts.append(make_artifact(name, path, body.strip()))

        for key in _ARRAY_KEYS:
            items = payload.get(key)
            if not isinstance(items, list):
                continue
            for item in items:
                if not isinstance(item, dict) or not isinstance(item.get("content"), str):
                    continue
                file_name = item.get("name") or posixpath.basename(item.get("path") or "")
                if not file_name:
                    continue
                if "." not in file_name:
                    file_name += ".ts"
                directory = item.get("path") or f"src/{key}"
                if posixpath.basename(directory) == file_name:
                    path = directory
                else:
                    path = posixpath.join(directory, file_name)
                artifacts.append(make_artifact(name_from_path(path), path, item["content"].strip()))

        for item in payload.get("files") or []:
            if isinstance(item, dict) and item.get("path") and isinstance(item.get("content"), str):
                artifacts.append(make_artifact(name_from_path(item["path"]), item["path"], item["content"]))

        if not artifacts:
            raise ExtractionError(f"JSON payload with keys {sorted(payload)} holds no usable file")
        return artifacts


def fallback_artifact(text, ctx: ExtractionContext) -> Artifact:
    """The whole text, fences stripped, as one artifact named after the entity."""
    body = strip_fences(text)
    return make_artifact(ctx.entity, component_path(ctx.entity, code=body), body, "typescript")


TEXT_STRATEGIES = (
    MarkerStrategy,
    PathCommentStrategy,
    FencedBlockStrategy,
    DeclarationStrategy,
    StructuredPayloadStrategy,
)
