"""Template search: prior-art snippets matched by entity and feature keywords."""

import logging

from core.state import PromptAnalysis
from utils.naming import has_keyword
from utils.template_engine import list_templates, load_template

logger = logging.getLogger(__name__)

_CATEGORY = "prior_art"
_KEYWORDS_PREFIX = "# keywords:"


def _parse_snippet(name, raw):
    first, _, rest = raw.partition("\n")
    if first.lower().startswith(_KEYWORDS_PREFIX):
        keywords = [k.strip().lower() for k in first[len(_KEYWORDS_PREFIX):].split(",") if k.strip()]
        content = rest
    else:
        keywords = [name]
        content = raw
    return {"name": name, "keywords": keywords, "content": content.strip()}


class TemplateSearch:
    """Finds prior art for the composer. Any failure yields an empty list."""

    name = "template_search"

    def __init__(self, limit=3):
        self.limit = limit

    def search(self, analysis: PromptAnalysis) -> list[dict]:
        try:
            snippets = [
                _parse_snippet(n[:-len(".tpl")], load_template(_CATEGORY, n))
                for n in list_templates(_CATEGORY)
            ]
        except (OSError, ValueError) as e:
            logger.warning("Template search unavailable: %s", e)
            return []

        haystack = " ".join(
            [analysis.original_prompt] + list(analysis.entities) + list(analysis.features)
        )
        scored = []
        for snippet in snippets:
            hits = sum(1 for kw in snippet["keywords"] if has_keyword(haystack, kw, plural=True))
            if hits:
                scored.append((hits, snippet))
        scored.sort(key=lambda pair: (-pair[0], pair[1]["name"]))
        matches = [snippet for _, snippet in scored[:self.limit]]
        logger.debug("Template search matched %s", [m["name"] for m in matches])
        return matches
