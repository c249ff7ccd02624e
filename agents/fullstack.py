"""Multi-file sub-generator for full-stack requests."""

import json
import logging
import time

from config.defaults import DEFAULTS
from config.rules import DEFAULT_ENTITY
from core.errors import InvocationError
from core.state import PromptAnalysis
from utils.llm import call_llm
from utils.naming import kebab
from utils.template_engine import render_template

logger = logging.getLogger(__name__)


def build_structured_input(analysis: PromptAnalysis, options=None) -> dict:
    """Turn an analysis into the sub-generator's project description."""
    options = options or {}
    entity = analysis.main_entity
    if entity == DEFAULT_ENTITY:
        project_name = f"project-{int(time.time())}"
    else:
        project_name = kebab(entity)
    return {
        "projectName": project_name,
        "description": analysis.original_prompt,
        "features": list(analysis.features),
        "entities": list(analysis.entities),
        "techStack": {
            "frontend": [analysis.framework, "typescript", "tailwindcss"],
            "backend": ["express", "typescript"],
            "database": analysis.database or "postgresql",
        },
        "includeAuth": "Authentication" in analysis.features,
        "includeTests": bool(options.get("include_tests", False)),
    }


class FullstackGenerator:
    """Asks the provider for a JSON file list describing a whole application.

    Returns ``{"files": [...]}`` when the provider answered with usable files,
    the raw text otherwise. Raises InvocationError when there is nothing to use.
    """

    name = "fullstack"

    def __init__(self, llm=None):
        self.llm = llm or call_llm

    def generate(self, structured_input):
        database = structured_input.get("techStack", {}).get("database")
        system_prompt = render_template("base", "fullstack.tpl", {
            "database_clause": f" backed by {database}" if database else "",
        })
        result = self.llm(
            system_prompt,
            json.dumps(structured_input, indent=2),
            response_format="json",
            max_tokens=DEFAULTS["fullstack_max_tokens"],
        )

        if isinstance(result, dict):
            raw_files = result.get("files")
            if isinstance(raw_files, list):
                files = [
                    {"path": f["path"], "content": f["content"]}
                    for f in raw_files
                    if isinstance(f, dict) and f.get("path") and isinstance(f.get("content"), str)
                ]
                if files:
                    logger.info("Sub-generator returned %d files", len(files))
                    return {"files": files}
                raise InvocationError("Sub-generator returned an empty file list", source="fullstack")
            # Other shapes (server/app/controllers...) go through the extractor
            return json.dumps(result)

        if isinstance(result, str) and result.strip():
            return result
        raise InvocationError("Sub-generator returned no usable output", source="fullstack")
