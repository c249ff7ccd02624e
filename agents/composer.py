"""Prompt composer: builds the scope-specific generation instruction."""

from config.rules import FORBIDDEN_PACKAGES
from config.scopes import SCOPES
from core.state import PromptAnalysis, ScopeDetectionResult
from utils.naming import kebab
from utils.template_engine import render_template, substitute


def expected_files(scope: ScopeDetectionResult, entity: str) -> list[str]:
    """Render the tier's file templates for an entity."""
    variables = {"entity": entity, "slug": kebab(entity)}
    return [substitute(t, variables) for t in SCOPES[scope.type.value]["file_templates"]]


class PromptComposer:
    """Pure string construction from template fragments.

    Order of sections: rules, scope task, file count, output format, then
    prior art when the template search found any.
    """

    name = "composer"

    def compose(self, text, analysis: PromptAnalysis, scope: ScopeDetectionResult,
                templates=None) -> str:
        entity = analysis.main_entity
        tier = SCOPES[scope.type.value]
        low, high = scope.expected_range

        sections = [
            render_template("base", "rules.tpl", {
                "forbidden_packages": ", ".join(FORBIDDEN_PACKAGES),
            }),
            render_template("scopes", f"{scope.type.value}.tpl", {
                "entity": entity,
                "request": text.strip(),
                "framework": analysis.framework,
                "features": ", ".join(analysis.features) or "none",
                "entities": ", ".join(analysis.entities) or entity,
                "database": analysis.database or ("yes" if scope.include_database else "none"),
            }),
            render_template("base", "file_count.tpl", {
                "scope_name": tier["name"],
                "complexity": scope.complexity,
                "min_files": low,
                "max_files": high,
                "file_list": "\n".join(f"- {p}" for p in expected_files(scope, entity)),
            }),
            render_template("base", "output_format.tpl", {"entity": entity}),
        ]

        if templates:
            snippets = "\n\n".join(f"[{t['name']}]\n{t['content']}" for t in templates)
            sections.append(render_template("base", "prior_art.tpl", {"snippets": snippets}))

        # restated last so it is the final constraint the provider reads
        sections.append(f"Remember: between {low} and {high} files, each complete.")
        return "\n\n".join(s.strip() for s in sections)
