"""Prompt fragment loading and rendering with string.Template."""

import functools
import os
from string import Template

PROMPTS_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "agents", "prompts")


def get_templates_dir():
    return PROMPTS_DIR


def _resolve(category, template_name):
    root = os.path.realpath(get_templates_dir())
    resolved = os.path.realpath(os.path.join(root, category, template_name))
    if not resolved.startswith(root + os.sep):
        raise ValueError(f"Template path escapes templates directory: {category}/{template_name}")
    return resolved


@functools.lru_cache(maxsize=64)
def load_template(category, template_name):
    """Read one fragment. Fragments are cached for the life of the process."""
    with open(_resolve(category, template_name), "r", encoding="utf-8") as f:
        return f.read()


def list_templates(category):
    """Fragment file names in a category, sorted."""
    directory = os.path.join(get_templates_dir(), category)
    if not os.path.isdir(directory):
        return []
    return sorted(n for n in os.listdir(directory) if n.endswith(".tpl"))


def substitute(text, variables):
    """Fill ``${name}`` placeholders. Unknown placeholders are left as written."""
    return Template(text).safe_substitute(variables)


def render_template(category, template_name, variables):
    return substitute(load_template(category, template_name), variables)
