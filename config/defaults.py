"""Default pipeline settings."""

import os
from dataclasses import dataclass

DEFAULTS = {
    "model": "claude-sonnet-4-5-20250929",
    "max_tokens": 8000,             # every tier except fullstack
    "fullstack_max_tokens": 32000,
    "temperature": 0.7,
    "retry_delay": 2,
    "enable_validation": True,
    "enable_optimization": True,
    "enable_quality_analysis": True,
    "max_workers": 4,
    "min_section_chars": 20,        # shorter extracted sections are discarded
    "history_limit": 100,
    "output_root": "generated",
}

_ENV_PREFIX = "ARTIFACTFORGE_"


def _env_flag(name, default):
    raw = os.environ.get(_ENV_PREFIX + name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class PipelineConfig:
    model: str = DEFAULTS["model"]
    max_tokens: int = DEFAULTS["max_tokens"]
    fullstack_max_tokens: int = DEFAULTS["fullstack_max_tokens"]
    temperature: float = DEFAULTS["temperature"]
    enable_validation: bool = DEFAULTS["enable_validation"]
    enable_optimization: bool = DEFAULTS["enable_optimization"]
    enable_quality_analysis: bool = DEFAULTS["enable_quality_analysis"]
    max_workers: int = DEFAULTS["max_workers"]

    @classmethod
    def from_env(cls, **overrides):
        """Build a config from DEFAULTS, ARTIFACTFORGE_* variables, then overrides."""
        config = cls(
            model=os.environ.get(_ENV_PREFIX + "MODEL", DEFAULTS["model"]),
            enable_validation=_env_flag("ENABLE_VALIDATION", DEFAULTS["enable_validation"]),
            enable_optimization=_env_flag("ENABLE_OPTIMIZATION", DEFAULTS["enable_optimization"]),
            enable_quality_analysis=_env_flag(
                "ENABLE_QUALITY_ANALYSIS", DEFAULTS["enable_quality_analysis"]
            ),
        )
        workers = os.environ.get(_ENV_PREFIX + "MAX_WORKERS")
        if workers and workers.isdigit() and int(workers) > 0:
            config.max_workers = int(workers)
        for key, value in overrides.items():
            if value is not None and hasattr(config, key):
                setattr(config, key, value)
        return config
