"""Tests for the command-line entry point and config loading."""

import json
from unittest.mock import patch

from config.defaults import DEFAULTS, PipelineConfig
from core.state import Generation
from main import main

BUTTON_OUTPUT = (
    "// component:Button:typescript:src/components/Button.tsx\n"
    "export default function Button() { return <button>Go</button>; }\n"
)


def test_classify_command(capsys):
    assert main(["classify", "--prompt", "build a REST API for orders"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["type"] == "backend"
    assert data["entity"] == "Order"


def test_compose_command(capsys):
    assert main(["compose", "--prompt", "create a simple login button component"]) == 0
    out = capsys.readouterr().out
    assert "TASK: SINGLE COMPONENT" in out
    assert out.rstrip().endswith("Remember: between 3 and 5 files, each complete.")


def test_build_command_writes_output(tmp_path, capsys):
    with patch("agents.generator.GenerationInvoker.invoke",
               return_value=Generation(raw_text=BUTTON_OUTPUT)):
        code = main(["build", "--prompt", "create a login button", "--output", str(tmp_path)])
    assert code == 0
    out = capsys.readouterr().out
    assert "src/components/Button.tsx" in out
    assert (tmp_path / "src" / "components" / "Button.tsx").is_file()
    assert (tmp_path / "package.json").is_file()


def test_build_failure_exit_code(capsys):
    with patch("agents.generator.GenerationInvoker.invoke", side_effect=RuntimeError("no key")):
        assert main(["build", "--prompt", "create a login button"]) == 1
    assert "Generation failed: no key" in capsys.readouterr().err


def test_no_command_prints_help():
    assert main([]) == 1


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("ARTIFACTFORGE_MODEL", "some-model")
    monkeypatch.setenv("ARTIFACTFORGE_ENABLE_VALIDATION", "false")
    monkeypatch.setenv("ARTIFACTFORGE_MAX_WORKERS", "2")
    config = PipelineConfig.from_env(enable_optimization=False, max_tokens=None)
    assert config.model == "some-model"
    assert config.enable_validation is False
    assert config.enable_optimization is False
    assert config.max_workers == 2
    assert config.max_tokens == DEFAULTS["max_tokens"]


def test_config_ignores_bad_worker_count(monkeypatch):
    monkeypatch.setenv("ARTIFACTFORGE_MAX_WORKERS", "lots")
    assert PipelineConfig.from_env().max_workers == DEFAULTS["max_workers"]
