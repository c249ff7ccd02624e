"""Tests for core.orchestrator. The generation provider is always mocked."""

import json
import os
from unittest.mock import MagicMock, patch

import pytest

from config.defaults import PipelineConfig
from core.errors import InvocationError
from core.orchestrator import PipelineOrchestrator, _advance
from core.state import (
    Generation,
    GenerationRequest,
    PipelineResult,
    PipelineRun,
    PipelineStatus,
    ScopeType,
)

BUTTON_OUTPUT = """\
// component:Button:typescript:src/components/Button/Button.tsx
import React from 'react';
import { ButtonProps } from './Button.types';

export default function Button({ label, onClick }: ButtonProps) {
  return <button onClick={onClick}>{label}</button>;
}

// component:ButtonTypes:typescript:src/components/Button/Button.types.ts
export interface ButtonProps {
  label: string;
  onClick: () => void;
}
"""


def _invoker(raw_text="", files=None, source="provider", error=None):
    invoker = MagicMock()
    if error is not None:
        invoker.invoke.side_effect = error
    else:
        invoker.invoke.return_value = Generation(raw_text=raw_text, files=files, source=source)
    return invoker


def _orchestrator(invoker, **kwargs):
    config = kwargs.pop("config", None) or PipelineConfig()
    return PipelineOrchestrator(config=config, invoker=invoker, **kwargs)


def test_button_request_end_to_end():
    invoker = _invoker(BUTTON_OUTPUT)
    result = _orchestrator(invoker).execute("create a simple login button component")

    assert result.success is True
    assert result.status == PipelineStatus.DONE
    assert result.scope.type == ScopeType.SINGLE_COMPONENT
    assert [a.name for a in result.artifacts] == ["Button", "ButtonTypes"]
    assert all(a.is_final for a in result.artifacts)
    assert all(a.metadata.validated for a in result.artifacts)
    assert result.dependencies == ["react"]
    assert result.generation_source == "provider"
    assert 0 < result.quality_score <= 100
    assert "Generated 2 artifact(s), expected at least 3 for single-component" in result.warnings
    assert json.loads(result.package_manifest)["dependencies"] == {"react": "latest"}
    assert "./Button.types" not in result.artifacts[0].body

    instruction, scope, analysis, options = invoker.invoke.call_args.args
    assert "Remember: between 3 and 5 files" in instruction
    assert analysis.main_entity == "Button"


def test_blank_prompt_fails_without_provider_call():
    invoker = _invoker(BUTTON_OUTPUT)
    result = _orchestrator(invoker).execute(GenerationRequest(prompt="   "))
    assert result.success is False
    assert result.error == "Invalid request: prompt is required"
    assert result.status == PipelineStatus.FAILED
    invoker.invoke.assert_not_called()


def test_invocation_error_fails_run():
    invoker = _invoker(error=InvocationError("provider down"))
    result = _orchestrator(invoker).execute("create a simple login button component")
    assert result.success is False
    assert result.error == "Generation failed: provider down"
    assert result.artifacts == []
    assert result.scope.type == ScopeType.SINGLE_COMPONENT


def test_empty_output_fails_after_generated():
    orchestrator = _orchestrator(_invoker(""))
    run = PipelineRun(request=GenerationRequest(prompt="create a simple login button component"))
    assert orchestrator.prepare(run).success

    stage = orchestrator.generate(run)

    assert stage.success is False
    assert stage.error == "No artifacts could be extracted from the generated output"
    assert run.status == PipelineStatus.GENERATED

    result = orchestrator._fail(run, stage.error, 0)
    assert run.history == [PipelineStatus.PREPARED, PipelineStatus.GENERATED]
    assert result.status == PipelineStatus.FAILED


def test_scope_override_from_options():
    invoker = _invoker(BUTTON_OUTPUT)
    request = GenerationRequest(prompt="create a simple login button component", options={"scope": "page"})
    result = _orchestrator(invoker).execute(request)
    assert result.scope.type == ScopeType.PAGE
    assert result.scope.confidence == 1.0


def test_files_from_subgenerator_bypass_extraction_strategies():
    files = [
        {"path": "backend/src/server.ts", "content": "import express from 'express';\nconst app = express();"},
        {"path": "frontend/src/App.tsx", "content": "export default function App() { return <div />; }"},
    ]
    invoker = _invoker(files=files, source="fullstack-direct")
    result = _orchestrator(invoker).execute("build a fullstack blog system with database")
    assert result.success
    assert result.generation_source == "fullstack-direct"
    assert [a.path for a in result.artifacts] == ["backend/src/server.ts", "frontend/src/App.tsx"]
    assert result.dependencies == ["express"]


def test_rewrite_runs_even_with_stages_disabled():
    body = (
        "// component:Fancy:typescript:src/components/Fancy.tsx\n"
        "import { motion } from 'framer-motion';\n"
        "export default function Fancy() { return <div>fancy</div>; }\n"
    )
    config = PipelineConfig(enable_validation=False, enable_optimization=False,
                            enable_quality_analysis=False)
    result = _orchestrator(_invoker(body), config=config).execute("a fancy button")

    artifact = result.artifacts[0]
    assert result.success
    assert artifact.metadata.validated is None
    assert artifact.metadata.quality_score is None
    assert artifact.is_final
    assert "framer-motion" not in artifact.body
    assert result.quality_score == 0.0


def test_validation_stage_failure_is_a_warning():
    validation = MagicMock()
    validation.run.side_effect = RuntimeError("validator crashed")
    result = _orchestrator(_invoker(BUTTON_OUTPUT), validation=validation).execute("a login button")
    assert result.success
    assert "validation: validator crashed" in result.warnings


def test_optimizer_failure_is_a_warning():
    optimizer = MagicMock()
    optimizer.optimize.side_effect = ValueError("bad input")
    result = _orchestrator(_invoker(BUTTON_OUTPUT), optimizer=optimizer).execute("a login button")
    assert result.success
    assert "optimization: Button: bad input" in result.warnings
    assert all(a.metadata.quality_score is not None for a in result.artifacts)


def test_rewrite_failure_is_a_warning():
    rewriter = MagicMock()
    rewriter.apply.side_effect = RuntimeError("rewrite boom")
    config = PipelineConfig(enable_validation=False)
    result = _orchestrator(_invoker(BUTTON_OUTPUT), config=config, rewriter=rewriter).execute(
        "a login button"
    )
    assert result.success is True
    assert result.status == PipelineStatus.DONE
    assert len(result.artifacts) == 2
    assert "rewrite: Button: rewrite boom" in result.warnings
    assert "rewrite: ButtonTypes: rewrite boom" in result.warnings


def test_aggregation_failure_is_a_warning():
    with patch("core.orchestrator.build_readme", side_effect=ValueError("no title")):
        result = _orchestrator(_invoker(BUTTON_OUTPUT)).execute("a login button")
    assert result.success is True
    assert result.readme == ""
    assert "aggregation: no title" in result.warnings


def test_dependencies_follow_rewritten_bodies():
    raw = (
        "// component:Button:typescript:src/components/Button.tsx\n"
        "import React from 'react';\n"
        "import { motion } from 'framer-motion';\n"
        "import axios from 'axios';\n"
        "\n"
        "export default function Button() {\n"
        "  axios.get('/api/ping');\n"
        "  return <motion.button>Go</motion.button>;\n"
        "}\n"
    )
    result = _orchestrator(_invoker(raw)).execute("a login button")

    button = result.artifacts[0]
    assert "framer-motion" not in button.body
    assert button.dependencies == ["react"]
    assert result.dependencies == ["react"]
    assert json.loads(result.package_manifest)["dependencies"] == {"react": "latest"}
    assert button.metadata.line_count == button.body.count("\n") + 1


def test_illegal_transition_rejected():
    run = PipelineRun(request=GenerationRequest(prompt="x"))
    with pytest.raises(RuntimeError):
        _advance(run, PipelineStatus.DONE)
    _advance(run, PipelineStatus.GENERATED)
    _advance(run, PipelineStatus.VALIDATED)
    with pytest.raises(RuntimeError):
        _advance(run, PipelineStatus.FAILED)


def test_write_artifacts(tmp_path):
    orchestrator = _orchestrator(_invoker(BUTTON_OUTPUT))
    result = orchestrator.execute("create a simple login button component")

    written = orchestrator.write_artifacts(result, str(tmp_path))

    assert "README.md" in written
    assert "package.json" in written
    assert os.path.isfile(tmp_path / "src" / "components" / "Button" / "Button.tsx")


def test_write_artifacts_rejects_escaping_paths(tmp_path):
    orchestrator = _orchestrator(_invoker(""))
    result = orchestrator.execute("create a simple login button component")
    assert result.success is False
    assert orchestrator.write_artifacts(result, str(tmp_path)) == []

    escaping = PipelineResult(success=True, artifacts=_orchestrator(_invoker(
        "// component:Evil:ts:../../evil.ts\nexport const evil = 'outside the root';\n"
    )).execute("a button").artifacts)
    with pytest.raises(ValueError):
        orchestrator.write_artifacts(escaping, str(tmp_path / "out"))
