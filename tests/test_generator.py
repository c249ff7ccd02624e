"""Tests for agents.generator and the full-stack sub-generator."""

import json
from unittest.mock import MagicMock

import pytest

from agents.fullstack import FullstackGenerator, build_structured_input
from agents.generator import GenerationInvoker
from config.defaults import PipelineConfig
from core.errors import InvocationError
from core.state import GenerationRequest
from manager.analyzer import analyze_prompt
from manager.classifier import classify

FULLSTACK_PROMPT = "build a fullstack blog system with database"


def _setup(prompt):
    analysis = analyze_prompt(GenerationRequest(prompt=prompt))
    return analysis, classify(prompt, analysis)


def test_component_scope_uses_provider_with_tier_budget():
    provider = MagicMock()
    provider.generate.return_value = "// component:Button:typescript:src/Button.tsx\n..."
    analysis, scope = _setup("create a simple login button component")
    invoker = GenerationInvoker(provider=provider, fullstack=MagicMock())

    generation = invoker.invoke("instruction", scope, analysis)

    assert generation.source == "provider"
    assert generation.raw_text.startswith("// component:Button")
    provider.generate.assert_called_once_with("instruction", max_tokens=8000, temperature=0.7)
    invoker.fullstack.generate.assert_not_called()


def test_fullstack_files_returned_directly():
    fullstack = MagicMock()
    fullstack.generate.return_value = {"files": [{"path": "backend/src/server.ts", "content": "x"}]}
    provider = MagicMock()
    analysis, scope = _setup(FULLSTACK_PROMPT)

    generation = GenerationInvoker(provider=provider, fullstack=fullstack).invoke("i", scope, analysis)

    assert generation.source == "fullstack-direct"
    assert generation.files[0]["path"] == "backend/src/server.ts"
    provider.generate.assert_not_called()


def test_fullstack_failure_falls_back_to_provider():
    fullstack = MagicMock()
    fullstack.generate.side_effect = InvocationError("empty", source="fullstack")
    provider = MagicMock()
    provider.generate.return_value = "fallback text"
    analysis, scope = _setup(FULLSTACK_PROMPT)
    config = PipelineConfig(fullstack_max_tokens=32000)

    generation = GenerationInvoker(provider=provider, fullstack=fullstack, config=config).invoke(
        "instruction", scope, analysis,
    )

    assert generation.source == "provider-fallback"
    assert generation.raw_text == "fallback text"
    assert provider.generate.call_args.kwargs["max_tokens"] == 32000


def test_provider_failure_is_invocation_error():
    provider = MagicMock()
    provider.generate.side_effect = RuntimeError("boom")
    analysis, scope = _setup("create a simple login button component")

    with pytest.raises(InvocationError, match="boom"):
        GenerationInvoker(provider=provider, fullstack=MagicMock()).invoke("i", scope, analysis)


def test_structured_input():
    analysis, _ = _setup("a blog with login and a mongo database")
    data = build_structured_input(analysis, {"include_tests": True})
    assert data["projectName"] == "post"
    assert data["includeAuth"] is True
    assert data["includeTests"] is True
    assert data["techStack"]["database"] == "mongodb"


def test_structured_input_default_entity_gets_timestamp_name():
    analysis, _ = _setup("something vague")
    assert build_structured_input(analysis)["projectName"].startswith("project-")


def test_subgenerator_filters_bad_entries():
    llm = MagicMock(return_value={"files": [
        {"path": "a.ts", "content": "a"},
        {"path": "", "content": "b"},
        "junk",
    ]})
    assert FullstackGenerator(llm=llm).generate({"techStack": {}}) == {
        "files": [{"path": "a.ts", "content": "a"}],
    }
    assert llm.call_args.kwargs["response_format"] == "json"


def test_subgenerator_empty_list_raises():
    llm = MagicMock(return_value={"files": []})
    with pytest.raises(InvocationError):
        FullstackGenerator(llm=llm).generate({})


def test_subgenerator_other_shapes_become_text():
    payload = {"server": "const app = express();"}
    llm = MagicMock(return_value=payload)
    assert json.loads(FullstackGenerator(llm=llm).generate({})) == payload


def test_subgenerator_blank_text_raises():
    llm = MagicMock(return_value="   ")
    with pytest.raises(InvocationError):
        FullstackGenerator(llm=llm).generate({})
