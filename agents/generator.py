"""Generation invoker: picks the provider path for a scope and calls it."""

import logging

from agents.fullstack import FullstackGenerator, build_structured_input
from config.defaults import PipelineConfig
from config.scopes import SCOPES
from core.errors import InvocationError
from core.state import Generation, PromptAnalysis, ScopeDetectionResult, ScopeType
from utils.llm import AnthropicProvider

logger = logging.getLogger(__name__)


class GenerationInvoker:
    """Calls the generation provider with a composed instruction.

    Fullstack scopes go to the multi-file sub-generator first; any failure
    there falls back to the generic provider with the same instruction. A
    failure of the generic provider is raised as InvocationError.
    """

    name = "generator"

    def __init__(self, provider=None, fullstack=None, config=None):
        self.config = config or PipelineConfig()
        self.provider = provider or AnthropicProvider(model=self.config.model)
        self.fullstack = fullstack or FullstackGenerator()

    def invoke(self, instruction, scope: ScopeDetectionResult,
               analysis: PromptAnalysis | None = None, options=None) -> Generation:
        if scope.type == ScopeType.FULLSTACK and analysis is not None:
            try:
                result = self.fullstack.generate(build_structured_input(analysis, options))
                if isinstance(result, dict):
                    return Generation(files=result["files"], source="fullstack-direct")
                return Generation(raw_text=result, source="fullstack")
            except Exception as e:
                logger.warning("Sub-generator failed, falling back to provider: %s", e)
            return self._call_provider(instruction, self.config.fullstack_max_tokens,
                                       source="provider-fallback")

        budget = SCOPES[scope.type.value].get("max_tokens") or self.config.max_tokens
        return self._call_provider(instruction, budget)

    def _call_provider(self, instruction, max_tokens, source="provider"):
        try:
            text = self.provider.generate(
                instruction,
                max_tokens=max_tokens,
                temperature=self.config.temperature,
            )
        except InvocationError:
            raise
        except Exception as e:
            raise InvocationError(f"Generation provider failed: {e}", source=source) from e
        logger.info("Provider returned %d chars (%s)", len(text or ""), source)
        return Generation(raw_text=text or "", source=source)
