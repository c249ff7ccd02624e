"""Claude API client used as the generation provider."""

import json
import logging
import os
import re
import time

import anthropic

from config.defaults import DEFAULTS
from core.errors import InvocationError, ProviderUnavailable

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a senior software engineer. You write complete, production-ready "
    "source files and follow the output format you are given exactly."
)


def get_client():
    """Return an Anthropic client. Raises if no API key is set."""
    api_key = os.environ.get("ANTHROPIC_API_KEY")
    if not api_key:
        raise ProviderUnavailable(
            "ANTHROPIC_API_KEY environment variable is not set. "
            "Get a key at https://console.anthropic.com/ and run:\n"
            "  export ANTHROPIC_API_KEY='your-key-here'"
        )
    return anthropic.Anthropic(api_key=api_key)


def call_llm(system_prompt, user_message, response_format=None, max_tokens=None,
             temperature=None, model=None):
    """Call Claude with optional structured JSON output.

    Args:
        system_prompt: System prompt string.
        user_message: User message string.
        response_format: If "json", appends instruction to return valid JSON
                         and attempts to parse the response.
        max_tokens: Token budget, defaults to DEFAULTS["max_tokens"].
        temperature: Sampling temperature, defaults to DEFAULTS["temperature"].

    Returns:
        Raw text string, or parsed dict/list if response_format="json".

    Raises:
        ProviderUnavailable: no API key configured.
        InvocationError: the API failed twice in a row.
    """
    client = get_client()

    if response_format == "json":
        system_prompt = system_prompt + "\n\nIMPORTANT: Respond ONLY with valid JSON. No markdown fences, no commentary."

    last_error = None
    for attempt in range(2):
        try:
            # Streaming avoids the SDK timeout for large max_tokens
            text = ""
            with client.messages.stream(
                model=model or DEFAULTS["model"],
                max_tokens=max_tokens or DEFAULTS["max_tokens"],
                temperature=DEFAULTS["temperature"] if temperature is None else temperature,
                system=system_prompt,
                messages=[{"role": "user", "content": user_message}],
            ) as stream:
                for chunk in stream.text_stream:
                    text += chunk
                response_msg = stream.get_final_message()

            if response_msg.stop_reason == "max_tokens":
                logger.warning("Provider response hit the token limit (%d chars)", len(text))

            if response_format == "json":
                cleaned = text.strip()
                if cleaned.startswith("```"):
                    cleaned = re.sub(r"^```\w*\n?", "", cleaned)
                    cleaned = re.sub(r"\n?```$", "", cleaned)
                return json.loads(cleaned)

            return text

        except anthropic.APIError as e:
            last_error = e
            if attempt == 0:
                logger.warning("Provider call failed, retrying once: %s", e)
                time.sleep(DEFAULTS["retry_delay"])
                continue
        except json.JSONDecodeError:
            # Return raw text if JSON parsing fails
            return text

    raise InvocationError(f"Generation provider failed: {last_error}") from last_error


class AnthropicProvider:
    """Generic text-generation provider backed by the Anthropic API."""

    name = "anthropic"

    def __init__(self, model=None, system_prompt=SYSTEM_PROMPT):
        self.model = model or DEFAULTS["model"]
        self.system_prompt = system_prompt

    def generate(self, instruction, max_tokens=None, temperature=None):
        logger.debug("Calling %s (max_tokens=%s)", self.model, max_tokens)
        return call_llm(
            self.system_prompt,
            instruction,
            max_tokens=max_tokens,
            temperature=temperature,
            model=self.model,
        )
