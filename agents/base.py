"""
IntelliBid - Base Agent Configuration

Provides the LLM abstraction layer (OpenAI, Anthropic, Gemini) and the
helpers every agent uses to run a task and parse its JSON answer.
"""

import json
import os
from dataclasses import dataclass
from typing import Optional

from crewai import LLM, Agent, Crew, Task

from config.settings import settings, LLMProvider


def get_llm(
    provider: Optional[LLMProvider] = None,
    model: Optional[str] = None,
    temperature: Optional[float] = None
) -> LLM:
    """
    Get an LLM instance for the specified or configured provider.

    Args:
        provider: Override the configured provider
        model: Override the configured model
        temperature: Override the configured temperature

    Returns:
        Configured LLM instance for CrewAI
    """
    provider = provider or settings.llm_provider
    model = model or settings.default_model
    temperature = temperature if temperature is not None else settings.llm_temperature

    # CrewAI reads provider keys from the environment
    if provider == LLMProvider.OPENAI:
        if settings.openai_api_key:
            os.environ["OPENAI_API_KEY"] = settings.openai_api_key
        prefix = "openai"
    elif provider == LLMProvider.ANTHROPIC:
        if settings.anthropic_api_key:
            os.environ["ANTHROPIC_API_KEY"] = settings.anthropic_api_key
        prefix = "anthropic"
    elif provider == LLMProvider.GEMINI:
        if settings.google_api_key:
            os.environ["GOOGLE_API_KEY"] = settings.google_api_key
        prefix = "gemini"
    else:
        raise ValueError(f"Unsupported LLM provider: {provider}")

    return LLM(
        model=model if model.startswith(f"{prefix}/") else f"{prefix}/{model}",
        temperature=temperature,
        timeout=settings.agent_timeout_seconds
    )


# Default LLM instance using configured settings
default_llm = None


def get_default_llm() -> LLM:
    """Get the default LLM instance (lazy initialization)."""
    global default_llm
    if default_llm is None:
        default_llm = get_llm()
    return default_llm


AGENT_VERBOSE = False


@dataclass
class AgentRun:
    """Raw answer of a single agent task plus its token usage."""
    raw: str
    total_tokens: int = 0


async def run_agent_task(agent: Agent, task: Task) -> AgentRun:
    """
    Execute one task with its agent and report token usage.

    Wraps the pair in a single-agent Crew so usage metrics are collected.
    """
    crew = Crew(agents=[agent], tasks=[task], verbose=AGENT_VERBOSE)
    output = await crew.kickoff_async()

    usage = getattr(output, "token_usage", None)
    total_tokens = getattr(usage, "total_tokens", 0) or 0
    return AgentRun(raw=output.raw or "", total_tokens=int(total_tokens))


def validate_json_output(output: str, required_keys: list[str]) -> dict:
    """
    Validate and parse JSON output from an agent.

    Args:
        output: Raw output string from agent
        required_keys: Keys that must be present in the output

    Returns:
        Parsed JSON dict

    Raises:
        ValueError: If output is not valid JSON or missing required keys
    """
    # Agents sometimes wrap JSON in markdown code blocks
    if "```json" in output:
        start = output.find("```json") + 7
        end = output.find("```", start)
        output = output[start:end].strip()
    elif "```" in output:
        start = output.find("```") + 3
        end = output.find("```", start)
        output = output[start:end].strip()

    try:
        data = json.loads(output)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON output: {e}")

    if not isinstance(data, dict):
        raise ValueError("Invalid JSON output: expected an object")

    missing = [key for key in required_keys if key not in data]
    if missing:
        raise ValueError(f"Missing required keys in output: {missing}")

    return data
