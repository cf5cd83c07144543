"""Base utilities for AI agents.

This module provides common utilities for creating and running AI agents
using the OpenAI Agents SDK.
"""

import logging
import os
from typing import Any, Optional

# Disable tracing to avoid noisy 503 errors from telemetry
os.environ.setdefault("OPENAI_AGENTS_DISABLE_TRACING", "1")

from agents import Agent, Runner, set_default_openai_key


logger = logging.getLogger(__name__)


# Default model to use for agents
DEFAULT_MODEL = "gpt-4o-mini"


def get_model() -> str:
    """Get the model to use for agents.

    Checks OPENAI_MODEL environment variable, falls back to default.

    Returns:
        Model name string.
    """
    return os.environ.get("OPENAI_MODEL", DEFAULT_MODEL)


def configure_api_key(api_key: Optional[str]) -> None:
    """Use an explicit API key (e.g. from config.toml) for all agents."""
    if api_key:
        set_default_openai_key(api_key)


def create_agent(
    name: str,
    instructions: str,
    model: Optional[str] = None,
) -> Agent:
    """Create an AI agent with the specified configuration.

    Args:
        name: Name of the agent.
        instructions: System instructions for the agent.
        model: Optional model override. Uses default if not specified.

    Returns:
        Configured Agent instance.
    """
    return Agent(
        name=name,
        instructions=instructions,
        model=model or get_model(),
    )


def _log_agent_call(agent: Agent) -> None:
    """Log agent call info to terminal."""
    from rich.console import Console

    console = Console()
    console.print(f"[dim]🤖 Agent: {agent.name} | Model: {agent.model}[/dim]")
    logger.debug("Running agent %s on %s", agent.name, agent.model)


def run_agent_sync(
    agent: Agent,
    message: str,
    context: Optional[dict[str, Any]] = None,
) -> str:
    """Run an agent synchronously and return the response.

    Args:
        agent: The agent to run.
        message: User message to send to the agent.
        context: Optional context dictionary to pass to the agent.

    Returns:
        Agent's response as a string.
    """
    _log_agent_call(agent)
    result = Runner.run_sync(agent, message, context=context)
    return result.final_output or ""
