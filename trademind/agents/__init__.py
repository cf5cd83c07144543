"""AI agents for TradeMind.

- MarketAnalystAgent: Technical/fundamental analysis and chat over
  simulated instruments
"""

from trademind.agents.base import (
    configure_api_key,
    create_agent,
    get_model,
    run_agent_sync,
)
from trademind.agents.analyst import (
    MarketAnalystAgent,
    build_chat_instructions,
    build_fundamental_prompt,
    build_technical_prompt,
)

__all__ = [
    # Base utilities
    "configure_api_key",
    "create_agent",
    "get_model",
    "run_agent_sync",
    # Agents
    "MarketAnalystAgent",
    # Prompt builders
    "build_chat_instructions",
    "build_fundamental_prompt",
    "build_technical_prompt",
]
