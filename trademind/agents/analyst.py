"""Market Analyst Agent.

Turns an instrument's public fields into prompts for short technical and
fundamental write-ups, and answers free-form chat questions. The market
engine never calls into this module; callers hand it plain snapshot data.
"""

from typing import Optional

from agents import Agent

from trademind.agents.base import create_agent, run_agent_sync
from trademind.models import InstrumentState


ANALYSIS_UNAVAILABLE = "Analysis unavailable."
CHAT_UNAVAILABLE = "I couldn't process that request."

GREETING = (
    "Hello! I am TradeMind AI. I can help with market trends, "
    "stock details, or financial concepts."
)


ANALYST_INSTRUCTIONS = """You are a market analyst covering US equities, Indian equities and crypto assets.
Answer with concise, professional analysis grounded in the data you are given.
Never invent live earnings figures. Always state that the analysis is
AI-generated and not financial advice.
"""


def build_technical_prompt(fields: dict) -> str:
    """Build the technical analysis prompt from an instrument's public fields."""
    history = ", ".join(str(price) for price in fields["history"])
    return f"""Perform a short-term technical analysis for {fields['name']} ({fields['symbol']}).
Current Price: {fields['price']}
Change: {fields['change_percent']}%
Recent Price Data points (last 20 mins): [{history}]

Identify:
1. Support and Resistance levels.
2. Short-term trend (Bullish/Bearish/Neutral).
3. Suggested Momentum.

Keep it professional, concise (under 150 words), and add a disclaimer that this is AI-generated."""


def build_fundamental_prompt(fields: dict) -> str:
    """Build the fundamental snapshot prompt from an instrument's public fields."""
    return f"""Provide a fundamental snapshot for {fields['name']} ({fields['symbol']}) listed in the {fields['market']} market.
Focus on:
1. Business Model.
2. Key recent strengths or risks.
3. Sector outlook ({fields['sector']}).

Do not use live earnings data unless known. Keep it under 150 words."""


def build_chat_instructions(context: Optional[str] = None) -> str:
    """Build the chat system instructions, optionally naming what the user is viewing."""
    instructions = "You are TradeMind AI, a helpful financial assistant.\n"
    if context:
        instructions += f"Context: User is currently viewing: {context}\n"
    instructions += "DISCLAIMER: Mention you are an AI and this is not financial advice."
    return instructions


def describe_instrument(state: InstrumentState) -> str:
    """One-line chat context for an instrument."""
    return (
        f"{state.name} ({state.symbol}, {state.market.value}) at {state.price} "
        f"({state.change_percent:+.2f}%)"
    )


class MarketAnalystAgent:
    """Agent for AI analysis of simulated instruments.

    Wraps two underlying agents: an analyst for technical/fundamental
    write-ups and a chat assistant whose instructions carry the current
    viewing context.
    """

    def __init__(self, model: Optional[str] = None):
        """Initialize the Market Analyst Agent.

        Args:
            model: Optional model override.
        """
        self.model = model
        self._agent = create_agent(
            name="Market Analyst Agent",
            instructions=ANALYST_INSTRUCTIONS,
            model=model,
        )

    def _chat_agent(self, context: Optional[str]) -> Agent:
        return create_agent(
            name="TradeMind Assistant",
            instructions=build_chat_instructions(context),
            model=self.model,
        )

    def technical_analysis(self, state: InstrumentState) -> str:
        """Short-term technical analysis of an instrument."""
        prompt = build_technical_prompt(state.public_fields())
        return run_agent_sync(self._agent, prompt) or ANALYSIS_UNAVAILABLE

    def fundamental_analysis(self, state: InstrumentState) -> str:
        """Fundamental snapshot of an instrument."""
        prompt = build_fundamental_prompt(state.public_fields())
        return run_agent_sync(self._agent, prompt) or ANALYSIS_UNAVAILABLE

    def chat(self, message: str, context: Optional[str] = None) -> str:
        """Answer a free-form question.

        Args:
            message: User message.
            context: Optional description of what the user is looking at.

        Returns:
            Assistant's reply.
        """
        return run_agent_sync(self._chat_agent(context), message) or CHAT_UNAVAILABLE
