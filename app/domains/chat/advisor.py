"""Model-backed policies for support conversations.

Each policy wraps one gateway call and converts every failure into a safe
default: an apology for replies, a literal string for summaries, ``False``
for escalation and ``"neutral"`` for sentiment. Nothing here is retried.
"""

import logging
from collections.abc import Sequence
from enum import Enum

from app.schemas.chat import ReplyResult
from app.services.llm_gateway import LLMGateway
from models.message import Message

from . import prompts

logger = logging.getLogger(__name__)

# Prior messages included when prompting for a reply
HISTORY_WINDOW = 20
# Most recent messages shown to the escalation check
ESCALATION_WINDOW = 10
# Conversations shorter than this are never escalated
ESCALATION_MIN_MESSAGES = 3
ESCALATION_AFFIRMATIVE = "yes"

REPLY_FALLBACK = (
    "I apologize, but I'm having trouble processing your request right now. "
    "Please try again or contact our support team directly."
)
SUMMARY_EMPTY = "No messages in conversation."
SUMMARY_UNAVAILABLE = "Unable to generate summary."
SUMMARY_FAILED = "Error generating conversation summary."


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class ConversationAdvisor:
    """Asks the language model for replies, summaries and hand-off advice."""

    def __init__(self, gateway: LLMGateway):
        self.gateway = gateway

    async def generate_reply(self, history: Sequence[Message], message: str) -> ReplyResult:
        """Answer ``message`` given up to ``HISTORY_WINDOW`` prior messages.

        Args:
            history: Prior messages, oldest first. Only the newest
                ``HISTORY_WINDOW`` are used.
            message: The customer's new message.

        Returns:
            ReplyResult with ``success=False`` and the apology text when the
            gateway fails.
        """
        prompt = prompts.build_reply_prompt(list(history)[-HISTORY_WINDOW:], message)
        try:
            text = await self.gateway.generate(prompt)
        except Exception as e:
            logger.error(f"Reply generation failed, using fallback: {str(e)}")
            return ReplyResult(text=REPLY_FALLBACK, success=False, error=str(e))

        reply = text.strip()
        if not reply:
            logger.error("Reply generation returned blank text, using fallback")
            return ReplyResult(text=REPLY_FALLBACK, success=False, error="Empty reply")

        return ReplyResult(text=reply, success=True)

    async def summarize(self, messages: Sequence[Message]) -> str:
        """Summarize a whole conversation for a human agent."""
        if not messages:
            return SUMMARY_EMPTY

        try:
            summary = await self.gateway.generate(prompts.build_summary_prompt(messages))
        except Exception as e:
            logger.error(f"Summary generation failed: {str(e)}")
            return SUMMARY_FAILED

        return summary.strip() or SUMMARY_UNAVAILABLE

    async def should_escalate(self, recent_messages: Sequence[Message]) -> bool:
        """Advise whether a human should take over.

        Only the newest ``ESCALATION_WINDOW`` messages are considered. Short
        conversations are never escalated and the gateway is not consulted.
        """
        window = list(recent_messages)[-ESCALATION_WINDOW:]
        if len(window) < ESCALATION_MIN_MESSAGES:
            return False

        try:
            decision = await self.gateway.generate(prompts.build_escalation_prompt(window))
        except Exception as e:
            logger.error(f"Escalation check failed, not escalating: {str(e)}")
            return False

        return decision.strip().casefold() == ESCALATION_AFFIRMATIVE

    async def classify_sentiment(self, message: str) -> Sentiment:
        try:
            label = await self.gateway.generate(prompts.build_sentiment_prompt(message))
        except Exception as e:
            logger.error(f"Sentiment analysis failed: {str(e)}")
            return Sentiment.NEUTRAL

        try:
            return Sentiment(label.strip().casefold())
        except ValueError:
            logger.warning(f"Unexpected sentiment label {label!r}, defaulting to neutral")
            return Sentiment.NEUTRAL
