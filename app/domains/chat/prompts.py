"""Prompt templates for the support assistant."""

from collections.abc import Sequence

from models.message import Message, MessageRole

NO_HISTORY_PLACEHOLDER = "No previous conversation."

SPEAKER_LABELS = {
    MessageRole.USER: "Customer",
    MessageRole.ASSISTANT: "Assistant",
}

SUPPORT_PERSONA = """You are a helpful and empathetic AI customer support assistant for an e-commerce company. Your role is to:

1. Understand customer queries and provide accurate, helpful information
2. Be polite, professional, and empathetic
3. Provide step-by-step solutions when needed
4. If you don't know something, admit it and offer to escalate to a human agent
5. Keep responses concise but comprehensive
6. Use markdown formatting for better readability

Guidelines:
- Always greet customers warmly
- Listen carefully to their concerns
- Provide clear, actionable solutions
- Confirm understanding before offering solutions
- End conversations positively"""

REPLY_TEMPLATE = """{persona}

Current conversation:
{history}

Customer: {message}
Assistant:"""

SUMMARY_TEMPLATE = """Please provide a concise summary of the following customer support conversation. Include:
1. Main issue or question
2. Solutions attempted
3. Current status
4. What the customer needs

Conversation:
{conversation}

Summary:"""

ESCALATION_TEMPLATE = """Based on this customer support conversation, should it be escalated to a human agent?
Consider:
- Customer frustration level
- Complexity of the issue
- Number of failed resolution attempts
- Urgency

Respond with only YES or NO.

Conversation:
{conversation}

Should escalate:"""

SENTIMENT_TEMPLATE = """Analyze the sentiment of this customer message and respond with only one word: positive, negative, or neutral.

Message: {message}

Sentiment:"""


def render_message(message: Message) -> str:
    return f"{SPEAKER_LABELS[MessageRole(message.role)]}: {message.text}"


def render_history(messages: Sequence[Message], separator: str = "\n") -> str:
    """Render messages oldest first as ``Customer:``/``Assistant:`` lines."""
    return separator.join(render_message(message) for message in messages)


def build_reply_prompt(history: Sequence[Message], message: str) -> str:
    return REPLY_TEMPLATE.format(
        persona=SUPPORT_PERSONA,
        history=render_history(history) or NO_HISTORY_PLACEHOLDER,
        message=message,
    )


def build_summary_prompt(messages: Sequence[Message]) -> str:
    return SUMMARY_TEMPLATE.format(conversation=render_history(messages, separator="\n\n"))


def build_escalation_prompt(messages: Sequence[Message]) -> str:
    return ESCALATION_TEMPLATE.format(conversation=render_history(messages))


def build_sentiment_prompt(message: str) -> str:
    return SENTIMENT_TEMPLATE.format(message=message)
