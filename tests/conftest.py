# tests/conftest.py
import os

# Set up test environment variables BEFORE any other imports
os.environ.setdefault("TESTING", "true")
os.environ.setdefault("TEST_DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("DATABASE_URL", os.environ["TEST_DATABASE_URL"])
os.environ["GEMINI_API_KEY"] = ""
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SUPPORT_TEAM_EMAIL", "support@example.com")

from datetime import timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.dependencies import get_db, get_email_service, get_llm_gateway
from app.core.security import token_manager
from app.exceptions.ai import AIServiceUnavailableError
from app.main import app
from app.schemas.support import NotificationResult
from models import Base, Conversation, Message, MessageRole
from models.base import utc_now
from tests.factories import ConversationFactory, MessageFactory, UserFactory, persist

TEST_DATABASE_URL = os.environ["TEST_DATABASE_URL"]


class FakeGateway:
    """Stands in for the Gemini gateway.

    Answers by prompt kind and records every prompt it was given. Kinds listed
    in ``fail_on`` raise instead of answering.
    """

    def __init__(self):
        self.prompts: list[str] = []
        self.reply = "Thanks for reaching out! Let me look into that for you."
        self.summary = "Customer reports a missing order and wants a refund."
        self.escalation = "NO"
        self.sentiment = "neutral"
        self.fail_on: set[str] = set()
        self.is_configured = True

    @staticmethod
    def kind_of(prompt: str) -> str:
        tail = prompt.rstrip()
        if tail.endswith("Should escalate:"):
            return "escalation"
        if tail.endswith("Summary:"):
            return "summary"
        if tail.endswith("Sentiment:"):
            return "sentiment"
        return "reply"

    def prompts_of(self, kind: str) -> list[str]:
        return [p for p in self.prompts if self.kind_of(p) == kind]

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        kind = self.kind_of(prompt)
        if kind in self.fail_on or "all" in self.fail_on:
            raise AIServiceUnavailableError()
        return getattr(self, kind)


class FakeNotifier:
    """Records notifications instead of sending email."""

    def __init__(self):
        self.calls: list[tuple] = []
        self.fail_on: set[str] = set()

    def _result(self, kind: str, recipient: str) -> NotificationResult:
        if kind in self.fail_on:
            return NotificationResult(kind=kind, recipient=recipient, success=False, error="SMTP down")
        return NotificationResult(kind=kind, recipient=recipient, success=True)

    async def send_password_reset(self, email, token):
        self.calls.append(("password_reset", email, token))
        return self._result("password_reset", email)

    async def send_escalation_alert(self, customer_email, summary, notes=None, internal_address=None):
        self.calls.append(("escalation_alert", customer_email, summary, notes))
        return self._result("escalation_alert", internal_address or "support@example.com")

    async def send_summary_copy(self, customer_email, summary):
        self.calls.append(("summary_copy", customer_email, summary))
        return self._result("summary_copy", customer_email)

    def kinds(self) -> list[str]:
        return [call[0] for call in self.calls]


@pytest_asyncio.fixture
async def test_db():
    """Create a test database session."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    TestSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()

    # Clean up - drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def fake_notifier():
    return FakeNotifier()


@pytest_asyncio.fixture
async def client(test_db, fake_gateway, fake_notifier):
    """Create a test client with database and shared-service overrides."""
    app.dependency_overrides[get_db] = lambda: test_db
    app.dependency_overrides[get_llm_gateway] = lambda: fake_gateway
    app.dependency_overrides[get_email_service] = lambda: fake_notifier

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# User fixtures
@pytest_asyncio.fixture
async def test_user(test_db):
    """Create a test user."""
    (user,) = await persist(test_db, UserFactory.build(name="Test User", email="test@example.com"))
    return user


@pytest_asyncio.fixture
async def test_user_2(test_db):
    """Create a second test user."""
    (user,) = await persist(test_db, UserFactory.build(name="Other User", email="other@example.com"))
    return user


@pytest.fixture
def auth_headers(test_user):
    return {"Authorization": f"Bearer {token_manager.create_access_token(test_user.id)}"}


@pytest.fixture
def auth_headers_2(test_user_2):
    return {"Authorization": f"Bearer {token_manager.create_access_token(test_user_2.id)}"}


# Conversation fixtures
@pytest_asyncio.fixture
async def test_conversation(test_db, test_user):
    """Create an empty conversation owned by test_user."""
    (conversation,) = await persist(test_db, ConversationFactory.build(user_id=test_user.id))
    return conversation


@pytest.fixture
def add_messages(test_db):
    """Insert ``count`` alternating messages with strictly increasing timestamps.

    Message texts are ``history-00``, ``history-01``, ... and start with a user
    message. Timestamps lie in the past so later writes sort after them.
    """

    async def _add(conversation: Conversation, count: int, prefix: str = "history") -> list[Message]:
        base = utc_now() - timedelta(hours=1)
        messages = [
            MessageFactory.build(
                conversation_id=conversation.id,
                role=MessageRole.USER if i % 2 == 0 else MessageRole.ASSISTANT,
                text=f"{prefix}-{i:02d}",
                created_at=base + timedelta(seconds=i),
                updated_at=base + timedelta(seconds=i),
            )
            for i in range(count)
        ]
        return list(await persist(test_db, *messages))

    return _add
