"""
Pytest configuration and fixtures for Study Buddy tests.
"""
import sys
import os
import httpx
import pytest

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from api.main import create_app
from core.config import Settings
from core.security import create_token
from db.base import Base
from db.session import build_engine, build_sessionmaker
from models.user import User
from services.ai_service import Completion
from utils.parser import GeneratedQuestion, Parsed

LETTERS = "ABCD"


def correct_letter(number: int) -> str:
    """Correct option of question ``number`` as produced by make_questions."""
    return LETTERS[(number - 1) % 4]


def wrong_letter(number: int) -> str:
    return LETTERS[number % 4]


def make_questions(count: int):
    return [
        GeneratedQuestion(
            question=f"Sample question {i}?",
            options={"A": f"Option A{i}", "B": f"Option B{i}", "C": f"Option C{i}", "D": f"Option D{i}"},
            correct=correct_letter(i),
            explanation=f"Explanation {i}",
        )
        for i in range(1, count + 1)
    ]


class FakeAIService:
    """Stands in for AIService; returns canned questions or raises a preset error."""

    def __init__(self):
        self.outcome = None
        self.error = None
        self.reply = "Here is an explanation."
        self.generate_calls = []
        self.chat_calls = []

    async def generate_mcq_questions(self, subject, topic, difficulty, count):
        self.generate_calls.append({"subject": subject, "topic": topic, "difficulty": difficulty, "count": count})
        if self.error:
            raise self.error
        if self.outcome is not None:
            return self.outcome
        return Parsed(questions=make_questions(count))

    async def chat_reply(self, system_prompt, history, message):
        self.chat_calls.append({"system_prompt": system_prompt, "history": list(history), "message": message})
        if self.error:
            raise self.error
        return Completion(content=self.reply, tokens_used=42)

    async def close(self):
        pass


class FakeRedis:
    def __init__(self):
        self.counters = {}
        self.expiry = {}

    async def incr(self, key):
        self.counters[key] = self.counters.get(key, 0) + 1
        return self.counters[key]

    async def expire(self, key, seconds):
        self.expiry[key] = seconds

    async def aclose(self):
        pass


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        SECRET_KEY="test-secret",
        REDIS_URL="",
        GROQ_API_KEY="fake_key",
        AI_RATE_LIMIT_PER_MINUTE=3,
    )


@pytest.fixture
async def engine(settings):
    engine = build_engine(settings)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_sessionmaker(engine)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


async def _create_user(db, email):
    user = User(email=email, full_name=email.split("@")[0])
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest.fixture
async def user(db):
    return await _create_user(db, "student@example.com")


@pytest.fixture
async def other_user(db):
    return await _create_user(db, "other@example.com")


@pytest.fixture
def fake_ai():
    return FakeAIService()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def auth_headers(settings, user):
    return {"Authorization": f"Bearer {create_token(user.id, settings.SECRET_KEY)}"}


@pytest.fixture
async def client(settings, session_factory, fake_ai):
    app = create_app(settings, ai_service=fake_ai, sessionmaker=session_factory)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def limited_client(settings, session_factory, fake_ai, fake_redis):
    app = create_app(settings, ai_service=fake_ai, sessionmaker=session_factory, redis=fake_redis)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
