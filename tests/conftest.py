"""
Shared fixtures: an in-memory database and a scripted AI provider.
"""
import json

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from interviewai.core.security import hash_password
from interviewai.db.base import Base
from interviewai.db.models.profile import Profile
from interviewai.llm.provider import LLMProvider, LLMResponse
from interviewai.services.ai_gateway import ANALYSIS_PROMPT, AIGateway


# Setup in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def feedback_json(score=85, strengths=None, improvements=None, feedback="Clear and well structured."):
    return json.dumps({
        "score": score,
        "strengths": strengths if strengths is not None else ["Good structure"],
        "improvements": improvements if improvements is not None else ["Mention complexity"],
        "feedback": feedback,
    })


class FakeProvider(LLMProvider):
    """
    Scripted provider. Queued items are returned in order; an Exception
    instance in a queue is raised instead.
    """

    def __init__(self, questions=None, analyses=None, transcript="my spoken answer", audio=b"mp3-bytes"):
        self.questions = list(questions or [])
        self.analyses = list(analyses or [])
        self.transcript = transcript
        self.audio = audio
        self.question_prompts = []
        self.analysis_prompts = []
        self.transcribed = []
        self.synthesized = []

    @staticmethod
    def _next(queue, default):
        item = queue.pop(0) if queue else default
        if isinstance(item, Exception):
            raise item
        return item

    async def chat(self, messages, model, temperature=0.7, max_tokens=None, **kwargs):
        system, user = messages[0]["content"], messages[1]["content"]
        if system == ANALYSIS_PROMPT:
            self.analysis_prompts.append(user)
            content = self._next(self.analyses, feedback_json())
        else:
            self.question_prompts.append((system, user))
            content = self._next(self.questions, f"Generated question {len(self.question_prompts)}")
        return LLMResponse(content=content, model=model)

    async def transcribe(self, audio, model, filename="answer.webm"):
        self.transcribed.append((audio, filename))
        if isinstance(self.transcript, Exception):
            raise self.transcript
        return self.transcript

    async def synthesize(self, text, model, voice):
        self.synthesized.append(text)
        if isinstance(self.audio, Exception):
            raise self.audio
        return self.audio


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=test_engine)
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def profile(db):
    """A registered user."""
    user = Profile(
        full_name="Asha Rao",
        email="asha@example.com",
        password_hash=hash_password("testpass123"),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def gateway(provider):
    return AIGateway(provider, tts_voice="alloy")


@pytest.fixture
def registry():
    from interviewai.services.interview_controller import ControllerRegistry

    return ControllerRegistry()


@pytest.fixture
def client(db, gateway, registry):
    """TestClient wired to the in-memory database, scripted gateway and a fresh run registry."""
    from fastapi.testclient import TestClient

    from interviewai.api.dependencies import get_gateway, get_registry, get_session_factory
    from interviewai.core.auth_dependency import get_db
    from interviewai.main import app

    def override_get_db():
        session = TestSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_gateway] = lambda: gateway
    app.dependency_overrides[get_registry] = lambda: registry
    app.dependency_overrides[get_session_factory] = lambda: TestSessionLocal
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(profile):
    from interviewai.core.security import create_access_token

    return {"Authorization": f"Bearer {create_access_token({'sub': profile.email})}"}
