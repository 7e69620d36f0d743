"""
Shared test fixtures: in-memory database, principals, fakes for AI and email
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("AI_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "text")

from types import SimpleNamespace

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from projectflow import models  # noqa: F401
from projectflow.core.database import Base, get_db
from projectflow.core.security import CurrentUser
from projectflow.models import ProjectMember, UserProfile
from projectflow.schemas.question import AnswerInput
from projectflow.services.ai_service import AIService
from projectflow.services.project_service import ProjectService


class RecordingEmailService:
    """Collects notifications instead of sending them"""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    async def _record(self, kind, **kwargs):
        if self.fail:
            raise ConnectionError("SMTP relay unavailable")
        self.sent.append((kind, kwargs))
        return True

    async def send_project_invitation_email(self, **kwargs):
        return await self._record("invitation", **kwargs)

    async def send_role_update_email(self, **kwargs):
        return await self._record("role_update", **kwargs)

    async def send_removal_email(self, **kwargs):
        return await self._record("removal", **kwargs)


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAI:
    """Stands in for AsyncOpenAI; only chat.completions.create is used"""

    def __init__(self, content=None, error=None):
        self.completions = FakeCompletions(content, error)
        self.chat = SimpleNamespace(completions=self.completions)


@pytest.fixture
def ai_with():
    """Build an enabled AI service backed by a canned completion"""
    def _build(content=None, error=None):
        return AIService(client=FakeOpenAI(content=content, error=error), model="test-model", enabled=True)
    return _build


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def ai_service():
    return AIService(enabled=False)


@pytest.fixture
def email_outbox():
    return RecordingEmailService()


@pytest.fixture
def failing_outbox():
    return RecordingEmailService(fail=True)


@pytest.fixture
def make_user(db_session: AsyncSession):
    """Create a profile and return the matching principal"""
    async def _make(user_id: str, email: str = None) -> CurrentUser:
        profile = UserProfile(
            user_id=user_id,
            email=email or f"{user_id}@example.com",
            first_name=user_id.title(),
            last_name="Tester",
        )
        db_session.add(profile)
        await db_session.commit()
        return CurrentUser(user_id=user_id, email=profile.email, name=profile.full_name)
    return _make


@pytest.fixture
async def owner(make_user):
    return await make_user("owner")


@pytest.fixture
def grant_role(db_session: AsyncSession):
    """Put a user in a project's role map"""
    async def _grant(project, user: CurrentUser, role: str):
        project.members.append(ProjectMember(user_id=user.user_id, role=role, added_by=project.owner_id))
        await db_session.commit()
    return _grant


@pytest.fixture
def project_service(db_session, ai_service):
    return ProjectService(db_session, ai_service)


@pytest.fixture
def features_step_project(db_session, project_service, owner):
    """A project named, described and with every question answered (wizard on step 4)"""
    async def _build(name: str = "Acme", description: str = "A widget"):
        project = await project_service.create_project(owner)
        await project_service.update_project_name(owner, project.id, name)
        await project_service.update_project_description(owner, project.id, description)
        questions = await project_service.questions.list_questions(owner, project.id)
        answers = [AnswerInput(question_id=q.id, answer=f"Answer {q.order_index}") for q in questions]
        return await project_service.save_question_answers(owner, project.id, answers)
    return _build


@pytest.fixture
async def client(session_factory, ai_service, email_outbox):
    from projectflow.core.deps import get_ai_service, get_email_service
    from projectflow.main import app

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ai_service] = lambda: ai_service
    app.dependency_overrides[get_email_service] = lambda: email_outbox

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client

    app.dependency_overrides.clear()
