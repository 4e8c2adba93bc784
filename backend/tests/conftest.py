"""
IT Chronicle - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator, Awaitable, Callable
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment
os.environ['TESTING'] = 'true'
os.environ['ENVIRONMENT'] = 'test'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['ANTHROPIC_API_KEY'] = 'test-api-key'
os.environ['LOG_FILE'] = ''

from chronicle.main import app
from chronicle.api.deps import get_ai_client, get_skill_scheduler
from chronicle.core.database import Base, get_db
from chronicle.core.security import create_access_token
from chronicle.db.gateway import SQLAlchemyGateway, make_key
from chronicle.models.user import User, UserRole, ItStatus
from chronicle.services.skill_service import SkillDerivationScheduler
from chronicle.services.task_runner import BackgroundTaskRunner
from tests.mocks.mock_classifier import MockLogbookAIClient

fake = Faker()

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def gateway(db_session: AsyncSession) -> SQLAlchemyGateway:
    return SQLAlchemyGateway(db_session)


@pytest.fixture
def ai_client() -> MockLogbookAIClient:
    return MockLogbookAIClient()


@pytest.fixture
def task_runner() -> BackgroundTaskRunner:
    return BackgroundTaskRunner(failure_history=10)


@pytest.fixture
def skill_scheduler(task_runner, ai_client) -> SkillDerivationScheduler:
    """Derivations run on their own sessions against the test database"""
    return SkillDerivationScheduler(task_runner, ai_client, TestSessionLocal)


@pytest.fixture
async def client(
    db_session: AsyncSession,
    ai_client: MockLogbookAIClient,
    skill_scheduler: SkillDerivationScheduler
) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database, AI and scheduler overrides"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ai_client] = lambda: ai_client
    app.dependency_overrides[get_skill_scheduler] = lambda: skill_scheduler

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(gateway: SQLAlchemyGateway) -> Callable[..., Awaitable[User]]:
    """Factory storing a profile straight through the gateway"""
    async def _make_user(role: UserRole = UserRole.STUDENT, **fields) -> User:
        profile = {
            'first_name': fake.first_name(),
            'surname': fake.last_name(),
            'email': fake.unique.email(),
            'role': role,
        }
        if role == UserRole.STUDENT:
            profile['it_status'] = ItStatus.ONGOING
            profile['level'] = 300
        elif role == UserRole.SUPERVISOR:
            profile['supervisor_code'] = f"SUPER-{fake.unique.bothify('??##??').upper()}"
            profile['company_name'] = fake.company()
        profile.update(fields)
        return await gateway.set(make_key('users', gateway.new_id()), profile)
    return _make_user


@pytest.fixture
async def supervisor(make_user) -> User:
    return await make_user(UserRole.SUPERVISOR)


@pytest.fixture
async def student(make_user, supervisor: User) -> User:
    """Student linked to the supervisor fixture"""
    return await make_user(UserRole.STUDENT, supervisor_id=supervisor.id)


@pytest.fixture
async def admin_user(make_user) -> User:
    return await make_user(UserRole.ADMIN)


def auth_headers_for(user: User) -> dict:
    """Generate authentication headers for a user"""
    token = create_access_token({'sub': str(user.id), 'email': user.email})
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def student_headers(student: User) -> dict:
    return auth_headers_for(student)


@pytest.fixture
def supervisor_headers(supervisor: User) -> dict:
    return auth_headers_for(supervisor)


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return auth_headers_for(admin_user)
