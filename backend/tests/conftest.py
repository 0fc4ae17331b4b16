"""
Contest Portal - Test Configuration and Fixtures
"""
import os
import tempfile
from typing import AsyncGenerator
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

# Set testing environment before the app is imported
_TEST_DIR = tempfile.mkdtemp(prefix="contest-portal-tests-")
TEST_DATABASE_URL = f"sqlite+aiosqlite:///{_TEST_DIR}/test.db"

os.environ['ENVIRONMENT'] = 'testing'
os.environ['DEBUG'] = 'false'
os.environ['DATABASE_URL'] = TEST_DATABASE_URL
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['UPLOAD_DIR'] = os.path.join(_TEST_DIR, 'uploads')
os.environ['LOG_LEVEL'] = 'WARNING'

from contest_portal.main import app
from contest_portal.core.database import Base, get_db
from contest_portal.models import Competition, User, UserRole

from factories import bearer, fake, make_competition, make_user

# Test database setup
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a regular test user"""
    return await make_user(db_session)


@pytest.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await make_user(db_session)


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    """Create an admin test user"""
    return await make_user(db_session, role=UserRole.ADMIN)


@pytest.fixture
async def super_admin_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, role=UserRole.SUPER_ADMIN)


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    """Generate authentication headers for test user"""
    return bearer(test_user)


@pytest.fixture
def admin_auth_headers(admin_user: User) -> dict:
    """Generate authentication headers for admin user"""
    return bearer(admin_user)


@pytest.fixture
def super_admin_auth_headers(super_admin_user: User) -> dict:
    return bearer(super_admin_user)


@pytest.fixture
async def open_competition(db_session: AsyncSession, admin_user: User) -> Competition:
    return await make_competition(db_session, admin_user)


@pytest.fixture
def test_user_data() -> dict:
    """Registration payload for a new account"""
    return {
        'username': fake.unique.user_name(),
        'email': fake.unique.email(),
        'password': 'secret1',
        'realName': fake.name(),
        'studentId': fake.unique.numerify('2024########'),
        'phone': fake.unique.numerify('139########'),
    }
