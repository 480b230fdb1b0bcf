"""
School Noticeboard - Test Configuration and Fixtures
"""
import os
from pathlib import Path
from typing import AsyncGenerator, Awaitable, Callable
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from faker import Faker

# Set testing environment
os.environ['TESTING'] = 'true'
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['SESSION_SECRET'] = 'test-session-secret-for-testing-only'
os.environ['STORAGE_BACKEND'] = 'memory'
os.environ['SESSION_BACKEND'] = 'memory'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['KDF_ROUNDS'] = '2'  # keep hashing fast
os.environ['LOG_LEVEL'] = 'WARNING'

from app.main import app
from app.modules.auth.session_store import MemorySessionStore
from app.modules.storage import MemStorage
from app.services.file_upload import FileUploadHandler

fake = Faker()

BOOTSTRAP_PASSWORD = 'password'

ClientFactory = Callable[..., Awaitable[AsyncClient]]


@pytest.fixture
def storage() -> MemStorage:
    """Fresh in-memory storage seeded with admin (1), teacher (2), student (3)"""
    return MemStorage()


@pytest.fixture
def session_store() -> MemorySessionStore:
    return MemorySessionStore(max_age_seconds=3600)


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    return tmp_path / 'fileuploads'


@pytest.fixture
def upload_handler(upload_dir: Path) -> FileUploadHandler:
    return FileUploadHandler(
        upload_dir,
        url_prefix='/fileuploads',
        max_size=64 * 1024,
        allowed_extensions=['pdf', 'txt', 'png'],
    )


@pytest.fixture
def test_app(storage, session_store, upload_handler):
    """The app wired to per-test backends (the lifespan does not run under ASGITransport)"""
    app.state.storage = storage
    app.state.session_store = session_store
    app.state.upload_handler = upload_handler
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client_factory(test_app) -> AsyncGenerator[ClientFactory, None]:
    """
    Build extra clients, optionally logged in. Each client keeps its own
    cookie jar, so several identities can be used in one test.
    """
    clients = []

    async def make(username: str = None, password: str = BOOTSTRAP_PASSWORD) -> AsyncClient:
        ac = AsyncClient(transport=ASGITransport(app=test_app), base_url='http://test')
        clients.append(ac)
        if username:
            response = await ac.post('/api/login', json={'username': username, 'password': password})
            assert response.status_code == 200, response.text
        return ac

    yield make

    for ac in clients:
        await ac.aclose()


@pytest_asyncio.fixture
async def client(client_factory) -> AsyncClient:
    """Anonymous client"""
    return await client_factory()


@pytest_asyncio.fixture
async def student_client(client_factory) -> AsyncClient:
    return await client_factory('student')


@pytest_asyncio.fixture
async def teacher_client(client_factory) -> AsyncClient:
    return await client_factory('teacher')


@pytest_asyncio.fixture
async def admin_client(client_factory) -> AsyncClient:
    return await client_factory('admin')


@pytest.fixture
def user_data() -> dict:
    """Registration payload for a new user"""
    return {
        'username': fake.unique.user_name(),
        'password': fake.password(length=12),
        'name': fake.name(),
        'role': 'student',
    }


@pytest.fixture
def announcement_data() -> dict:
    return {
        'title': fake.sentence(nb_words=4),
        'content': fake.paragraph(),
        'important': False,
        'category': 'general',
        'audience': 'all',
    }


@pytest.fixture
def assignment_data() -> dict:
    return {
        'title': fake.sentence(nb_words=4),
        'description': fake.paragraph(),
        'dueDate': '2030-05-01T12:00:00Z',
        'classId': '10A',
    }


@pytest.fixture
def event_data() -> dict:
    return {
        'title': fake.sentence(nb_words=3),
        'description': fake.paragraph(),
        'startDate': '2030-06-01T09:00:00Z',
        'endDate': '2030-06-01T15:00:00Z',
        'location': 'Main hall',
    }
