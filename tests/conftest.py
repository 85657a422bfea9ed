"""
Конфигурация для pytest.
"""
import io
from uuid import UUID, uuid4

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.core import redis as redis_module
from app.core.config import settings
from app.core.database import Base, get_db
from app.utils.jwt import create_access_token


# Тестовая БД (in-memory SQLite для тестов)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

SAMPLE_BOM = (
    "partNumber,partName,description,quantity\n"
    "PN-001,Blad,Main rotr assembly,3\n"
    "PN-002,Hub,Cast iron hub,1\n"
    ",Tower,teh section,2\n"
    "PN-004,Bolt,Steel bolt M12,24\n"
)


class MockRedis:
    """Redis в памяти: только команды, которые использует приложение."""

    def __init__(self):
        self.data = {}
        self.closed = 0

    async def get(self, key: str):
        return self.data.get(key)

    async def setex(self, key: str, time: int, value: str):
        self.data[key] = value

    async def delete(self, key: str):
        self.data.pop(key, None)

    async def incr(self, key: str):
        self.data[key] = int(self.data.get(key, 0)) + 1
        return self.data[key]

    async def expire(self, key: str, time: int, nx: bool = False):
        return True

    async def ping(self):
        return True

    def pipeline(self):
        return MockPipeline(self)

    async def aclose(self):
        self.closed += 1
        self.data.clear()


class MockPipeline:
    def __init__(self, redis: MockRedis):
        self.redis = redis
        self.commands = []

    def incr(self, key: str):
        self.commands.append(self.redis.incr(key))

    def expire(self, key: str, time: int, nx: bool = False):
        self.commands.append(self.redis.expire(key, time, nx))

    async def execute(self):
        return [await command for command in self.commands]


@pytest.fixture(autouse=True)
def mock_redis(monkeypatch) -> MockRedis:
    """Подмена глобального клиента Redis."""
    client = MockRedis()
    monkeypatch.setattr(redis_module, "redis_client", client)
    return client


@pytest.fixture(autouse=True)
def storage_path(monkeypatch, tmp_path):
    """Файловое хранилище во временном каталоге."""
    monkeypatch.setattr(settings, "FILE_STORAGE_PATH", str(tmp_path))
    monkeypatch.setattr(settings, "VALIDATION_ASYNC", False)
    return tmp_path


@pytest.fixture(scope="function")
async def test_engine():
    """Движок БД на время одного теста."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture(scope="function")
async def db_session(session_factory):
    """Создание тестовой сессии БД."""
    async with session_factory() as session:
        yield session


@pytest.fixture(scope="function")
async def client(session_factory):
    """Создание тестового клиента."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def auth_headers(user_id: UUID) -> dict:
    """Заголовок с токеном текущего пользователя."""
    token = create_access_token({"sub": str(user_id), "email": "engineer@example.com"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_auth_headers() -> dict:
    """Заголовок с токеном другого пользователя."""
    token = create_access_token({"sub": str(uuid4())})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def upload_bom(client: AsyncClient, auth_headers: dict):
    """Загрузка BOM от имени текущего пользователя."""
    async def _upload(content: str = SAMPLE_BOM, filename: str = "bom.csv", headers: dict | None = None):
        files = {"file": (filename, io.BytesIO(content.encode("utf-8")), "text/csv")}
        return await client.post(
            "/api/v1/bom-checks/upload",
            headers=headers or auth_headers,
            files=files,
        )

    return _upload
