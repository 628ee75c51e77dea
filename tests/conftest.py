import pytest
from unittest.mock import MagicMock, AsyncMock
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.core.database import Base
from src.models.daily_image import DailyImage  # noqa: F401
from src.repositories.daily_image_repository import DailyImageRepository

ANALYSIS_REPLY = "SUMMARY: test\nTHEMES: x, y, z, w, v"


def make_articles(count=3):
    return [
        {
            "title": f"Headline {i}",
            "description": f"Description {i}",
            "url": f"https://example.com/{i}",
            "source": {"id": None, "name": f"Source {i}"},
            "publishedAt": "2024-01-01T10:00:00Z",
        }
        for i in range(count)
    ]


@pytest.fixture
def mock_news_source():
    source = MagicMock()
    source.search = AsyncMock(return_value=make_articles())
    return source


@pytest.fixture
def mock_llm_service():
    service = MagicMock()
    service.generate_with_fallback = AsyncMock(side_effect=[ANALYSIS_REPLY, "P"])
    return service


@pytest.fixture
def mock_image_generator():
    generator = MagicMock()
    generator.generate = AsyncMock(return_value="H")
    return generator


@pytest.fixture
def mock_cache():
    cache = MagicMock()
    cache.get = AsyncMock(return_value=None)
    cache.set = AsyncMock(return_value=True)
    cache.ping = AsyncMock(return_value=True)
    cache.close = AsyncMock()
    return cache


@pytest.fixture
def mock_embedding_service():
    service = MagicMock()
    service.embed = AsyncMock(return_value=[0.1, 0.2, 0.3])
    return service


@pytest.fixture
def mock_vector_store():
    store = MagicMock()
    store.upsert = AsyncMock()
    store.query = AsyncMock(return_value=[])
    return store


@pytest.fixture
def test_db():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def daily_image_repository(test_db):
    return DailyImageRepository(test_db)


@pytest.fixture
def admin_settings(monkeypatch):
    settings = MagicMock()
    settings.admin_api_key = "test-admin-key"
    monkeypatch.setattr("src.api.dependencies.get_settings", lambda: settings)
    return settings


@pytest.fixture
def mock_daily_image_service():
    service = MagicMock()
    service.generate_daily_image = AsyncMock()
    service.fill_vector_db = AsyncMock()
    service.query_similar_news = AsyncMock(return_value=[])
    return service


@pytest.fixture
async def async_client(test_db, admin_settings, mock_daily_image_service):
    from src.main import app
    from src.core.database import get_db
    from src.api.dependencies import get_daily_image_service

    def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_daily_image_service] = lambda: mock_daily_image_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
