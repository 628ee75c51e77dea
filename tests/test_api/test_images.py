import pytest

from src.api.dependencies import get_image_storage
from src.main import app
from src.services.image_storage import ImageStorageService


@pytest.fixture
def image_storage(tmp_path):
    storage = ImageStorageService(str(tmp_path))
    app.dependency_overrides[get_image_storage] = lambda: storage
    return storage


async def test_latest_image_not_found(async_client, image_storage):
    response = await async_client.get("/api/v1/images/latest")

    assert response.status_code == 404


async def test_latest_image_served(async_client, image_storage):
    image_storage.image_path_for("2024-01-02").write_bytes(b"png-bytes")

    response = await async_client.get("/api/v1/images/latest")

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content == b"png-bytes"


async def test_daily_image_record(async_client, daily_image_repository):
    daily_image_repository.upsert(date="2024-01-02", analysis="stored", image_path="images/image_2024-01-02.png")

    response = await async_client.get("/api/v1/images/2024-01-02")

    assert response.status_code == 200
    assert response.json()["analysis"] == "stored"


async def test_daily_image_missing(async_client):
    response = await async_client.get("/api/v1/images/2024-01-03")

    assert response.status_code == 404


async def test_daily_image_invalid_date(async_client):
    response = await async_client.get("/api/v1/images/not-a-date")

    assert response.status_code == 400
