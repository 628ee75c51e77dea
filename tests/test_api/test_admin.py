import pytest

from src.exceptions import ImageGenerationError, ValidationError, WorkflowError

HEADERS = {"X-API-Key": "test-admin-key"}

RECORD = {
    "date": "2024-01-02",
    "analysis": "test\n\nThemes: x, y, z, w, v",
    "image_path": "images/image_2024-01-02.png",
    "summary": "test",
    "themes": ["x", "y", "z", "w", "v"],
    "image_prompt": "P",
}


@pytest.mark.parametrize("headers", [{}, {"X-API-Key": "wrong"}])
async def test_generate_image_rejects_bad_key(async_client, mock_daily_image_service, headers):
    response = await async_client.post("/api/v1/admin/generate-image", json={"date": "2024-01-02"}, headers=headers)

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid API key"
    mock_daily_image_service.generate_daily_image.assert_not_awaited()


async def test_generate_image_requires_date(async_client, mock_daily_image_service):
    response = await async_client.post("/api/v1/admin/generate-image", json={}, headers=HEADERS)

    assert response.status_code == 400
    assert response.json()["detail"] == "Date is required"
    mock_daily_image_service.generate_daily_image.assert_not_awaited()


async def test_generate_image_success(async_client, mock_daily_image_service):
    mock_daily_image_service.generate_daily_image.return_value = RECORD

    response = await async_client.post(
        "/api/v1/admin/generate-image", json={"date": "2024-01-02", "force": True}, headers=HEADERS
    )

    assert response.status_code == 200
    assert response.json()["analysis"] == RECORD["analysis"]
    mock_daily_image_service.generate_daily_image.assert_awaited_once_with("2024-01-02", force=True)


async def test_generate_image_invalid_date(async_client, mock_daily_image_service):
    mock_daily_image_service.generate_daily_image.side_effect = ValidationError("Invalid date")

    response = await async_client.post("/api/v1/admin/generate-image", json={"date": "yesterday"}, headers=HEADERS)

    assert response.status_code == 400


@pytest.mark.parametrize("error", [WorkflowError("failed"), ImageGenerationError("policy")])
async def test_generate_image_failure(async_client, mock_daily_image_service, error):
    mock_daily_image_service.generate_daily_image.side_effect = error

    response = await async_client.post("/api/v1/admin/generate-image", json={"date": "2024-01-02"}, headers=HEADERS)

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to generate image"


async def test_fill_vector_db_success(async_client, mock_daily_image_service):
    mock_daily_image_service.fill_vector_db.return_value = {
        "date": "2024-01-02",
        "status": "success",
        "message": "Vector DB updated successfully",
    }

    response = await async_client.post("/api/v1/admin/fill-vector-db", json={"date": "2024-01-02"}, headers=HEADERS)

    assert response.status_code == 200
    assert response.json()["status"] == "success"


async def test_fill_vector_db_failure(async_client, mock_daily_image_service):
    mock_daily_image_service.fill_vector_db.side_effect = WorkflowError("no news")

    response = await async_client.post("/api/v1/admin/fill-vector-db", json={"date": "2024-01-02"}, headers=HEADERS)

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to fill vector DB"


async def test_fill_vector_db_requires_key(async_client):
    response = await async_client.post("/api/v1/admin/fill-vector-db", json={"date": "2024-01-02"})

    assert response.status_code == 401


async def test_similar_news(async_client, mock_daily_image_service):
    mock_daily_image_service.query_similar_news.return_value = [
        {"date": "2024-01-01", "analysis": "a", "score": 0.9}
    ]

    response = await async_client.get(
        "/api/v1/admin/similar-news", params={"query": "summit", "limit": 2}, headers=HEADERS
    )

    assert response.status_code == 200
    assert response.json() == {"query": "summit", "matches": [{"date": "2024-01-01", "analysis": "a", "score": 0.9}]}
    mock_daily_image_service.query_similar_news.assert_awaited_once_with("summit", limit=2)


async def test_non_ascii_key_rejected(async_client, mock_daily_image_service):
    response = await async_client.get(
        "/api/v1/admin/similar-news",
        params={"query": "summit"},
        headers={"X-API-Key": "café".encode("latin-1")},
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid API key"
    mock_daily_image_service.query_similar_news.assert_not_awaited()
