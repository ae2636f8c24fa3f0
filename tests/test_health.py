import pytest


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/health", "/healthz"])
async def test_health(async_client, path):
    response = await async_client.get(path)
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["version"] == "1.0.0"
    assert data["environment"] == "test"
    assert data["timestamp"].endswith("Z")


@pytest.mark.asyncio
async def test_api_index(async_client):
    response = await async_client.get("/api")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "UIGen Vue API"
    assert data["version"] == "v1"
    assert data["endpoints"]["projects"] == "/api/v1/projects"
    assert data["documentation"] == "/api/v1/docs"
    assert data["websocket"] == "/ws"


@pytest.mark.asyncio
async def test_openapi_document(async_client):
    response = await async_client.get("/api/v1/openapi.json")
    assert response.status_code == 200
    paths = response.json()["paths"]
    assert "/api/v1/projects" in paths
    # The unversioned alias is not documented twice
    assert "/api/projects" not in paths


@pytest.mark.asyncio
async def test_docs_page(async_client):
    response = await async_client.get("/api/v1/docs")
    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]


@pytest.mark.asyncio
async def test_metrics_endpoint(async_client):
    await async_client.get("/health")
    response = await async_client.get("/metrics")
    assert response.status_code == 200
    assert "uigen_ai_provider_healthy" in response.text


@pytest.mark.asyncio
@pytest.mark.parametrize("method,path", [
    ("post", "/api/v1/auth/register"),
    ("post", "/api/v1/auth/login"),
    ("post", "/api/v1/auth/logout"),
    ("post", "/api/v1/auth/refresh"),
    ("get", "/api/v1/auth/profile"),
    ("get", "/api/v1/users"),
    ("get", "/api/v1/users/42"),
    ("put", "/api/v1/users/42"),
    ("delete", "/api/v1/users/42"),
    ("get", "/api/users"),
])
async def test_unimplemented_routes(async_client, method, path):
    response = await getattr(async_client, method)(path)
    assert response.status_code == 501
    body = response.json()
    assert body["success"] is False
    assert body["data"] is None
    assert body["message"].endswith("not implemented yet")
