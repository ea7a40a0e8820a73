import pytest
import httpx


@pytest.mark.anyio
async def test_health_check(client: httpx.AsyncClient):
    """
    Test the health check endpoint to ensure the server is responsive.
    """
    response = await client.get('/')
    assert response.status_code == 200
    json_data = response.json()
    assert "status" in json_data
    assert json_data["status"] == "ok"
