"""Tests for GET /health and GET /robots.txt."""


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["services"]["reasoning"] is True
    assert body["services"]["redis"] is True
    assert body["services"]["firestore"] is True


def test_robots_txt(client):
    response = client.get("/robots.txt")
    assert response.status_code == 200
    assert "User-agent: *" in response.text
    assert "Disallow: /" in response.text
