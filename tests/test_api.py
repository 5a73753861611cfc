import json

import pytest
from starlette.testclient import TestClient

from foodrag.main import create_app


@pytest.fixture
def foods_file(settings, tmp_path):
    path = tmp_path / "foods.json"
    path.write_text(
        json.dumps(
            [
                {"id": "1", "text": "A banana is a yellow fruit.", "region": "Tropical", "type": "Fruit"},
                {"id": "2", "text": "Kimchi is a spicy fermented cabbage side dish.", "region": "Korea"},
            ]
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def client(registry, foods_file):
    return TestClient(create_app(registry))


def embed(client, force=False, token="secret"):
    return client.post("/admin/embed", json={"force": force}, headers={"X-Admin-Token": token})


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_admin_embed_requires_token(client):
    assert embed(client, token="wrong").status_code == 403


def test_progressive_search_then_generate(client, llm):
    resp = embed(client, force=True)
    assert resp.status_code == 200
    assert resp.json()["count"] == 2

    search = client.post("/api/v1/search", json={"question": "What fruits are yellow?"}).json()
    assert search["success"] is True
    details = search["rag_details"]
    assert details["result_count"] == 2
    assert set(details["ids"]) == {"1", "2"}

    generation = client.post(
        "/api/v1/generate",
        json={"question": "What fruits are yellow?", "context": "\n".join(details["documents"])},
    ).json()
    assert generation["success"] is True
    assert generation["response"] == "Bananas are yellow."
    assert "Question: What fruits are yellow?\nAnswer:" in llm.prompts[-1]


def test_ask_without_embeddings_reports_error(client):
    body = client.post("/api/v1/ask", json={"question": "What fruits are yellow?"}).json()
    assert body == {
        "success": False,
        "llm_response": None,
        "rag_details": None,
        "error": "No relevant information found in the database",
    }


def test_empty_question_is_rejected(client):
    assert client.post("/api/v1/ask", json={"question": ""}).status_code == 422


def test_embedding_status(client):
    embed(client)
    body = client.get("/api/v1/embeddings/status").json()
    assert body == {
        "success": True,
        "total": 2,
        "embedded": 2,
        "remaining": 0,
        "percentage": 100,
        "error": None,
    }


def test_food_stats_and_lookup(client):
    stats = client.get("/api/v1/foods/stats").json()
    assert stats == {"total": 2, "regions": 2, "types": 1, "with_region": 2, "with_type": 1}

    assert client.get("/api/v1/foods/1").json()["region"] == "Tropical"
    assert client.get("/api/v1/foods/404").status_code == 404


def test_connection_check(client):
    body = client.get("/api/v1/test-connection").json()
    assert body["success"] is True
    assert body["tests"]["llm"]["status"] == "connected"
