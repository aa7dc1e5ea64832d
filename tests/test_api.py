"""
API endpoint tests for the Code Gateway.

Tests cover the status code table of every /api/code method, response
shapes, the health and root endpoints, and request validation.
"""

from conftest import FakeCompletionClient, exhaust_trial, subscribe
from fastapi.testclient import TestClient

from code_gateway import dependencies
from code_gateway.config import SYSTEM_INSTRUCTION
from code_gateway.main import create_app
from code_gateway.models import ChatMessage

USER = {"X-User-Id": "u1"}
PROMPT = {"messages": [{"role": "user", "content": "write a function"}]}


# Auth gate
def test_post_unauthorized(client, store, completion_client):
    response = client.post("/api/code", json=PROMPT)
    assert response.status_code == 401
    assert response.json() == {"detail": "Unauthorized"}
    assert store.calls == []
    assert completion_client.calls == []


def test_get_unauthorized(client, store):
    response = client.get("/api/code")
    assert response.status_code == 401
    assert store.calls == []


def test_put_unauthorized(client, store):
    response = client.put("/api/code", json={"title": "T", "content": "C"})
    assert response.status_code == 401
    assert store.calls == []


def test_blank_identity_header_is_unauthorized(client, store):
    response = client.get("/api/code", headers={"X-User-Id": "   "})
    assert response.status_code == 401
    assert store.calls == []


# POST /api/code
def test_generate_code(client, store, completion_client):
    """Scenario: trial user u1 asks for a function."""
    response = client.post("/api/code", json=PROMPT, headers=USER)

    assert response.status_code == 200
    assert response.json() == {"role": "assistant", "content": completion_client.reply.content}
    assert "X-Request-ID" in response.headers

    forwarded = completion_client.calls[0]
    assert [m.model_dump() for m in forwarded] == [
        {"role": "system", "content": SYSTEM_INSTRUCTION},
        {"role": "user", "content": "write a function"},
    ]
    assert store.calls.count("increment_trial_usage") == 1


def test_generate_unconfigured(client, store):
    client.app.dependency_overrides[dependencies.get_completion_client] = lambda: FakeCompletionClient(configured=False)

    response = client.post("/api/code", json=PROMPT, headers=USER)
    assert response.status_code == 500
    assert response.json() == {"detail": "OpenAI API Key not configured."}
    assert store.calls == []


def test_generate_missing_messages(client, completion_client):
    response = client.post("/api/code", json={}, headers=USER)
    assert response.status_code == 400
    assert response.json() == {"detail": "Messages are required"}

    response = client.post("/api/code", headers=USER)
    assert response.status_code == 400
    assert completion_client.calls == []


def test_generate_empty_messages(client, store, completion_client):
    response = client.post("/api/code", json={"messages": []}, headers=USER)
    assert response.status_code == 400
    assert completion_client.calls == []
    assert store.calls == []


def test_generate_trial_expired(client, store, completion_client, run):
    run(exhaust_trial(store, "u1"))
    store.calls.clear()

    response = client.post("/api/code", json=PROMPT, headers=USER)
    assert response.status_code == 403
    assert response.json() == {"detail": "Free trial has expired. Please upgrade to pro."}
    assert completion_client.calls == []
    assert "increment_trial_usage" not in store.calls


def test_generate_upstream_failure_is_generic(client, store, completion_client):
    completion_client.fail = True

    response = client.post("/api/code", json=PROMPT, headers=USER)
    assert response.status_code == 500
    assert response.json() == {"detail": "Internal Error"}
    assert "increment_trial_usage" not in store.calls


def test_generate_subscriber_after_trial(client, store, completion_client, run):
    run(exhaust_trial(store, "u1"))
    run(subscribe(store, "u1"))
    store.calls.clear()

    response = client.post("/api/code", json=PROMPT, headers=USER)
    assert response.status_code == 200
    assert "increment_trial_usage" not in store.calls


def test_generate_invalid_role(client, store, completion_client):
    response = client.post("/api/code", json={"messages": [{"role": "tool", "content": "x"}]}, headers=USER)
    assert response.status_code == 400
    assert store.calls == []
    assert completion_client.calls == []


def test_generate_malformed_messages(client, completion_client):
    for body in ({"messages": "abc"}, {"messages": ["write a function"]}, ["write a function"], "abc"):
        response = client.post("/api/code", json=body, headers=USER)
        assert response.status_code == 400
    assert completion_client.calls == []


def test_generate_unparseable_body(client):
    response = client.post("/api/code", content=b"{not json", headers={**USER, "Content-Type": "application/json"})
    assert response.status_code == 400


def test_malformed_body_without_identity_is_unauthorized(client, store, completion_client):
    assert client.post("/api/code", json={"messages": "write a function"}).status_code == 401
    assert client.put("/api/code", json={"title": 1, "content": ["x"]}).status_code == 401
    assert client.post("/api/code", content=b"{not json", headers={"Content-Type": "application/json"}).status_code == 401
    assert store.calls == []
    assert completion_client.calls == []


def test_generate_forwards_extra_keys(client, completion_client):
    completion_client.reply = ChatMessage(role="assistant", content="x", refusal="no")
    body = {"messages": [{"role": "user", "content": "x", "name": "bob"}]}

    response = client.post("/api/code", json=body, headers=USER)

    assert response.status_code == 200
    assert response.json() == {"role": "assistant", "content": "x", "refusal": "no"}
    assert completion_client.calls[0][1].model_dump() == {"role": "user", "content": "x", "name": "bob"}


def test_dependency_failure_returns_generic_error(store):
    def broken_client():
        raise RuntimeError("secret store offline")

    app = create_app()
    app.dependency_overrides.update(
        {
            dependencies.get_memory: lambda: store,
            dependencies.get_completion_client: broken_client,
        }
    )

    with TestClient(app, raise_server_exceptions=False) as test_client:
        response = test_client.post("/api/code", json=PROMPT, headers=USER)

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal Error"}


# GET /api/code
def test_list_empty(client):
    response = client.get("/api/code", headers=USER)
    assert response.status_code == 200
    assert response.json() == []


def test_list_storage_denied(client, store, run):
    run(exhaust_trial(store, "u1"))
    store.calls.clear()

    response = client.get("/api/code", headers=USER)
    assert response.status_code == 404
    assert response.json() == {"detail": "No cloud storage for free trial. Please upgrade to pro."}
    assert "list_by_user_and_type" not in store.calls


# PUT /api/code
def test_save_and_list(client):
    first = client.put("/api/code", json={"title": "Old", "content": "print(1)"}, headers=USER)
    second = client.put("/api/code", json={"title": "T", "content": "C"}, headers=USER)
    assert first.status_code == 200
    assert second.status_code == 200

    record = second.json()
    assert set(record) == {"id", "userId", "type", "title", "content", "createdAt"}
    assert record["userId"] == "u1"
    assert record["type"] == "code"

    listed = client.get("/api/code", headers=USER).json()
    assert [r["title"] for r in listed] == ["T", "Old"]
    assert [r for r in listed if r["title"] == "T" and r["content"] == "C"] == [record]


def test_list_is_scoped_to_caller(client):
    client.put("/api/code", json={"title": "mine", "content": "C"}, headers=USER)

    response = client.get("/api/code", headers={"X-User-Id": "u2"})
    assert response.json() == []


def test_save_missing_fields(client, store):
    for body in ({"title": "T"}, {"content": "C"}, {"title": "", "content": "C"}, {}):
        response = client.put("/api/code", json=body, headers=USER)
        assert response.status_code == 400
        assert response.json() == {"detail": "Content and title is required"}
    assert store.calls == []


def test_save_non_text_fields(client, store):
    for body in ({"title": 1, "content": ["x"]}, {"title": "T", "content": {"code": "x"}}):
        response = client.put("/api/code", json=body, headers=USER)
        assert response.status_code == 400
        assert response.json() == {"detail": "Content and title must be text"}
    assert store.calls == []


def test_save_storage_denied(client, store, run):
    run(exhaust_trial(store, "u1"))
    store.calls.clear()

    response = client.put("/api/code", json={"title": "T", "content": "C"}, headers=USER)
    assert response.status_code == 404
    assert "create" not in store.calls


# GET /api/code/usage
def test_usage(client):
    client.post("/api/code", json=PROMPT, headers=USER)

    response = client.get("/api/code/usage", headers=USER)
    assert response.status_code == 200
    assert response.json() == {"count": 1, "maxFreeCounts": 5, "isPro": False}


def test_usage_unauthorized(client):
    assert client.get("/api/code/usage").status_code == 401


# Health and root
def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_health_degraded_without_key(client):
    client.app.dependency_overrides[dependencies.get_completion_client] = lambda: FakeCompletionClient(configured=False)

    response = client.get("/health")
    assert response.json()["status"] == "degraded"
    assert response.json()["openai_configured"] is False


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["docs"]["swagger"] == "/docs"
