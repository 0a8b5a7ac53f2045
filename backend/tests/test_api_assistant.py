import asyncio
import json

import httpx
from httpx import ASGITransport, AsyncClient

from site_builder.api import assistant as assistant_api
from site_builder.core.config import Settings
from site_builder.main import create_app
from site_builder.services.assistant_service import AssistantService
from site_builder.services.gateway import ProviderGateway


def _openai_payload(content) -> dict:
    if not isinstance(content, str):
        content = json.dumps(content)
    return {"choices": [{"message": {"content": content}}]}


async def _no_sleep(seconds):
    return None


def _make_app(handler, **gateway_kwargs):
    gateway = ProviderGateway(transport=httpx.MockTransport(handler), **gateway_kwargs)
    service = AssistantService(gateway=gateway, settings=Settings(), sleep=_no_sleep)
    app = create_app()
    app.dependency_overrides[assistant_api.get_service] = lambda: service
    return app


async def _post(app, path, body, raise_app_exceptions=True):
    transport = ASGITransport(app=app, raise_app_exceptions=raise_app_exceptions)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.post(f"/api/assistant{path}", json=body)


def _chat_body(**overrides):
    body = {
        "message": "add a footer",
        "projectContent": {"index.html": "<body></body>"},
        "projectId": "proj-1",
        "conversationHistory": [{"type": "user", "content": "hello"}, {"type": "ai", "content": "hi"}],
        "apiKeys": {"openai": "sk-x", "selectedModels": {}},
    }
    body.update(overrides)
    return body


def test_chat_returns_files_and_legacy_code_changes():
    new_html = "<body><footer>hi</footer></body>"

    def handler(request):
        prompt = json.loads(request.content)["messages"][0]["content"]
        assert "User message: add a footer" in prompt
        assert "User: hello" in prompt
        return httpx.Response(200, json=_openai_payload({"files": {"index.html": new_html}}))

    response = asyncio.run(_post(_make_app(handler), "/chat", _chat_body()))
    assert response.status_code == 200
    body = response.json()
    assert body["files"] == {"index.html": new_html}
    assert body["codeChanges"] == [{"file": "index.html", "content": new_html}]
    assert body["response"] == "Changes applied successfully. 1 file(s) updated."
    assert body["provider"] == "openai"
    assert body["model"] == "gpt-4o-mini"


def test_chat_message_result_has_no_files():
    def handler(request):
        return httpx.Response(200, json=_openai_payload({"response": "Which footer style do you want?"}))

    response = asyncio.run(_post(_make_app(handler), "/chat", _chat_body()))
    assert response.status_code == 200
    body = response.json()
    assert body["files"] == {}
    assert body["codeChanges"] == []
    assert body["response"] == "Which footer style do you want?"


def test_chat_without_keys_returns_actionable_error_envelope():
    def handler(request):
        raise AssertionError("no upstream call expected")

    body = _chat_body(apiKeys={"openai": "  ", "anthropic": ""})
    response = asyncio.run(_post(_make_app(handler), "/chat", body))
    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "No API key configured"
    assert "configure your API keys" in data["response"]
    assert data["files"] == {}
    assert data["codeChanges"] == []


def test_chat_disabled_provider_returns_400():
    def handler(request):
        raise AssertionError("no upstream call expected")

    app = _make_app(handler, disabled_providers=["gemini"])
    response = asyncio.run(_post(app, "/chat", _chat_body(apiKeys={"gemini": "g"})))
    assert response.status_code == 400
    assert "not available" in response.json()["error"]


def test_chat_retries_once_then_succeeds():
    calls = {"n": 0}

    def handler(request):
        calls["n"] += 1
        if calls["n"] == 1:
            return httpx.Response(502)
        return httpx.Response(200, json=_openai_payload({"response": "ok"}))

    response = asyncio.run(_post(_make_app(handler), "/chat", _chat_body()))
    assert response.status_code == 200
    assert calls["n"] == 2


def test_chat_upstream_failure_returns_502_envelope():
    calls = {"n": 0}

    def handler(request):
        calls["n"] += 1
        return httpx.Response(500)

    response = asyncio.run(_post(_make_app(handler), "/chat", _chat_body(retries=0)))
    assert response.status_code == 502
    data = response.json()
    assert data["error"].startswith("API error: 500")
    assert data["codeChanges"] == []
    assert calls["n"] == 1


def test_chat_does_not_echo_keys_in_error():
    def handler(request):
        return httpx.Response(401)

    response = asyncio.run(_post(_make_app(handler), "/chat", _chat_body(retries=0)))
    assert "sk-x" not in response.text


def test_chat_missing_message_is_422():
    def handler(request):
        raise AssertionError("no upstream call expected")

    body = _chat_body()
    del body["message"]
    response = asyncio.run(_post(_make_app(handler), "/chat", body))
    assert response.status_code == 422


def test_plan_assigns_ids_and_pending_status():
    plan = {
        "title": "Footer work",
        "description": "Add a footer",
        "totalEstimatedTime": "10m",
        "tasks": [
            {"title": "Markup", "priority": "high", "affectedFiles": ["index.html"]},
            {"id": "t2", "title": "Styles", "status": "completed"},
            "not a task",
        ],
    }

    def handler(request):
        return httpx.Response(200, json=_openai_payload(plan))

    body = {"message": "add a footer", "projectContent": {"index.html": ""}, "apiKeys": {"openai": "sk"}}
    response = asyncio.run(_post(_make_app(handler), "/plan", body))
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Footer work"
    assert data["totalEstimatedTime"] == "10m"
    assert len(data["tasks"]) == 2
    assert data["tasks"][0]["id"]
    assert data["tasks"][0]["affectedFiles"] == ["index.html"]
    assert data["tasks"][1]["id"] == "t2"
    assert all(task["status"] == "pending" for task in data["tasks"])


def test_plan_unparseable_response_is_502():
    def handler(request):
        return httpx.Response(200, json=_openai_payload("I cannot help with that."))

    body = {"message": "add a footer", "apiKeys": {"openai": "sk"}}
    response = asyncio.run(_post(_make_app(handler), "/plan", body))
    assert response.status_code == 502
    data = response.json()
    assert data["error"] == "AI returned invalid structure: expected a JSON to-do list."
    assert data["codeChanges"] == []


def _task_body(**overrides):
    body = {
        "task": {"id": "t1", "title": "Footer", "affectedFiles": ["index.html"], "status": "approved"},
        "projectContent": {"index.html": "<body></body>"},
        "apiKeys": {"openai": "sk"},
    }
    body.update(overrides)
    return body


def test_execute_task_returns_files_and_summary():
    content = {
        "analysis": "Need a footer",
        "files": {"index.html": "<body><footer/></body>", "empty.css": ""},
        "summary": "Added footer",
        "verification": "Look at the bottom",
    }

    def handler(request):
        prompt = json.loads(request.content)["messages"][0]["content"]
        assert "=== index.html (MODIFY THIS) ===" in prompt
        return httpx.Response(200, json=_openai_payload(content))

    response = asyncio.run(_post(_make_app(handler), "/execute-task", _task_body()))
    assert response.status_code == 200
    data = response.json()
    assert data["taskId"] == "t1"
    assert data["status"] == "completed"
    assert data["files"] == {"index.html": "<body><footer/></body>"}
    assert data["summary"] == "Added footer"
    assert data["verification"] == "Look at the bottom"


def test_execute_task_without_valid_files_is_502():
    def handler(request):
        return httpx.Response(200, json=_openai_payload({"files": {"index.html": "  "}}))

    response = asyncio.run(_post(_make_app(handler), "/execute-task", _task_body()))
    assert response.status_code == 502
    data = response.json()
    assert data["error"] == (
        "AI returned invalid structure: No valid file changes were provided by the AI agent."
    )
    assert "try again" in data["response"]
    assert data["files"] == {}
    assert data["codeChanges"] == []


def test_analyze_keeps_only_valid_suggestions():
    content = {
        "suggestions": [
            {"issue": "Missing alt text", "severity": "low", "fix": "Add alt", "affectedFiles": ["index.html"]},
            {"severity": "high"},
        ]
    }

    def handler(request):
        return httpx.Response(200, json=_openai_payload(content))

    body = {"projectContent": {"index.html": "<img>"}, "apiKeys": {"openai": "sk"}}
    response = asyncio.run(_post(_make_app(handler), "/analyze", body))
    assert response.status_code == 200
    suggestions = response.json()["suggestions"]
    assert suggestions == [
        {"issue": "Missing alt text", "severity": "low", "fix": "Add alt", "affectedFiles": ["index.html"]}
    ]


def test_auto_fix_reports_each_issue_independently():
    def handler(request):
        prompt = json.loads(request.content)["messages"][0]["content"]
        if "Issue: broken" in prompt:
            return httpx.Response(500)
        if "Issue: alt text" in prompt:
            return httpx.Response(200, json=_openai_payload({"files": {"index.html": "<img alt='x'>"}}))
        return httpx.Response(200, json=_openai_payload({"response": "Nothing to do"}))

    body = {
        "issues": [
            {"issue": "alt text", "severity": "low", "affectedFiles": ["index.html"]},
            {"issue": "broken", "severity": "high"},
            {"issue": "style nit", "severity": "low"},
        ],
        "projectContent": {"index.html": "<img>"},
        "apiKeys": {"openai": "sk"},
    }
    response = asyncio.run(_post(_make_app(handler), "/auto-fix", body))
    assert response.status_code == 200
    data = response.json()
    statuses = [(r["issue"], r["status"]) for r in data["results"]]
    assert statuses == [("alt text", "fixed"), ("broken", "failed"), ("style nit", "no_changes")]
    assert data["results"][1]["error"].startswith("API error: 500")
    assert data["files"] == {"index.html": "<img alt='x'>"}


def test_auto_fix_without_keys_fails_fast():
    def handler(request):
        raise AssertionError("no upstream call expected")

    body = {"issues": [{"issue": "x"}], "apiKeys": {}}
    response = asyncio.run(_post(_make_app(handler), "/auto-fix", body))
    assert response.status_code == 400


def test_auto_fix_isolates_unexpected_failures():
    def handler(request):
        prompt = json.loads(request.content)["messages"][0]["content"]
        if "Issue: crashes" in prompt:
            raise RuntimeError("connection pool exploded")
        return httpx.Response(200, json=_openai_payload({"files": {"index.html": "<img alt='x'>"}}))

    body = {
        "issues": [
            {"issue": "crashes", "severity": "high"},
            {"issue": "alt text", "severity": "low", "affectedFiles": ["index.html"]},
        ],
        "projectContent": {"index.html": "<img>"},
        "apiKeys": {"openai": "sk"},
    }
    response = asyncio.run(_post(_make_app(handler), "/auto-fix", body))
    assert response.status_code == 200
    data = response.json()
    assert [r["status"] for r in data["results"]] == ["failed", "fixed"]
    assert "connection pool" not in data["results"][0]["error"]
    assert data["files"] == {"index.html": "<img alt='x'>"}


def test_auto_fix_survives_deeply_nested_upstream_body():
    nested = "[" * 100000 + "]" * 100000

    def handler(request):
        prompt = json.loads(request.content)["messages"][0]["content"]
        if "Issue: nested" in prompt:
            return httpx.Response(200, content=nested, headers={"content-type": "application/json"})
        return httpx.Response(200, json=_openai_payload({"response": "Nothing to do"}))

    body = {
        "issues": [{"issue": "nested"}, {"issue": "style nit"}],
        "apiKeys": {"openai": "sk"},
    }
    response = asyncio.run(_post(_make_app(handler), "/auto-fix", body))
    assert response.status_code == 200
    statuses = [r["status"] for r in response.json()["results"]]
    assert statuses == ["failed", "no_changes"]


class _BrokenService:
    async def chat(self, payload):
        raise RuntimeError("unexpected")


def test_unexpected_error_still_returns_envelope():
    app = create_app()
    app.dependency_overrides[assistant_api.get_service] = lambda: _BrokenService()
    response = asyncio.run(_post(app, "/chat", _chat_body(), raise_app_exceptions=False))
    assert response.status_code == 500
    data = response.json()
    assert data["error"] == "Internal server error"
    assert data["response"]
    assert data["files"] == {}
    assert data["codeChanges"] == []
