import asyncio
import json

import httpx
from httpx import ASGITransport, AsyncClient

from site_builder.api import projects as projects_api
from site_builder.core.config import Settings
from site_builder.main import create_app
from site_builder.services.gateway import ProviderGateway
from site_builder.services.project_service import PROJECT_TEMPERATURE, ProjectService


def _make_app(handler):
    gateway = ProviderGateway(transport=httpx.MockTransport(handler))
    service = ProjectService(gateway=gateway, settings=Settings())
    app = create_app()
    app.dependency_overrides[projects_api.get_service] = lambda: service
    return app


async def _post(app, path, body):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.post(f"/api/projects{path}", json=body)


def _generate_body(**overrides):
    body = {
        "title": "Shoe Shop",
        "description": "An online shop for running shoes",
        "colorTheme": "green",
        "animations": ["fade-in"],
        "apiKeys": {"anthropic": "ak", "selectedModels": {"anthropic": "claude-3-opus"}},
    }
    body.update(overrides)
    return body


def test_generate_project_uses_detected_framework_and_hotter_sampling():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        text = json.dumps(
            {
                "files": {"package.json": "{}", "pages/index.tsx": "export default function Home() {}"},
                "structure": "Next.js pages",
                "features": ["Cart", "Checkout"],
                "instructions": "npm run dev",
                "dependencies": ["next", "react"],
            }
        )
        return httpx.Response(200, json={"content": [{"type": "text", "text": text}]})

    response = asyncio.run(_post(_make_app(handler), "/generate", _generate_body()))
    assert response.status_code == 200
    data = response.json()
    assert data["provider"] == "anthropic"
    assert data["model"] == "claude-3-opus"
    assert data["framework"] == "next"
    assert set(data["files"]) == {"package.json", "pages/index.tsx"}
    assert data["features"] == ["Cart", "Checkout"]
    assert data["dependencies"] == ["next", "react"]

    assert seen["url"] == "https://api.anthropic.com/v1/messages"
    assert seen["headers"]["x-api-key"] == "ak"
    assert seen["body"]["model"] == "claude-3-opus"
    prompt = seen["body"]["messages"][0]["content"]
    assert "Framework: next" in prompt
    assert "#10B981" in prompt
    assert "fade-in" in prompt


def test_generate_project_sends_project_temperature_to_chat_providers():
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        content = json.dumps({"files": {"index.html": "<h1>Hi</h1>"}})
        return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})

    body = _generate_body(apiKeys={"openai": "sk"}, description="A simple landing page")
    response = asyncio.run(_post(_make_app(handler), "/generate", body))
    assert response.status_code == 200
    assert response.json()["framework"] == "vanilla"
    assert seen["body"]["temperature"] == PROJECT_TEMPERATURE


def test_generate_project_without_files_is_502():
    def handler(request):
        return httpx.Response(200, json={"choices": [{"message": {"content": "Sorry, I can't."}}]})

    body = _generate_body(apiKeys={"openai": "sk"})
    response = asyncio.run(_post(_make_app(handler), "/generate", body))
    assert response.status_code == 502
    data = response.json()
    assert "did not contain any project files" in data["error"]
    assert data["files"] == {}
    assert data["codeChanges"] == []


def test_generate_project_does_not_retry_upstream_errors():
    calls = {"n": 0}

    def handler(request):
        calls["n"] += 1
        return httpx.Response(503)

    body = _generate_body(apiKeys={"openai": "sk"})
    response = asyncio.run(_post(_make_app(handler), "/generate", body))
    assert response.status_code == 502
    assert response.json()["error"].startswith("API error: 503")
    assert calls["n"] == 1


def test_generate_project_without_keys_is_400():
    def handler(request):
        raise AssertionError("no upstream call expected")

    response = asyncio.run(_post(_make_app(handler), "/generate", _generate_body(apiKeys={})))
    assert response.status_code == 400
    assert response.json()["error"] == "No API key configured"


def test_preview_returns_html_document():
    body = {"projectContent": {"index.html": "<main>Hello</main>", "styles.css": "main { color: red; }"}}
    response = asyncio.run(_post(create_app(), "/preview", body))
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "<main>Hello</main>" in response.text
    assert "main { color: red; }" in response.text
