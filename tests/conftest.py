"""Shared fixtures: an in-memory Moorcheh service behind httpx.MockTransport."""

from __future__ import annotations

import json
from typing import Any, Optional

import httpx
import pytest

from moorcheh_mcp.api import APIClient, Endpoints
from moorcheh_mcp.config import Config, reset_config

TEST_API_KEY = "test-key-0123456789"
BASE_URL = "https://api.moorcheh.ai/v1"
API_PREFIX = "/v1"


class FakeMoorcheh:
    """
    Minimal in-memory stand-in for the Moorcheh API.

    Records every request in ``self.requests``. Set ``self.status_override``
    to force every call to answer with that status. Set
    ``self.namespace_list_text`` to answer the namespace list with plain text.
    """

    def __init__(self) -> None:
        self.namespaces: dict[str, dict[str, Any]] = {}
        self.items: dict[str, dict[str, dict[str, Any]]] = {}
        self.requests: list[httpx.Request] = []
        self.status_override: Optional[int] = None
        self.namespace_list_text: Optional[str] = None

    # Helpers for assertions
    def bodies(self, path: str) -> list[Any]:
        return [
            json.loads(r.content)
            for r in self.requests
            if r.url.path == API_PREFIX + path and r.content
        ]

    def paths(self) -> list[str]:
        return [f"{r.method} {r.url.path}" for r in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_override is not None:
            return httpx.Response(self.status_override, json={"message": "denied"})

        path = request.url.path[len(API_PREFIX):]
        parts = [p for p in path.split("/") if p]

        if parts == ["namespaces"]:
            if request.method == "GET" and self.namespace_list_text is not None:
                return httpx.Response(200, text=self.namespace_list_text)
            if request.method == "GET":
                return httpx.Response(200, json={"namespaces": list(self.namespaces.values())})
            return self._create(json.loads(request.content))
        if parts == ["search"]:
            return self._search(json.loads(request.content))
        if parts == ["answer"]:
            return self._answer(json.loads(request.content))
        if parts[:1] == ["namespaces"] and len(parts) >= 2:
            return self._namespace(request, parts[1], "/".join(parts[2:]))
        return httpx.Response(404, json={"message": "not found"})

    def _create(self, body: dict[str, Any]) -> httpx.Response:
        name = body["namespace_name"]
        if name in self.namespaces:
            return httpx.Response(409, json={"message": f"Namespace {name} already exists"})
        self.namespaces[name] = {
            "namespace_name": name,
            "type": body["type"],
            "vector_dimension": body.get("vector_dimension"),
            "createdAt": "2024-01-01T00:00:00Z",
            "itemCount": 0,
        }
        self.items[name] = {}
        return httpx.Response(201, json={"message": "created", "namespace_name": name})

    def _namespace(self, request: httpx.Request, name: str, sub: str) -> httpx.Response:
        if name not in self.namespaces:
            return httpx.Response(404, json={"message": f"Namespace {name} not found"})
        items = self.items[name]

        if sub == "" and request.method == "GET":
            return httpx.Response(200, json=self.namespaces[name])
        if sub == "" and request.method == "DELETE":
            del self.namespaces[name]
            del self.items[name]
            return httpx.Response(200, json={"message": "deleted"})
        if sub == "upload-file":
            items[f"file-{len(items)}"] = {"text": request.content.decode("latin-1")}
            return httpx.Response(202, json={"fileName": "notes.md", "status": "queued"})

        body = json.loads(request.content)
        if sub in ("documents", "vectors"):
            for item in body[sub]:
                items[item["id"]] = item
            self.namespaces[name]["itemCount"] = len(items)
            return httpx.Response(200, json={"status": "success", "count": len(body[sub])})
        if sub == "documents/delete":
            for item_id in body["ids"]:
                items.pop(item_id, None)
            self.namespaces[name]["itemCount"] = len(items)
            return httpx.Response(200, json={"status": "success"})
        if sub == "documents/get":
            found = [items[i] for i in body["ids"] if i in items]
            return httpx.Response(200, json={"items": found})
        return httpx.Response(404, json={"message": "not found"})

    def _search(self, body: dict[str, Any]) -> httpx.Response:
        query = body["query"]
        results = []
        for name in body["namespaces"]:
            for item in self.items.get(name, {}).values():
                if isinstance(query, str) and query.lower() in item.get("text", "").lower():
                    results.append({
                        "id": item["id"], "content": item["text"],
                        "score": 0.92, "metadata": item.get("metadata", {}),
                    })
                elif not isinstance(query, str) and "vector" in item:
                    results.append({"id": item["id"], "score": 0.5, "metadata": {}})
        results = results[:body["top_k"]]
        return httpx.Response(200, json={"results": results})

    def _answer(self, body: dict[str, Any]) -> httpx.Response:
        return httpx.Response(200, json={"answer": f"X is what {body['namespace']} says."})


@pytest.fixture
def fake_service():
    return FakeMoorcheh()


@pytest.fixture
def client(fake_service):
    """APIClient wired to the in-memory service."""
    return APIClient(
        TEST_API_KEY,
        Endpoints(BASE_URL),
        transport=httpx.MockTransport(fake_service.handler),
    )


@pytest.fixture
def config():
    return Config(api_key=TEST_API_KEY, base_url=BASE_URL)


@pytest.fixture(autouse=True)
def _clean_config():
    """Keep the cached config from leaking between tests."""
    reset_config()
    yield
    reset_config()
