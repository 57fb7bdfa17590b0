"""Test helper functions."""

import json
from typing import Any, Dict, Optional

import httpx


def create_vercel_request(
    method: str = "GET",
    path: str = "/api/activities",
    body: Optional[Dict[str, Any]] = None,
    query: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """Create a Vercel request dict for testing."""
    return {
        "method": method,
        "path": path,
        "headers": {"content-type": "application/json"},
        "body": json.dumps(body) if body is not None else None,
        "query": query or {}
    }


def recording_transport(responses: Dict[tuple, httpx.Response], calls: list) -> httpx.MockTransport:
    """MockTransport answering by ``(method, path)`` and recording each request."""

    def handle(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        key = (request.method, request.url.path)
        if key not in responses:
            return httpx.Response(404, json={"error": "not found"})
        return responses[key]

    return httpx.MockTransport(handle)
