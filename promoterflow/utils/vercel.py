"""Helpers shared by the Vercel function handlers in ``api/``."""

import asyncio
import json
from typing import Any, Coroutine


def json_response(status_code: int, payload: dict[str, Any]) -> dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(payload, default=str),
    }


def parse_json_body(request: dict[str, Any]) -> dict[str, Any]:
    """Request body as a dict; string bodies are JSON-decoded. Raises ValueError on bad JSON."""
    body = request.get("body")
    if body is None or body == "":
        return {}
    if isinstance(body, (bytes, str)):
        body = json.loads(body)
    if not isinstance(body, dict):
        raise ValueError("Request body must be a JSON object")
    return body


def run_async(coro: Coroutine) -> Any:
    """Run a coroutine to completion from a synchronous handler."""
    return asyncio.run(coro)
