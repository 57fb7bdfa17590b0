"""Activities endpoint - role-scoped listing and creation."""

import logging

from promoterflow.services.supabase_client import create_activity, list_activities
from promoterflow.utils.logging import setup_logging
from promoterflow.utils.vercel import json_response, parse_json_body, run_async

setup_logging()
logger = logging.getLogger(__name__)


def _list(request: dict) -> dict:
    query_params = request.get("query", {}) or {}
    role = str(query_params.get("role") or "gestor")
    user = str(query_params.get("user") or "")

    if role != "admin":
        if not user:
            return json_response(400, {"error": "Missing user"})
        if '"' in user or "," in user:
            return json_response(400, {"error": "Invalid user"})

    items = run_async(list_activities(role, user or None))
    return json_response(200, {"ok": True, "items": items})


def _create(request: dict) -> dict:
    body = parse_json_body(request)

    created_by = str(body.get("created_by") or "")
    role = str(body.get("role") or "gestor")
    assigned_to = str(body["assigned_to"]) if body.get("assigned_to") else None
    objective = str(body.get("objective") or body.get("title") or "")

    if not created_by or not objective:
        return json_response(400, {"error": "created_by and title/objective are required"})

    row = {
        "created_by": created_by,
        "role": role,
        "assigned_to": assigned_to,
        "title": objective,
        "objective": objective,
        "community": str(body.get("community") or ""),
        "activity_date": body.get("date") or None,
        "activity_time": body.get("time") or None,
        "status": str(body.get("status") or "pendiente"),
    }
    item = run_async(create_activity(row))
    return json_response(201, {"ok": True, "item": item})


def handler(request):
    """
    GET lists activities (``role=admin`` sees all, otherwise ``user`` is required).
    POST creates one activity.
    """
    try:
        method = (request.get("method") or "GET").upper()
        if method == "GET":
            return _list(request)
        if method == "POST":
            return _create(request)
        return json_response(405, {"error": "Method not allowed"})
    except ValueError as e:
        return json_response(400, {"error": f"Invalid request body: {e}"})
    except Exception as e:
        logger.error(f"Error handling activities request: {e}", exc_info=True)
        return json_response(500, {"error": str(e) or "Server error"})
