"""Promoters endpoint - admin listing and profile upsert."""

import logging

from promoterflow.services.supabase_client import list_promoters, upsert_promoter
from promoterflow.utils.logging import setup_logging
from promoterflow.utils.vercel import json_response, parse_json_body, run_async

setup_logging()
logger = logging.getLogger(__name__)


def handler(request):
    """GET lists promoters; PUT upserts a profile by id."""
    try:
        method = (request.get("method") or "GET").upper()

        if method == "GET":
            items = run_async(list_promoters())
            return json_response(200, {"ok": True, "items": items})

        if method == "PUT":
            body = parse_json_body(request)
            promoter_id = str(body.get("id") or "")
            if not promoter_id:
                return json_response(400, {"error": "Missing id"})

            is_online = body.get("isOnline", body.get("is_online"))
            item = run_async(upsert_promoter({
                "id": promoter_id,
                "name": body.get("name"),
                "email": body.get("email"),
                "role": body.get("role"),
                "photo": body.get("photo"),
                "phone": body.get("phone"),
                "is_online": is_online if isinstance(is_online, bool) else None,
                "last_connection": body.get("lastConnection", body.get("last_connection")),
            }))
            return json_response(200, {"ok": True, "item": item})

        return json_response(405, {"error": "Method not allowed"})
    except ValueError as e:
        return json_response(400, {"error": f"Invalid request body: {e}"})
    except Exception as e:
        logger.error(f"Error handling promoters request: {e}", exc_info=True)
        return json_response(500, {"error": str(e) or "Server error"})
