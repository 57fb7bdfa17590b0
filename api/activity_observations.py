"""Activity observations endpoint - append-only notes."""

import logging

from promoterflow.services.supabase_client import create_activity_observation
from promoterflow.utils.logging import setup_logging
from promoterflow.utils.vercel import json_response, parse_json_body, run_async

setup_logging()
logger = logging.getLogger(__name__)


def handler(request):
    """POST ``{activity_id, created_by, note}``."""
    if (request.get("method") or "").upper() != "POST":
        return json_response(405, {"error": "Method not allowed"})

    try:
        body = parse_json_body(request)
        try:
            activity_id = int(body.get("activity_id"))
        except (TypeError, ValueError):
            activity_id = 0
        created_by = str(body.get("created_by") or "")
        note = str(body.get("note") or "")

        if not activity_id or not created_by or not note:
            return json_response(400, {"error": "activity_id, created_by, note are required"})

        item = run_async(create_activity_observation({
            "activity_id": activity_id,
            "created_by": created_by,
            "note": note,
        }))
        return json_response(201, {"ok": True, "item": item})
    except ValueError as e:
        return json_response(400, {"error": f"Invalid request body: {e}"})
    except Exception as e:
        logger.error(f"Error creating observation: {e}", exc_info=True)
        return json_response(500, {"error": str(e) or "Server error"})
