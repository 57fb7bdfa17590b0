"""Text generation endpoint backed by the summarization service."""

import logging

from promoterflow.services.summarizer import generate_text
from promoterflow.utils.errors import SummarizationError
from promoterflow.utils.logging import setup_logging
from promoterflow.utils.vercel import json_response, parse_json_body, run_async

setup_logging()
logger = logging.getLogger(__name__)


def handler(request):
    """POST ``{prompt, context}`` -> ``{ok, text}``."""
    if (request.get("method") or "").upper() != "POST":
        return json_response(405, {"error": "Method not allowed"})

    try:
        body = parse_json_body(request)
        prompt = str(body.get("prompt") or "").strip()
        context = str(body.get("context") or "").strip()
        if not prompt:
            return json_response(400, {"error": "Missing prompt"})

        text = run_async(generate_text(prompt, context or None))
        return json_response(200, {"ok": True, "text": text})
    except ValueError as e:
        return json_response(400, {"error": f"Invalid request body: {e}"})
    except SummarizationError as e:
        logger.error(f"Generation failed: {e}")
        return json_response(500, {"error": str(e)})
