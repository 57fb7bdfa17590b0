"""Health check endpoint."""

from http.server import BaseHTTPRequestHandler
import json
import os

SERVICE_NAME = "promoterflow-backend"


def health_payload() -> dict:
    """Service status plus which backing services are configured."""
    return {
        "status": "ok",
        "service": SERVICE_NAME,
        "supabase_configured": bool(
            os.environ.get("SUPABASE_URL") and os.environ.get("SUPABASE_SERVICE_ROLE_KEY")
        ),
        "llm_provider": os.environ.get("LLM_PROVIDER", "anthropic"),
    }


class handler(BaseHTTPRequestHandler):
    """Health check handler for Vercel serverless function."""

    def do_GET(self):
        self.send_response(200)
        self.send_header('Content-Type', 'application/json')
        self.end_headers()
        self.wfile.write(json.dumps(health_payload()).encode('utf-8'))

    def do_HEAD(self):
        self.send_response(200)
        self.send_header('Content-Type', 'application/json')
        self.end_headers()
