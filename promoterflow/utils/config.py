"""Application configuration read from environment variables."""

import os


class AppConfig:
    """Runtime settings for the sync engine, local store, and collaborators."""

    API_BASE_URL = os.environ.get("PROMOTERFLOW_API_BASE_URL", "http://localhost:3000/api").rstrip("/")
    STORAGE_DIR = os.environ.get("PROMOTERFLOW_STORAGE_DIR", ".promoterflow")
    REQUEST_TIMEOUT_SECONDS = float(os.environ.get("PROMOTERFLOW_REQUEST_TIMEOUT_SECONDS", "10"))

    # Assignee used when an admin creates an activity without naming anyone
    ADMIN_FALLBACK_ASSIGNEE = os.environ.get("PROMOTERFLOW_ADMIN_FALLBACK_ASSIGNEE", "p2")
    # Assignee used for activities created by field promoters (an admin)
    FIELD_FALLBACK_ASSIGNEE = os.environ.get("PROMOTERFLOW_FIELD_FALLBACK_ASSIGNEE", "p1")

    MAX_NOTIFICATIONS = int(os.environ.get("PROMOTERFLOW_MAX_NOTIFICATIONS", "200"))

    LLM_PROVIDER = os.environ.get("LLM_PROVIDER", "anthropic").lower()
    LLM_MODEL = os.environ.get("LLM_MODEL", "claude-sonnet-4-20250514")
