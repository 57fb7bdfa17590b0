"""Error handling utilities."""

from typing import Optional


class PromoterFlowError(Exception):
    """Base exception for the PromoterFlow backend."""
    pass


class SchemaError(PromoterFlowError):
    """CSV schedule is missing required columns."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(f"Missing required columns: {', '.join(self.missing)}")


class AuthorizationViolation(PromoterFlowError):
    """Caller tried to act on activities owned by another promoter."""
    pass


class RemoteFailure(PromoterFlowError):
    """Remote activity store request failed (network or non-2xx)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class PromoterConflict(PromoterFlowError):
    """A promoter with the same id already exists."""
    pass


class StorageError(PromoterFlowError):
    """Local persisted storage could not be read or written."""
    pass


class SummarizationError(PromoterFlowError):
    """LLM summarization error."""
    pass


class SupabaseError(PromoterFlowError):
    """Supabase operation error."""
    pass
