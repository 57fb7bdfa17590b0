"""HTTP client for the remote activity store."""

from typing import Any, Optional, Union

import httpx
from pydantic import ValidationError

from promoterflow.models.remote import ActivityCreatePayload, ActivityRow, RemoteRole
from promoterflow.utils.config import AppConfig
from promoterflow.utils.errors import RemoteFailure
from promoterflow.utils.logging import get_structured_logger, log_timing, mask_user_id

logger = get_structured_logger(__name__)


class RemoteActivityStore:
    """Client for the ``/activities``, ``/activity_observations`` and ``/promoters`` endpoints.

    Every failure (transport error, non-2xx status, body without ``ok``)
    surfaces as ``RemoteFailure``. There is no retry.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or AppConfig.API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else AppConfig.REQUEST_TIMEOUT_SECONDS
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"Accept": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "RemoteActivityStore":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        client = self._get_client()
        try:
            with log_timing(f"remote {method} {path}", logger=logger):
                response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise RemoteFailure(f"{method} {path} failed: {e}")

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.is_success:
            message = data.get("error") if isinstance(data, dict) else None
            raise RemoteFailure(
                message or f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
            )

        if not isinstance(data, dict) or not data.get("ok"):
            raise RemoteFailure(
                f"{method} {path} response missing ok flag",
                status_code=response.status_code,
            )
        return data

    async def list_activities(self, role: RemoteRole, user: Optional[str] = None) -> list[ActivityRow]:
        """``GET /activities``; gestor listings are scoped to ``user``."""
        params = {"role": role}
        if role != "admin":
            params["user"] = user or ""

        data = await self._request("GET", "/activities", params=params)
        try:
            rows = [ActivityRow.model_validate(item) for item in data.get("items") or []]
        except ValidationError as e:
            raise RemoteFailure(f"Malformed activity listing: {e.error_count()} invalid fields")

        logger.debug(
            "Activities listed",
            role=role,
            user=mask_user_id(user),
            count=len(rows)
        )
        return rows

    async def create_activity(self, payload: ActivityCreatePayload) -> ActivityRow:
        """``POST /activities``."""
        data = await self._request("POST", "/activities", json=payload.model_dump())
        try:
            return ActivityRow.model_validate(data.get("item"))
        except ValidationError as e:
            raise RemoteFailure(f"Malformed created activity: {e.error_count()} invalid fields")

    async def add_observation(self, activity_id: Union[str, int], created_by: str, note: str) -> dict[str, Any]:
        """``POST /activity_observations``."""
        data = await self._request(
            "POST",
            "/activity_observations",
            json={"activity_id": activity_id, "created_by": created_by, "note": note},
        )
        return data.get("item") or {}

    async def list_promoters(self) -> list[dict[str, Any]]:
        data = await self._request("GET", "/promoters")
        return data.get("items") or []

    async def upsert_promoter(self, promoter: dict[str, Any]) -> dict[str, Any]:
        data = await self._request("PUT", "/promoters", json=promoter)
        return data.get("item") or {}
