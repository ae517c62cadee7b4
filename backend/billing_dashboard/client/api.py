# billing_dashboard/client/api.py
import logging
from datetime import datetime
from typing import Any, Optional

import httpx

from billing_dashboard.core.config import settings

log = logging.getLogger(__name__)


class ReportingError(Exception):
    """A read against the dashboard API failed (transport or HTTP status)."""


class BillingApiClient:
    def __init__(
        self,
        base_url: str = settings.API_BASE_URL,
        timeout: float = settings.API_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._http = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()

    async def aclose(self):
        await self._http.aclose()

    async def _get(self, path: str, params: Optional[dict[str, Any]] = None):
        params = {k: v for k, v in (params or {}).items() if v is not None}
        try:
            resp = await self._http.get(path, params=params)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ReportingError(f"GET {path} -> {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ReportingError(f"GET {path} failed: {e}") from e
        try:
            return resp.json()
        except ValueError as e:
            raise ReportingError(f"GET {path} returned invalid JSON") from e

    # --- Projects ---
    async def list_projects(self) -> list[dict]:
        return await self._get("/projects")

    # --- Overview ---
    async def get_summary(self, project_id: str) -> dict:
        return await self._get(f"/projects/{project_id}/summary")

    async def get_trend(
        self,
        project_id: str,
        end: Optional[datetime] = None,
        tz: Optional[str] = None,
    ) -> list[dict]:
        return await self._get(
            f"/projects/{project_id}/trend",
            {"end": end.isoformat() if end else None, "tz": tz},
        )

    async def recent_transactions(self, project_id: str, limit: Optional[int] = None) -> list[dict]:
        return await self._get(f"/projects/{project_id}/transactions/recent", {"limit": limit})

    # --- Lists ---
    async def list_transactions(self, project_id: str, status: str = "all") -> list[dict]:
        return await self._get(f"/projects/{project_id}/transactions", {"status": status})

    async def list_subscriptions(self, project_id: str, status: str = "all") -> list[dict]:
        return await self._get(f"/projects/{project_id}/subscriptions", {"status": status})
