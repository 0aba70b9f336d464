"""Off-chain enrichment API client.

The backend serves job and application records enriched with metadata that is
not stored on the ledger (company, location, tags...), keyed by the same ids the
ledger uses. This is a plain fetch client: every call returns an
``ApiResponse`` and never raises on HTTP or network errors.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "http://localhost:3000/api"


class ApiResponse(BaseModel):
    success: bool
    data: Any = None
    error: Optional[str] = None
    message: Optional[str] = None


class JobFilters(BaseModel):
    search: Optional[str] = None
    category: Optional[str] = None
    type: Optional[str] = None
    location: Optional[str] = None
    min_salary: Optional[int] = None
    max_salary: Optional[int] = None
    is_active: Optional[bool] = None

    def to_params(self) -> Dict[str, str]:
        params: Dict[str, str] = {}
        for key, value in (
            ("search", self.search),
            ("category", self.category),
            ("type", self.type),
            ("location", self.location),
        ):
            if value:
                params[key] = value
        if self.min_salary:
            params["minSalary"] = str(self.min_salary)
        if self.max_salary:
            params["maxSalary"] = str(self.max_salary)
        if self.is_active is not None:
            params["isActive"] = "true" if self.is_active else "false"
        return params


def _wallet_headers(wallet_address: str, signature: str) -> Dict[str, str]:
    return {"X-Wallet-Address": wallet_address, "X-Signature": signature}


class ApiService:
    """Client for the enrichment backend."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_s: float = 20.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._base_url = (base_url or os.environ.get("MINIHUB_API_BASE_URL") or DEFAULT_API_BASE_URL).rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_s, follow_redirects=True)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _fetch(
        self,
        endpoint: str,
        method: str = "GET",
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> ApiResponse:
        url = f"{self._base_url}{endpoint}"
        try:
            resp = await self._client.request(
                method,
                url,
                params=params,
                json=json,
                headers={"Content-Type": "application/json", **(headers or {})},
            )
            payload = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("%s %s failed: %s", method, endpoint, exc)
            return ApiResponse(success=False, error=str(exc) or type(exc).__name__)

        if not isinstance(payload, dict):
            payload = {"data": payload}

        if resp.is_error:
            return ApiResponse(
                success=False,
                error=payload.get("error") or "Request failed",
                message=payload.get("message"),
            )

        data = payload.get("data")
        return ApiResponse(
            success=True,
            data=payload if data is None else data,
            message=payload.get("message"),
        )

    # --- Jobs -----------------------------------------------------------------

    async def get_jobs(self, filters: Optional[JobFilters] = None) -> ApiResponse:
        return await self._fetch("/jobs", params=filters.to_params() if filters else None)

    async def get_job(self, job_id: str) -> ApiResponse:
        return await self._fetch(f"/jobs/{job_id}")

    async def get_jobs_by_employer(self, employer_address: str) -> ApiResponse:
        return await self._fetch(f"/jobs/employer/{employer_address}")

    async def get_job_board(self) -> ApiResponse:
        return await self._fetch("/job-board")

    # --- Applications ------------------------------------------------------------

    async def get_job_applications(self, job_id: str, wallet_address: str, signature: str) -> ApiResponse:
        """Applications for a job; the backend only serves these to its employer."""
        return await self._fetch(
            f"/jobs/{job_id}/applications",
            headers=_wallet_headers(wallet_address, signature),
        )

    async def get_candidate_applications(self, candidate_address: str) -> ApiResponse:
        return await self._fetch(f"/applications/candidate/{candidate_address}")

    async def get_application(self, application_id: str) -> ApiResponse:
        return await self._fetch(f"/applications/{application_id}")

    async def submit_application(
        self,
        job_id: str,
        cover_message: str,
        cv_url: str,
        wallet_address: str,
        signature: str,
    ) -> ApiResponse:
        return await self._fetch(
            "/applications",
            method="POST",
            json={"jobId": job_id, "coverMessage": cover_message, "cvUrl": cv_url},
            headers=_wallet_headers(wallet_address, signature),
        )

    # --- Events and stats -----------------------------------------------------------

    async def get_events(self, event_type: Optional[str] = None, limit: int = 50) -> ApiResponse:
        params = {"limit": str(limit)}
        if event_type:
            params["type"] = event_type
        return await self._fetch("/events", params=params)

    async def get_stats(self) -> ApiResponse:
        return await self._fetch("/stats")
