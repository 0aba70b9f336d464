"""JSON-RPC ledger reader.

Talks to a Sui fullnode over its JSON-RPC interface. One ``httpx.AsyncClient``
is shared by every call, so a single reader can serve concurrent scans.

Docs: https://docs.sui.io/sui-api-ref

Paginated endpoints (owned objects, dynamic fields) are followed to the last
page. HTTP 429 responses are retried with exponential backoff; every other
HTTP or network failure is raised as ``LedgerTransportError``.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Any, Callable, Dict, List, Optional

import httpx
from pydantic import ValidationError

from ..errors import LedgerRpcError, LedgerTransportError
from ..models import DynamicFieldInfo, EventPage, ObjectEnvelope
from .base import LedgerReader

logger = logging.getLogger(__name__)

_OBJECT_OPTIONS = {"showContent": True, "showType": True, "showOwner": True}


class RpcLedgerReader(LedgerReader):
    """Read ledger objects through a fullnode's JSON-RPC endpoint."""

    name = "rpc"

    def __init__(
        self,
        rpc_url: str,
        timeout_s: float = 20.0,
        max_retries: int = 3,
        backoff_s: float = 2.0,
        page_size: int = 50,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._url = rpc_url
        self._max_retries = max_retries
        self._backoff_s = backoff_s
        self._page_size = page_size
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_s, follow_redirects=True)
        self._request_ids = itertools.count(1)

    async def __aenter__(self) -> "RpcLedgerReader":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _call(self, method: str, params: List[Any]) -> Any:
        """POST one JSON-RPC request and return its ``result``."""
        payload = {"jsonrpc": "2.0", "id": next(self._request_ids), "method": method, "params": params}
        retries = 0
        while True:
            try:
                resp = await self._client.post(self._url, json=payload)
                resp.raise_for_status()
                break
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                if status == 429 and retries < self._max_retries:
                    sleep_s = self._backoff_s * (2**retries)
                    logger.warning("%s rate limited, retrying in %.1fs", method, sleep_s)
                    await asyncio.sleep(sleep_s)
                    retries += 1
                    continue
                raise LedgerTransportError(f"{method}: HTTP {status}", method=method) from exc
            except httpx.HTTPError as exc:
                raise LedgerTransportError(f"{method}: {exc!r}", method=method) from exc

        try:
            body = resp.json()
        except ValueError as exc:
            raise LedgerTransportError(f"{method}: response is not JSON", method=method) from exc
        if not isinstance(body, dict):
            raise LedgerTransportError(f"{method}: response is not a JSON-RPC object", method=method)

        error = body.get("error")
        if error:
            if not isinstance(error, dict):
                error = {"message": str(error)}
            raise LedgerRpcError(
                f"{method}: {error.get('message', 'rpc error')}",
                method=method,
                code=error.get("code"),
            )
        return body.get("result")

    async def _collect_pages(self, method: str, params_for: Callable[[Any], List[Any]]) -> List[Dict[str, Any]]:
        out: List[Dict[str, Any]] = []
        cursor = None
        while True:
            result = await self._call(method, params_for(cursor)) or {}
            if not isinstance(result, dict):
                raise LedgerTransportError(f"{method}: page is not an object", method=method)
            data = result.get("data") or []
            if not isinstance(data, list):
                raise LedgerTransportError(f"{method}: page data is not a list", method=method)
            out.extend(data)
            cursor = result.get("nextCursor")
            if not result.get("hasNextPage") or cursor is None:
                break
        return out

    @staticmethod
    def _envelope(raw: Any) -> ObjectEnvelope:
        try:
            return ObjectEnvelope.model_validate(raw or {})
        except ValidationError as exc:
            logger.debug("malformed object response: %s", exc.error_count())
            return ObjectEnvelope(error={"code": "malformedResponse"})

    async def get_object(self, object_id: str) -> ObjectEnvelope:
        result = await self._call("sui_getObject", [object_id, _OBJECT_OPTIONS])
        return self._envelope(result)

    async def get_owned_objects(self, owner: str, struct_type: str) -> List[ObjectEnvelope]:
        query = {"filter": {"StructType": struct_type}, "options": _OBJECT_OPTIONS}
        items = await self._collect_pages(
            "suix_getOwnedObjects",
            lambda cursor: [owner, query, cursor, self._page_size],
        )
        return [self._envelope(it) for it in items]

    async def get_dynamic_fields(self, parent_id: str) -> List[DynamicFieldInfo]:
        items = await self._collect_pages(
            "suix_getDynamicFields",
            lambda cursor: [parent_id, cursor, self._page_size],
        )
        out: List[DynamicFieldInfo] = []
        for it in items:
            try:
                out.append(DynamicFieldInfo.model_validate(it))
            except ValidationError:
                logger.debug("skipping malformed dynamic field under %s", parent_id)
        return out

    async def query_events(
        self,
        event_type: str,
        limit: Optional[int] = None,
        cursor: Optional[Dict[str, Any]] = None,
        descending: bool = False,
    ) -> EventPage:
        result = await self._call(
            "suix_queryEvents",
            [{"MoveEventType": event_type}, cursor, limit, descending],
        )
        try:
            return EventPage.model_validate(result or {})
        except ValidationError as exc:
            raise LedgerRpcError(f"suix_queryEvents: malformed page ({exc.error_count()} errors)",
                                 method="suix_queryEvents") from exc
