"""In-memory ledger reader.

Serves objects, dynamic fields and events from dictionaries. Useful for
fixtures and offline development; ids listed in ``failing`` raise
``LedgerTransportError`` the way an unreachable endpoint would.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Set

from pydantic import ValidationError

from ..errors import LedgerTransportError
from ..models import DynamicFieldInfo, EventPage, LedgerEvent, ObjectEnvelope
from .base import LedgerReader

logger = logging.getLogger(__name__)


class InMemoryLedger(LedgerReader):
    """A ledger held in process memory."""

    name = "memory"

    def __init__(self) -> None:
        self.objects: Dict[str, Dict[str, Any]] = {}
        self.owners: Dict[str, str] = {}
        self.children: Dict[str, List[DynamicFieldInfo]] = {}
        self.events: Dict[str, List[LedgerEvent]] = {}
        self.failing: Set[str] = set()
        self.reads: List[str] = []

    def put_object(
        self,
        object_id: str,
        type_tag: str,
        fields: Dict[str, Any],
        owner: Optional[str] = None,
        data_type: str = "moveObject",
    ) -> str:
        """Store an object; ``fields`` should include the UID as ``{"id": {"id": object_id}}``."""
        self.objects[object_id] = {
            "objectId": object_id,
            "version": "1",
            "type": type_tag,
            "content": {"dataType": data_type, "type": type_tag, "fields": fields},
        }
        if owner:
            self.owners[object_id] = owner
        return object_id

    def put_raw(self, object_id: str, data: Dict[str, Any]) -> None:
        """Store an object response ``data`` payload verbatim (may be malformed)."""
        self.objects[object_id] = data

    def attach(self, parent_id: str, child_id: str, name_type: str = "", name_value: Any = None) -> None:
        """Attach ``child_id`` as a dynamic object field of ``parent_id``."""
        child = self.objects.get(child_id, {})
        info = DynamicFieldInfo(
            name={"type": name_type, "value": name_value},
            type="DynamicObject",
            object_type=child.get("type", ""),
            object_id=child_id,
        )
        self.children.setdefault(parent_id, []).append(info)

    def emit(self, event_type: str, parsed_json: Dict[str, Any], sender: Optional[str] = None) -> None:
        seq = sum(len(v) for v in self.events.values())
        event = LedgerEvent(
            id={"txDigest": f"tx{seq}", "eventSeq": "0"},
            type=event_type,
            sender=sender,
            parsed_json=parsed_json,
        )
        self.events.setdefault(event_type, []).append(event)

    def _check(self, key: str, method: str) -> None:
        self.reads.append(key)
        if key in self.failing:
            raise LedgerTransportError(f"{method}: simulated failure for {key}", method=method)

    @staticmethod
    def _envelope(data: Dict[str, Any]) -> ObjectEnvelope:
        try:
            return ObjectEnvelope.model_validate({"data": data})
        except ValidationError as exc:
            logger.debug("malformed stored object: %s", exc.error_count())
            return ObjectEnvelope(error={"code": "malformedResponse"})

    async def get_object(self, object_id: str) -> ObjectEnvelope:
        self._check(object_id, "get_object")
        data = self.objects.get(object_id)
        if data is None:
            return ObjectEnvelope(error={"code": "notExists", "object_id": object_id})
        return self._envelope(data)

    async def get_owned_objects(self, owner: str, struct_type: str) -> List[ObjectEnvelope]:
        self._check(owner, "get_owned_objects")
        out: List[ObjectEnvelope] = []
        for object_id, data in self.objects.items():
            if self.owners.get(object_id) == owner and isinstance(data, dict) and data.get("type") == struct_type:
                out.append(self._envelope(data))
        return out

    async def get_dynamic_fields(self, parent_id: str) -> List[DynamicFieldInfo]:
        self._check(parent_id, "get_dynamic_fields")
        return list(self.children.get(parent_id, []))

    async def query_events(
        self,
        event_type: str,
        limit: Optional[int] = None,
        cursor: Optional[Dict[str, Any]] = None,
        descending: bool = False,
    ) -> EventPage:
        self._check(event_type, "query_events")
        events = list(self.events.get(event_type, []))
        if descending:
            events.reverse()
        start = int((cursor or {}).get("index", 0))
        end = len(events) if limit is None else start + limit
        page = events[start:end]
        has_next = end < len(events)
        return EventPage(
            data=page,
            next_cursor={"index": end} if has_next else None,
            has_next_page=has_next,
        )
