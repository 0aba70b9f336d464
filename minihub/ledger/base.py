"""Base classes for the ledger collaborators: the read primitive and the signer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..models import DynamicFieldInfo, EventPage, ObjectEnvelope, SubmitResult


class LedgerReader(ABC):
    """Abstract read access to the ledger.

    Implementations raise ``LedgerError`` on transport failure. A missing object
    is not an error: ``get_object`` returns an envelope whose ``exists`` is False.
    """

    name: str

    @abstractmethod
    async def get_object(self, object_id: str) -> ObjectEnvelope:
        """Fetch one object with its content."""
        raise NotImplementedError

    @abstractmethod
    async def get_owned_objects(self, owner: str, struct_type: str) -> List[ObjectEnvelope]:
        """Fetch every object of ``struct_type`` owned by ``owner`` (all pages)."""
        raise NotImplementedError

    @abstractmethod
    async def get_dynamic_fields(self, parent_id: str) -> List[DynamicFieldInfo]:
        """List every dynamic field under ``parent_id`` (all pages, listing order)."""
        raise NotImplementedError

    @abstractmethod
    async def query_events(
        self,
        event_type: str,
        limit: Optional[int] = None,
        cursor: Optional[Dict[str, Any]] = None,
        descending: bool = False,
    ) -> EventPage:
        """Fetch one page of events of a fully qualified Move event type."""
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release connections held by the reader."""
        return None


class Signer(ABC):
    """External signing capability. Signs a call description and submits it."""

    @abstractmethod
    async def sign_and_submit(self, call: Any) -> SubmitResult:
        """Return the signer's outcome; on-chain rejections come back with success=False."""
        raise NotImplementedError
