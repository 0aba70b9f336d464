"""Side-record walking.

Applications are not listed in their job's fields; they hang off the job as
dynamic object fields keyed by (candidate, index). Walking a parent means
listing its dynamic fields, then fetching and decoding each child.

Listing order is whatever the ledger returns. It is stable across repeated
calls while nobody writes, and it is the order the hire entry point indexes by.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, Type, TypeVar

from .decode import decode, decode_application_key
from .errors import LedgerError
from .ledger.base import LedgerReader
from .models import ApplicationKey, DynamicFieldInfo, LedgerRecord

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=LedgerRecord)


@dataclass(frozen=True)
class SideRecord(Generic[T]):
    """A decoded child together with its place in the parent's listing."""

    position: int
    info: DynamicFieldInfo
    record: T

    @property
    def key(self) -> Optional[ApplicationKey]:
        return decode_application_key(self.info)


class SideRecordWalker:
    """Enumerate and decode the side-records attached to a parent object."""

    def __init__(self, reader: LedgerReader, max_concurrency: int = 16) -> None:
        self._reader = reader
        self._max_concurrency = max(1, max_concurrency)

    async def list_entries(self, parent_id: str, model: Type[T]) -> List[SideRecord[T]]:
        """Children of ``parent_id`` with their listing positions.

        Raises ``LedgerError`` if the listing itself fails. Children that fail to
        fetch or decode are skipped; positions of the others are unchanged.
        """
        infos = await self._reader.get_dynamic_fields(parent_id)
        if not infos:
            return []

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def one(position: int, info: DynamicFieldInfo) -> Optional[SideRecord[T]]:
            async with semaphore:
                try:
                    envelope = await self._reader.get_object(info.object_id)
                except LedgerError as exc:
                    logger.warning("dropping child %s of %s: %s", info.object_id, parent_id, exc)
                    return None
            record = decode(envelope, model)
            if record is None:
                return None
            return SideRecord(position=position, info=info, record=record)

        results = await asyncio.gather(*(one(pos, info) for pos, info in enumerate(infos)))
        return [r for r in results if r is not None]

    async def list_children(self, parent_id: str, model: Type[T]) -> List[T]:
        """Decoded children of ``parent_id``; an empty list when there are none."""
        return [entry.record for entry in await self.list_entries(parent_id, model)]

    async def find_entry(
        self,
        parent_id: str,
        model: Type[T],
        predicate: Callable[[T], bool],
    ) -> Optional[SideRecord[T]]:
        for entry in await self.list_entries(parent_id, model):
            if predicate(entry.record):
                return entry
        return None

    async def find_child(
        self,
        parent_id: str,
        model: Type[T],
        predicate: Callable[[T], bool],
    ) -> Optional[T]:
        """First child (in listing order) matching ``predicate``, or None."""
        entry = await self.find_entry(parent_id, model, predicate)
        return entry.record if entry else None
