"""Registry scanning.

The ledger has no query-by-field capability. Registries (the job board and the
two profile registries) are append-only id lists kept precisely so that "list
all" reads are possible: read the registry once, then fetch and decode every id
concurrently.

Lookups by owner are a full scan, O(n) in the registry size. There is no
secondary index and nothing here caches; callers that look the same owner up
repeatedly pay the scan every time.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional, Sequence, Type, TypeVar

from .decode import decode
from .errors import LedgerError
from .ledger.base import LedgerReader
from .models import LedgerRecord, Registry
from .utils import same_address

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=LedgerRecord)
R = TypeVar("R", bound=Registry)


class RegistryScanner:
    """Resolve registries into the records they list."""

    def __init__(self, reader: LedgerReader, max_concurrency: int = 16) -> None:
        self._reader = reader
        self._max_concurrency = max(1, max_concurrency)

    async def fetch(self, object_id: str, model: Type[T]) -> Optional[T]:
        """Fetch and decode one object. Transport errors propagate."""
        envelope = await self._reader.get_object(object_id)
        return decode(envelope, model)

    async def read_registry(self, registry_id: str, model: Type[R]) -> Optional[R]:
        return await self.fetch(registry_id, model)

    async def fetch_many(self, object_ids: Sequence[str], model: Type[T]) -> List[T]:
        """Fetch ``object_ids`` concurrently, keeping input order.

        Ids that are missing, fail to decode or fail to fetch are dropped, not
        retried.
        """
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def one(object_id: str) -> Optional[T]:
            async with semaphore:
                try:
                    return await self.fetch(object_id, model)
                except LedgerError as exc:
                    logger.warning("dropping %s %s: %s", model.__name__, object_id, exc)
                    return None

        results = await asyncio.gather(*(one(i) for i in object_ids))
        return [r for r in results if r is not None]

    async def list_all(self, registry_id: str, registry_model: Type[Registry], model: Type[T]) -> List[T]:
        """Return every record listed by the registry, in registry (creation) order.

        Raises ``LedgerError`` only when the registry object itself cannot be read.
        The result is never longer than the registry's stored count.
        """
        registry = await self.read_registry(registry_id, registry_model)
        if registry is None:
            return []

        ids = registry.entry_ids
        if len(ids) > registry.entry_count:
            logger.warning(
                "%s %s lists %d ids but counts %d; ignoring the tail",
                registry_model.__name__,
                registry_id,
                len(ids),
                registry.entry_count,
            )
            ids = ids[: registry.entry_count]
        if not ids:
            return []
        return await self.fetch_many(ids, model)

    async def find_all(
        self,
        registry_id: str,
        registry_model: Type[Registry],
        model: Type[T],
        predicate: Callable[[T], bool],
    ) -> List[T]:
        records = await self.list_all(registry_id, registry_model, model)
        return [r for r in records if predicate(r)]

    async def find_all_by_owner(
        self,
        registry_id: str,
        registry_model: Type[Registry],
        model: Type[T],
        owner_address: str,
    ) -> List[T]:
        """Every record owned by ``owner_address``; more than one means duplicate profiles."""
        return await self.find_all(
            registry_id,
            registry_model,
            model,
            lambda r: same_address(getattr(r, "owner_address", None), owner_address),
        )

    async def find_by_owner(
        self,
        registry_id: str,
        registry_model: Type[Registry],
        model: Type[T],
        owner_address: str,
    ) -> Optional[T]:
        """First record in registry order owned by ``owner_address``, or None."""
        matches = await self.find_all_by_owner(registry_id, registry_model, model, owner_address)
        if len(matches) > 1:
            logger.warning(
                "%d %s records share owner %s; returning the earliest",
                len(matches),
                model.__name__,
                owner_address,
            )
        return matches[0] if matches else None
