"""Read API over the ledger.

Every method re-reads live ledger state; nothing is cached, and the class holds
no mutable state, so one instance can serve concurrent callers.

Failure policy: a transport or RPC failure on any underlying read is logged and
degraded to ``None`` / ``[]`` at this boundary. Callers therefore cannot tell
"nothing there" from "could not read"; ``get_statistics`` is the one read that
reports a degraded scan (``Statistics.jobs_scanned``).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Dict, List, Optional, Type, TypeVar

from .config import PackageConfig
from .decode import decode, decode_event
from .errors import LedgerError
from .filters import active_and_not_expired, active_only, is_job_active
from .ledger.base import LedgerReader
from .models import (
    ApplicationProfile,
    ApplicationSubmittedEvent,
    CandidateHiredEvent,
    EmployerCap,
    EmployerProfile,
    EmployerProfileCreatedEvent,
    EmployerRegistry,
    Job,
    JobBoard,
    JobPostedEvent,
    LedgerRecord,
    ProfileUpdatedEvent,
    Statistics,
    UserProfile,
    UserProfileCreatedEvent,
    UserRegistry,
)
from .scanner import RegistryScanner
from .utils import now_ms, same_address
from .walker import SideRecordWalker

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R", bound=LedgerRecord)


class MiniHubQueries:
    """The public read surface: single reads, scans, lookups and aggregates."""

    def __init__(self, reader: LedgerReader, config: PackageConfig) -> None:
        self._reader = reader
        self._config = config
        self.scanner = RegistryScanner(reader, max_concurrency=config.max_concurrency)
        self.walker = SideRecordWalker(reader, max_concurrency=config.max_concurrency)

    async def _guard(self, what: str, call: Awaitable[T], default: T) -> T:
        try:
            return await call
        except LedgerError as exc:
            logger.warning("%s failed, returning empty result: %s", what, exc)
            return default

    async def _get(self, object_id: str, model: Type[R]) -> Optional[R]:
        return await self._guard(
            f"get {model.__name__} {object_id}",
            self.scanner.fetch(object_id, model),
            None,
        )

    # --- Singletons and single records ---------------------------------------

    async def get_job_board(self) -> Optional[JobBoard]:
        return await self._get(self._config.job_board_id, JobBoard)

    async def get_user_registry(self) -> Optional[UserRegistry]:
        return await self._get(self._config.user_registry_id, UserRegistry)

    async def get_employer_registry(self) -> Optional[EmployerRegistry]:
        return await self._get(self._config.employer_registry_id, EmployerRegistry)

    async def get_job(self, job_id: str) -> Optional[Job]:
        return await self._get(job_id, Job)

    async def get_user_profile(self, profile_id: str) -> Optional[UserProfile]:
        return await self._get(profile_id, UserProfile)

    async def get_employer_profile(self, profile_id: str) -> Optional[EmployerProfile]:
        return await self._get(profile_id, EmployerProfile)

    async def get_application_profile(self, application_id: str) -> Optional[ApplicationProfile]:
        return await self._get(application_id, ApplicationProfile)

    # --- Jobs ------------------------------------------------------------------

    async def get_all_jobs(self) -> List[Job]:
        """Every job on the board, in posting order."""
        return await self._guard(
            "get_all_jobs",
            self.scanner.list_all(self._config.job_board_id, JobBoard, Job),
            [],
        )

    async def get_active_jobs(self, include_expired: bool = True, now: Optional[int] = None) -> List[Job]:
        """Jobs that are active and have nobody hired.

        With ``include_expired=False`` jobs whose deadline has passed are dropped
        as well. The default keeps them, matching the board's own notion of
        "active", which does not look at the clock.
        """
        jobs = await self.get_all_jobs()
        if include_expired:
            return active_only(jobs)
        return active_and_not_expired(jobs, now)

    async def get_jobs_by_employer(self, employer_address: str) -> List[Job]:
        """Full board scan filtered on the employer address."""
        jobs = await self.get_all_jobs()
        return [j for j in jobs if same_address(j.employer, employer_address)]

    # --- Profiles ----------------------------------------------------------------

    async def get_all_user_profiles(self) -> List[UserProfile]:
        return await self._guard(
            "get_all_user_profiles",
            self.scanner.list_all(self._config.user_registry_id, UserRegistry, UserProfile),
            [],
        )

    async def get_all_employer_profiles(self) -> List[EmployerProfile]:
        return await self._guard(
            "get_all_employer_profiles",
            self.scanner.list_all(self._config.employer_registry_id, EmployerRegistry, EmployerProfile),
            [],
        )

    async def get_user_profile_by_address(self, user_address: str) -> Optional[UserProfile]:
        """Registry scan; the earliest profile wins if an owner has several."""
        return await self._guard(
            "get_user_profile_by_address",
            self.scanner.find_by_owner(self._config.user_registry_id, UserRegistry, UserProfile, user_address),
            None,
        )

    async def get_employer_profile_by_address(self, employer_address: str) -> Optional[EmployerProfile]:
        return await self._guard(
            "get_employer_profile_by_address",
            self.scanner.find_by_owner(
                self._config.employer_registry_id, EmployerRegistry, EmployerProfile, employer_address
            ),
            None,
        )

    # --- Capabilities --------------------------------------------------------------

    async def _load_caps(self, owner_address: str) -> List[EmployerCap]:
        envelopes = await self._reader.get_owned_objects(owner_address, self._config.struct_type("EmployerCap"))
        caps = (decode(env, EmployerCap) for env in envelopes)
        return [c for c in caps if c is not None]

    async def _match_cap(self, owner_address: str, job_id: str) -> Optional[EmployerCap]:
        """Like ``find_employer_cap`` but ``LedgerError`` propagates."""
        for cap in await self._load_caps(owner_address):
            if same_address(cap.job_id, job_id):
                return cap
        return None

    async def get_employer_caps(self, owner_address: str) -> List[EmployerCap]:
        """Capabilities owned by ``owner_address``."""
        return await self._guard("get_employer_caps", self._load_caps(owner_address), [])

    async def find_employer_cap(self, owner_address: str, job_id: str) -> Optional[EmployerCap]:
        return await self._guard(f"find_employer_cap {job_id}", self._match_cap(owner_address, job_id), None)

    # --- Applications ------------------------------------------------------------

    async def get_job_applications(self, job_id: str) -> List[ApplicationProfile]:
        """Applications attached to ``job_id``; ``[]`` when there are none."""
        return await self._guard(
            f"get_job_applications {job_id}",
            self.walker.list_children(job_id, ApplicationProfile),
            [],
        )

    async def get_application(self, job_id: str, candidate_address: str) -> Optional[ApplicationProfile]:
        """The candidate's first application to ``job_id`` in listing order."""
        return await self._guard(
            f"get_application {job_id}",
            self.walker.find_child(
                job_id,
                ApplicationProfile,
                lambda app: same_address(app.candidate, candidate_address),
            ),
            None,
        )

    async def has_user_applied_to_job(self, job_id: str, user_address: str) -> bool:
        return await self.get_application(job_id, user_address) is not None

    async def _application_position(self, job_id: str, candidate_address: str) -> Optional[int]:
        """Like ``resolve_application_index`` but ``LedgerError`` propagates."""
        entry = await self.walker.find_entry(
            job_id,
            ApplicationProfile,
            lambda app: same_address(app.candidate, candidate_address),
        )
        return entry.position if entry else None

    async def resolve_application_index(self, job_id: str, candidate_address: str) -> Optional[int]:
        """Zero-based position of the candidate's application in the job's listing.

        This is the index ``hire_candidate`` expects. It is only valid until the
        next application to the job, so resolve it right before building the call.

        Children that fail to fetch or decode still occupy their listing
        position, so a broken sibling does not shift the index. The web front
        end instead counts only the applications that decoded.
        """
        return await self._guard(
            f"resolve_application_index {job_id}",
            self._application_position(job_id, candidate_address),
            None,
        )

    async def get_user_applications(self, user_address: str) -> List[ApplicationProfile]:
        """Every application by ``user_address`` across all jobs.

        A full corpus scan: one side-record walk per job on the board.
        """
        jobs = await self.get_all_jobs()
        per_job = await asyncio.gather(*(self.get_job_applications(j.id) for j in jobs))
        out: List[ApplicationProfile] = []
        for applications in per_job:
            out.extend(a for a in applications if same_address(a.candidate, user_address))
        return out

    # --- Aggregates --------------------------------------------------------------------

    async def get_statistics(self, now: Optional[int] = None) -> Statistics:
        """Counts across the board, both registries and a full job scan.

        When the job scan comes back short (some jobs unreadable) or the board
        cannot be read, ``total_jobs`` falls back to the board's stored count and
        ``jobs_scanned`` is False.
        """
        now = now_ms() if now is None else now
        board, user_registry, employer_registry = await asyncio.gather(
            self.get_job_board(),
            self.get_user_registry(),
            self.get_employer_registry(),
        )

        jobs: List[Job] = []
        complete = False
        if board is not None:
            ids = board.entry_ids[: board.entry_count]
            jobs = await self.scanner.fetch_many(ids, Job)
            complete = len(jobs) == len(ids)

        if complete:
            total_jobs = len(jobs)
        else:
            total_jobs = board.entry_count if board is not None else 0
            logger.warning("job scan incomplete; total_jobs uses the board's stored count")

        return Statistics(
            total_jobs=total_jobs,
            active_jobs=len(active_only(jobs)),
            open_jobs=len(active_and_not_expired(jobs, now)),
            filled_jobs=sum(1 for j in jobs if j.hired_candidate is not None),
            total_applications=sum(j.application_count for j in jobs),
            total_users=user_registry.entry_count if user_registry else 0,
            total_employers=employer_registry.entry_count if employer_registry else 0,
            jobs_scanned=complete,
        )

    # --- Events ------------------------------------------------------------------------

    async def get_events(
        self,
        event_type: str,
        limit: Optional[int] = None,
        cursor: Optional[Dict[str, Any]] = None,
        descending: bool = False,
    ) -> List[Dict[str, Any]]:
        """Parsed payloads of ``<package>::<module>::<event_type>`` events."""
        page = await self._guard(
            f"get_events {event_type}",
            self._reader.query_events(self._config.struct_type(event_type), limit, cursor, descending),
            None,
        )
        if page is None:
            return []
        return [e.parsed_json for e in page.data]

    async def _typed_events(self, event_type: str, model: Type[T], limit: Optional[int]) -> List[T]:
        page = await self._guard(
            f"get_events {event_type}",
            self._reader.query_events(self._config.struct_type(event_type), limit),
            None,
        )
        if page is None:
            return []
        decoded = (decode_event(e, model) for e in page.data)
        return [d for d in decoded if d is not None]

    async def get_job_posted_events(self, limit: Optional[int] = None) -> List[JobPostedEvent]:
        return await self._typed_events("JobPosted", JobPostedEvent, limit)

    async def get_application_submitted_events(self, limit: Optional[int] = None) -> List[ApplicationSubmittedEvent]:
        return await self._typed_events("ApplicationSubmitted", ApplicationSubmittedEvent, limit)

    async def get_candidate_hired_events(self, limit: Optional[int] = None) -> List[CandidateHiredEvent]:
        return await self._typed_events("CandidateHired", CandidateHiredEvent, limit)

    async def get_user_profile_created_events(self, limit: Optional[int] = None) -> List[UserProfileCreatedEvent]:
        return await self._typed_events("UserProfileCreated", UserProfileCreatedEvent, limit)

    async def get_employer_profile_created_events(
        self, limit: Optional[int] = None
    ) -> List[EmployerProfileCreatedEvent]:
        return await self._typed_events("EmployerProfileCreated", EmployerProfileCreatedEvent, limit)

    async def get_profile_updated_events(self, limit: Optional[int] = None) -> List[ProfileUpdatedEvent]:
        return await self._typed_events("ProfileUpdated", ProfileUpdatedEvent, limit)

    # --- Convenience -----------------------------------------------------------------

    async def can_apply(self, job_id: str, now: Optional[int] = None) -> bool:
        """True when the job accepts applications and its deadline has not passed."""
        job = await self.get_job(job_id)
        return job is not None and is_job_active(job, now)
