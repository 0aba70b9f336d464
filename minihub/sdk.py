"""MiniHub: the read API, the transaction builder and validation in one object.

``MiniHub`` is what the rest of an application talks to. Reads are inherited
from ``MiniHubQueries``. Writes come in two layers:

- ``create_*_transaction`` validate their input and return a ``MoveCall``;
  they never touch the network;
- ``hire_candidate`` / ``submit`` additionally hand calls to a ``Signer``.

Example:
    hub = create_minihub()
    jobs = await hub.get_active_jobs()
    call = hub.create_post_job_transaction(
        employer_profile_id=profile.id, title="Rust dev", description="...",
        deadline=now_ms() + 7 * 86_400_000, salary=1000,
    )
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Tuple

from .config import PackageConfig, load_config
from .errors import ApplicationNotFoundError, CapabilityNotFoundError, SignerUnavailableError
from .ledger.base import LedgerReader, Signer
from .ledger.rpc import RpcLedgerReader
from .models import EmployerCap, SubmitResult
from .query import MiniHubQueries
from .transactions import (
    ApplyToJobParams,
    EmployerProfileParams,
    HireCandidateParams,
    MoveCall,
    PostJobParams,
    TransactionBuilder,
    UpdateEmployerProfileParams,
    UpdateUserProfileParams,
    UserProfileParams,
)
from .validation import (
    validate_application,
    validate_employer_profile,
    validate_post_job,
    validate_user_profile,
)

logger = logging.getLogger(__name__)


class MiniHub(MiniHubQueries):
    """Read and write access to one deployment of the job board contract."""

    def __init__(self, reader: LedgerReader, config: PackageConfig, signer: Optional[Signer] = None) -> None:
        super().__init__(reader, config)
        self.config = config
        self.builder = TransactionBuilder(config)
        self._signer = signer

    # --- Building ------------------------------------------------------------------

    def create_post_job_transaction(
        self,
        employer_profile_id: str,
        title: str,
        description: str,
        deadline: int,
        salary: Optional[int] = None,
        now: Optional[int] = None,
    ) -> MoveCall:
        """Validate and build ``post_job``. Raises InvalidParamsError."""
        params = PostJobParams(
            employer_profile_id=employer_profile_id,
            title=title,
            description=description,
            salary=salary,
            deadline=deadline,
        )
        validate_post_job(params, now).raise_for_errors()
        return self.builder.post_job(params)

    def create_apply_to_job_transaction(
        self,
        job_id: str,
        user_profile_id: str,
        cover_message: str,
        cv_url: str = "",
    ) -> MoveCall:
        params = ApplyToJobParams(
            job_id=job_id,
            user_profile_id=user_profile_id,
            cover_message=cover_message,
            cv_url=cv_url,
        )
        validate_application(params).raise_for_errors()
        return self.builder.apply_to_job(params)

    def create_hire_candidate_transaction(
        self,
        job_id: str,
        employer_cap_id: str,
        candidate_address: str,
        candidate_index: int,
    ) -> MoveCall:
        """Build ``hire_candidate``. Prefer ``hire_candidate()``, which resolves a fresh index."""
        return self.builder.hire_candidate(
            HireCandidateParams(
                job_id=job_id,
                employer_cap_id=employer_cap_id,
                candidate_address=candidate_address,
                candidate_index=candidate_index,
            )
        )

    def create_user_profile_transaction(
        self,
        name: str,
        bio: str,
        avatar_url: str = "",
        skills: Optional[List[str]] = None,
        experience_years: int = 0,
        portfolio_url: str = "",
    ) -> MoveCall:
        params = UserProfileParams(
            name=name,
            bio=bio,
            avatar_url=avatar_url,
            skills=skills or [],
            experience_years=experience_years,
            portfolio_url=portfolio_url,
        )
        validate_user_profile(params).raise_for_errors()
        return self.builder.create_user_profile(params)

    def create_update_user_profile_transaction(
        self,
        user_profile_id: str,
        name: str,
        bio: str,
        avatar_url: str = "",
        skills: Optional[List[str]] = None,
        experience_years: int = 0,
        portfolio_url: str = "",
    ) -> MoveCall:
        params = UpdateUserProfileParams(
            user_profile_id=user_profile_id,
            name=name,
            bio=bio,
            avatar_url=avatar_url,
            skills=skills or [],
            experience_years=experience_years,
            portfolio_url=portfolio_url,
        )
        validate_user_profile(params).raise_for_errors()
        return self.builder.update_user_profile(params)

    def create_employer_profile_transaction(
        self,
        company_name: str,
        description: str,
        logo_url: str = "",
        website: str = "",
        industry: str = "",
        employee_count: int = 0,
        founded_year: int = 0,
    ) -> MoveCall:
        params = EmployerProfileParams(
            company_name=company_name,
            description=description,
            logo_url=logo_url,
            website=website,
            industry=industry,
            employee_count=employee_count,
            founded_year=founded_year,
        )
        validate_employer_profile(params).raise_for_errors()
        return self.builder.create_employer_profile(params)

    def create_update_employer_profile_transaction(
        self,
        employer_profile_id: str,
        company_name: str,
        description: str,
        logo_url: str = "",
        website: str = "",
        industry: str = "",
        employee_count: int = 0,
        founded_year: int = 0,
    ) -> MoveCall:
        params = UpdateEmployerProfileParams(
            employer_profile_id=employer_profile_id,
            company_name=company_name,
            description=description,
            logo_url=logo_url,
            website=website,
            industry=industry,
            employee_count=employee_count,
            founded_year=founded_year,
        )
        validate_employer_profile(params).raise_for_errors()
        return self.builder.update_employer_profile(params)

    # --- Create-or-update ------------------------------------------------------------

    async def save_user_profile(self, owner_address: str, **fields) -> MoveCall:
        """Build an update if ``owner_address`` already has a profile, else a create.

        The lookup is a hint only: another session may create a profile between
        this read and the submit. The contract's ownership checks are what
        actually guard the update.
        """
        existing = await self.get_user_profile_by_address(owner_address)
        if existing is not None:
            return self.create_update_user_profile_transaction(existing.id, **fields)
        return self.create_user_profile_transaction(**fields)

    async def save_employer_profile(self, owner_address: str, **fields) -> MoveCall:
        existing = await self.get_employer_profile_by_address(owner_address)
        if existing is not None:
            return self.create_update_employer_profile_transaction(existing.id, **fields)
        return self.create_employer_profile_transaction(**fields)

    # --- Submitting -------------------------------------------------------------------

    async def submit(self, call: MoveCall) -> SubmitResult:
        """Sign and submit ``call``. Rejections are returned, not interpreted."""
        if self._signer is None:
            raise SignerUnavailableError("no signer configured")
        result = await self._signer.sign_and_submit(call)
        if not result.success:
            logger.warning("%s rejected: %s", call.function, result.error)
        return result

    async def _resolve_hire(self, job_id: str, candidate_address: str, employer_address: str) -> Tuple[EmployerCap, int]:
        cap, index = await asyncio.gather(
            self._match_cap(employer_address, job_id),
            self._application_position(job_id, candidate_address),
        )
        if cap is None:
            raise CapabilityNotFoundError(f"{employer_address} holds no capability for job {job_id}")
        if index is None:
            raise ApplicationNotFoundError(f"{candidate_address} has not applied to job {job_id}")
        return cap, index

    async def prepare_hire_transaction(self, job_id: str, candidate_address: str, employer_address: str) -> MoveCall:
        """Resolve the capability and a fresh application index, then build the call."""
        cap, index = await self._resolve_hire(job_id, candidate_address, employer_address)
        return self.create_hire_candidate_transaction(job_id, cap.id, candidate_address, index)

    async def hire_candidate(
        self,
        job_id: str,
        candidate_address: str,
        employer_address: str,
        max_attempts: int = 2,
    ) -> SubmitResult:
        """Hire ``candidate_address`` for ``job_id``, re-resolving the index on rejection.

        The contract addresses the application by position, so a position read
        earlier can go stale. The index is resolved right before each submit;
        after a rejection it is resolved again and the hire retried only if the
        index moved. An unchanged index means the rejection had another cause,
        and that result is returned as-is.

        A ledger read failure while resolving raises ``LedgerError``; it is not
        reported as a missing capability or application.
        """
        max_attempts = max(1, max_attempts)
        result: Optional[SubmitResult] = None
        submitted_index: Optional[int] = None
        for attempt in range(1, max_attempts + 1):
            cap, index = await self._resolve_hire(job_id, candidate_address, employer_address)
            if result is not None and index == submitted_index:
                break
            call = self.create_hire_candidate_transaction(job_id, cap.id, candidate_address, index)
            result = await self.submit(call)
            if result.success:
                return result
            submitted_index = index
            logger.info("hire attempt %d/%d rejected at index %d", attempt, max_attempts, index)
        return result  # type: ignore[return-value]


def create_minihub(
    config: Optional[PackageConfig] = None,
    reader: Optional[LedgerReader] = None,
    signer: Optional[Signer] = None,
) -> MiniHub:
    """Build a MiniHub; config defaults to the environment, reader to JSON-RPC."""
    config = config or load_config()
    reader = reader or RpcLedgerReader(config.rpc_url)
    return MiniHub(reader, config, signer=signer)
