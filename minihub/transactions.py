"""Transaction construction.

Builds call descriptions for the contract's entry points: the fully qualified
target, then the arguments in the exact order and primitive types the entry
point declares. Shared and owned objects are passed by id; everything else is a
pure value that can be rendered to BCS.

Nothing here performs I/O or signs. A call description is handed to an external
signer as-is.

Conventions the contract relies on:
- optional salary is a ``vector<u64>`` with zero elements (no salary) or one;
- timestamps (the job deadline) are epoch milliseconds resolved by the caller;
  the clock object is only passed through by id for the contract's own time;
- ``hire_candidate`` addresses the application by its index in the job's
  side-record listing, not by id.
"""

from __future__ import annotations

from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from . import bcs
from .config import PackageConfig
from .utils import normalize_address


class ObjectArg(BaseModel):
    """An object passed by reference."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["object"] = "object"
    object_id: str

    @field_validator("object_id")
    @classmethod
    def _canonical_id(cls, value: str) -> str:
        return normalize_address(value)


class PureArg(BaseModel):
    """A pure value with its Move type; rejected at construction if not encodable."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["pure"] = "pure"
    type: str
    value: Any

    @model_validator(mode="after")
    def _check_encodable(self) -> "PureArg":
        bcs.encode(self.type, self.value)
        return self

    def to_bytes(self) -> bytes:
        return bcs.encode(self.type, self.value)


CallArg = Annotated[Union[ObjectArg, PureArg], Field(discriminator="kind")]


class MoveCall(BaseModel):
    """An unsigned entry-point invocation."""

    target: str
    arguments: List[CallArg] = Field(default_factory=list)

    @property
    def function(self) -> str:
        return self.target.rsplit("::", 1)[-1]

    @property
    def object_ids(self) -> List[str]:
        return [a.object_id for a in self.arguments if isinstance(a, ObjectArg)]

    @property
    def pure_arguments(self) -> List[PureArg]:
        return [a for a in self.arguments if isinstance(a, PureArg)]

    def encoded_arguments(self) -> List[Union[str, bytes]]:
        """Arguments as the signer consumes them: object ids and BCS bytes."""
        return [a.object_id if isinstance(a, ObjectArg) else a.to_bytes() for a in self.arguments]


# --- Parameters ------------------------------------------------------------------


class PostJobParams(BaseModel):
    employer_profile_id: str
    title: str
    description: str
    salary: Optional[int] = None
    deadline: int = Field(..., description="Epoch millis.")


class ApplyToJobParams(BaseModel):
    job_id: str
    user_profile_id: str
    cover_message: str = ""
    cv_url: str = ""


class HireCandidateParams(BaseModel):
    job_id: str
    employer_cap_id: str
    candidate_address: str
    candidate_index: int


class UserProfileParams(BaseModel):
    name: str
    bio: str = ""
    avatar_url: str = ""
    skills: List[str] = Field(default_factory=list)
    experience_years: int = 0
    portfolio_url: str = ""


class UpdateUserProfileParams(UserProfileParams):
    user_profile_id: str


class EmployerProfileParams(BaseModel):
    company_name: str
    description: str = ""
    logo_url: str = ""
    website: str = ""
    industry: str = ""
    employee_count: int = 0
    founded_year: int = 0


class UpdateEmployerProfileParams(EmployerProfileParams):
    employer_profile_id: str


# --- Builder -----------------------------------------------------------------------


def _string(value: str) -> PureArg:
    return PureArg(type="string", value=value)


def _u64(name: str, value: int) -> PureArg:
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")
    return PureArg(type="u64", value=value)


class TransactionBuilder:
    """Build call descriptions for every mutating entry point."""

    def __init__(self, config: PackageConfig) -> None:
        self._config = config

    def _call(self, function: str, *arguments: Union[ObjectArg, PureArg]) -> MoveCall:
        return MoveCall(target=self._config.target(function), arguments=list(arguments))

    def _clock(self) -> ObjectArg:
        return ObjectArg(object_id=self._config.clock_id)

    def post_job(self, params: PostJobParams) -> MoveCall:
        salary: List[int] = []
        if params.salary is not None:
            salary = [_u64("salary", params.salary).value]
        return self._call(
            "post_job",
            ObjectArg(object_id=self._config.job_board_id),
            ObjectArg(object_id=params.employer_profile_id),
            _string(params.title),
            _string(params.description),
            PureArg(type="vector<u64>", value=salary),
            _u64("deadline", params.deadline),
        )

    def apply_to_job(self, params: ApplyToJobParams) -> MoveCall:
        return self._call(
            "apply_to_job",
            ObjectArg(object_id=params.job_id),
            ObjectArg(object_id=params.user_profile_id),
            _string(params.cover_message),
            _string(params.cv_url),
            self._clock(),
        )

    def hire_candidate(self, params: HireCandidateParams) -> MoveCall:
        return self._call(
            "hire_candidate",
            ObjectArg(object_id=params.job_id),
            ObjectArg(object_id=params.employer_cap_id),
            PureArg(type="address", value=params.candidate_address),
            _u64("candidate_index", params.candidate_index),
        )

    def _user_profile_args(self, params: UserProfileParams) -> List[PureArg]:
        return [
            _string(params.name),
            _string(params.bio),
            _string(params.avatar_url),
            PureArg(type="vector<string>", value=list(params.skills)),
            _u64("experience_years", params.experience_years),
            _string(params.portfolio_url),
        ]

    def create_user_profile(self, params: UserProfileParams) -> MoveCall:
        return self._call(
            "create_user_profile",
            ObjectArg(object_id=self._config.user_registry_id),
            *self._user_profile_args(params),
            self._clock(),
        )

    def update_user_profile(self, params: UpdateUserProfileParams) -> MoveCall:
        return self._call(
            "update_user_profile",
            ObjectArg(object_id=params.user_profile_id),
            *self._user_profile_args(params),
            self._clock(),
        )

    def _employer_profile_args(self, params: EmployerProfileParams) -> List[PureArg]:
        return [
            _string(params.company_name),
            _string(params.description),
            _string(params.logo_url),
            _string(params.website),
            _string(params.industry),
            _u64("employee_count", params.employee_count),
            _u64("founded_year", params.founded_year),
        ]

    def create_employer_profile(self, params: EmployerProfileParams) -> MoveCall:
        return self._call(
            "create_employer_profile",
            ObjectArg(object_id=self._config.employer_registry_id),
            *self._employer_profile_args(params),
            self._clock(),
        )

    def update_employer_profile(self, params: UpdateEmployerProfileParams) -> MoveCall:
        return self._call(
            "update_employer_profile",
            ObjectArg(object_id=params.employer_profile_id),
            *self._employer_profile_args(params),
            self._clock(),
        )
