"""Data models for the MiniHub ledger layer.

Two families of models live here:

- *Envelope* models describe what the ledger endpoint returns (object responses,
  dynamic-field listings, event pages). They are loose on purpose: every field a
  node may omit is optional.
- *Record* models are the typed domain records decoded from envelope content.
  Attribute names match the Move struct field names, so a content payload can be
  validated directly. Ledger integers arrive as strings and are coerced to int.

This file uses Pydantic v2.
"""

from __future__ import annotations

from typing import Annotated, Any, ClassVar, Dict, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from .utils import coerce_u64, unwrap_option


def _option_u64(value: Any) -> Optional[int]:
    inner = unwrap_option(value)
    return None if inner is None else coerce_u64(inner)


def _option_address(value: Any) -> Optional[str]:
    return unwrap_option(value)


def _string_vector(value: Any) -> List[str]:
    if value is None:
        return []
    return value


U64 = Annotated[int, BeforeValidator(coerce_u64)]
OptionalU64 = Annotated[Optional[int], BeforeValidator(_option_u64)]
OptionalAddress = Annotated[Optional[str], BeforeValidator(_option_address)]
StringVector = Annotated[List[str], BeforeValidator(_string_vector)]


# --- Envelopes ---------------------------------------------------------------


class MoveContent(BaseModel):
    """Parsed content of a ledger object."""

    model_config = ConfigDict(populate_by_name=True)

    data_type: str = Field(..., alias="dataType", description="'moveObject' or 'package'.")
    type: str = ""
    has_public_transfer: Optional[bool] = Field(default=None, alias="hasPublicTransfer")
    fields: Dict[str, Any] = Field(default_factory=dict)


class ObjectData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    object_id: str = Field(..., alias="objectId")
    version: Optional[str] = None
    digest: Optional[str] = None
    type: Optional[str] = None
    owner: Any = None
    content: Optional[MoveContent] = None


class ObjectEnvelope(BaseModel):
    """A ledger object response: either ``data`` or an ``error`` is set."""

    data: Optional[ObjectData] = None
    error: Optional[Dict[str, Any]] = None

    @property
    def exists(self) -> bool:
        return self.data is not None

    @property
    def content(self) -> Optional[MoveContent]:
        return self.data.content if self.data else None


class DynamicFieldName(BaseModel):
    type: str = ""
    value: Any = None


class DynamicFieldInfo(BaseModel):
    """One entry of a parent's dynamic-field listing."""

    model_config = ConfigDict(populate_by_name=True)

    name: DynamicFieldName = Field(default_factory=DynamicFieldName)
    type: str = Field(default="DynamicObject", description="'DynamicField' or 'DynamicObject'.")
    object_type: str = Field(default="", alias="objectType")
    object_id: str = Field(..., alias="objectId")
    version: Optional[Any] = None
    digest: Optional[str] = None


class LedgerEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Dict[str, Any] = Field(default_factory=dict)
    type: str = ""
    sender: Optional[str] = None
    parsed_json: Dict[str, Any] = Field(default_factory=dict, alias="parsedJson")
    timestamp_ms: Optional[str] = Field(default=None, alias="timestampMs")


class EventPage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data: List[LedgerEvent] = Field(default_factory=list)
    next_cursor: Optional[Dict[str, Any]] = Field(default=None, alias="nextCursor")
    has_next_page: bool = Field(default=False, alias="hasNextPage")


# --- Records -----------------------------------------------------------------


class LedgerRecord(BaseModel):
    """Base for every decoded ledger record.

    ``move_struct`` names the struct the record decodes from; the decoder rejects
    content whose type tag names a different struct.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    move_struct: ClassVar[str] = ""

    id: str

    @field_validator("id", mode="before")
    @classmethod
    def _flatten_uid(cls, value: Any) -> Any:
        # UID renders as {"id": "0x..."}
        if isinstance(value, dict):
            return value.get("id")
        return value


class Registry(LedgerRecord):
    """An append-only list of record ids plus its own count."""

    @property
    def entry_ids(self) -> List[str]:
        raise NotImplementedError

    @property
    def entry_count(self) -> int:
        raise NotImplementedError


class JobBoard(Registry):
    move_struct: ClassVar[str] = "JobBoard"

    job_count: U64 = 0
    job_ids: StringVector = Field(default_factory=list)

    @property
    def entry_ids(self) -> List[str]:
        return list(self.job_ids)

    @property
    def entry_count(self) -> int:
        return self.job_count


class UserRegistry(Registry):
    move_struct: ClassVar[str] = "UserRegistry"

    user_profiles: StringVector = Field(default_factory=list)
    user_count: U64 = 0

    @property
    def entry_ids(self) -> List[str]:
        return list(self.user_profiles)

    @property
    def entry_count(self) -> int:
        return self.user_count


class EmployerRegistry(Registry):
    move_struct: ClassVar[str] = "EmployerRegistry"

    employer_profiles: StringVector = Field(default_factory=list)
    employer_count: U64 = 0

    @property
    def entry_ids(self) -> List[str]:
        return list(self.employer_profiles)

    @property
    def entry_count(self) -> int:
        return self.employer_count


class Job(LedgerRecord):
    """A job posting.

    A job with a hired candidate is closed for new applications whatever the
    value of ``is_active``.
    """

    move_struct: ClassVar[str] = "Job"

    employer: str
    employer_profile_id: str = ""
    title: str
    description: str = ""
    salary: OptionalU64 = None
    application_count: U64 = 0
    hired_candidate: OptionalAddress = None
    is_active: bool = True
    deadline: U64 = Field(default=0, description="Application deadline, epoch millis.")

    @property
    def owner_address(self) -> str:
        return self.employer


class UserProfile(LedgerRecord):
    move_struct: ClassVar[str] = "UserProfile"

    user_address: str
    name: str = ""
    bio: str = ""
    avatar_url: str = ""
    skills: StringVector = Field(default_factory=list)
    experience_years: U64 = 0
    portfolio_url: str = ""
    created_at: U64 = 0
    updated_at: U64 = 0

    @property
    def owner_address(self) -> str:
        return self.user_address


class EmployerProfile(LedgerRecord):
    move_struct: ClassVar[str] = "EmployerProfile"

    employer_address: str
    company_name: str = ""
    description: str = ""
    logo_url: str = ""
    website: str = ""
    industry: str = ""
    employee_count: U64 = 0
    founded_year: U64 = 0
    created_at: U64 = 0
    updated_at: U64 = 0

    @property
    def owner_address(self) -> str:
        return self.employer_address


class EmployerCap(LedgerRecord):
    """Capability proving control over exactly one job."""

    move_struct: ClassVar[str] = "EmployerCap"

    job_id: str


class ApplicationProfile(LedgerRecord):
    """A candidate's application, stored as a side-record under its job."""

    move_struct: ClassVar[str] = "ApplicationProfile"

    candidate: str
    user_profile_id: str = ""
    job_id: str
    cover_message: str = ""
    timestamp: U64 = 0
    cv_url: str = ""


class ApplicationKey(BaseModel):
    """Dynamic-field key of an application: (candidate, per-candidate index)."""

    model_config = ConfigDict(frozen=True)

    candidate: str
    index: U64 = 0


# --- Events ------------------------------------------------------------------


class JobPostedEvent(BaseModel):
    job_id: str
    employer: str
    title: str = ""
    has_salary: bool = False
    deadline: U64 = 0


class ApplicationSubmittedEvent(BaseModel):
    job_id: str
    candidate: str
    timestamp: U64 = 0
    application_id: str = ""


class CandidateHiredEvent(BaseModel):
    job_id: str
    employer: str
    candidate: str


class UserProfileCreatedEvent(BaseModel):
    user_profile_id: str
    user_address: str
    name: str = ""


class EmployerProfileCreatedEvent(BaseModel):
    employer_profile_id: str
    employer_address: str
    company_name: str = ""


class ProfileUpdatedEvent(BaseModel):
    profile_id: str
    profile_type: str = ""
    updated_at: U64 = 0


# --- Aggregates and write results ---------------------------------------------


class Statistics(BaseModel):
    """Board-wide counts from one composed read.

    ``jobs_scanned`` is False when the job scan failed and ``total_jobs`` fell
    back to the board's stored count.
    """

    total_jobs: int = 0
    active_jobs: int = 0
    open_jobs: int = Field(default=0, description="Active, not hired, deadline not passed.")
    filled_jobs: int = 0
    total_applications: int = 0
    total_users: int = 0
    total_employers: int = 0
    jobs_scanned: bool = True


class SubmitResult(BaseModel):
    """Outcome reported by an external signer. Rejections are passed through as-is."""

    success: bool
    result: Any = None
    error: Optional[str] = None
