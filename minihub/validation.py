"""Client-side validation of write parameters.

These checks catch input-shape errors before a transaction is built, so the
contract is never asked to reject a malformed call. Each failure is reported
against the field it concerns, so a form can show it next to the input.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

from .errors import InvalidParamsError
from .transactions import (
    ApplyToJobParams,
    EmployerProfileParams,
    PostJobParams,
    UserProfileParams,
)
from .utils import now_ms

MAX_TITLE_LENGTH = 200
MAX_NAME_LENGTH = 100
MAX_EXPERIENCE_YEARS = 50
MIN_FOUNDED_YEAR = 1800


class FieldError(BaseModel):
    field: str
    message: str


class ValidationResult(BaseModel):
    errors: List[FieldError] = Field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def messages(self) -> List[str]:
        return [e.message for e in self.errors]

    def for_field(self, field: str) -> List[str]:
        return [e.message for e in self.errors if e.field == field]

    def raise_for_errors(self) -> None:
        """Raise InvalidParamsError if any check failed."""
        if self.errors:
            raise InvalidParamsError(self.errors)


def _blank(value: Optional[str]) -> bool:
    return not (value or "").strip()


def validate_post_job(params: PostJobParams, now: Optional[int] = None) -> ValidationResult:
    """Check a job posting. ``now`` (epoch millis) defaults to the wall clock."""
    now = now_ms() if now is None else now
    errors: List[FieldError] = []

    if _blank(params.employer_profile_id):
        errors.append(FieldError(field="employer_profile_id", message="An employer profile is required to post jobs"))

    if _blank(params.title):
        errors.append(FieldError(field="title", message="Job title is required"))
    elif len(params.title) > MAX_TITLE_LENGTH:
        errors.append(FieldError(field="title", message=f"Job title must be at most {MAX_TITLE_LENGTH} characters"))

    if _blank(params.description):
        errors.append(FieldError(field="description", message="Job description is required"))

    if params.salary is not None and params.salary < 0:
        errors.append(FieldError(field="salary", message="Salary must not be negative"))

    if params.deadline <= now:
        errors.append(FieldError(field="deadline", message="Deadline must be in the future"))

    return ValidationResult(errors=errors)


def validate_user_profile(params: UserProfileParams) -> ValidationResult:
    errors: List[FieldError] = []

    if _blank(params.name):
        errors.append(FieldError(field="name", message="Name is required"))
    elif len(params.name) > MAX_NAME_LENGTH:
        errors.append(FieldError(field="name", message=f"Name must be at most {MAX_NAME_LENGTH} characters"))

    if _blank(params.bio):
        errors.append(FieldError(field="bio", message="Bio is required"))

    if not 0 <= params.experience_years <= MAX_EXPERIENCE_YEARS:
        errors.append(
            FieldError(
                field="experience_years",
                message=f"Experience must be between 0 and {MAX_EXPERIENCE_YEARS} years",
            )
        )

    if any(_blank(s) for s in params.skills):
        errors.append(FieldError(field="skills", message="Skills must not be empty"))

    return ValidationResult(errors=errors)


def validate_employer_profile(params: EmployerProfileParams, current_year: Optional[int] = None) -> ValidationResult:
    errors: List[FieldError] = []

    if _blank(params.company_name):
        errors.append(FieldError(field="company_name", message="Company name is required"))
    elif len(params.company_name) > MAX_NAME_LENGTH:
        errors.append(
            FieldError(field="company_name", message=f"Company name must be at most {MAX_NAME_LENGTH} characters")
        )

    if _blank(params.description):
        errors.append(FieldError(field="description", message="Company description is required"))

    if params.employee_count < 0:
        errors.append(FieldError(field="employee_count", message="Employee count must not be negative"))

    # 0 means "not given"
    if params.founded_year != 0:
        current_year = current_year or datetime.now(timezone.utc).year
        if not MIN_FOUNDED_YEAR <= params.founded_year <= current_year:
            errors.append(
                FieldError(
                    field="founded_year",
                    message=f"Founded year must be between {MIN_FOUNDED_YEAR} and {current_year}",
                )
            )

    return ValidationResult(errors=errors)


def validate_application(params: ApplyToJobParams) -> ValidationResult:
    errors: List[FieldError] = []

    if _blank(params.job_id):
        errors.append(FieldError(field="job_id", message="Job is required"))
    if _blank(params.user_profile_id):
        errors.append(FieldError(field="user_profile_id", message="Create a user profile before applying"))
    if _blank(params.cover_message):
        errors.append(FieldError(field="cover_message", message="Please write a cover message"))

    return ValidationResult(errors=errors)
