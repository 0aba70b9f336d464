"""Filtering, sorting and search over decoded records.

Pure functions over lists already read from the ledger. None of them touch the
network, and none mutate their input; sorts return new lists.

Deadline checks take ``now`` in epoch millis so callers (and tests) control the
clock; it defaults to the wall clock.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from .models import EmployerProfile, Job, UserProfile
from .utils import now_ms


def is_deadline_passed(job: Job, now: Optional[int] = None) -> bool:
    now = now_ms() if now is None else now
    return now > job.deadline


def accepts_applications(job: Job) -> bool:
    """Active and nobody hired. A hire closes the job whatever ``is_active`` says."""
    return job.is_active and job.hired_candidate is None


def is_job_active(job: Job, now: Optional[int] = None) -> bool:
    """Active, nobody hired, and the deadline has not passed."""
    return accepts_applications(job) and not is_deadline_passed(job, now)


def active_only(jobs: Iterable[Job]) -> List[Job]:
    return [j for j in jobs if accepts_applications(j)]


def active_and_not_expired(jobs: Iterable[Job], now: Optional[int] = None) -> List[Job]:
    now = now_ms() if now is None else now
    return [j for j in jobs if is_job_active(j, now)]


def sort_jobs_by_application_count(jobs: Iterable[Job], ascending: bool = False) -> List[Job]:
    return sorted(jobs, key=lambda j: j.application_count, reverse=not ascending)


def sort_jobs_by_deadline(jobs: Iterable[Job], ascending: bool = True) -> List[Job]:
    return sorted(jobs, key=lambda j: j.deadline, reverse=not ascending)


def filter_jobs_by_salary_range(
    jobs: Iterable[Job],
    min_salary: Optional[int] = None,
    max_salary: Optional[int] = None,
) -> List[Job]:
    """Jobs with a salary inside [min_salary, max_salary]; jobs without one are excluded."""
    out: List[Job] = []
    for job in jobs:
        if job.salary is None:
            continue
        if min_salary is not None and job.salary < min_salary:
            continue
        if max_salary is not None and job.salary > max_salary:
            continue
        out.append(job)
    return out


def search_jobs(jobs: Iterable[Job], query: str) -> List[Job]:
    """Case-insensitive substring match on title or description."""
    q = (query or "").strip().lower()
    if not q:
        return list(jobs)
    return [j for j in jobs if q in j.title.lower() or q in j.description.lower()]


def search_user_profiles_by_skills(profiles: Iterable[UserProfile], skills: Iterable[str]) -> List[UserProfile]:
    """Profiles having at least one skill that contains any of ``skills``."""
    wanted = [s.strip().lower() for s in skills if s and s.strip()]
    if not wanted:
        return []
    return [
        p for p in profiles
        if any(w in skill.lower() for skill in p.skills for w in wanted)
    ]


def filter_employers_by_industry(profiles: Iterable[EmployerProfile], industry: str) -> List[EmployerProfile]:
    needle = (industry or "").strip().lower()
    return [p for p in profiles if needle in p.industry.lower()]
