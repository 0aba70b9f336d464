"""Shared fixtures: an in-memory ledger populated the way the contract lays it out."""

import asyncio

import pytest

from minihub.config import PackageConfig
from minihub.ledger.memory import InMemoryLedger
from minihub.models import SubmitResult
from minihub.ledger.base import Signer
from minihub.sdk import MiniHub

PACKAGE = "0x" + "a" * 64
EMPLOYER = "0x" + "e" * 64
OTHER_EMPLOYER = "0x" + "f" * 64
CANDIDATE = "0x" + "c" * 64
OTHER_CANDIDATE = "0x" + "d" * 64

NOW = 1_700_000_000_000
DAY = 86_400_000


def run(coro):
    return asyncio.run(coro)


class LedgerFixture:
    """Builds board, registries, jobs, profiles and applications in an InMemoryLedger."""

    def __init__(self, config):
        self.config = config
        self.ledger = InMemoryLedger()
        self.job_ids = []
        self.user_ids = []
        self.employer_ids = []
        self.sync_registries()

    def tag(self, name):
        return self.config.struct_type(name)

    def sync_registries(self, job_count=None):
        cfg = self.config
        self.ledger.put_object(cfg.job_board_id, self.tag("JobBoard"), {
            "id": {"id": cfg.job_board_id},
            "job_count": str(len(self.job_ids) if job_count is None else job_count),
            "job_ids": list(self.job_ids),
        })
        self.ledger.put_object(cfg.user_registry_id, self.tag("UserRegistry"), {
            "id": {"id": cfg.user_registry_id},
            "user_profiles": list(self.user_ids),
            "user_count": str(len(self.user_ids)),
        })
        self.ledger.put_object(cfg.employer_registry_id, self.tag("EmployerRegistry"), {
            "id": {"id": cfg.employer_registry_id},
            "employer_profiles": list(self.employer_ids),
            "employer_count": str(len(self.employer_ids)),
        })

    def add_job(self, job_id, employer=EMPLOYER, title="Engineer", description="Build things",
                salary=None, hired=None, active=True, deadline=NOW + 7 * DAY,
                application_count=0, cap_id=None):
        self.ledger.put_object(job_id, self.tag("Job"), {
            "id": {"id": job_id},
            "employer": employer,
            "employer_profile_id": "0x900",
            "title": title,
            "description": description,
            "salary": None if salary is None else str(salary),
            "application_count": str(application_count),
            "hired_candidate": hired,
            "is_active": active,
            "deadline": str(deadline),
        })
        self.job_ids.append(job_id)
        self.sync_registries()
        if cap_id:
            self.ledger.put_object(
                cap_id,
                self.tag("EmployerCap"),
                {"id": {"id": cap_id}, "job_id": job_id},
                owner=employer,
            )
        return job_id

    def add_user(self, profile_id, owner, name="Ada", skills=("python",), experience_years=3):
        self.ledger.put_object(profile_id, self.tag("UserProfile"), {
            "id": {"id": profile_id},
            "user_address": owner,
            "name": name,
            "bio": "Engineer",
            "avatar_url": "",
            "skills": list(skills),
            "experience_years": str(experience_years),
            "portfolio_url": "",
            "created_at": str(NOW),
            "updated_at": str(NOW),
        })
        self.user_ids.append(profile_id)
        self.sync_registries()
        return profile_id

    def add_employer(self, profile_id, owner, company_name="Acme", industry="Software"):
        self.ledger.put_object(profile_id, self.tag("EmployerProfile"), {
            "id": {"id": profile_id},
            "employer_address": owner,
            "company_name": company_name,
            "description": "We build",
            "logo_url": "",
            "website": "https://acme.example",
            "industry": industry,
            "employee_count": "40",
            "founded_year": "2015",
            "created_at": str(NOW),
            "updated_at": str(NOW),
        })
        self.employer_ids.append(profile_id)
        self.sync_registries()
        return profile_id

    def add_application(self, job_id, app_id, candidate, index=0, cover="Hello"):
        self.ledger.put_object(app_id, self.tag("ApplicationProfile"), {
            "id": {"id": app_id},
            "candidate": candidate,
            "user_profile_id": "0x800",
            "job_id": job_id,
            "cover_message": cover,
            "timestamp": str(NOW),
            "cv_url": "https://cv.example/" + app_id,
        })
        self.ledger.attach(
            job_id,
            app_id,
            name_type=self.tag("ApplicationKey"),
            name_value={"candidate": candidate, "index": str(index)},
        )
        return app_id

    def hub(self, signer=None):
        return MiniHub(self.ledger, self.config, signer=signer)


class ScriptedSigner(Signer):
    """Signer that replays canned results and records what it was given."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = []
        self.on_submit = None

    async def sign_and_submit(self, call):
        self.calls.append(call)
        if self.on_submit:
            self.on_submit(call)
        if self.results:
            return self.results.pop(0)
        return SubmitResult(success=True, result={"digest": "ok"})


@pytest.fixture
def config():
    return PackageConfig(
        package_id=PACKAGE,
        job_board_id="0xb0",
        user_registry_id="0xb1",
        employer_registry_id="0xb2",
        max_concurrency=4,
    )


@pytest.fixture
def board(config):
    return LedgerFixture(config)
