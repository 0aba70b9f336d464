"""Tests for the read API (MiniHubQueries) over the in-memory ledger."""

from minihub.models import JobPostedEvent

from conftest import CANDIDATE, DAY, EMPLOYER, NOW, OTHER_CANDIDATE, OTHER_EMPLOYER, run


class TestJobReads:
    def test_active_jobs_exclude_hired(self, board):
        board.add_job("0x101")
        board.add_job("0x102", hired=CANDIDATE)
        hub = board.hub()
        assert [j.id for j in run(hub.get_active_jobs())] == ["0x101"]

    def test_active_jobs_exclude_inactive(self, board):
        board.add_job("0x101", active=False)
        board.add_job("0x102")
        assert [j.id for j in run(board.hub().get_active_jobs())] == ["0x102"]

    def test_expired_jobs_kept_by_default(self, board):
        board.add_job("0x101", deadline=NOW - DAY)
        board.add_job("0x102", deadline=NOW + DAY)
        hub = board.hub()
        assert [j.id for j in run(hub.get_active_jobs(now=NOW))] == ["0x101", "0x102"]
        assert [j.id for j in run(hub.get_active_jobs(include_expired=False, now=NOW))] == ["0x102"]

    def test_jobs_by_employer(self, board):
        board.add_job("0x101", employer=EMPLOYER)
        board.add_job("0x102", employer=OTHER_EMPLOYER)
        board.add_job("0x103", employer=EMPLOYER)
        jobs = run(board.hub().get_jobs_by_employer(OTHER_EMPLOYER))
        assert [j.id for j in jobs] == ["0x102"]

    def test_unreadable_board_degrades_to_empty(self, board, config):
        board.add_job("0x101")
        board.ledger.failing.add(config.job_board_id)
        hub = board.hub()
        assert run(hub.get_all_jobs()) == []
        assert run(hub.get_job_board()) is None

    def test_malformed_option_drops_only_that_job(self, board):
        board.add_job("0x101")
        board.add_job("0x102")
        board.ledger.objects["0x102"]["content"]["fields"]["salary"] = {"vec": "1000"}
        board.ledger.objects["0x101"]["content"]["fields"]["hired_candidate"] = {"vec": 5}
        board.add_job("0x103", salary=7)
        jobs = run(board.hub().get_all_jobs())
        assert [(j.id, j.salary) for j in jobs] == [("0x103", 7)]

    def test_single_reads(self, board):
        board.add_job("0x101", title="Auditor", salary=0)
        hub = board.hub()
        job = run(hub.get_job("0x101"))
        assert job.title == "Auditor"
        assert job.salary == 0
        assert run(hub.get_job("0x404")) is None
        assert run(hub.get_user_profile("0x101")) is None

    def test_can_apply(self, board):
        board.add_job("0x101")
        board.add_job("0x102", deadline=NOW - 1)
        board.add_job("0x103", hired=CANDIDATE)
        hub = board.hub()
        assert run(hub.can_apply("0x101", now=NOW))
        assert not run(hub.can_apply("0x102", now=NOW))
        assert not run(hub.can_apply("0x103", now=NOW))
        assert not run(hub.can_apply("0x404", now=NOW))


class TestProfiles:
    def test_three_ids_one_malformed(self, board):
        board.add_employer("0x301", EMPLOYER)
        board.add_employer("0x302", OTHER_EMPLOYER)
        board.ledger.put_object("0x303", board.tag("EmployerProfile"), {"id": {"id": "0x303"}, "employee_count": "x"})
        board.employer_ids.append("0x303")
        board.sync_registries()
        profiles = run(board.hub().get_all_employer_profiles())
        assert len(profiles) == 2

    def test_three_ids_one_unparseable_envelope(self, board):
        board.add_user("0x201", CANDIDATE)
        board.add_user("0x202", OTHER_CANDIDATE)
        board.ledger.put_raw("0x203", {"content": {"dataType": "moveObject", "fields": {}}})
        board.user_ids.append("0x203")
        board.sync_registries()
        profiles = run(board.hub().get_all_user_profiles())
        assert [p.id for p in profiles] == ["0x201", "0x202"]

    def test_profile_by_address(self, board):
        board.add_user("0x201", CANDIDATE, name="Grace")
        board.add_employer("0x301", EMPLOYER, company_name="Acme")
        hub = board.hub()
        assert run(hub.get_user_profile_by_address(CANDIDATE)).name == "Grace"
        assert run(hub.get_employer_profile_by_address(EMPLOYER)).company_name == "Acme"
        assert run(hub.get_user_profile_by_address(OTHER_CANDIDATE)) is None

    def test_registry_counts(self, board):
        board.add_user("0x201", CANDIDATE)
        registry = run(board.hub().get_user_registry())
        assert registry.entry_count == 1
        assert registry.entry_ids == ["0x201"]


class TestCapabilities:
    def test_caps_and_lookup(self, board):
        board.add_job("0x101", cap_id="0xc1")
        board.add_job("0x102", cap_id="0xc2")
        hub = board.hub()
        caps = run(hub.get_employer_caps(EMPLOYER))
        assert sorted(c.id for c in caps) == ["0xc1", "0xc2"]
        assert run(hub.find_employer_cap(EMPLOYER, "0x102")).id == "0xc2"
        assert run(hub.find_employer_cap(OTHER_EMPLOYER, "0x102")) is None

    def test_cap_read_failure_degrades(self, board):
        board.add_job("0x101", cap_id="0xc1")
        board.ledger.failing.add(EMPLOYER)
        hub = board.hub()
        assert run(hub.get_employer_caps(EMPLOYER)) == []
        assert run(hub.find_employer_cap(EMPLOYER, "0x101")) is None


class TestApplications:
    def test_job_with_no_applications(self, board):
        board.add_job("0x101")
        assert run(board.hub().get_job_applications("0x101")) == []

    def test_applications_and_lookups(self, board):
        board.add_job("0x101")
        board.add_application("0x101", "0xa1", CANDIDATE)
        board.add_application("0x101", "0xa2", OTHER_CANDIDATE)
        hub = board.hub()

        assert [a.id for a in run(hub.get_job_applications("0x101"))] == ["0xa1", "0xa2"]
        assert run(hub.get_application("0x101", OTHER_CANDIDATE)).id == "0xa2"
        assert run(hub.has_user_applied_to_job("0x101", CANDIDATE))
        assert not run(hub.has_user_applied_to_job("0x101", EMPLOYER))
        assert run(hub.resolve_application_index("0x101", OTHER_CANDIDATE)) == 1
        assert run(hub.resolve_application_index("0x101", EMPLOYER)) is None

    def test_undecodable_sibling_keeps_listing_position(self, board):
        board.add_job("0x101")
        board.add_application("0x101", "0xa1", OTHER_CANDIDATE)
        board.add_application("0x101", "0xa2", CANDIDATE)
        board.ledger.put_raw("0xa1", {"objectId": "0xa1", "content": {"dataType": "package", "fields": {}}})
        hub = board.hub()
        assert [a.id for a in run(hub.get_job_applications("0x101"))] == ["0xa2"]
        assert run(hub.resolve_application_index("0x101", CANDIDATE)) == 1

    def test_listing_failure_degrades_to_empty(self, board):
        board.add_job("0x101")
        board.add_application("0x101", "0xa1", CANDIDATE)
        board.ledger.failing.add("0x101")
        hub = board.hub()
        assert run(hub.get_job_applications("0x101")) == []
        assert run(hub.resolve_application_index("0x101", CANDIDATE)) is None

    def test_user_applications_across_jobs(self, board):
        board.add_job("0x101")
        board.add_job("0x102")
        board.add_application("0x101", "0xa1", CANDIDATE)
        board.add_application("0x102", "0xa2", OTHER_CANDIDATE)
        board.add_application("0x102", "0xa3", CANDIDATE)
        apps = run(board.hub().get_user_applications(CANDIDATE))
        assert [a.id for a in apps] == ["0xa1", "0xa3"]


class TestStatistics:
    def test_full_scan(self, board):
        board.add_job("0x101", application_count=2)
        board.add_job("0x102", hired=CANDIDATE, application_count=3)
        board.add_job("0x103", deadline=NOW - DAY)
        board.add_user("0x201", CANDIDATE)
        board.add_employer("0x301", EMPLOYER)
        stats = run(board.hub().get_statistics(now=NOW))

        assert stats.jobs_scanned
        assert stats.total_jobs == 3
        assert stats.active_jobs == 2
        assert stats.open_jobs == 1
        assert stats.filled_jobs == 1
        assert stats.total_applications == 5
        assert stats.total_users == 1
        assert stats.total_employers == 1

    def test_partial_scan_falls_back_to_stored_count(self, board):
        board.add_job("0x101", application_count=1)
        board.add_job("0x102", application_count=4)
        board.ledger.failing.add("0x102")
        stats = run(board.hub().get_statistics(now=NOW))

        assert not stats.jobs_scanned
        assert stats.total_jobs == 2
        assert stats.active_jobs == 1
        assert stats.total_applications == 1

    def test_unreadable_board(self, board, config):
        board.ledger.failing.add(config.job_board_id)
        stats = run(board.hub().get_statistics(now=NOW))
        assert stats.total_jobs == 0
        assert not stats.jobs_scanned

    def test_empty_board(self, board):
        stats = run(board.hub().get_statistics(now=NOW))
        assert stats.total_jobs == 0
        assert stats.jobs_scanned


class TestEvents:
    def test_raw_and_typed_events(self, board):
        tag = board.tag("JobPosted")
        board.ledger.emit(tag, {"job_id": "0x101", "employer": EMPLOYER, "title": "A", "deadline": "5"})
        board.ledger.emit(tag, {"job_id": "0x102", "employer": EMPLOYER, "title": "B"})
        board.ledger.emit(tag, {"title": "missing ids"})
        hub = board.hub()

        raw = run(hub.get_events("JobPosted", limit=2))
        assert [e["title"] for e in raw] == ["A", "B"]

        newest = run(hub.get_events("JobPosted", limit=1, descending=True))
        assert newest == [{"title": "missing ids"}]

        typed = run(hub.get_job_posted_events())
        assert [type(e) for e in typed] == [JobPostedEvent, JobPostedEvent]
        assert typed[0].deadline == 5

    def test_no_events(self, board):
        assert run(board.hub().get_candidate_hired_events()) == []

    def test_event_read_failure(self, board):
        board.ledger.failing.add(board.tag("CandidateHired"))
        assert run(board.hub().get_events("CandidateHired")) == []
