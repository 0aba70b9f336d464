"""Tests for registry scanning and side-record walking against the in-memory ledger."""

import pytest

from minihub.errors import LedgerError
from minihub.models import ApplicationProfile, Job, JobBoard, UserProfile, UserRegistry
from minihub.scanner import RegistryScanner
from minihub.walker import SideRecordWalker

from conftest import CANDIDATE, EMPLOYER, OTHER_CANDIDATE, OTHER_EMPLOYER, run


class TestRegistryScanner:
    def test_list_all_keeps_registry_order(self, board, config):
        for job_id in ("0x103", "0x101", "0x102"):
            board.add_job(job_id)
        scanner = RegistryScanner(board.ledger, max_concurrency=2)
        jobs = run(scanner.list_all(config.job_board_id, JobBoard, Job))
        assert [j.id for j in jobs] == ["0x103", "0x101", "0x102"]

    def test_malformed_profile_is_dropped(self, board, config):
        board.add_user("0x201", CANDIDATE)
        board.add_user("0x202", OTHER_CANDIDATE)
        board.ledger.put_object("0x203", board.tag("UserProfile"), {"id": {"id": "0x203"}, "name": "no owner"})
        board.user_ids.append("0x203")
        board.sync_registries()

        scanner = RegistryScanner(board.ledger)
        profiles = run(scanner.list_all(config.user_registry_id, UserRegistry, UserProfile))
        assert [p.id for p in profiles] == ["0x201", "0x202"]

    def test_unparseable_stored_object_is_dropped(self, board, config):
        board.add_user("0x201", CANDIDATE)
        board.ledger.put_raw("0x202", {"content": "nonsense"})
        board.user_ids.append("0x202")
        board.sync_registries()

        env = run(board.ledger.get_object("0x202"))
        assert env.error == {"code": "malformedResponse"}
        scanner = RegistryScanner(board.ledger)
        profiles = run(scanner.list_all(config.user_registry_id, UserRegistry, UserProfile))
        assert [p.id for p in profiles] == ["0x201"]

    def test_unreadable_id_is_dropped(self, board, config):
        board.add_job("0x101")
        board.add_job("0x102")
        board.ledger.failing.add("0x101")
        jobs = run(RegistryScanner(board.ledger).list_all(config.job_board_id, JobBoard, Job))
        assert [j.id for j in jobs] == ["0x102"]

    def test_missing_registry_is_empty(self, board):
        scanner = RegistryScanner(board.ledger)
        assert run(scanner.list_all("0x404", JobBoard, Job)) == []

    def test_unreadable_registry_raises(self, board, config):
        board.ledger.failing.add(config.job_board_id)
        with pytest.raises(LedgerError):
            run(RegistryScanner(board.ledger).list_all(config.job_board_id, JobBoard, Job))

    def test_ids_beyond_stored_count_are_ignored(self, board, config):
        board.add_job("0x101")
        board.add_job("0x102")
        board.sync_registries(job_count=1)
        jobs = run(RegistryScanner(board.ledger).list_all(config.job_board_id, JobBoard, Job))
        assert [j.id for j in jobs] == ["0x101"]

    def test_empty_registry_fetches_nothing(self, board, config):
        scanner = RegistryScanner(board.ledger)
        assert run(scanner.list_all(config.job_board_id, JobBoard, Job)) == []
        assert board.ledger.reads == [config.job_board_id]

    def test_find_by_owner_earliest_wins(self, board, config):
        board.add_user("0x201", CANDIDATE, name="first")
        board.add_user("0x202", OTHER_CANDIDATE)
        board.add_user("0x203", CANDIDATE.upper().replace("0X", "0x"), name="second")
        scanner = RegistryScanner(board.ledger)

        found = run(scanner.find_by_owner(config.user_registry_id, UserRegistry, UserProfile, CANDIDATE))
        assert found.name == "first"

        everyone = run(scanner.find_all_by_owner(config.user_registry_id, UserRegistry, UserProfile, CANDIDATE))
        assert [p.id for p in everyone] == ["0x201", "0x203"]

    def test_find_by_owner_no_match(self, board, config):
        board.add_job("0x101", employer=EMPLOYER)
        scanner = RegistryScanner(board.ledger)
        assert run(scanner.find_by_owner(config.job_board_id, JobBoard, Job, OTHER_EMPLOYER)) is None


class TestSideRecordWalker:
    def test_no_children(self, board):
        board.add_job("0x101")
        walker = SideRecordWalker(board.ledger)
        assert run(walker.list_children("0x101", ApplicationProfile)) == []

    def test_positions_follow_listing(self, board):
        board.add_job("0x101")
        board.add_application("0x101", "0xa1", CANDIDATE)
        board.add_application("0x101", "0xa2", OTHER_CANDIDATE)
        entries = run(SideRecordWalker(board.ledger).list_entries("0x101", ApplicationProfile))
        assert [(e.position, e.record.id) for e in entries] == [(0, "0xa1"), (1, "0xa2")]
        assert entries[1].key.candidate == OTHER_CANDIDATE

    def test_broken_child_is_skipped_and_positions_kept(self, board):
        board.add_job("0x101")
        board.add_application("0x101", "0xa1", CANDIDATE)
        board.add_application("0x101", "0xa2", OTHER_CANDIDATE)
        board.add_application("0x101", "0xa3", EMPLOYER)
        board.ledger.failing.add("0xa1")
        board.ledger.put_raw("0xa2", {"objectId": "0xa2", "content": {"dataType": "package", "fields": {}}})

        entries = run(SideRecordWalker(board.ledger).list_entries("0x101", ApplicationProfile))
        assert [(e.position, e.record.id) for e in entries] == [(2, "0xa3")]

    def test_listing_failure_raises(self, board):
        board.add_job("0x101")
        board.ledger.failing.add("0x101")
        with pytest.raises(LedgerError):
            run(SideRecordWalker(board.ledger).list_children("0x101", ApplicationProfile))

    def test_find_child(self, board):
        board.add_job("0x101")
        board.add_application("0x101", "0xa1", CANDIDATE)
        board.add_application("0x101", "0xa2", OTHER_CANDIDATE)
        walker = SideRecordWalker(board.ledger)
        found = run(walker.find_child("0x101", ApplicationProfile, lambda a: a.candidate == OTHER_CANDIDATE))
        assert found.id == "0xa2"
        assert run(walker.find_child("0x101", ApplicationProfile, lambda a: False)) is None
