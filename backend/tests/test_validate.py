"""Cross-table consistency check and its command line entry point."""

import pytest

from padops import validate
from padops.shared.backup import BackupManager
from padops.validate import find_problems, fix_jobs


@pytest.fixture
def consistent(seeded):
    seeded.write(
        "jobs",
        [
            {
                "id": 1,
                "pad_id": 1,
                "pad_name": "Pad A",
                "operator_name": "Acme Energy",
                "start_date": "2024-01-01T00:00:00Z",
                "status": "active",
                "incidents": [1],
            }
        ],
    )
    seeded.write("incidents", [{"id": 1, "job_id": 1, "type_id": 2, "description": "Lightning delay"}])
    return seeded


@pytest.fixture
def quiet_logging(monkeypatch):
    monkeypatch.setattr(validate, "setup_logging", lambda cfg: None)


class TestFindProblems:
    def test_consistent_data(self, consistent) -> None:
        assert find_problems(consistent) == []

    def test_empty_data_dir(self, store) -> None:
        assert find_problems(store) == []

    def test_broken_references(self, consistent) -> None:
        consistent.write("pads", consistent.read("pads") + [{"id": 2, "name": "Pad B", "operator_id": 9}])
        jobs = consistent.read("jobs")
        jobs.append({"id": 2, "pad_id": 7, "start_date": "2024-02-01T00:00:00Z"})
        consistent.write("jobs", jobs)
        consistent.write("incidents", [{"id": 1, "job_id": 5, "type_id": 8}])

        assert find_problems(consistent) == [
            "Invalid operator_id 9 for pad 2",
            "Invalid pad_id 7 for job 2",
            "Invalid job_id 5 for incident 1",
            "Invalid type_id 8 for incident 1",
        ]

    def test_stale_job_names(self, consistent) -> None:
        consistent.write("operators", [{"id": 1, "name": "Acme Midstream"}])
        assert find_problems(consistent) == ["Inconsistent names for job 1"]


class TestFixJobs:
    def test_fills_missing_fields(self, store, settings) -> None:
        store.write(
            "jobs",
            [
                {"id": 1, "pad_id": 1, "start_date": "2024-01-01", "end_date": "2024-01-05"},
                {"id": 2, "pad_id": 1, "start_date": "2024-02-01"},
                {"id": 3, "pad_id": 1, "start_date": "2024-03-01", "status": "active", "incidents": []},
            ],
        )
        backups = BackupManager(store, settings.backup_dir)

        assert fix_jobs(store, backups) == 2

        jobs = store.read("jobs")
        assert [j["status"] for j in jobs] == ["completed", "active", "active"]
        assert all(j["incidents"] == [] for j in jobs)
        assert len(backups.list_backups("jobs")) == 1

    def test_nothing_to_fix_writes_nothing(self, consistent, settings) -> None:
        backups = BackupManager(consistent, settings.backup_dir)
        assert fix_jobs(consistent, backups) == 0
        assert backups.list_backups("jobs") == []


class TestMain:
    def test_exit_zero_when_consistent(self, consistent, settings, quiet_logging) -> None:
        with pytest.raises(SystemExit) as exc_info:
            validate.main(["--data-dir", str(settings.DATA_DIR)])
        assert exc_info.value.code == 0

    def test_exit_one_on_broken_reference(self, consistent, settings, quiet_logging) -> None:
        consistent.write("incidents", [{"id": 1, "job_id": 42, "type_id": 1}])
        with pytest.raises(SystemExit) as exc_info:
            validate.main(["--data-dir", str(settings.DATA_DIR)])
        assert exc_info.value.code == 1

    def test_exit_one_on_corrupt_table(self, store, settings, quiet_logging) -> None:
        settings.DATA_DIR.mkdir(parents=True)
        (settings.DATA_DIR / "jobs.json").write_text("[oops", encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            validate.main(["--data-dir", str(settings.DATA_DIR)])
        assert exc_info.value.code == 1

    def test_fix_flag(self, consistent, settings, quiet_logging) -> None:
        jobs = consistent.read("jobs")
        del jobs[0]["status"]
        consistent.write("jobs", jobs)

        with pytest.raises(SystemExit) as exc_info:
            validate.main(["--data-dir", str(settings.DATA_DIR), "--fix"])

        assert exc_info.value.code == 0
        assert consistent.read("jobs")[0]["status"] == "active"
