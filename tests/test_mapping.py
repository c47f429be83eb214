# tests/test_mapping.py

from __future__ import annotations

import json
import logging

import pytest

from taskboard.board.mapping import map_record, map_records, normalize_progress, normalize_status


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("In Progress", "in-progress"),
        ("in_progress", "in-progress"),
        ("At Risk", "at-risk"),
        ("Done", "completed"),
        ("", "not-started"),
        (None, "not-started"),
        ("Waiting On Vendor", "waiting-on-vendor"),
    ],
)
def test_normalize_status(raw, expected) -> None:
    assert normalize_status(raw) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (0.45, 45),
        (1.0, 100),
        (1, 100),
        (0, 0),
        (75, 75),
        ("1", 1),
        ("60%", 60),
        (150, 100),
        (-3, 0),
        ("abc", 0),
        (None, 0),
        (True, 0),
    ],
)
def test_normalize_progress(raw, expected) -> None:
    assert normalize_progress(raw) == expected


def test_map_record_reads_list_fields() -> None:
    task = map_record(
        {
            "Id": 12,
            "TaskID": "T006",
            "Title": "SKU Remediation",
            "Phase": "Phase 1",
            "Workstream": "SKU Remediation",
            "Status": "In Progress",
            "PercentComplete": 0.45,
            "DueDate": "2026-01-16T08:00:00Z",
            "Owner": {"Title": "Jane Doe"},
        }
    )

    assert task is not None
    assert task.id == "T006"
    assert task.status == "in-progress"
    assert task.progress == 45
    assert task.due_date == "2026-01-16"
    assert task.owner == "Jane Doe"


def test_blocked_flag_overrides_open_status_only() -> None:
    assert map_record({"Id": 1, "Status": "In Progress", "IsBlocked": True}).status == "blocked"
    assert map_record({"Id": 2, "Status": "Completed", "IsBlocked": True}).status == "completed"


def test_records_without_identifier_are_skipped(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="taskboard.board.mapping"):
        tasks = map_records([{"Title": "orphan"}, {"Id": 3, "Title": "ok"}])

    assert [t.id for t in tasks] == ["3"]
    assert any("Skipped 1" in r.getMessage() for r in caplog.records)


def test_completed_record_with_integer_fraction_is_full_progress() -> None:
    task = map_record(json.loads('{"Id": 7, "Status": "Completed", "PercentComplete": 1}'))

    assert task is not None
    assert task.status == "completed"
    assert task.progress == 100
