"""
Tests for sync data models and the operation log.
"""

from datetime import datetime

import pytest
from pydantic import ValidationError

from gitix.core.status import FileStatusKind, FileStatusRecord, format_file_size
from gitix.core.sync import (
    OperationLog,
    OperationOutcome,
    RemoteStatus,
    SyncOperation,
    SyncOperationKind,
)


def make_op(message: str, outcome: OperationOutcome = OperationOutcome.SUCCESS) -> SyncOperation:
    return SyncOperation(kind=SyncOperationKind.FETCH, outcome=outcome, message=message)


class TestOperationLog:
    def test_newest_first(self) -> None:
        log = OperationLog()
        log.record(make_op("first"))
        log.record(make_op("second"))

        assert [op.message for op in log] == ["second", "first"]
        assert log.latest is not None
        assert log.latest.message == "second"

    def test_capped_at_ten(self) -> None:
        """Recording an eleventh operation drops the oldest one."""
        log = OperationLog()
        for i in range(11):
            log.record(make_op(f"op {i}"))

        assert len(log) == 10
        assert log.entries[0].message == "op 10"
        assert log.entries[-1].message == "op 1"

    def test_custom_cap(self) -> None:
        log = OperationLog(max_entries=2)
        for i in range(5):
            log.record(make_op(f"op {i}"))

        assert [op.message for op in log] == ["op 4", "op 3"]

    def test_empty_log(self) -> None:
        log = OperationLog()

        assert len(log) == 0
        assert log.latest is None
        assert log.entries == ()


class TestSyncOperation:
    def test_frozen(self) -> None:
        op = make_op("done")

        with pytest.raises(ValidationError):
            op.message = "changed"

    def test_succeeded(self) -> None:
        assert make_op("ok").succeeded
        assert not make_op("bad", OperationOutcome.ERROR).succeeded

    def test_timestamp_defaults_to_now(self) -> None:
        before = datetime.now()
        op = make_op("x")

        assert before <= op.timestamp <= datetime.now()

    def test_summary(self) -> None:
        op = make_op("Remote 'nope' is not configured", OperationOutcome.ERROR)

        assert op.summary() == "fetch error: Remote 'nope' is not configured"


class TestRemoteStatus:
    def test_up_to_date(self) -> None:
        assert RemoteStatus(name="origin").up_to_date
        assert not RemoteStatus(name="origin", ahead=1).up_to_date

    def test_counts_cannot_be_negative(self) -> None:
        with pytest.raises(ValidationError):
            RemoteStatus(name="origin", behind=-1)


class TestStatusPresentation:
    @pytest.mark.parametrize(
        ("kind", "symbol", "description"),
        [
            (FileStatusKind.MODIFIED, "M", "Modified"),
            (FileStatusKind.ADDED, "A", "New file"),
            (FileStatusKind.DELETED, "D", "Deleted"),
            (FileStatusKind.UNTRACKED, "?", "Untracked"),
            (FileStatusKind.RENAMED, "R", "Renamed"),
            (FileStatusKind.TYPE_CHANGED, "T", "Type changed"),
        ],
    )
    def test_symbol_and_description(self, kind: FileStatusKind, symbol: str, description: str) -> None:
        assert kind.symbol == symbol
        assert kind.description == description

    @pytest.mark.parametrize(
        ("size", "expected"),
        [
            (None, "-"),
            (0, "0 B"),
            (1023, "1023 B"),
            (1536, "1.5 KB"),
            (5 * 1024 * 1024, "5.0 MB"),
            (3 * 1024 * 1024 * 1024, "3.0 GB"),
        ],
    )
    def test_format_file_size(self, size: int | None, expected: str) -> None:
        assert format_file_size(size) == expected

    def test_record_is_frozen(self) -> None:
        record = FileStatusRecord(path="a.txt", kind=FileStatusKind.MODIFIED)

        with pytest.raises(ValidationError):
            record.staged = True
