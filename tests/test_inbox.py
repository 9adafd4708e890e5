"""Tests for the append-only inbox writer."""

import json
import os
import threading
from datetime import datetime, timezone

import pytest

from contact_inbox.errors import PersistenceError
from contact_inbox.inbox import InboxWriter
from contact_inbox.models import SubmissionRecord

from fakes import read_lines


def _record(**overrides):
    fields = dict(name="Jane", email="jane@x.com", message="Hi")
    fields.update(overrides)
    return SubmissionRecord(**fields)


class TestFileCreation:
    def test_creates_directory_and_file(self, tmp_path):
        path = str(tmp_path / "newdir" / "subdir" / "inbox.jsonl")
        InboxWriter(path, fsync=False).append(_record())
        assert os.path.isfile(path)

    def test_nothing_created_before_first_append(self, tmp_path):
        path = str(tmp_path / "lazy" / "inbox.jsonl")
        InboxWriter(path)
        assert not os.path.exists(os.path.dirname(path))


class TestContentFormat:
    def test_single_record_format(self, writer, inbox_path):
        writer.append(_record(phone="555", service="Design",
                              user_agent="pytest", source_address="10.0.0.1"))
        lines = read_lines(inbox_path)
        assert len(lines) == 1
        assert lines[0] == {
            "name": "Jane",
            "email": "jane@x.com",
            "phone": "555",
            "service": "Design",
            "message": "Hi",
            "userAgent": "pytest",
            "sourceAddress": "10.0.0.1",
            "receivedAt": lines[0]["receivedAt"],
        }

    def test_received_at_from_clock(self, inbox_path):
        moment = datetime(2026, 10, 19, 8, 15, 2, 123456, tzinfo=timezone.utc)
        writer = InboxWriter(inbox_path, fsync=False, time_func=lambda: moment)
        stamped = writer.append(_record())
        assert stamped.received_at == moment
        assert read_lines(inbox_path)[0]["receivedAt"] == "2026-10-19T08:15:02.123Z"

    def test_record_argument_is_not_mutated(self, writer):
        record = _record()
        writer.append(record)
        assert record.received_at is None

    def test_multiline_message_stays_on_one_line(self, writer, inbox_path):
        writer.append(_record(message="line one\nline two\r\nline three"))
        with open(inbox_path, encoding="utf-8") as f:
            raw = f.read()
        assert raw.count("\n") == 1
        assert json.loads(raw)["message"] == "line one\nline two\r\nline three"

    def test_unicode_is_kept_readable(self, writer, inbox_path):
        writer.append(_record(name="Zoë Ångström"))
        with open(inbox_path, encoding="utf-8") as f:
            assert "Zoë Ångström" in f.read()


class TestAppendOnly:
    def test_existing_content_preserved(self, writer, inbox_path):
        os.makedirs(os.path.dirname(inbox_path))
        with open(inbox_path, "w", encoding="utf-8") as f:
            f.write('{"name": "earlier"}\n')

        writer.append(_record())
        lines = read_lines(inbox_path)
        assert len(lines) == 2
        assert lines[0] == {"name": "earlier"}
        assert lines[1]["name"] == "Jane"

    def test_duplicates_are_not_collapsed(self, writer, inbox_path):
        writer.append(_record())
        writer.append(_record())
        assert len(read_lines(inbox_path)) == 2

    def test_new_writer_appends_to_same_file(self, inbox_path):
        InboxWriter(inbox_path, fsync=False).append(_record(name="first"))
        InboxWriter(inbox_path, fsync=False).append(_record(name="second"))
        assert [line["name"] for line in read_lines(inbox_path)] == ["first", "second"]

    def test_fsync_enabled(self, inbox_path):
        InboxWriter(inbox_path, fsync=True).append(_record())
        assert len(read_lines(inbox_path)) == 1


class TestConcurrentAppends:
    def test_concurrent_appends(self, writer, inbox_path):
        """5 threads x 50 records = 250 lines, each parseable."""
        errors = []

        def append_many(thread_id):
            for i in range(50):
                try:
                    writer.append(_record(message=f"thread-{thread_id}-msg-{i}" * 20))
                except Exception as e:
                    errors.append(e)

        threads = [threading.Thread(target=append_many, args=(t,)) for t in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        lines = read_lines(inbox_path)
        assert len(lines) == 250
        assert len({line["message"] for line in lines}) == 250


class TestPersistenceErrors:
    def test_path_is_a_directory(self, tmp_path):
        writer = InboxWriter(str(tmp_path), fsync=False)
        with pytest.raises(PersistenceError):
            writer.append(_record())

    def test_parent_is_a_file(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        writer = InboxWriter(str(blocker / "inbox.jsonl"), fsync=False)
        with pytest.raises(PersistenceError) as exc_info:
            writer.append(_record())
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_write_failure_is_wrapped(self, writer, monkeypatch):
        def fail(data):
            raise OSError(28, "No space left on device")

        monkeypatch.setattr(writer, "_write", fail)
        with pytest.raises(PersistenceError) as exc_info:
            writer.append(_record())
        assert "No space left" in str(exc_info.value)

    def test_unencodable_text_is_wrapped(self, writer, inbox_path):
        with pytest.raises(PersistenceError) as exc_info:
            writer.append(_record(message="Hi\udc80"))
        assert isinstance(exc_info.value.__cause__, UnicodeEncodeError)
        assert not os.path.exists(inbox_path)
