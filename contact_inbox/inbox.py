"""Append-only inbox file — one JSON object per line."""

import dataclasses
import json
import os
import threading
from datetime import datetime, timezone

from contact_inbox.errors import PersistenceError
from contact_inbox.models import SubmissionRecord


class InboxWriter:
    """Appends submission records to a newline-delimited JSON file.

    The file is opened in append mode for every record and closed again, so
    existing content is never truncated. A lock serializes appends inside the
    process; O_APPEND keeps each line whole when several processes share the
    file.
    """

    def __init__(self, path: str, fsync: bool = True, time_func=None):
        self._path = path
        self._fsync = fsync
        self._time_func = time_func or (lambda: datetime.now(timezone.utc))
        self._lock = threading.Lock()

    @property
    def path(self) -> str:
        return self._path

    def append(self, record: SubmissionRecord) -> SubmissionRecord:
        """Stamp ``received_at`` and append the record as a single line.

        Returns the stamped record. Raises PersistenceError if the line could
        not be written.
        """
        with self._lock:
            stamped = dataclasses.replace(record, received_at=self._time_func())
            try:
                data = (json.dumps(stamped.to_dict(), ensure_ascii=False) + "\n").encode("utf-8")
            except (TypeError, ValueError) as exc:
                raise PersistenceError(f"Could not serialize submission: {exc}") from exc

            try:
                self._write(data)
            except OSError as exc:
                raise PersistenceError(
                    f"Could not append to {self._path}: {exc}"
                ) from exc
        return stamped

    def _write(self, data: bytes):
        directory = os.path.dirname(self._path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        fd = os.open(self._path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, 0o644)
        try:
            view = memoryview(data)
            while view:
                written = os.write(fd, view)
                view = view[written:]
            if self._fsync:
                os.fsync(fd)
        finally:
            os.close(fd)
