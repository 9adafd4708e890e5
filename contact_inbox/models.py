"""Data types passed along the submission path."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


def format_timestamp(moment: datetime) -> str:
    """Render a datetime as UTC ISO-8601 with millisecond precision and a Z suffix."""
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class RequestContext:
    user_agent: str = ""
    source_address: str = ""


@dataclass(frozen=True)
class SubmissionRecord:
    """One contact attempt, as written to the inbox file.

    ``received_at`` stays None until the inbox writer stamps it.
    """

    name: str
    email: str
    message: str
    phone: str = ""
    service: str = ""
    user_agent: str = ""
    source_address: str = ""
    received_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Return the persisted representation.

        Key names are part of the on-disk format and must not change.
        """
        return {
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "service": self.service,
            "message": self.message,
            "userAgent": self.user_agent,
            "sourceAddress": self.source_address,
            "receivedAt": (
                format_timestamp(self.received_at)
                if self.received_at is not None else None
            ),
        }


@dataclass(frozen=True)
class Outcome:
    accepted: bool
    relayed: bool
    relay_note: str

    def to_dict(self) -> dict:
        return {
            "ok": self.accepted,
            "accepted": self.accepted,
            "relayed": self.relayed,
            "relayNote": self.relay_note,
        }
