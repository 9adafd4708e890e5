"""Submission path — validate, append to the inbox, then attempt the email relay."""

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout

from contact_inbox.config import Config
from contact_inbox.errors import RelayError
from contact_inbox.inbox import InboxWriter
from contact_inbox.models import Outcome, RequestContext, SubmissionRecord
from contact_inbox.relay import NOT_CONFIGURED, build_relay
from contact_inbox.validation import SubmissionValidator

logger = logging.getLogger(__name__)

RELAY_SENT = "sent"
RELAY_FAILED = "relay failed"
RELAY_TIMED_OUT = "relay timed out"


class SubmissionHandler:
    """Accepts contact submissions.

    Persistence is the only fatal step: ValidationError and PersistenceError
    propagate to the caller, while relay problems are logged and reported in
    the returned Outcome.
    """

    def __init__(self, writer: InboxWriter, relay, relay_timeout: float = 10.0,
                 validator: SubmissionValidator = None, relay_workers: int = 4):
        self._writer = writer
        self._relay = relay
        self._relay_timeout = relay_timeout
        self._validator = validator or SubmissionValidator()
        self._executor = None
        if relay.enabled:
            self._executor = ThreadPoolExecutor(
                max_workers=relay_workers, thread_name_prefix="relay",
            )

    @classmethod
    def from_config(cls, config: Config) -> "SubmissionHandler":
        writer = InboxWriter(config.inbox_path, fsync=config.inbox_fsync)
        return cls(writer, build_relay(config), config.relay_timeout_seconds)

    @property
    def relay_enabled(self) -> bool:
        return bool(self._relay.enabled)

    def submit(self, payload, context: RequestContext = None) -> Outcome:
        context = context or RequestContext()
        fields = self._validator.validate(payload)

        record = SubmissionRecord(
            user_agent=context.user_agent,
            source_address=context.source_address,
            **fields,
        )
        stamped = self._writer.append(record)

        relayed, note = self._relay_submission(stamped)
        logger.info(
            "Accepted submission from %s (relay: %s)", stamped.email, note,
        )
        return Outcome(accepted=True, relayed=relayed, relay_note=note)

    def _relay_submission(self, record: SubmissionRecord):
        if not self._relay.enabled:
            return False, NOT_CONFIGURED

        future = self._executor.submit(self._relay.send, record)
        try:
            future.result(timeout=self._relay_timeout)
        except FutureTimeout:
            future.cancel()
            logger.warning(
                "Email relay timed out after %.1fs for submission from %s "
                "(saved to inbox)", self._relay_timeout, record.email,
            )
            return False, RELAY_TIMED_OUT
        except RelayError as exc:
            logger.warning(
                "Email relay failed for submission from %s (saved to inbox): %s",
                record.email, exc,
            )
            return False, RELAY_FAILED
        except Exception:
            logger.warning(
                "Email relay raised unexpectedly for submission from %s "
                "(saved to inbox)", record.email, exc_info=True,
            )
            return False, RELAY_FAILED
        return True, RELAY_SENT

    def close(self):
        """Release relay worker threads without waiting for in-flight sends.

        The workers are not daemon threads, so interpreter exit still joins a
        hung send; that wait is bounded by the SMTP socket timeout.
        """
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None
