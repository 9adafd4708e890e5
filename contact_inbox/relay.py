"""Email relay for accepted submissions — SMTP sender and disabled stand-in."""

import logging
import smtplib
from contextlib import contextmanager
from email.message import EmailMessage

from contact_inbox.config import Config
from contact_inbox.errors import RelayError
from contact_inbox.models import SubmissionRecord, format_timestamp

logger = logging.getLogger(__name__)

NOT_CONFIGURED = "not configured"


class DisabledRelay:
    """Selected when the SMTP settings are incomplete."""

    enabled = False

    def send(self, record: SubmissionRecord):
        raise RelayError(NOT_CONFIGURED)


class SmtpRelay:
    """Delivers each submission as a plain-text email over a fresh SMTP connection."""

    enabled = True

    def __init__(self, config: Config, smtp_factory=None, smtp_ssl_factory=None):
        self._config = config
        self._smtp_factory = smtp_factory or smtplib.SMTP
        self._smtp_ssl_factory = smtp_ssl_factory or smtplib.SMTP_SSL

    def send(self, record: SubmissionRecord):
        """Send ``record`` to the configured recipient. Raises RelayError on failure."""
        message = build_message(record, self._config)
        try:
            with self._connection() as smtp:
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise RelayError(f"{type(exc).__name__}: {exc}") from exc
        logger.info("Relayed submission from %s to %s", record.email, message["To"])

    @contextmanager
    def _connection(self):
        cfg = self._config
        timeout = cfg.relay_timeout_seconds
        if cfg.smtp_secure:
            server = self._smtp_ssl_factory(cfg.smtp_host, cfg.smtp_port, timeout=timeout)
        else:
            server = self._smtp_factory(cfg.smtp_host, cfg.smtp_port, timeout=timeout)
        try:
            if not cfg.smtp_secure:
                server.ehlo()
                if server.has_extn("starttls"):
                    server.starttls()
                    server.ehlo()
            server.login(cfg.smtp_user, cfg.smtp_pass)
            yield server
        finally:
            try:
                server.quit()
            except (smtplib.SMTPException, OSError):
                logger.debug("SMTP quit failed", exc_info=True)


def build_message(record: SubmissionRecord, config: Config) -> EmailMessage:
    received = format_timestamp(record.received_at) if record.received_at else ""
    body = "\n".join([
        "New contact form submission:",
        "",
        f"Name: {record.name}",
        f"Email: {record.email}",
        f"Phone: {record.phone}",
        f"Service: {record.service}",
        "",
        "Message:",
        record.message,
        "",
        f"Received: {received}",
    ])

    msg = EmailMessage()
    msg["Subject"] = f"{config.subject_prefix}: {_one_line(record.name) or 'New Message'}"
    msg["From"] = config.relay_sender
    msg["To"] = config.relay_recipient
    if record.email:
        msg["Reply-To"] = _one_line(record.email)
    msg.set_content(body)
    return msg


def _one_line(value: str) -> str:
    # header values may not contain line breaks
    return " ".join(value.split())


def build_relay(config: Config):
    """Return an SMTP relay when fully configured, otherwise a disabled one."""
    if config.relay_configured:
        return SmtpRelay(config)
    return DisabledRelay()
