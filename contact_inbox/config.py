"""Configuration module — frozen dataclass loaded from environment variables."""

import os
from dataclasses import dataclass
from typing import Optional


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes")


def _parse_port(value: Optional[str]) -> Optional[int]:
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class Config:
    host: str = "0.0.0.0"
    port: int = 5000
    inbox_dir: str = "./data"
    inbox_filename: str = "inbox.jsonl"
    inbox_fsync: bool = True
    site_dir: Optional[str] = None
    cors_origins: str = "*"
    max_body_bytes: int = 1024 * 1024  # 1 MB
    log_level: str = "INFO"
    smtp_host: Optional[str] = None
    smtp_port: Optional[int] = None
    smtp_secure: bool = False
    smtp_user: Optional[str] = None
    smtp_pass: Optional[str] = None
    to_email: Optional[str] = None
    from_email: Optional[str] = None
    subject_prefix: str = "Website Contact"
    relay_timeout_seconds: float = 10.0

    @property
    def inbox_path(self) -> str:
        return os.path.join(self.inbox_dir, self.inbox_filename)

    @property
    def relay_configured(self) -> bool:
        """True when every setting needed to reach the mail relay is present."""
        return bool(
            self.smtp_host
            and self.smtp_port
            and self.smtp_user
            and self.smtp_pass
        )

    @property
    def relay_recipient(self) -> Optional[str]:
        return self.to_email or self.smtp_user

    @property
    def relay_sender(self) -> Optional[str]:
        return self.from_email or self.smtp_user


def load_config() -> Config:
    """Build Config from environment variables with sensible defaults."""
    port = os.environ.get("SERVER_PORT") or os.environ.get("PORT")
    return Config(
        host=os.environ.get("SERVER_HOST", Config.host),
        port=int(port) if port else Config.port,
        inbox_dir=os.environ.get("INBOX_DIR", Config.inbox_dir),
        inbox_filename=os.environ.get("INBOX_FILENAME", Config.inbox_filename),
        inbox_fsync=_parse_bool(os.environ.get("INBOX_FSYNC", "true")),
        site_dir=_optional(os.environ.get("SITE_DIR")),
        cors_origins=os.environ.get("CORS_ORIGINS", Config.cors_origins),
        max_body_bytes=int(os.environ.get("MAX_BODY_BYTES", Config.max_body_bytes)),
        log_level=os.environ.get("LOG_LEVEL", Config.log_level).upper(),
        smtp_host=_optional(os.environ.get("SMTP_HOST")),
        smtp_port=_parse_port(os.environ.get("SMTP_PORT")),
        smtp_secure=_parse_bool(os.environ.get("SMTP_SECURE", "false")),
        smtp_user=_optional(os.environ.get("SMTP_USER")),
        smtp_pass=os.environ.get("SMTP_PASS") or None,
        to_email=_optional(os.environ.get("TO_EMAIL")),
        from_email=_optional(os.environ.get("FROM_EMAIL")),
        subject_prefix=os.environ.get("EMAIL_SUBJECT_PREFIX", Config.subject_prefix),
        relay_timeout_seconds=float(
            os.environ.get("RELAY_TIMEOUT_SECONDS", Config.relay_timeout_seconds)
        ),
    )
