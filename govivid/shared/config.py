"""
Service configuration

Reads every setting from environment variables once, at application start,
and exposes them as an immutable Settings object.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

DEFAULT_PORT = 6001
MAX_UPLOAD_BYTES = 5 * 1024 * 1024  # 5 MiB

# Any of these may hold the admin password; all configured values are accepted
ADMIN_SECRET_ENV_VARS = ("ADMIN_PASSWORD", "VITE_ADMIN_PASSWORD", "ADMIN_SECRET")


class ConfigError(RuntimeError):
    """Raised when a required SMTP_* setting is missing."""


def _env_flag(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(key: str) -> list[str]:
    value = os.getenv(key, "")
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class SmtpSettings:
    """Outbound mail settings. Every field is optional until the relay starts."""
    host: Optional[str] = None
    port: Optional[str] = None
    secure: Optional[str] = None
    user: Optional[str] = None
    password: Optional[str] = None
    mail_from: Optional[str] = None
    recipient: Optional[str] = None
    timeout: float = 10.0

    @classmethod
    def from_env(cls) -> "SmtpSettings":
        return cls(
            host=os.getenv("SMTP_HOST"),
            port=os.getenv("SMTP_PORT"),
            secure=os.getenv("SMTP_SECURE"),
            user=os.getenv("SMTP_USER"),
            password=os.getenv("SMTP_PASS"),
            mail_from=os.getenv("SMTP_FROM"),
            recipient=os.getenv("CONTACT_RECIPIENT"),
            timeout=float(os.getenv("SMTP_TIMEOUT", "10")),
        )

    @property
    def sender(self) -> Optional[str]:
        return self.mail_from or self.user

    @property
    def to(self) -> Optional[str]:
        return self.recipient or self.user


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    environment: str = "development"
    log_level: str = "INFO"
    projects_file: str = os.path.join("data", "projects.json")
    categories_file: str = os.path.join("data", "categories.json")
    upload_dir: str = "uploads"
    upload_base_url: str = "/uploads"
    max_upload_bytes: int = MAX_UPLOAD_BYTES
    admin_secrets: tuple[str, ...] = ()
    cors_origins: tuple[str, ...] = ("*",)
    seed_categories: bool = True
    smtp: SmtpSettings = field(default_factory=SmtpSettings)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment."""
        data_dir = os.getenv("DATA_DIR", "data")

        secrets = []
        for key in ADMIN_SECRET_ENV_VARS:
            value = (os.getenv(key) or "").strip()
            if value and value not in secrets:
                secrets.append(value)

        origins = _env_list("CORS_ORIGINS") or ["*"]
        frontend_url = os.getenv("FRONTEND_URL")
        if frontend_url and "*" not in origins:
            clean_url = frontend_url.rstrip("/")
            if clean_url not in origins:
                origins.append(clean_url)

        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", str(DEFAULT_PORT))),
            environment=os.getenv("ENVIRONMENT", "development"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            projects_file=os.getenv("PROJECTS_FILE", os.path.join(data_dir, "projects.json")),
            categories_file=os.getenv("CATEGORIES_FILE", os.path.join(data_dir, "categories.json")),
            upload_dir=os.getenv("UPLOAD_DIR", "uploads"),
            upload_base_url=os.getenv("UPLOAD_BASE_URL", "/uploads").rstrip("/"),
            admin_secrets=tuple(secrets),
            cors_origins=tuple(origins),
            seed_categories=_env_flag("SEED_CATEGORIES", True),
            smtp=SmtpSettings.from_env(),
        )
