"""
Application settings.

Values come from environment variables (a local .env file is loaded first)
and are validated once at import through a pydantic model.
"""

import os
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from utils.exceptions import ConfigError

load_dotenv()


class Settings(BaseModel):
    app_name: str = "MekarPad"
    environment: str = "development"
    database_url: str = "sqlite:///./mekarpad.db"
    secret_key: str = "dev-secret-change-me"
    log_level: str = "INFO"

    # OTP codes expire this many minutes after issuance (absolute, not sliding)
    otp_ttl_minutes: int = Field(15, gt=0)

    # "public": drafts are readable by anyone; "owner-only": drafts 404 for others
    draft_visibility: Literal["public", "owner-only"] = "public"

    mail_backend: Literal["console", "smtp", "http"] = "console"
    mail_from: str = "no-reply@mekarpad.local"
    smtp_host: str = "localhost"
    smtp_port: int = 25
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None
    mail_api_url: Optional[str] = None
    mail_api_token: Optional[str] = None

    upload_dir: str = "uploads"

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"


def _env(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return value.strip()


def load_settings() -> Settings:
    """Build Settings from the environment. Unset variables keep their defaults."""
    raw = {}
    for field_name in Settings.model_fields:
        value = _env(field_name.upper())
        if value is not None:
            raw[field_name] = value
    try:
        return Settings(**raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


settings = load_settings()
