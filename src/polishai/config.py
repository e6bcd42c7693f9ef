"""Constants and runtime configuration for PolishAI."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

# Product identifier shared by every license row this app owns
PRODUCT = "polishai"
DEFAULT_LICENSES_TABLE = "licenses"

# Language model defaults
DEFAULT_MODEL = "claude-3-haiku-20240307"
MAX_OUTPUT_TOKENS = 2048
MAX_TEXT_LENGTH = 5000  # longer input is truncated, not rejected

# HTTP limits
MAX_BODY_SIZE = 1_000_000  # 1MB

# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


class ConfigurationError(RuntimeError):
    """A required setting is missing from the environment."""


@dataclass(frozen=True)
class Settings:
    supabase_url: str = ""
    supabase_service_key: str = ""
    anthropic_api_key: str = ""
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    licenses_table: str = DEFAULT_LICENSES_TABLE
    model: str = DEFAULT_MODEL
    environment: str = "production"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        return cls(
            supabase_url=env.get("SUPABASE_URL", "").strip(),
            supabase_service_key=env.get("SUPABASE_SERVICE_KEY", "").strip(),
            anthropic_api_key=env.get("ANTHROPIC_API_KEY", "").strip(),
            stripe_secret_key=env.get("STRIPE_SECRET_KEY", "").strip(),
            stripe_webhook_secret=env.get("STRIPE_WEBHOOK_SECRET", "").strip(),
            licenses_table=env.get("LICENSES_TABLE", "").strip() or DEFAULT_LICENSES_TABLE,
            model=env.get("POLISH_MODEL", "").strip() or DEFAULT_MODEL,
            environment=env.get("VERCEL_ENV", "").strip() or "production",
            log_level=env.get("LOG_LEVEL", "").strip().upper() or "INFO",
        )

    @property
    def debug(self) -> bool:
        """Error details are only exposed to callers in development."""
        return self.environment == "development"

    def require(self, *names: str) -> None:
        """Raise ConfigurationError naming every unset attribute in ``names``."""
        missing = [name for name in names if not getattr(self, name)]
        if missing:
            env_names = ", ".join(name.upper() for name in missing)
            raise ConfigurationError(f"Missing required settings: {env_names}")
