"""Shared state for PolishAI API endpoints.

Holds the process-wide Services instance so warm invocations reuse their
Supabase and Anthropic clients. Prefixed with _ so Vercel does NOT expose it
as a route.
"""

import logging

from polishai.config import Settings
from polishai.services import Services

_services = None


def get_services() -> Services:
    """Build Services from the environment on first use."""
    global _services
    if _services is None:
        settings = Settings.from_env()
        logging.basicConfig(
            level=getattr(logging, settings.log_level, logging.INFO),
            format="%(levelname)s %(name)s: %(message)s",
        )
        _services = Services(settings)
    return _services
