"""Email normalization, masking, and timestamp helpers."""

from datetime import datetime, timezone


def normalize_email(email: str) -> str:
    """Canonical form used as the license identity key.

    " Jane@Example.COM " -> "jane@example.com"
    """
    return email.strip().lower()


def mask_email(email: str | None) -> str:
    """Mask email for logs: 'john@example.com' -> 'j***@example.com'."""
    if not email or "@" not in email:
        return ""
    local, domain = email.rsplit("@", 1)
    masked = local[0] + "***" if len(local) > 1 else "***"
    return f"{masked}@{domain}"


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
