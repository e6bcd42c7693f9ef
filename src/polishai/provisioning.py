"""Stripe webhook verification and license provisioning.

Handles:
  - checkout.session.completed -> create the buyer's license, or reactivate it
    when one already exists for the email

Other event types are acknowledged without action.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

import stripe

from polishai.config import ConfigurationError
from polishai.licenses import DuplicateLicenseError, LicenseStore, LicenseStoreError
from polishai.utils import mask_email, normalize_email

logger = logging.getLogger("polishai.webhook")

CHECKOUT_COMPLETED = "checkout.session.completed"


class MissingEmailError(ValueError):
    """A completed checkout carried no customer email."""


class LicenseCreateError(LicenseStoreError):
    """Inserting a new license failed for a reason other than a duplicate."""


@dataclass
class ProvisionResult:
    email: str
    action: str  # "created", "reactivated" or "unchanged"


class WebhookVerifier:
    """Checks the Stripe-Signature header before anything reads the payload."""

    def __init__(self, secret: str):
        self._secret = secret

    def verify(self, payload: bytes, sig_header: str | None) -> dict[str, Any]:
        """Return the decoded event, or raise.

        Raises stripe.SignatureVerificationError for a bad or missing signature
        and ValueError for a payload that is not UTF-8 JSON.
        """
        if not self._secret:
            raise ConfigurationError("Missing required settings: STRIPE_WEBHOOK_SECRET")
        text = payload.decode("utf-8")
        stripe.WebhookSignature.verify_header(
            text, sig_header or "", self._secret, tolerance=stripe.Webhook.DEFAULT_TOLERANCE
        )
        event = json.loads(text)
        if not isinstance(event, dict):
            raise ValueError("Event payload must be a JSON object")
        return event


def session_email(session: dict[str, Any]) -> str | None:
    """Payer email: customer_details first, then the top-level field."""
    details = session.get("customer_details") or {}
    return details.get("email") or session.get("customer_email")


class LicenseProvisioner:
    def __init__(self, store: LicenseStore):
        self._store = store

    def handle_event(self, event: dict[str, Any]) -> ProvisionResult | None:
        """Apply an event. Returns None for event types that need no action."""
        event_type = event.get("type", "")
        if event_type != CHECKOUT_COMPLETED:
            logger.info("Ignoring webhook event type %s", event_type)
            return None
        session = (event.get("data") or {}).get("object") or {}
        return self.provision(session)

    def provision(self, session: dict[str, Any]) -> ProvisionResult:
        email = normalize_email(session_email(session) or "")
        if not email:
            raise MissingEmailError("No customer email in checkout session")

        session_id = session.get("id")
        existing = self._store.find(email)

        if existing is None:
            try:
                self._store.create(
                    email,
                    session_id=session_id,
                    customer_id=session.get("customer"),
                    amount_paid=session.get("amount_total"),
                    currency=session.get("currency"),
                )
                return ProvisionResult(email, "created")
            except DuplicateLicenseError as exc:
                # Concurrent delivery inserted the row after our existence check
                logger.warning("License for %s already inserted, reactivating", mask_email(email))
                existing = self._store.find(email)
                if existing is None:
                    raise LicenseCreateError(exc.message, exc.code) from exc
            except LicenseStoreError as exc:
                raise LicenseCreateError(exc.message, exc.code) from exc

        if existing.active and existing.stripe_session_id == session_id:
            logger.info("Checkout %s already applied for %s", session_id, mask_email(email))
            return ProvisionResult(email, "unchanged")

        self._store.reactivate(existing.id, session_id)
        return ProvisionResult(email, "reactivated")
