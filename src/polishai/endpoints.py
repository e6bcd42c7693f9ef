"""Endpoint logic for the three API routes, independent of the HTTP server.

Each endpoint takes an ApiRequest plus the Services it calls and returns an
ApiResponse. Route modules under api/ and the dev server only translate
between BaseHTTPRequestHandler and these two dataclasses.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import stripe
from pydantic import ValidationError

from polishai.config import ConfigurationError
from polishai.licenses import LicenseStoreError
from polishai.polisher import RateLimitedError
from polishai.provisioning import LicenseCreateError, MissingEmailError
from polishai.schema import (
    LicenseCheckRequest,
    LicenseCheckResponse,
    PolishRequest,
    PolishResponse,
    WebhookResponse,
    first_invalid_field,
)
from polishai.services import Services
from polishai.utils import mask_email

logger = logging.getLogger("polishai.endpoints")

SIGNATURE_HEADER = "Stripe-Signature"

# Checked in this order so the reported error matches the first bad field
POLISH_FIELD_ERRORS = {
    "text": "Text is required",
    "mode": "Invalid mode",
    "customPrompt": "Invalid customPrompt",
}


@dataclass
class ApiRequest:
    method: str
    body: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None

    def json(self) -> Any:
        """Parse the body as JSON (empty body -> {}). Raises ValueError."""
        return json.loads(self.body) if self.body else {}


@dataclass
class ApiResponse:
    status: int
    payload: dict[str, Any] | None = None  # None -> empty body


def error_response(status: int, message: str) -> ApiResponse:
    return ApiResponse(status, {"error": message})


def _reject_method(request: ApiRequest, *, preflight: bool) -> ApiResponse | None:
    if preflight and request.method == "OPTIONS":
        return ApiResponse(200)
    if request.method != "POST":
        return error_response(405, "Method not allowed")
    return None


# -- /api/check-license ---------------------------------------------------------


def check_license(request: ApiRequest, services: Services) -> ApiResponse:
    """Report whether an email holds an active license."""
    rejected = _reject_method(request, preflight=True)
    if rejected:
        return rejected

    try:
        body = request.json()
    except ValueError:
        return error_response(400, "Invalid JSON")

    try:
        email = LicenseCheckRequest.model_validate(body).email
    except ValidationError:
        return error_response(400, "Email is required")

    try:
        store = services.licenses
        record = store.find_active(email)
    except LicenseStoreError as exc:
        logger.error("License lookup failed for %s: %s", mask_email(email), exc.message)
        return error_response(500, "Database error")
    except Exception:
        logger.exception("License check error")
        return error_response(500, "Failed to verify license")

    if record is None:
        return ApiResponse(200, LicenseCheckResponse(valid=False, email=email).to_json())

    try:
        store.touch_verified(record.id)
    except LicenseStoreError as exc:
        logger.warning("Could not update last_verified for license %s: %s", record.id, exc.message)

    return ApiResponse(
        200,
        LicenseCheckResponse(valid=True, email=email, created_at=record.created_at).to_json(),
    )


# -- /api/polish ----------------------------------------------------------------


def polish(request: ApiRequest, services: Services) -> ApiResponse:
    """Transform text with the model using the requested mode."""
    rejected = _reject_method(request, preflight=True)
    if rejected:
        return rejected

    try:
        body = request.json()
    except ValueError:
        return error_response(400, "Invalid JSON")

    try:
        data = PolishRequest.model_validate(body)
    except ValidationError as exc:
        bad_field = first_invalid_field(exc, tuple(POLISH_FIELD_ERRORS))
        return error_response(400, POLISH_FIELD_ERRORS.get(bad_field, "Text is required"))

    try:
        result = services.polisher.polish(data.text, data.mode, data.custom_prompt)
    except RateLimitedError:
        logger.warning("Model API rate limited the request")
        return error_response(429, "Rate limited. Please try again in a moment.")
    except Exception as exc:
        logger.exception("Polish API error")
        payload: dict[str, Any] = {"error": "Failed to process text. Please try again."}
        if services.settings.debug:
            payload["details"] = str(exc)
        return ApiResponse(500, payload)

    return ApiResponse(
        200,
        PolishResponse(
            polished=result.polished,
            mode=result.mode,
            input_length=result.input_length,
            output_length=result.output_length,
        ).to_json(),
    )


# -- /api/webhook ---------------------------------------------------------------


def stripe_webhook(request: ApiRequest, services: Services) -> ApiResponse:
    """Verify a Stripe event and provision the license it pays for.

    Unhandled event types still get a 2xx so Stripe does not redeliver them.
    """
    rejected = _reject_method(request, preflight=False)
    if rejected:
        return rejected

    try:
        event = services.verifier.verify(request.body, request.header(SIGNATURE_HEADER))
    except ConfigurationError:
        logger.error("Stripe webhook secret is not configured")
        return error_response(500, "Webhook not configured")
    except (stripe.SignatureVerificationError, ValueError) as exc:
        logger.warning("Webhook signature verification failed: %s", exc)
        return error_response(400, f"Webhook Error: {exc}")

    try:
        result = services.provisioner.handle_event(event)
    except MissingEmailError:
        logger.error("No customer email found in session")
        return error_response(400, "No customer email")
    except LicenseCreateError as exc:
        logger.error("Failed to create license: %s (code=%s)", exc.message, exc.code)
        return ApiResponse(
            500,
            {"error": "Failed to create license", "details": exc.message, "code": exc.code},
        )
    except Exception:
        logger.exception("Error processing webhook")
        return error_response(500, "Webhook processing failed")

    if result is None:
        return ApiResponse(200, WebhookResponse().to_json())

    logger.info("License %s for %s", result.action, mask_email(result.email))
    return ApiResponse(200, WebhookResponse(email=result.email).to_json())
