"""Pydantic v2 models for request bodies, responses, and license rows."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, StrictStr, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from polishai.modes import Mode
from polishai.utils import normalize_email


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# -- Requests -----------------------------------------------------------------


class LicenseCheckRequest(BaseModel):
    email: StrictStr

    @field_validator("email")
    @classmethod
    def email_normalized(cls, v: str) -> str:
        v = normalize_email(v)
        if not v:
            msg = "email must not be blank"
            raise ValueError(msg)
        return v


class PolishRequest(CamelModel):
    text: StrictStr
    mode: Mode
    custom_prompt: StrictStr | None = None

    @field_validator("text")
    @classmethod
    def text_not_empty(cls, v: str) -> str:
        if not v:
            msg = "text must not be empty"
            raise ValueError(msg)
        return v


def first_invalid_field(exc: ValidationError, fields: tuple[str, ...]) -> str | None:
    """Return the first of ``fields`` (in priority order) that failed validation."""
    failed = {err["loc"][0] for err in exc.errors() if err["loc"]}
    for field in fields:
        if field in failed:
            return field
    return None


# -- Responses ----------------------------------------------------------------


class LicenseCheckResponse(CamelModel):
    valid: bool
    email: str
    created_at: str | None = None


class PolishResponse(CamelModel):
    success: bool = True
    polished: str
    mode: Mode
    input_length: int
    output_length: int


class WebhookResponse(CamelModel):
    received: bool = True
    email: str | None = None


# -- Store rows ---------------------------------------------------------------


class LicenseRecord(BaseModel):
    """A row of the licenses table. Unknown columns are ignored."""

    model_config = ConfigDict(extra="ignore")

    id: int | str
    email: str
    product: str
    active: bool = False
    created_at: str | None = None
    updated_at: str | None = None
    last_verified: str | None = None
    stripe_session_id: str | None = None
    stripe_customer_id: str | None = None
    amount_paid: int | None = None
    currency: str | None = None
