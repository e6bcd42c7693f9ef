"""License persistence on a Supabase (PostgREST) table.

Every query is scoped to this app's ``PRODUCT`` since the table may be shared
with other products. PostgREST and transport failures are re-raised as
LicenseStoreError so callers never depend on the client library's exception types.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from polishai.config import DEFAULT_LICENSES_TABLE, PRODUCT, UNIQUE_VIOLATION
from polishai.schema import LicenseRecord
from polishai.utils import mask_email, utcnow_iso

logger = logging.getLogger("polishai.licenses")


class LicenseStoreError(Exception):
    """A query against the licenses table failed."""

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code

    @classmethod
    def from_api_error(cls, exc: APIError) -> LicenseStoreError:
        error_cls = DuplicateLicenseError if exc.code == UNIQUE_VIOLATION else cls
        return error_cls(exc.message or str(exc), exc.code)


class DuplicateLicenseError(LicenseStoreError):
    """Insert rejected by the unique (email, product) index."""


class LicenseStore:
    def __init__(self, client: Client, table: str = DEFAULT_LICENSES_TABLE):
        self._client = client
        self._table_name = table

    def _table(self):
        return self._client.table(self._table_name)

    def _execute(self, query) -> list[dict[str, Any]]:
        try:
            result = query.execute()
        except APIError as exc:
            raise LicenseStoreError.from_api_error(exc) from exc
        except httpx.HTTPError as exc:
            raise LicenseStoreError(str(exc) or type(exc).__name__) from exc
        return result.data or []

    def find_active(self, email: str) -> LicenseRecord | None:
        """Return the active license for a normalized email, if any."""
        rows = self._execute(
            self._table()
            .select("*")
            .eq("email", email)
            .eq("product", PRODUCT)
            .eq("active", True)
            .limit(1)
        )
        return LicenseRecord.model_validate(rows[0]) if rows else None

    def find(self, email: str) -> LicenseRecord | None:
        """Return the license for a normalized email regardless of status."""
        rows = self._execute(
            self._table().select("*").eq("email", email).eq("product", PRODUCT).limit(1)
        )
        return LicenseRecord.model_validate(rows[0]) if rows else None

    def touch_verified(self, license_id: int | str) -> None:
        self._execute(self._table().update({"last_verified": utcnow_iso()}).eq("id", license_id))

    def reactivate(self, license_id: int | str, session_id: str | None) -> None:
        self._execute(
            self._table()
            .update({"active": True, "updated_at": utcnow_iso(), "stripe_session_id": session_id})
            .eq("id", license_id)
        )
        logger.info("Reactivated license %s", license_id)

    def create(
        self,
        email: str,
        *,
        session_id: str | None,
        customer_id: str | None,
        amount_paid: int | None,
        currency: str | None,
    ) -> LicenseRecord | None:
        """Insert a new active license.

        Raises DuplicateLicenseError when a row for (email, product) already
        exists; the caller decides whether that is a conflict or a race.
        """
        now = utcnow_iso()
        rows = self._execute(
            self._table().insert(
                {
                    "email": email,
                    "product": PRODUCT,
                    "active": True,
                    "stripe_session_id": session_id,
                    "stripe_customer_id": customer_id,
                    "amount_paid": amount_paid,
                    "currency": currency,
                    "created_at": now,
                    "updated_at": now,
                }
            )
        )
        logger.info("Created license for %s", mask_email(email))
        return LicenseRecord.model_validate(rows[0]) if rows else None
