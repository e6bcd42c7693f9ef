"""Process-wide service objects, built lazily from Settings.

The entry point (Vercel route module, dev server, CLI) owns one Services
instance and passes the pieces each endpoint needs. Clients are only created
on first use, so the polish route never needs Supabase credentials and the
license routes never need an Anthropic key.
"""

from __future__ import annotations

from functools import cached_property

import anthropic
import stripe
from supabase import Client, create_client

from polishai.config import Settings
from polishai.licenses import LicenseStore
from polishai.polisher import Polisher
from polishai.provisioning import LicenseProvisioner, WebhookVerifier


class Services:
    def __init__(
        self,
        settings: Settings,
        *,
        supabase_client: Client | None = None,
        anthropic_client: anthropic.Anthropic | None = None,
    ):
        self.settings = settings
        self._supabase_client = supabase_client
        self._anthropic_client = anthropic_client
        if settings.stripe_secret_key:
            stripe.api_key = settings.stripe_secret_key

    @cached_property
    def licenses(self) -> LicenseStore:
        client = self._supabase_client
        if client is None:
            self.settings.require("supabase_url", "supabase_service_key")
            client = create_client(self.settings.supabase_url, self.settings.supabase_service_key)
        return LicenseStore(client, self.settings.licenses_table)

    @cached_property
    def polisher(self) -> Polisher:
        client = self._anthropic_client
        if client is None:
            self.settings.require("anthropic_api_key")
            client = anthropic.Anthropic(api_key=self.settings.anthropic_api_key)
        return Polisher(client, model=self.settings.model)

    @cached_property
    def provisioner(self) -> LicenseProvisioner:
        return LicenseProvisioner(self.licenses)

    @cached_property
    def verifier(self) -> WebhookVerifier:
        return WebhookVerifier(self.settings.stripe_webhook_secret)
