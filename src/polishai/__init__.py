"""PolishAI API: license checks, text polishing, and Stripe license provisioning."""

__version__ = "0.1.0"
