"""Vercel Serverless Function: POST /api/webhook

Handles Stripe webhook events to provision PolishAI licenses.
Events handled:
  - checkout.session.completed -> create or reactivate the buyer's license
"""

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))
sys.path.insert(0, str(PROJECT_ROOT))
sys.path.insert(0, str(Path(__file__).parent))

from _shared import get_services  # noqa: E402
from polishai.endpoints import stripe_webhook  # noqa: E402
from server_utils import EndpointHandler  # noqa: E402


class handler(EndpointHandler):
    def handle_api(self, request):
        return stripe_webhook(request, get_services())
