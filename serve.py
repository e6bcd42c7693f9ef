"""Local development server for the PolishAI API.

Serves the same endpoints the Vercel functions under api/ expose:
- POST /api/check-license: Report whether an email holds an active license
- POST /api/polish: Transform text with the language model
- POST /api/webhook: Stripe webhook (license provisioning)

Configuration is read from the environment, as on Vercel. VERCEL_ENV defaults
to "development" here so error details are included in 500 responses.
"""

import logging
import os
import sys
from http.server import HTTPServer
from urllib.parse import urlsplit

from polishai.config import Settings
from polishai.endpoints import check_license, polish, stripe_webhook
from polishai.services import Services
from server_utils import EndpointHandler, json_error

logger = logging.getLogger(__name__)

ROUTES = {
    "/api/check-license": check_license,
    "/api/polish": polish,
    "/api/webhook": stripe_webhook,
}


class DevServerHandler(EndpointHandler):
    """Routes /api/* paths to the endpoint functions."""

    services: Services | None = None

    def _dispatch(self):
        if urlsplit(self.path).path not in ROUTES:
            json_error(self, "Not Found", 404)
            return
        super()._dispatch()

    def handle_api(self, request):
        endpoint = ROUTES[urlsplit(self.path).path]
        return endpoint(request, self.services)


def main():
    port = int(sys.argv[1]) if len(sys.argv) > 1 else 8042
    os.environ.setdefault("VERCEL_ENV", "development")
    settings = Settings.from_env()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="[serve] %(levelname)s %(name)s: %(message)s",
    )

    DevServerHandler.services = Services(settings)
    server = HTTPServer(("127.0.0.1", port), DevServerHandler)
    print(f"PolishAI API on http://127.0.0.1:{port}")
    for path in ROUTES:
        print(f"  POST {path}")
    print(f"Licenses table: {settings.licenses_table}")
    print(f"Model:          {settings.model}")
    print("Press Ctrl+C to stop\n")

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\nShutting down.")
    finally:
        server.server_close()


if __name__ == "__main__":
    main()
