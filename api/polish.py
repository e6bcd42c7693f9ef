"""Vercel Serverless Function: POST /api/polish

Rewrites text in one of nine modes using Claude Haiku.
"""

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))
sys.path.insert(0, str(PROJECT_ROOT))
sys.path.insert(0, str(Path(__file__).parent))

from _shared import get_services  # noqa: E402
from polishai.endpoints import polish  # noqa: E402
from server_utils import EndpointHandler  # noqa: E402


class handler(EndpointHandler):
    def handle_api(self, request):
        return polish(request, get_services())
