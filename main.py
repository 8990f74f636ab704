"""
Feedback portal entry point.

Serves the feedback form, the Google review funnel and the review
dashboard. Without Supabase credentials the portal runs against an
in-memory store, which is handy for local development.

Usage:
    Serve:       python main.py
    Custom port: PORT=5000 python main.py
"""

import logging

from feedback_portal.config import settings
from feedback_portal.web.app import create_app

logger = logging.getLogger(__name__)

app = create_app()


def _run_server() -> None:
    """Start the Flask development server."""
    logger.info("Serving %s on port %d", settings.business.name, settings.web.port)
    app.run(host=settings.web.host, port=settings.web.port)


if __name__ == "__main__":
    _run_server()
