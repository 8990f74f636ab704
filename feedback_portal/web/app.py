"""
Flask application factory.

Usage:
    app = create_app()
    app.run(host="0.0.0.0", port=8080)
"""

import logging
import time
from typing import Callable, Optional

from flask import Flask

from feedback_portal.admin.monitor import ReviewMonitor
from feedback_portal.config import AppConfig, settings
from feedback_portal.funnel.sessions import FunnelSessionRegistry
from feedback_portal.locations import all_configured
from feedback_portal.logging_context import clear_session_id
from feedback_portal.store.base import RecordStore
from feedback_portal.store.factory import create_store
from feedback_portal.web.api import api
from feedback_portal.web.pages import pages
from feedback_portal.web.services import EXTENSION_KEY, PortalServices

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[AppConfig] = None,
    store: Optional[RecordStore] = None,
    clock: Callable[[], float] = time.monotonic,
) -> Flask:
    config = config or settings
    store = store or create_store(config.store)

    app = Flask(__name__)
    app.config["SECRET_KEY"] = config.web.secret_key
    app.extensions[EXTENSION_KEY] = PortalServices(
        config=config,
        store=store,
        sessions=FunnelSessionRegistry(config.funnel.max_sessions),
        monitor=ReviewMonitor(store, limit=config.admin.recent_limit),
        clock=clock,
    )
    app.before_request(clear_session_id)
    app.register_blueprint(pages)
    app.register_blueprint(api, url_prefix="/api")

    if not all_configured():
        logger.warning("Review links are incomplete; some locations cannot be reviewed")
    return app
