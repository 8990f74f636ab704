"""Objects shared by every request: store, live funnels, dashboard monitor."""

import time
from dataclasses import dataclass
from typing import Callable

from flask import current_app

from feedback_portal.admin.monitor import ReviewMonitor
from feedback_portal.config import AppConfig
from feedback_portal.funnel.review_funnel import ReviewFunnel
from feedback_portal.funnel.sessions import FunnelSessionRegistry
from feedback_portal.identity.bridge import IdentityBridge
from feedback_portal.identity.widget import BrowserSignInWidget, SignInWidget
from feedback_portal.store.base import RecordStore

EXTENSION_KEY = "feedback_portal"


@dataclass
class PortalServices:
    config: AppConfig
    store: RecordStore
    sessions: FunnelSessionRegistry
    monitor: ReviewMonitor
    clock: Callable[[], float] = time.monotonic
    widget_factory: Callable[[], SignInWidget] = BrowserSignInWidget

    def new_funnel(self) -> ReviewFunnel:
        """Start a funnel for a fresh page load and begin loading sign-in."""
        bridge = IdentityBridge(
            self.widget_factory(),
            client_id=self.config.identity.client_id,
            timeout_seconds=self.config.identity.timeout_seconds,
            clock=self.clock,
        )
        funnel = ReviewFunnel(
            self.store,
            bridge,
            config=self.config.funnel,
            redirect_url=self.config.business.public_site_url,
            clock=self.clock,
        )
        bridge.load()
        self.sessions.add(funnel)
        return funnel


def get_services() -> PortalServices:
    return current_app.extensions[EXTENSION_KEY]
