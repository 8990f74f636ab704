"""Shared test fixtures and helpers."""

import base64
import json
from dataclasses import replace
from typing import Any, Callable, Optional

import pytest

from feedback_portal.config import IdentityConfig, settings
from feedback_portal.funnel.review_funnel import ReviewFunnel
from feedback_portal.funnel.state_machine import FunnelStateMachine
from feedback_portal.identity.bridge import IdentityBridge
from feedback_portal.store.memory import InMemoryStore
from feedback_portal.web.app import create_app

CLIENT_ID = "1234567890-test.apps.googleusercontent.com"

JANE = {"name": "Jane Doe", "email": "jane@example.com", "picture": "https://x/y.png"}

LONG_REVIEW = (
    "The team did a fantastic end of lease clean, every room was spotless and on time."
)


class ManualClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeWidget:
    """Stands in for google.accounts.id."""

    def __init__(self, fail_on_initialize: bool = False) -> None:
        self.fail_on_initialize = fail_on_initialize
        self.client_id: Optional[str] = None
        self.callback: Optional[Callable[[str], Any]] = None
        self.rendered: list[tuple[str, dict]] = []
        self.prompted = 0

    def initialize(self, client_id: str, callback: Callable[[str], Any]) -> None:
        if self.fail_on_initialize:
            raise RuntimeError("google is not defined")
        self.client_id = client_id
        self.callback = callback

    def prompt(self) -> None:
        self.prompted += 1

    def render_button(self, target: str, options: dict) -> None:
        self.rendered.append((target, options))

    def sign_in(self, credential: str) -> Any:
        """Simulate the user finishing the Google popup."""
        assert self.callback is not None, "widget was never initialized"
        return self.callback(credential)


def b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def make_credential(payload: Optional[dict] = None) -> str:
    """Build a three-part token whose middle segment is Base64URL JSON."""
    header = b64url(json.dumps({"alg": "RS256", "typ": "JWT"}).encode())
    body = b64url(json.dumps(payload if payload is not None else JANE).encode("utf-8"))
    return f"{header}.{body}.signature"


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def widget():
    return FakeWidget()


@pytest.fixture
def bridge(widget, clock):
    return IdentityBridge(widget, client_id=CLIENT_ID, timeout_seconds=5.0, clock=clock)


@pytest.fixture
def state_machine():
    return FunnelStateMachine()


@pytest.fixture
def funnel(store, bridge, clock):
    return ReviewFunnel(
        store,
        bridge,
        config=settings.funnel,
        redirect_url="https://www.cleaningprofessionals.com.au/",
        clock=clock,
    )


@pytest.fixture
def signed_in_funnel(funnel, widget):
    """Funnel sitting on the form screen after a successful Google sign-in."""
    funnel.bridge.load()
    funnel.bridge.script_loaded()
    widget.sign_in(make_credential())
    return funnel


@pytest.fixture
def reviewing_funnel(signed_in_funnel):
    """Funnel that has saved its intent and is on the first location."""
    result = signed_in_funnel.submit_form(5, LONG_REVIEW)
    assert result["success"], result
    return signed_in_funnel


@pytest.fixture
def booking_store():
    """Store with one booking and its customer."""
    return InMemoryStore({
        "bookings": [{"id": "b-1", "booking_number": "CP-1001", "customer_id": "c-1"}],
        "customers": [{
            "id": "c-1",
            "booking_id": "b-1",
            "first_name": "Sam",
            "last_name": "Lee",
            "email": "sam@example.com",
            "phone": "0412345678",
        }],
    })


@pytest.fixture
def app(booking_store, clock):
    config = replace(
        settings,
        identity=IdentityConfig(client_id=CLIENT_ID, timeout_seconds=5.0),
    )
    application = create_app(config=config, store=booking_store, clock=clock)
    application.config["TESTING"] = True
    return application


@pytest.fixture
def client(app):
    return app.test_client()
