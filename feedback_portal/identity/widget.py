"""
Google Identity Services widget seam.

``SignInWidget`` mirrors the three ``google.accounts.id`` calls the portal
makes. In production the widget lives in the browser, so
``BrowserSignInWidget`` records each call as a JSON step that the page
script replays against the real API once the GSI script has loaded.
"""

from typing import Any, Callable, Optional, Protocol

CredentialCallback = Callable[[str], Any]


class SignInWidget(Protocol):
    def initialize(self, client_id: str, callback: CredentialCallback) -> None: ...

    def prompt(self) -> None: ...

    def render_button(self, target: str, options: dict[str, Any]) -> None: ...


class BrowserSignInWidget:
    """Collects widget calls into a plan for the page script."""

    def __init__(self) -> None:
        self._steps: list[dict[str, Any]] = []
        self.callback: Optional[CredentialCallback] = None

    def initialize(self, client_id: str, callback: CredentialCallback) -> None:
        self.callback = callback
        self._steps.append({
            "call": "initialize",
            "config": {
                "client_id": client_id,
                "auto_select": False,
                "cancel_on_tap_outside": False,
            },
        })

    def prompt(self) -> None:
        self._steps.append({"call": "prompt"})

    def render_button(self, target: str, options: dict[str, Any]) -> None:
        self._steps.append({"call": "renderButton", "target": target, "options": dict(options)})

    def plan(self) -> list[dict[str, Any]]:
        return [dict(step) for step in self._steps]
