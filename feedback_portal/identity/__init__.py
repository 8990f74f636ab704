from feedback_portal.identity.bridge import BridgeState, IdentityBridge
from feedback_portal.identity.timer import FallbackTimer
from feedback_portal.identity.token import IdentityDecodeError, decode_credential
from feedback_portal.identity.widget import BrowserSignInWidget, SignInWidget

__all__ = [
    "IdentityBridge",
    "BridgeState",
    "FallbackTimer",
    "IdentityDecodeError",
    "decode_credential",
    "BrowserSignInWidget",
    "SignInWidget",
]
