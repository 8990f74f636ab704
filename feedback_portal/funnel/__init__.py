from feedback_portal.funnel.review_funnel import FunnelError, FunnelResult, ReviewFunnel
from feedback_portal.funnel.sessions import FunnelSessionRegistry
from feedback_portal.funnel.state_machine import (
    FunnelState,
    FunnelStateMachine,
    FunnelTrigger,
    InvalidTransitionError,
)

__all__ = [
    "ReviewFunnel",
    "FunnelResult",
    "FunnelError",
    "FunnelSessionRegistry",
    "FunnelStateMachine",
    "FunnelState",
    "FunnelTrigger",
    "InvalidTransitionError",
]
