"""
JSON endpoints called by the page scripts.

Every response carries ``success`` and ``message``. A failed user action
(validation or store error) is a 422 with the inline error to show; the
action can simply be retried.
"""

from typing import Any

from flask import Blueprint, abort, jsonify, request
from pydantic import BaseModel, ValidationError

from feedback_portal.funnel.review_funnel import FunnelError, ReviewFunnel
from feedback_portal.identity.widget import BrowserSignInWidget
from feedback_portal.intake import FeedbackIntake
from feedback_portal.logging_context import get_session_logger, set_session_id
from feedback_portal.schemas.feedback_schema import FeedbackSubmission
from feedback_portal.schemas.review_schema import LocationAction, ReviewFormSubmission
from feedback_portal.web.services import get_services

logger = get_session_logger(__name__)

api = Blueprint("api", __name__)


def _payload(model: type[BaseModel]) -> Any:
    try:
        return model.model_validate(request.get_json(silent=True) or {})
    except ValidationError as e:
        abort(_json_error(f"Invalid request: {e.errors()[0]['msg']}", 400))


def _json_error(message: str, status: int):
    response = jsonify({"success": False, "message": message})
    response.status_code = status
    return response


def _funnel(session_id: str) -> ReviewFunnel:
    funnel = get_services().sessions.get(session_id)
    if funnel is None:
        abort(_json_error("This review session has expired. Please reload the page.", 404))
    set_session_id(session_id)
    return funnel


def _respond(funnel: ReviewFunnel, result: dict[str, Any]):
    body = {**result, "session": funnel.snapshot()}
    response = jsonify(body)
    response.status_code = 200 if result.get("success") else 422
    return response


@api.errorhandler(FunnelError)
def handle_funnel_error(e: FunnelError):
    logger.warning("Rejected funnel action: %s", e)
    return _json_error(str(e), 409)


# ---------------------------------------------------------------------- #
# Review funnel
# ---------------------------------------------------------------------- #

@api.route("/google-review/<session_id>", methods=["GET"])
def funnel_snapshot(session_id: str):
    funnel = _funnel(session_id)
    return jsonify({"success": True, "message": "", "session": funnel.snapshot()})


@api.route("/google-review/<session_id>/bridge", methods=["POST"])
def funnel_bridge_event(session_id: str):
    """Sign-in script lifecycle reported by the page."""
    funnel = _funnel(session_id)
    data = request.get_json(silent=True) or {}
    try:
        funnel.bridge_event(data.get("event"), data.get("reason"))
    except ValueError as e:
        return _json_error(str(e), 400)

    bridge = funnel.bridge
    widget = bridge.widget
    plan = widget.plan() if isinstance(widget, BrowserSignInWidget) else []
    return jsonify({
        "success": not bridge.has_failed,
        "message": bridge.error or "",
        "widget_plan": plan,
        "session": funnel.snapshot(),
    })


@api.route("/google-review/<session_id>/credential", methods=["POST"])
def funnel_credential(session_id: str):
    funnel = _funnel(session_id)
    data = request.get_json(silent=True) or {}
    return _respond(funnel, funnel.sign_in(data.get("credential", "")))


@api.route("/google-review/<session_id>/manual", methods=["POST"])
def funnel_manual(session_id: str):
    funnel = _funnel(session_id)
    return _respond(funnel, funnel.start_manual())


@api.route("/google-review/<session_id>/form", methods=["POST"])
def funnel_form(session_id: str):
    funnel = _funnel(session_id)
    form = _payload(ReviewFormSubmission)
    return _respond(
        funnel,
        funnel.submit_form(form.rating, form.review_text, name=form.name, email=form.email),
    )


@api.route("/google-review/<session_id>/open", methods=["POST"])
def funnel_open(session_id: str):
    funnel = _funnel(session_id)
    return _respond(funnel, funnel.open_current())


@api.route("/google-review/<session_id>/complete", methods=["POST"])
def funnel_complete(session_id: str):
    funnel = _funnel(session_id)
    action = _payload(LocationAction)
    return _respond(funnel, funnel.mark_complete(action.location_id))


@api.route("/google-review/<session_id>/skip", methods=["POST"])
def funnel_skip(session_id: str):
    funnel = _funnel(session_id)
    action = _payload(LocationAction)
    return _respond(funnel, funnel.skip(action.location_id))


# ---------------------------------------------------------------------- #
# Feedback form
# ---------------------------------------------------------------------- #

@api.route("/feedback", methods=["POST"])
def submit_feedback():
    services = get_services()
    submission = _payload(FeedbackSubmission)

    intake = FeedbackIntake(
        services.store,
        submission.booking_number,
        config=services.config.feedback,
        redirect_url=services.config.business.public_site_url,
    )
    intake.name = submission.name
    intake.email = submission.email
    try:
        if submission.feedback_option:
            intake.select_option(submission.feedback_option)
            if submission.rating is not None:
                intake.set_rating(submission.rating)
    except ValueError as e:
        return _json_error(str(e), 400)
    intake.set_feedback(submission.feedback)

    result = intake.submit()
    response = jsonify(result)
    response.status_code = 200 if result["success"] else 422
    return response


# ---------------------------------------------------------------------- #
# Admin dashboard
# ---------------------------------------------------------------------- #

@api.route("/admin/reviews", methods=["GET"])
def admin_reviews():
    monitor = get_services().monitor
    refreshed = monitor.refresh()
    response = jsonify({
        "success": refreshed,
        "message": monitor.error or "",
        "stats": monitor.stats.to_dict(),
        "rows": monitor.rows(),
    })
    response.status_code = 200 if refreshed else 502
    return response
