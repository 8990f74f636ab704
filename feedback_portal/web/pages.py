"""HTML pages."""

import logging

from flask import Blueprint, jsonify, redirect, render_template, request

from feedback_portal.intake import FEEDBACK_OPTIONS, FeedbackIntake
from feedback_portal.locations import list_locations
from feedback_portal.logging_context import set_session_id
from feedback_portal.web.services import get_services

logger = logging.getLogger(__name__)

pages = Blueprint("pages", __name__)


@pages.route("/")
def home():
    """The portal has no home page of its own."""
    return redirect(get_services().config.business.public_site_url)


@pages.route("/feedback")
def feedback_page():
    services = get_services()
    booking_number = request.args.get("booking", "").strip()
    intake = FeedbackIntake(
        services.store,
        booking_number,
        config=services.config.feedback,
        redirect_url=services.config.business.public_site_url,
    )
    intake.prefill()
    return render_template(
        "feedback.html",
        business=services.config.business,
        booking_number=intake.booking_number,
        name=intake.name,
        email=intake.email,
        options=FEEDBACK_OPTIONS,
        redirect_seconds=services.config.feedback.redirect_seconds,
    )


@pages.route("/google-review")
def google_review_page():
    services = get_services()
    funnel = services.new_funnel()
    set_session_id(funnel.session_id)
    logger.info("Review funnel started")
    return render_template(
        "google_review.html",
        business=services.config.business,
        session=funnel.snapshot(),
        script_url=services.config.identity.script_url,
        timeout_seconds=services.config.identity.timeout_seconds,
    )


@pages.route("/google-review/admin")
def admin_page():
    services = get_services()
    monitor = services.monitor
    monitor.refresh()
    return render_template(
        "admin.html",
        business=services.config.business,
        stats=monitor.stats,
        rows=monitor.rows(),
        error=monitor.error,
        locations=list_locations(),
    )


@pages.route("/health")
def health():
    return jsonify({
        "status": "healthy",
        "service": "Feedback Portal",
        "store": type(get_services().store).__name__,
        "live_funnels": len(get_services().sessions),
    })
