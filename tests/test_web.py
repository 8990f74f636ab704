"""End-to-end tests for the Flask pages and JSON API."""

import re

import pytest

from feedback_portal.store.feedback import TABLE as FEEDBACK_TABLE
from feedback_portal.store.review_intents import TABLE as INTENT_TABLE
from tests.conftest import CLIENT_ID, LONG_REVIEW, make_credential

SESSION_RE = re.compile(r'"session_id":\s*"(FUN-[0-9a-f]+)"')


def _start_session(client) -> str:
    page = client.get("/google-review")
    assert page.status_code == 200
    match = SESSION_RE.search(page.get_data(as_text=True))
    assert match, "session id not embedded in page"
    return match.group(1)


def _api(client, session_id, action, payload=None):
    return client.post(f"/api/google-review/{session_id}/{action}", json=payload or {})


@pytest.fixture
def session_id(client):
    return _start_session(client)


@pytest.fixture
def form_session(client, session_id):
    _api(client, session_id, "bridge", {"event": "loaded"})
    response = _api(client, session_id, "credential", {"credential": make_credential()})
    assert response.status_code == 200
    return session_id


class TestPages:
    def test_root_redirects_to_public_site(self, client):
        response = client.get("/")
        assert response.status_code == 302
        assert response.headers["Location"] == "https://www.cleaningprofessionals.com.au/"

    def test_health(self, client):
        body = client.get("/health").get_json()
        assert body["status"] == "healthy"
        assert body["store"] == "InMemoryStore"

    def test_feedback_page_prefills_customer(self, client):
        html = client.get("/feedback?booking=CP-1001").get_data(as_text=True)
        assert "Sam Lee" in html
        assert "sam@example.com" in html

    def test_feedback_page_without_match_still_renders(self, client):
        response = client.get("/feedback?booking=UNKNOWN")
        assert response.status_code == 200
        assert 'id="prefill-name"' not in response.get_data(as_text=True)

    def test_review_page_embeds_session(self, client):
        html = client.get("/google-review").get_data(as_text=True)
        assert SESSION_RE.search(html)
        assert "accounts.google.com/gsi/client" in html

    def test_each_page_load_starts_a_new_session(self, client):
        assert _start_session(client) != _start_session(client)

    def test_admin_page_renders(self, client):
        response = client.get("/google-review/admin")
        assert response.status_code == 200


class TestReviewFunnelApi:
    def test_snapshot_for_new_session(self, client, session_id):
        body = client.get(f"/api/google-review/{session_id}").get_json()
        assert body["session"]["state"] == "welcome"
        assert body["session"]["bridge_state"] == "loading"

    def test_unknown_session_is_404(self, client):
        response = _api(client, "FUN-000000000000", "manual")
        assert response.status_code == 404
        assert "expired" in response.get_json()["message"]

    def test_bridge_loaded_returns_widget_plan(self, client, session_id):
        body = _api(client, session_id, "bridge", {"event": "loaded"}).get_json()
        assert body["success"]
        assert body["session"]["bridge_state"] == "ready"
        assert body["widget_plan"][0]["config"]["client_id"] == CLIENT_ID
        assert body["widget_plan"][1]["call"] == "renderButton"

    def test_unknown_bridge_event_is_400(self, client, session_id):
        assert _api(client, session_id, "bridge", {"event": "exploded"}).status_code == 400

    def test_credential_moves_to_form(self, client, form_session):
        session = client.get(f"/api/google-review/{form_session}").get_json()["session"]
        assert session["state"] == "form"
        assert session["draft"]["customer_email"] == "jane@example.com"

    def test_script_failure_then_manual_path(self, client, session_id):
        body = _api(client, session_id, "bridge", {"event": "failed"}).get_json()
        assert not body["success"]
        assert body["session"]["manual_available"]

        response = _api(client, session_id, "manual")
        assert response.status_code == 200
        assert response.get_json()["session"]["state"] == "form"

    def test_manual_before_failure_is_422(self, client, session_id):
        assert _api(client, session_id, "manual").status_code == 422

    def test_form_on_wrong_screen_is_409(self, client, session_id):
        response = _api(client, session_id, "form", {"rating": 5, "review_text": LONG_REVIEW})
        assert response.status_code == 409

    def test_malformed_form_payload_is_400(self, client, form_session):
        response = _api(client, form_session, "form", {"rating": "five"})
        assert response.status_code == 400

    def test_short_review_is_422(self, client, form_session):
        response = _api(client, form_session, "form", {"rating": 5, "review_text": "Nice"})
        assert response.status_code == 422
        assert "(4/50)" in response.get_json()["message"]

    def test_full_flow(self, client, form_session, booking_store):
        body = _api(client, form_session, "form", {"rating": 4, "review_text": LONG_REVIEW}).get_json()
        assert body["open_url"] == "https://g.page/r/CatIouiPpkIsEBM/review"
        assert body["session"]["current_location"] == "melbourne"

        assert _api(client, form_session, "complete", {"location_id": "melbourne"}).status_code == 200
        # repeated click for the same location
        repeat = _api(client, form_session, "complete", {"location_id": "melbourne"}).get_json()
        assert repeat["message"] == "Already recorded."

        _api(client, form_session, "skip", {"location_id": "brunswick"})
        final = _api(client, form_session, "complete", {"location_id": "epping"}).get_json()
        assert final["state"] == "complete"
        assert final["redirect_url"] == "https://www.cleaningprofessionals.com.au/"
        assert final["session"]["summary"]["skipped"] == ["Cleaning Professionals - Brunswick"]

        rows = booking_store.rows(INTENT_TABLE)
        assert len(rows) == 1
        assert rows[0]["rating"] == 4
        assert rows[0]["completed_locations"] == ["melbourne", "epping"]

    def test_store_failure_on_complete_is_422(self, client, form_session, booking_store):
        _api(client, form_session, "form", {"rating": 5, "review_text": LONG_REVIEW})
        booking_store.fail_next = "service unavailable"
        response = _api(client, form_session, "complete", {"location_id": "melbourne"})
        assert response.status_code == 422
        assert response.get_json()["session"]["current_location"] == "melbourne"


class TestFeedbackApi:
    def test_submit_feedback(self, client, booking_store):
        response = client.post("/api/feedback", json={
            "booking_number": "CP-1001",
            "feedback_option": "ok",
            "feedback": "Missed the oven.",
            "name": "Sam Lee",
            "email": "sam@example.com",
        })
        assert response.status_code == 200
        body = response.get_json()
        assert body["redirect_seconds"] == 5
        row = booking_store.rows(FEEDBACK_TABLE)[0]
        assert row["rating"] == 4
        assert row["feedback_option"] == "ok"
        assert row["booking_number"] == "CP-1001"

    def test_rating_override(self, client, booking_store):
        client.post("/api/feedback", json={"feedback_option": "great", "rating": 2})
        assert booking_store.rows(FEEDBACK_TABLE)[0]["rating"] == 2

    def test_missing_option_is_422(self, client, booking_store):
        response = client.post("/api/feedback", json={"feedback": "hello"})
        assert response.status_code == 422
        assert response.get_json()["message"] == "Please select a feedback option."
        assert booking_store.rows(FEEDBACK_TABLE) == []

    def test_unknown_option_is_400(self, client):
        assert client.post("/api/feedback", json={"feedback_option": "meh"}).status_code == 400

    def test_out_of_range_rating_is_400(self, client):
        response = client.post("/api/feedback", json={"feedback_option": "ok", "rating": 7})
        assert response.status_code == 400

    def test_store_failure_is_422(self, client, booking_store):
        booking_store.fail_next = "insert failed"
        response = client.post("/api/feedback", json={"feedback_option": "reclean"})
        assert response.status_code == 422
        assert response.get_json()["message"] == "insert failed"


class TestAdminApi:
    def test_reviews_and_stats(self, client, form_session):
        _api(client, form_session, "form", {"rating": 5, "review_text": LONG_REVIEW})
        _api(client, form_session, "complete")
        body = client.get("/api/admin/reviews").get_json()
        assert body["success"]
        assert body["stats"]["total"] == 1
        assert body["stats"]["partial_completion"] == 1
        assert body["rows"][0]["badge"] == "Partial"
        assert body["rows"][0]["customer_name"] == "Jane Doe"

    def test_fetch_failure_is_502_and_keeps_rows(self, client, form_session, booking_store):
        _api(client, form_session, "form", {"rating": 5, "review_text": LONG_REVIEW})
        client.get("/api/admin/reviews")
        booking_store.fail_next = "boom"
        response = client.get("/api/admin/reviews")
        assert response.status_code == 502
        body = response.get_json()
        assert body["message"] == "boom"
        assert len(body["rows"]) == 1

    def test_malformed_row_does_not_break_dashboard(self, client, booking_store):
        booking_store.rows(INTENT_TABLE).extend([
            {"id": "ok", "customer_name": None, "completed_locations": None, "rating": 5,
             "created_at": "2026-02-01T09:00:00+00:00"},
            {"id": "bad", "rating": 0, "created_at": "2026-02-02T09:00:00+00:00"},
        ])
        response = client.get("/api/admin/reviews")
        assert response.status_code == 200
        assert [row["id"] for row in response.get_json()["rows"]] == ["ok"]
        assert client.get("/google-review/admin").status_code == 200
