from pathlib import Path

from streamlit.testing.v1 import AppTest

from conftest import scan_payload

DASHBOARD = str(Path(__file__).resolve().parent.parent / "ui" / "dashboard.py")


def run_dashboard(client):
    """Run the dashboard script against the in-process API."""
    at = AppTest.from_file(DASHBOARD, default_timeout=30)
    at.session_state["http"] = client
    at.session_state["api_url"] = "http://testserver"
    at.session_state["authenticated"] = True
    return at.run()


def button(at, label):
    return next(b for b in at.button if b.label == label)


def test_signed_out_dashboard_asks_for_passcode(client):
    at = AppTest.from_file(DASHBOARD, default_timeout=30)
    at.session_state["http"] = client
    at.session_state["api_url"] = "http://testserver"
    at.run()
    assert not at.exception
    assert "Sign in with your passcode to continue." in [i.value for i in at.info]


def test_track_application_disables_button(authed):
    job = authed.post("/api/jobs/scan", json=scan_payload()).json()["job"]
    at = run_dashboard(authed)
    assert not at.exception
    assert button(at, "📌 Track Application").disabled is False

    button(at, "📌 Track Application").click().run()

    assert not at.exception
    assert authed.get(f"/api/jobs/{job['id']}").json()["application"]["stage"] == "APPLIED"
    assert button(at, "📌 Track Application").disabled is True
