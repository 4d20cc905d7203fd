import json

import pytest
from fastapi.testclient import TestClient

from config import SETTINGS

PASSCODE = "test-passcode"

ANALYSIS = {
    "overallScore": 60,
    "matchingSkills": ["Python"],
    "missingSkills": ["Kubernetes"],
    "experienceGap": "No container orchestration experience",
    "recommendations": ["Highlight AWS work", "Mention Docker deployments"],
}

BULLETS = [
    {"text": "Building Python services on AWS.", "relevance": 90, "targetRequirement": "Python"},
    {"text": "Packaging workloads with Docker.", "relevance": 70, "targetRequirement": "Kubernetes"},
]


@pytest.fixture
def fake_llm(monkeypatch):
    """Replace the provider call with a queue of canned answers (str or exception)."""
    responses = []
    calls = []

    def fake_complete(prompt, max_tokens=1024):
        calls.append({"prompt": prompt, "max_tokens": max_tokens})
        if not responses:
            raise AssertionError("unexpected provider call")
        r = responses.pop(0)
        if isinstance(r, Exception):
            raise r
        return r

    monkeypatch.setattr("matching.analysis.complete", fake_complete)
    monkeypatch.setattr("parsers.jd_extract.complete", fake_complete)
    fake_complete.responses = responses
    fake_complete.calls = calls
    return fake_complete


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(SETTINGS, "base_dir", str(tmp_path))
    monkeypatch.setattr(SETTINGS, "database_url", f"sqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setattr(SETTINGS, "passcode", PASSCODE)
    monkeypatch.setattr(SETTINGS, "jwt_secret", "test-secret")
    from app import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def authed(client):
    r = client.post("/api/auth/login", json={"passcode": PASSCODE})
    assert r.status_code == 200
    return client


def scan_payload(**overrides):
    payload = {
        "title": "Backend Engineer",
        "companyName": "Acme",
        "description": "Seeking backend engineer with Python and Kubernetes experience",
        "sourceUrl": "https://www.linkedin.com/jobs/view/1",
        "sourceSite": "linkedin",
    }
    payload.update(overrides)
    return payload


def analysis_json() -> str:
    return json.dumps(ANALYSIS)


def bullets_json() -> str:
    return json.dumps(BULLETS)
