"""E2E smoke test — hits a running server and checks the main user flow.

Set ENGLISHMATE_URL to point at the server; skipped otherwise.
"""
import os
import pytest
import requests

BASE = os.getenv("ENGLISHMATE_URL")

pytestmark = pytest.mark.skipif(not BASE, reason="ENGLISHMATE_URL not set")


def test_root_redirects_to_landing():
    r = requests.get(f"{BASE}/", allow_redirects=False)
    assert r.status_code in (302, 307)
    assert r.headers["Location"].endswith("/landing.html")


def test_health():
    r = requests.get(f"{BASE}/api/health")
    assert r.status_code == 200
    d = r.json()
    assert d["status"] in ("ok", "degraded")
    assert "sessions" in d


def test_translate():
    r = requests.post(f"{BASE}/api/translate", json={"text": "Hello", "targetLang": "bn"}, timeout=60)
    assert r.status_code == 200
    assert isinstance(r.json()["translatedText"], str)


def test_translate_rejects_get():
    r = requests.get(f"{BASE}/api/translate")
    assert r.status_code == 405


def test_vocabulary_flow():
    s = requests.Session()
    r = s.post(f"{BASE}/api/session")
    s.headers["X-Session-Id"] = r.headers["X-Session-Id"]

    r = s.post(f"{BASE}/api/view", json={"view": "vocabulary"})
    assert r.status_code == 200
    lessons = r.json()["page"]["items"]
    assert len(lessons) == 3

    r = s.post(f"{BASE}/api/lessons/select", json={"id": lessons[0]["id"]}, timeout=60)
    assert r.status_code == 200
    assert r.json()["translated"]
