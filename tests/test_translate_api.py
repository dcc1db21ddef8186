"""Tests for the translation relay."""
import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from translate_routes import router as translate_router


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(translate_router)
    with TestClient(app) as test_client:
        yield test_client


def test_translate_success(client, mock_upstream):
    seen = {}

    def handler(request: httpx.Request):
        seen["method"] = request.method
        seen["q"] = request.url.params["q"]
        seen["langpair"] = request.url.params["langpair"]
        return httpx.Response(200, json={"responseData": {"translatedText": "হ্যালো"}})

    mock_upstream(handler)
    r = client.post("/api/translate", json={"text": "Hello", "targetLang": "bn"})
    assert r.status_code == 200
    assert r.json() == {"translatedText": "হ্যালো"}
    assert seen == {"method": "GET", "q": "Hello", "langpair": "en|bn"}


def test_translate_encodes_text(client, mock_upstream):
    seen = {}

    def handler(request: httpx.Request):
        seen["q"] = request.url.params["q"]
        return httpx.Response(200, json={"responseData": {"translatedText": "ok"}})

    mock_upstream(handler)
    text = "Fish & chips? 100% yes #1"
    r = client.post("/api/translate", json={"text": text, "targetLang": "bn"})
    assert r.status_code == 200
    assert seen["q"] == text


def test_translate_missing_target_lang(client, mock_upstream):
    mock_upstream(lambda request: pytest.fail("upstream must not be called"))
    r = client.post("/api/translate", json={"text": "Hello"})
    assert r.status_code == 400
    assert r.json()["error"].startswith("Missing parameters")


@pytest.mark.parametrize("body", [
    {"targetLang": "bn"},
    {"text": "", "targetLang": "bn"},
    {"text": "Hello", "targetLang": ""},
    {"text": 42, "targetLang": "bn"},
    ["Hello", "bn"],
])
def test_translate_invalid_bodies(client, body):
    r = client.post("/api/translate", json=body)
    assert r.status_code == 400


def test_translate_non_json_body(client):
    r = client.post("/api/translate", content=b"not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 400


@pytest.mark.parametrize("method", ["get", "put", "patch", "delete", "options"])
def test_translate_wrong_method(client, method):
    r = getattr(client, method)("/api/translate")
    assert r.status_code == 405
    assert r.json() == {"error": "Method not allowed"}


def test_translate_head_is_not_allowed(client):
    assert client.head("/api/translate").status_code == 405


def test_translate_upstream_error_status_is_relayed(client, mock_upstream):
    mock_upstream(lambda request: httpx.Response(503, text="down for maintenance"))
    r = client.post("/api/translate", json={"text": "Hello", "targetLang": "bn"})
    assert r.status_code == 503
    assert r.json() == {"error": "Translation API error: Service Unavailable"}


@pytest.mark.parametrize("payload", [
    {"responseData": {}},
    {"responseData": None},
    {"responseStatus": 200},
])
def test_translate_unexpected_format(client, mock_upstream, payload):
    mock_upstream(lambda request: httpx.Response(200, json=payload))
    r = client.post("/api/translate", json={"text": "Hello", "targetLang": "bn"})
    assert r.status_code == 500
    assert r.json() == {"error": "Unexpected translation response format."}


def test_translate_non_json_upstream(client, mock_upstream):
    mock_upstream(lambda request: httpx.Response(200, text="<html>oops</html>"))
    r = client.post("/api/translate", json={"text": "Hello", "targetLang": "bn"})
    assert r.status_code == 500
    assert r.json() == {"error": "Unexpected translation response format."}


def test_translate_transport_failure(client, mock_upstream):
    def handler(request: httpx.Request):
        raise httpx.ConnectError("connection refused", request=request)

    mock_upstream(handler)
    r = client.post("/api/translate", json={"text": "Hello", "targetLang": "bn"})
    assert r.status_code == 500
    assert r.json() == {"error": "Translation failed due to server error."}
