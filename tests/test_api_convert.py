import re
from html import unescape

from fastapi.testclient import TestClient

from tw2builder import llm_client
from tw2builder.errors import MALFORMED_RESPONSE_MESSAGE, MalformedResponseError, ServiceError
from tw2builder.main import app
from tw2builder.models import BuilderType, ConversionResult, OutputFormat

client = TestClient(app)

RESULT = ConversionResult(css="selector {\n  position: relative;\n}\nselector::before {\n  content: \"\";\n}", explanation="Mapped bg", notes=["Paste into Custom CSS"])


def _never_called(*args):
    raise AssertionError("convert must not be called")


def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_llm_status_shape(monkeypatch):
    monkeypatch.setattr(llm_client, "GEMINI_API_KEY", "")
    r = client.get("/llm/status")
    assert r.status_code == 200
    body = r.json()
    assert body["provider"] == "gemini"
    assert body["has_token"] is False
    assert client.get("/llm/probe").json()["ok"] is False


def test_convert_ok(monkeypatch):
    seen = {}

    def fake_convert(text, builder, fmt, compact):
        seen["args"] = (text, builder, fmt, compact)
        return ConversionResult(css="div{padding:1rem}", explanation="x", notes=["n"])

    monkeypatch.setattr(llm_client, "convert", fake_convert)
    r = client.post(
        "/convert",
        json={"input": '<div class="bg-red-500 p-4">Hi</div>', "builder": "generic", "format": "standard", "compact": False},
    )
    assert r.status_code == 200
    assert r.json() == {"css": "div{padding:1rem}", "explanation": "x", "notes": ["n"]}
    assert seen["args"] == ('<div class="bg-red-500 p-4">Hi</div>', BuilderType.GENERIC, OutputFormat.STANDARD, False)


def test_convert_empty_input_is_400(monkeypatch):
    monkeypatch.setattr(llm_client, "convert", _never_called)
    r = client.post("/convert", json={"input": "   \n"})
    assert r.status_code == 400
    assert r.json() == {"error": "Input cannot be empty.", "kind": "empty_input"}


def test_convert_service_and_malformed_are_502(monkeypatch):
    def service_down(*args):
        raise ServiceError("API key not valid.", status_code=400)

    monkeypatch.setattr(llm_client, "convert", service_down)
    r = client.post("/convert", json={"input": "<p class='m-1'>x</p>"})
    assert r.status_code == 502
    assert r.json() == {"error": "API key not valid.", "kind": "service"}

    def malformed(*args):
        raise MalformedResponseError()

    monkeypatch.setattr(llm_client, "convert", malformed)
    r = client.post("/convert", json={"input": "<p class='m-1'>x</p>"})
    assert r.status_code == 502
    assert r.json()["error"] == MALFORMED_RESPONSE_MESSAGE


def test_convert_rejects_unknown_builder():
    r = client.post("/convert", json={"input": "<p>x</p>", "builder": "wix"})
    assert r.status_code == 422


def test_index_page_renders_controls():
    r = client.get("/")
    assert r.status_code == 200
    html = r.text
    assert "Tailwind2Builder" in html
    for value in ("elementor", "generic", "bricks", "standard", "bem", "vanilla", "deep-space", "midnight", "cyberpunk"):
        assert f'value="{value}"' in html
    assert "Ready to Transform" in html


def test_form_convert_renders_result_and_copy_payloads(monkeypatch):
    monkeypatch.setattr(llm_client, "convert", lambda *a: RESULT)
    r = client.post(
        "/",
        data={"input": "<div class='bg-gradient-to-r'>x</div>", "builder": "elementor", "format": "bem", "theme": "midnight", "action": "convert"},
    )
    assert r.status_code == 200
    html = r.text
    assert "theme-midnight" in html
    assert "Mapped bg" in html
    assert "Paste into Custom CSS" in html
    assert f"{len(RESULT.css)} chars" in html
    payloads = [unescape(p) for p in re.findall(r'data-copy="([^"]*)"', html)]
    assert RESULT.css in payloads
    assert f"<style>\n{RESULT.css}\n</style>" in payloads
    assert '<span class="tok-pseudo">::before</span>' in html


def test_form_blank_convert_shows_empty_error(monkeypatch):
    monkeypatch.setattr(llm_client, "convert", _never_called)
    r = client.post("/", data={"input": "  ", "action": "convert"})
    assert r.status_code == 200
    assert "Input cannot be empty." in r.text


def test_form_failure_shows_error(monkeypatch):
    def malformed(*args):
        raise MalformedResponseError()

    monkeypatch.setattr(llm_client, "convert", malformed)
    r = client.post("/", data={"input": "<p class='m-1'>x</p>", "action": "convert"})
    assert r.status_code == 200
    assert "Conversion Error" in r.text
    assert "Failed to parse AI response" in r.text


def test_form_option_update_keeps_carried_result(monkeypatch):
    monkeypatch.setattr(llm_client, "convert", _never_called)
    r = client.post(
        "/",
        data={"input": "<p>x</p>", "compact": "true", "result_json": RESULT.model_dump_json(), "action": "update"},
    )
    assert r.status_code == 200
    assert "Mapped bg" in r.text
    assert 'name="compact" value="true" checked' in r.text


def test_form_clear_drops_everything(monkeypatch):
    monkeypatch.setattr(llm_client, "convert", _never_called)
    r = client.post("/", data={"input": "<p>x</p>", "result_json": RESULT.model_dump_json(), "action": "clear"})
    assert r.status_code == 200
    assert "Mapped bg" not in r.text
    assert "Ready to Transform" in r.text


def test_form_bad_option_is_400():
    r = client.post("/", data={"input": "<p>x</p>", "builder": "wix", "action": "update"})
    assert r.status_code == 400


def test_convert_transport_failure_does_not_echo_key(monkeypatch):
    import requests

    monkeypatch.setattr(llm_client, "GEMINI_API_KEY", "SECRET-KEY-123")

    def fail(*a, **k):
        raise requests.ConnectionError("Max retries exceeded with url: /v1beta/models/m:generateContent?key=SECRET-KEY-123")

    monkeypatch.setattr(llm_client.requests, "post", fail)
    r = client.post("/convert", json={"input": "<p class='m-1'>x</p>"})
    assert r.status_code == 502
    assert "SECRET-KEY-123" not in r.text
    assert r.json() == {"error": llm_client.TRANSPORT_FAILURE_MESSAGE, "kind": "service"}
