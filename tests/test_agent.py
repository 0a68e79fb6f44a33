import httpx
import pytest

from medsafe.agent import (
    CONFIG_ERROR_REPLY,
    FALLBACK_REPLY,
    ResponseGenerator,
    build_upstream_body,
    extract_reply_text,
)
from medsafe.config import Settings
from medsafe.schemas import ChatRequest, FileAttachment

from conftest import FakeGemini, gemini_reply


def make_request(**overrides):
    payload = {
        "message": "what should I do?",
        "pathType": "medicine",
        "patientInfo": {"symptoms": "fever, headache", "symptomDuration": 2, "symptomUnit": "days"},
        "chatHistory": [],
    }
    payload.update(overrides)
    return ChatRequest.from_payload(payload)


def test_extract_joins_parts_of_first_candidate():
    payload = gemini_reply("Hello ", "there")
    payload["candidates"].append({"content": {"parts": [{"text": "ignored"}]}})
    assert extract_reply_text(payload) == "Hello there"


@pytest.mark.parametrize(
    "payload",
    [
        None,
        [],
        {},
        {"candidates": []},
        {"candidates": [{}]},
        {"candidates": [{"content": {"parts": []}}]},
        {"candidates": [{"content": {"parts": [{"inline_data": {}}]}}]},
        {"promptFeedback": {"blockReason": "SAFETY"}},
        {"candidates": [{"content": {"parts": [{"text": ""}, {"text": ""}]}}]},
    ],
)
def test_extract_falls_back_when_no_text(payload):
    assert extract_reply_text(payload) == FALLBACK_REPLY


def test_whitespace_only_text_is_kept():
    assert extract_reply_text(gemini_reply("\n", "  ")) == "\n  "


def test_upstream_body_without_attachment():
    body = build_upstream_body("prompt text")
    assert body == {"contents": [{"role": "user", "parts": [{"text": "prompt text"}]}]}


def test_upstream_body_with_attachment():
    attachment = FileAttachment(name="scan.png", type="image/png", data="aGVsbG8=")
    parts = build_upstream_body("prompt text", attachment)["contents"][0]["parts"]

    assert parts[0] == {"text": "prompt text"}
    assert parts[1] == {"inline_data": {"mime_type": "image/png", "data": "aGVsbG8="}}
    assert len(parts) == 2


def test_missing_key_returns_config_error():
    fake = FakeGemini()
    generator = ResponseGenerator(Settings(api_key=None), transport=fake.transport)

    assert generator.generate(make_request()) == CONFIG_ERROR_REPLY
    assert "Configuration error" in CONFIG_ERROR_REPLY
    assert fake.requests == []


def test_success_sends_key_and_prompt(settings):
    fake = FakeGemini(payload=gemini_reply("X"))
    generator = ResponseGenerator(settings, transport=fake.transport)

    assert generator.generate(make_request()) == "X"

    sent = fake.requests[0]
    assert sent.method == "POST"
    assert sent.url.params["key"] == "test-key"
    assert sent.url.path.endswith(f"/models/{settings.model}:generateContent")
    text = fake.last_body["contents"][0]["parts"][0]["text"]
    assert "Symptoms: fever, headache" in text
    assert '"what should I do?"' in text


def test_upstream_error_status_becomes_chat_message(settings):
    fake = FakeGemini(status_code=503, payload={"error": {"message": "overloaded"}})
    reply = ResponseGenerator(settings, transport=fake.transport).generate(make_request())

    assert "trouble connecting" in reply
    assert "503" in reply
    assert "overloaded" in reply


def test_transport_error_becomes_chat_message(settings):
    fake = FakeGemini(error=httpx.ConnectError("connection refused"))
    reply = ResponseGenerator(settings, transport=fake.transport).generate(make_request())

    assert "trouble connecting" in reply
    assert "connection refused" in reply


def test_non_json_success_uses_fallback(settings):
    fake = FakeGemini(text="<html>not json</html>")
    reply = ResponseGenerator(settings, transport=fake.transport).generate(make_request())
    assert reply == FALLBACK_REPLY


def test_history_is_capped_by_settings():
    fake = FakeGemini()
    generator = ResponseGenerator(Settings(api_key="k", max_history_turns=2), transport=fake.transport)
    history = [{"role": "user", "message": f"turn {i}"} for i in range(5)]

    generator.generate(make_request(chatHistory=history))

    text = fake.last_body["contents"][0]["parts"][0]["text"]
    assert "turn 2" not in text
    assert "User: turn 3\nUser: turn 4" in text
