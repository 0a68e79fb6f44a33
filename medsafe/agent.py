from typing import Any, Dict, Optional

import httpx
from loguru import logger

from medsafe.config import API_KEY_ENV, Settings
from medsafe.prompts import compose_prompt
from medsafe.schemas import ChatRequest, FileAttachment

FALLBACK_REPLY = "Sorry, I could not generate a response right now."

CONFIG_ERROR_REPLY = (
    "Configuration error: the server is missing the {env} setting, so I can't reach the "
    "AI service yet. Please add the key to the server environment and try again."
).format(env=API_KEY_ENV)

TROUBLE_CONNECTING_REPLY = (
    "I had trouble connecting to the AI service just now. Please try sending your message again "
    "in a moment. If your symptoms feel severe or are getting worse, please contact a doctor or "
    "your local emergency number."
)

_MAX_DETAIL_CHARS = 500


def build_upstream_body(prompt: str, attachment: Optional[FileAttachment] = None) -> Dict[str, Any]:
    parts = [{"text": prompt}]
    if attachment is not None:
        parts.append({
            "inline_data": {
                "mime_type": attachment.type,
                "data": attachment.data,
            }
        })
    return {"contents": [{"role": "user", "parts": parts}]}


def extract_reply_text(payload: Any) -> str:
    """Join every text part of the first candidate, or fall back to a fixed sentence."""
    if not isinstance(payload, dict):
        return FALLBACK_REPLY
    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        return FALLBACK_REPLY
    content = candidates[0].get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return FALLBACK_REPLY

    text = "".join(
        part["text"] for part in parts
        if isinstance(part, dict) and isinstance(part.get("text"), str)
    )
    return text if text else FALLBACK_REPLY


def _diagnostic_reply(detail: str) -> str:
    return f"{TROUBLE_CONNECTING_REPLY}\n\n(Technical details: {detail})"


def _status_detail(response: httpx.Response) -> str:
    detail = f"{response.status_code} {response.reason_phrase}".strip()
    body = response.text.strip()
    if body:
        detail += f": {body[:_MAX_DETAIL_CHARS]}"
    return detail


class ResponseGenerator:
    """
    Turns one chat request into one reply string.

    Holds only configuration; every call composes a fresh prompt and makes a
    single upstream request. Failures become chat text instead of exceptions.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.BaseTransport] = None):
        self.settings = settings
        self._transport = transport

    def compose(self, request: ChatRequest) -> str:
        return compose_prompt(
            request.path_type,
            request.patient_info,
            request.chat_history,
            request.message,
            has_attachment=request.file is not None,
            history_limit=self.settings.max_history_turns,
        )

    def call_upstream(self, body: Dict[str, Any]) -> str:
        try:
            with httpx.Client(timeout=self.settings.timeout, transport=self._transport) as client:
                response = client.post(
                    self.settings.endpoint_url,
                    params={"key": self.settings.api_key},
                    json=body,
                )
        except httpx.HTTPError as e:
            logger.exception("Upstream request failed")
            return _diagnostic_reply(str(e) or e.__class__.__name__)

        if not response.is_success:
            logger.warning("Upstream returned {} {}", response.status_code, response.reason_phrase)
            return _diagnostic_reply(_status_detail(response))

        try:
            payload = response.json()
        except ValueError:
            logger.warning("Upstream returned a non-JSON body")
            return FALLBACK_REPLY
        return extract_reply_text(payload)

    def generate(self, request: ChatRequest) -> str:
        if not self.settings.has_api_key:
            logger.warning("{} is not set; replying with configuration error", API_KEY_ENV)
            return CONFIG_ERROR_REPLY

        logger.info(
            "Generating reply path={} history={} attachment={}",
            request.path_type.value,
            len(request.chat_history),
            request.file is not None,
        )
        prompt = self.compose(request)
        return self.call_upstream(build_upstream_body(prompt, request.file))
