import base64
import mimetypes
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import httpx
from loguru import logger

from medsafe.config import MAX_HISTORY_TURNS
from medsafe.schemas import DEFAULT_MIME_TYPE, PathType, PatientInfo
from medsafe.urgency import bubble_emotion

API_URL = "http://localhost:8000"
CHAT_PATH = "/api/chat"

KICKOFF_MESSAGE = "I have just filled in the intake form. Please share your guidance."
FILE_PLACEHOLDER = "[File uploaded]"
CLIENT_TROUBLE_REPLY = "I'm having a moment of trouble connecting. Please try again, I'm here to help!"


class DispatchInProgressError(Exception):
    pass


@dataclass
class Attachment:
    name: str
    type: str
    data: str

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "Attachment":
        path = Path(path)
        mime, _ = mimetypes.guess_type(path.name)
        return cls(
            name=path.name,
            type=mime or DEFAULT_MIME_TYPE,
            data=base64.b64encode(path.read_bytes()).decode("ascii"),
        )

    def to_payload(self) -> Dict[str, str]:
        return {"name": self.name, "type": self.type or DEFAULT_MIME_TYPE, "data": self.data}


@dataclass
class Turn:
    role: str  # "user" | "bot"
    message: str
    emotion: Optional[str] = None

    def to_payload(self) -> Dict[str, str]:
        return {"role": self.role, "message": self.message}


def build_request_body(
    message: str,
    path_type: Optional[PathType],
    patient_info: PatientInfo,
    history: List[Turn],
    attachment: Optional[Attachment] = None,
    max_turns: int = MAX_HISTORY_TURNS,
) -> Dict[str, Any]:
    path = PathType.parse(path_type)
    return {
        "message": message,
        "pathType": None if path == PathType.UNKNOWN else path.value,
        "patientInfo": patient_info.model_dump(by_alias=True),
        "chatHistory": [turn.to_payload() for turn in history[-max_turns:]] if max_turns > 0 else [],
        "file": attachment.to_payload() if attachment else None,
    }


class ChatSession:
    """
    Client side of one conversation. Keeps the transcript in memory and
    re-sends the recent part of it with every message.
    """

    def __init__(
        self,
        path_type: Optional[PathType],
        patient_info: PatientInfo,
        client: Optional[httpx.Client] = None,
        base_url: str = API_URL,
        timeout: float = 60.0,
    ):
        self.path_type = PathType.parse(path_type)
        self.patient_info = patient_info
        self.transcript: List[Turn] = []
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)
        self._in_flight = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._in_flight.locked()

    def _claim(self) -> None:
        if not self._in_flight.acquire(blocking=False):
            raise DispatchInProgressError("Wait for the current reply before sending another message")

    def _post(self, body: Dict[str, Any]) -> str:
        try:
            response = self._client.post(CHAT_PATH, json=body)
            response.raise_for_status()
            reply = response.json().get("response")
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            logger.error("Chat request failed: {}", e)
            return CLIENT_TROUBLE_REPLY
        return reply if isinstance(reply, str) else CLIENT_TROUBLE_REPLY

    def _exchange(self, message: str, history: List[Turn], attachment: Optional[Attachment], emotion: str) -> Turn:
        # caller holds _in_flight
        body = build_request_body(message, self.path_type, self.patient_info, history, attachment)
        turn = Turn(role="bot", message=self._post(body), emotion=emotion)
        self.transcript.append(turn)
        return turn

    def start(self) -> Turn:
        self._claim()
        try:
            self.transcript = []
            return self._exchange(KICKOFF_MESSAGE, [], None, "supportive")
        finally:
            self._in_flight.release()

    def send(self, text: str, attachment: Optional[Attachment] = None) -> Optional[Turn]:
        text = (text or "").strip()
        if not text and attachment is None:
            return None

        self._claim()
        try:
            history = list(self.transcript)
            self.transcript.append(Turn(role="user", message=text or FILE_PLACEHOLDER))
            return self._exchange(text, history, attachment, bubble_emotion(text))
        finally:
            self._in_flight.release()

    def close(self) -> None:
        self._client.close()
