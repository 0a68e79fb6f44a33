from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_MIME_TYPE = "application/octet-stream"


class PathType(str, Enum):
    MEDICINE = "medicine"
    LIFESTYLE = "lifestyle"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "PathType":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.UNKNOWN


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _non_negative(value: Any, cast) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = cast(float(value))
    except (TypeError, ValueError, OverflowError):
        return None
    if number != number or number < 0:  # NaN or negative
        return None
    return number


class PatientInfo(WireModel):
    """Intake form snapshot. Every field may be missing."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    symptoms: Optional[str] = None
    symptom_duration: Optional[int] = None
    symptom_unit: Optional[str] = None
    meals_per_day: Optional[int] = None
    water_intake: Optional[float] = None
    last_meal: Optional[str] = None
    selected_foods: List[str] = Field(default_factory=list)
    sleep_hours: Optional[float] = None
    stress_level: Optional[str] = None
    exercise_frequency: Optional[str] = None
    smoking_status: Optional[str] = None
    alcohol_consumption: Optional[str] = None
    additional_info: Optional[str] = None

    @field_validator(
        "symptoms", "symptom_unit", "last_meal", "stress_level", "exercise_frequency",
        "smoking_status", "alcohol_consumption", "additional_info",
        mode="before",
    )
    @classmethod
    def _text(cls, v):
        return _clean_text(v)

    @field_validator("symptom_duration", "meals_per_day", mode="before")
    @classmethod
    def _count(cls, v):
        return _non_negative(v, int)

    @field_validator("water_intake", "sleep_hours", mode="before")
    @classmethod
    def _amount(cls, v):
        return _non_negative(v, float)

    @field_validator("selected_foods", mode="before")
    @classmethod
    def _foods(cls, v):
        if not isinstance(v, (list, tuple)):
            return []
        return [food for food in (_clean_text(item) for item in v) if food]


class ChatTurn(WireModel):
    role: str  # "user" | "bot"
    message: str = ""

    @field_validator("role", mode="before")
    @classmethod
    def _role(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
            if v == "assistant":
                return "bot"
            if v in ("user", "bot"):
                return v
        raise ValueError("role must be 'user' or 'bot'")

    @field_validator("message", mode="before")
    @classmethod
    def _message(cls, v):
        return v if isinstance(v, str) else ""

    @property
    def speaker(self) -> str:
        return "User" if self.role == "user" else "Assistant"


class FileAttachment(WireModel):
    name: str = "attachment"
    type: str = DEFAULT_MIME_TYPE
    data: str

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v):
        return _clean_text(v) or "attachment"

    @field_validator("type", mode="before")
    @classmethod
    def _type(cls, v):
        return _clean_text(v) or DEFAULT_MIME_TYPE


class ChatRequest(WireModel):
    message: str = ""
    path_type: PathType = PathType.UNKNOWN
    patient_info: PatientInfo = Field(default_factory=PatientInfo)
    chat_history: List[ChatTurn] = Field(default_factory=list)
    file: Optional[FileAttachment] = None

    @field_validator("message", mode="before")
    @classmethod
    def _message(cls, v):
        return v if isinstance(v, str) else ""

    @field_validator("path_type", mode="before")
    @classmethod
    def _path(cls, v):
        return PathType.parse(v)

    @field_validator("patient_info", mode="before")
    @classmethod
    def _patient(cls, v):
        if isinstance(v, PatientInfo):
            return v
        return v if isinstance(v, dict) else {}

    @field_validator("chat_history", mode="before")
    @classmethod
    def _history(cls, v):
        if not isinstance(v, (list, tuple)):
            return []
        turns = []
        for item in v:
            if isinstance(item, ChatTurn):
                turns.append(item)
                continue
            try:
                turns.append(ChatTurn.model_validate(item))
            except ValidationError:
                continue
        return turns

    @field_validator("file", mode="before")
    @classmethod
    def _file(cls, v):
        if isinstance(v, FileAttachment):
            return v
        if not isinstance(v, dict) or not isinstance(v.get("data"), str) or not v["data"]:
            return None
        return v

    @classmethod
    def from_payload(cls, payload: Any) -> "ChatRequest":
        """Build a request from any decoded JSON value, degrading instead of failing."""
        if not isinstance(payload, dict):
            return cls()
        try:
            return cls.model_validate(payload)
        except ValidationError:
            return cls()


class ChatResponse(BaseModel):
    response: str


class HealthResponse(WireModel):
    ok: bool = True
    message: str
    has_api_key: bool
