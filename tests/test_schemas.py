import pytest

from medsafe.schemas import ChatRequest, ChatTurn, PathType, PatientInfo
from medsafe.urgency import detect_emergency_symptoms, detect_emotional_tone


@pytest.mark.parametrize(
    "value, expected",
    [
        ("medicine", PathType.MEDICINE),
        ("Lifestyle ", PathType.LIFESTYLE),
        (None, PathType.UNKNOWN),
        ("", PathType.UNKNOWN),
        (3, PathType.UNKNOWN),
    ],
)
def test_path_type_parse(value, expected):
    assert PathType.parse(value) == expected


def test_patient_info_accepts_camel_and_snake_case():
    assert PatientInfo.model_validate({"mealsPerDay": 2}).meals_per_day == 2
    assert PatientInfo.model_validate({"meals_per_day": 2}).meals_per_day == 2


def test_patient_info_coerces_bad_values():
    info = PatientInfo.model_validate({
        "symptoms": "   ",
        "symptomDuration": "3",
        "waterIntake": "lots",
        "sleepHours": -2,
        "selectedFoods": ["Eggs", "", None, 7],
        "stressLevel": True,
    })
    assert info.symptoms is None
    assert info.symptom_duration == 3
    assert info.water_intake is None
    assert info.sleep_hours is None
    assert info.selected_foods == ["Eggs", "7"]
    assert info.stress_level is None


def test_chat_history_skips_invalid_turns():
    request = ChatRequest.from_payload({
        "chatHistory": [
            {"role": "user", "message": "hi"},
            {"role": "assistant", "message": "hello"},
            {"role": "system", "message": "nope"},
            "garbage",
            {"message": "no role"},
        ]
    })
    assert [(t.role, t.message) for t in request.chat_history] == [("user", "hi"), ("bot", "hello")]
    assert request.chat_history[1].speaker == "Assistant"


def test_non_dict_payload_gives_empty_request():
    request = ChatRequest.from_payload(["not", "a", "dict"])
    assert request.message == ""
    assert request.path_type == PathType.UNKNOWN
    assert request.chat_history == []
    assert request.file is None


def test_file_defaults():
    request = ChatRequest.from_payload({"file": {"data": "AAAA", "type": ""}})
    assert request.file.type == "application/octet-stream"
    assert request.file.name == "attachment"
    assert ChatTurn(role="user").message == ""


def test_emergency_keywords():
    assert detect_emergency_symptoms("I think I'm having a STROKE")
    assert not detect_emergency_symptoms("mild cough")
    assert not detect_emergency_symptoms(None)


@pytest.mark.parametrize(
    "text, tone",
    [
        ("I'm so worried about this", "worried"),
        ("honestly fed up with it", "frustrated"),
        ("just exhausted all day", "tired"),
        ("what about tea?", "neutral"),
    ],
)
def test_emotional_tone(text, tone):
    assert detect_emotional_tone(text) == tone
