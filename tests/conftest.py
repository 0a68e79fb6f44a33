import json

import httpx
import pytest
from fastapi.testclient import TestClient

from main import create_app
from medsafe.config import Settings
from medsafe.schemas import PatientInfo


class FakeGemini:
    """Stands in for the generateContent endpoint and records what it was sent."""

    def __init__(self, status_code=200, payload=None, text=None, error=None):
        self.status_code = status_code
        self.payload = payload if payload is not None else gemini_reply("X")
        self.text = text
        self.error = error
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def last_body(self):
        return json.loads(self.requests[-1].content)

    @property
    def transport(self):
        return httpx.MockTransport(self)


def gemini_reply(*texts):
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": t} for t in texts]}}]}


@pytest.fixture
def settings():
    return Settings(api_key="test-key")


@pytest.fixture
def fake_gemini():
    return FakeGemini()


@pytest.fixture
def client(settings, fake_gemini):
    return TestClient(create_app(settings, transport=fake_gemini.transport))


@pytest.fixture
def patient_payload():
    return {
        "symptoms": "fever, headache",
        "symptomDuration": 2,
        "symptomUnit": "days",
        "mealsPerDay": 1,
        "waterIntake": 1,
        "lastMeal": "toast",
        "selectedFoods": ["Soup"],
        "sleepHours": 6,
        "stressLevel": "high",
        "exerciseFrequency": "rarely",
        "smokingStatus": "non-smoker",
        "alcoholConsumption": "none",
        "additionalInfo": "",
    }


@pytest.fixture
def patient(patient_payload):
    return PatientInfo.model_validate(patient_payload)
