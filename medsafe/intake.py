from enum import Enum
from typing import Any, Dict, List, Optional

from loguru import logger

from medsafe.schemas import PathType, PatientInfo

SYMPTOM_UNITS = ("hours", "days", "weeks", "months")
STRESS_LEVELS = ("low", "moderate", "high", "very-high")
EXERCISE_FREQUENCIES = ("never", "rarely", "sometimes", "regularly", "daily")
SMOKING_STATUSES = ("non-smoker", "former-smoker", "occasional", "regular")
ALCOHOL_LEVELS = ("none", "occasional", "moderate", "regular", "frequent")
FOOD_OPTIONS = ("Eggs", "Juice", "Sandwich", "Salad", "Rice", "Pasta", "Soup", "Fruits", "Coffee")

_CHOICES = {
    "symptom_unit": SYMPTOM_UNITS,
    "stress_level": STRESS_LEVELS,
    "exercise_frequency": EXERCISE_FREQUENCIES,
    "smoking_status": SMOKING_STATUSES,
    "alcohol_consumption": ALCOHOL_LEVELS,
}
_COUNTERS = ("symptom_duration", "meals_per_day")
_AMOUNTS = ("water_intake", "sleep_hours")


class IntakeError(Exception):
    pass


class AgeRestrictionError(IntakeError):
    pass


class FormStep(str, Enum):
    AGE_VERIFICATION = "age-verification"
    PATIENT_INFO = "patient-info"
    LIFESTYLE = "lifestyle"
    CHATBOT = "chatbot"


def default_form() -> Dict[str, Any]:
    return {
        "symptoms": "",
        "symptom_duration": 1,
        "symptom_unit": "days",
        "meals_per_day": 0,
        "water_intake": 0.0,
        "last_meal": "",
        "selected_foods": [],
        "additional_info": "",
        "exercise_frequency": "never",
        "sleep_hours": 7.0,
        "stress_level": "moderate",
        "smoking_status": "non-smoker",
        "alcohol_consumption": "none",
    }


class IntakeForm:
    """
    Linear intake wizard: age check, symptom form, optional lifestyle form, chat.

    The medicine path goes from the symptom form straight to the chat; the
    lifestyle path shows the lifestyle screen first. The chosen path is fixed
    while the chat is open.
    """

    def __init__(self):
        self.step = FormStep.AGE_VERIFICATION
        self.path: Optional[PathType] = None
        self.data = default_form()

    @property
    def in_chat(self) -> bool:
        return self.step == FormStep.CHATBOT

    def _require_step(self, *steps: FormStep) -> None:
        if self.step not in steps:
            raise IntakeError(f"Not allowed on the {self.step.value} step")

    def confirm_age(self, is_over_18: bool) -> FormStep:
        self._require_step(FormStep.AGE_VERIFICATION)
        if not is_over_18:
            raise AgeRestrictionError(
                "You must be 18+ to use this service. Please seek guidance from a parent, "
                "guardian, or healthcare professional."
            )
        self.step = FormStep.PATIENT_INFO
        return self.step

    def select_path(self, path: PathType) -> None:
        self._require_step(FormStep.PATIENT_INFO)
        path = PathType.parse(path)
        if path == PathType.UNKNOWN:
            raise IntakeError("Choose either medicine or lifestyle")
        self.path = path

    def update(self, **fields: Any) -> None:
        if self.in_chat:
            raise IntakeError("The form is read-only while the chat is open")
        for name, value in fields.items():
            if name not in self.data:
                raise IntakeError(f"Unknown form field: {name}")
            choices = _CHOICES.get(name)
            if choices and value not in choices:
                raise IntakeError(f"{name} must be one of {', '.join(choices)}")
            if name in _COUNTERS or name in _AMOUNTS:
                kinds = (int,) if name in _COUNTERS else (int, float)
                if isinstance(value, bool) or not isinstance(value, kinds):
                    raise IntakeError(f"{name} must be a number")
                if value < 0:
                    raise IntakeError(f"{name} cannot be negative")
        # all fields checked before any is written
        self.data.update(fields)

    def increment(self, field: str) -> int:
        if field not in _COUNTERS:
            raise IntakeError(f"{field} is not a counter")
        self.data[field] += 1
        return self.data[field]

    def decrement(self, field: str) -> int:
        if field not in _COUNTERS:
            raise IntakeError(f"{field} is not a counter")
        self.data[field] = max(0, self.data[field] - 1)
        return self.data[field]

    def toggle_food(self, name: str) -> List[str]:
        if name not in FOOD_OPTIONS:
            raise IntakeError(f"Unknown food option: {name}")
        foods: List[str] = self.data["selected_foods"]
        if name in foods:
            foods.remove(name)
        else:
            foods.append(name)
        return list(foods)

    def next(self) -> FormStep:
        self._require_step(FormStep.PATIENT_INFO)
        if self.path is None:
            raise IntakeError("Select medicine or lifestyle before continuing")
        self.step = FormStep.CHATBOT if self.path == PathType.MEDICINE else FormStep.LIFESTYLE
        logger.info("Intake moved to {} ({})", self.step.value, self.path.value)
        return self.step

    def continue_to_chat(self) -> FormStep:
        self._require_step(FormStep.LIFESTYLE)
        self.step = FormStep.CHATBOT
        return self.step

    def back(self) -> FormStep:
        if self.step == FormStep.CHATBOT:
            self.step = FormStep.PATIENT_INFO if self.path == PathType.MEDICINE else FormStep.LIFESTYLE
        elif self.step == FormStep.LIFESTYLE:
            self.step = FormStep.PATIENT_INFO
        return self.step

    def patient_info(self) -> PatientInfo:
        return PatientInfo.model_validate(self.data)
