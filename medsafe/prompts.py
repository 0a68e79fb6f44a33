# Prompt text for the health assistant and the pure function that assembles it.
# Nothing here talks to the network; identical inputs give identical prompts.

from typing import Dict, List, Optional, Sequence, Tuple

from medsafe.config import MAX_HISTORY_TURNS
from medsafe.schemas import ChatTurn, PathType, PatientInfo

NOT_PROVIDED = "not provided"
NO_FOODS = "none"
UNKNOWN = "unknown"
NO_HISTORY = "(no previous messages)"
ATTACHMENT_ONLY = "(no text message; the user only sent an attachment)"
EMPTY_MESSAGE = "(empty message)"

SAFETY_PREAMBLE = """You are Medsafe, a calm and friendly health information assistant for adults.
You give general, educational health information. You are NOT a doctor.

SAFETY RULES:
1. Never diagnose. Talk about what symptoms "can be linked to", never what the user "has".
2. Never prescribe. You may name general categories of over-the-counter products, but never give exact doses, mg amounts or a personal schedule.
3. Always point to the package directions and to a pharmacist or doctor for anything specific.
4. If the user mentions any emergency sign, start your reply by telling them to call their local emergency number or go to the nearest emergency department now. Emergency signs include:
- chest pain or pressure
- difficulty breathing or shortness of breath
- stroke signs (face drooping, arm weakness, slurred speech)
- severe bleeding
- sudden confusion
- seizures
- thoughts of self-harm or suicide
5. Be warm and reassuring, use plain words and short sentences.

FORMATTING RULES:
- Write each section heading on its own line, in plain text, exactly as given.
- Start every bullet with "- ".
- Do not use markdown: no "*", no "**", no "#", no tables.
- Leave one blank line between sections."""

# Declared once here; the transcript renderer reads the same table.
SECTION_HEADINGS: Dict[PathType, Tuple[str, ...]] = {
    PathType.MEDICINE: (
        "What You Are Experiencing And How To Support Recovery",
        "Common Over-The-Counter Options",
        "How Each Option Helps And Typical Use",
        "When To See A Doctor Or Get Urgent Help",
    ),
    PathType.LIFESTYLE: (
        "Your Current Habits At A Glance",
        "Why Small Lifestyle Changes Help",
        "Small Changes You Can Start With",
        "When To Get Extra Support",
    ),
}

_SECTION_GUIDANCE: Dict[PathType, Tuple[str, ...]] = {
    PathType.MEDICINE: (
        "3-5 short bullets summarising the symptoms, how long they have lasted and simple recovery support (rest, fluids, food).",
        "2-4 bullets naming general over-the-counter categories that match the symptoms.",
        "2-4 bullets explaining what each category helps with and that it is usually taken as directed on the package. No mg amounts, no personal dosing.",
        "3-5 bullets listing clear warning signs that mean seeing a doctor or getting urgent care.",
    ),
    PathType.LIFESTYLE: (
        "3-5 bullets summarising the user's current sleep, water, meals, exercise, stress, smoking and alcohol habits.",
        "2-4 bullets explaining why small lifestyle changes can help with how they feel.",
        "4-6 specific but gentle changes they can start this week.",
        "3-5 bullets describing when it would help to talk to a doctor or other professional.",
    ),
}

_PATH_INTROS: Dict[PathType, str] = {
    PathType.MEDICINE: "The user chose MEDICINE INFORMATION. Full replies use exactly these 4 sections, in this order:",
    PathType.LIFESTYLE: "The user chose LIFESTYLE GUIDANCE. Full replies use exactly these 4 sections, in this order:",
}

_CLOSING_LINES: Dict[PathType, str] = {
    PathType.MEDICINE: "End with one short line saying this is general education, not a diagnosis.",
    PathType.LIFESTYLE: "End with one short line saying this is general wellness guidance, not a substitute for medical care.",
}

FIRST_TURN_DIRECTIVE = (
    "TASK: This is the first reply of the conversation. Greet the user warmly, then produce the "
    "FULL response structure above with every section in order, using their information. "
    "Keep the whole reply under 350 words."
)

GENERIC_FIRST_TURN_DIRECTIVE = (
    "TASK: This is the first reply of the conversation. Greet the user warmly and give short, "
    "general, safety-first health information that answers their message. "
    "Keep the whole reply under 250 words."
)

FOLLOW_UP_DIRECTIVE = (
    "TASK: This is a follow-up question. Do NOT repeat the full section structure. Answer the "
    "latest message directly and concisely in under 120 words, using short bullets only if they "
    "help, and refer back to earlier messages only when needed."
)


def headings_for(path_type: PathType) -> Tuple[str, ...]:
    return SECTION_HEADINGS.get(path_type, ())


def _number(value: Optional[float]) -> str:
    if value is None:
        return NOT_PROVIDED
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def _with_unit(value: Optional[float], unit: str) -> str:
    if value is None:
        return NOT_PROVIDED
    return f"{_number(value)} {unit}"


def _text(value: Optional[str]) -> str:
    return value if value else NOT_PROVIDED


def build_structure_block(path_type: PathType) -> Optional[str]:
    headings = SECTION_HEADINGS.get(path_type)
    if not headings:
        return None
    lines = [_PATH_INTROS[path_type]]
    for index, (heading, guidance) in enumerate(zip(headings, _SECTION_GUIDANCE[path_type]), start=1):
        lines.append(f"{index}. {heading}")
        lines.append(f"   {guidance}")
    lines.append(_CLOSING_LINES[path_type])
    return "\n".join(lines)


def render_history(chat_history: Sequence[ChatTurn], limit: int = MAX_HISTORY_TURNS) -> str:
    turns = list(chat_history)[-limit:] if limit > 0 else []
    if not turns:
        return NO_HISTORY
    return "\n".join(f"{turn.speaker}: {turn.message}" for turn in turns)


def render_patient_info(path_type: PathType, info: PatientInfo) -> str:
    if info.symptom_duration is None:
        duration = NOT_PROVIDED
    elif info.symptom_unit:
        duration = f"{info.symptom_duration} {info.symptom_unit}"
    else:
        duration = f"{info.symptom_duration} (unit {NOT_PROVIDED})"

    lines = [
        f"Chosen path: {path_type.value if path_type != PathType.UNKNOWN else UNKNOWN}",
        f"Symptoms: {_text(info.symptoms)}",
        f"Symptom duration: {duration}",
        f"Meals per day: {_number(info.meals_per_day)}",
        f"Water intake: {_with_unit(info.water_intake, 'litres per day')}",
        f"Last meal: {_text(info.last_meal)}",
        f"Foods eaten recently: {', '.join(info.selected_foods) if info.selected_foods else NO_FOODS}",
        f"Sleep: {_with_unit(info.sleep_hours, 'hours per night')}",
        f"Stress level: {_text(info.stress_level)}",
        f"Exercise frequency: {_text(info.exercise_frequency)}",
        f"Smoking status: {_text(info.smoking_status)}",
        f"Alcohol consumption: {_text(info.alcohol_consumption)}",
        f"Additional notes: {_text(info.additional_info)}",
    ]
    return "\n".join(lines)


def render_latest_message(latest_message: str, has_attachment: bool = False) -> str:
    text = (latest_message or "").strip()
    if text:
        return f'"{text}"'
    return ATTACHMENT_ONLY if has_attachment else EMPTY_MESSAGE


def task_directive(path_type: PathType, first_turn: bool) -> str:
    if not first_turn:
        return FOLLOW_UP_DIRECTIVE
    if path_type == PathType.UNKNOWN:
        return GENERIC_FIRST_TURN_DIRECTIVE
    return FIRST_TURN_DIRECTIVE


def build_turn_block(
    path_type: PathType,
    patient_info: PatientInfo,
    chat_history: Sequence[ChatTurn],
    latest_message: str,
    has_attachment: bool = False,
    history_limit: int = MAX_HISTORY_TURNS,
) -> str:
    sections = [
        "CONVERSATION SO FAR:\n" + render_history(chat_history, history_limit),
        "PATIENT INFORMATION:\n" + render_patient_info(path_type, patient_info),
        "USER'S LATEST MESSAGE:\n" + render_latest_message(latest_message, has_attachment),
    ]
    if has_attachment:
        sections.append(
            "The user attached a file. Describe only what is clearly visible or written in it "
            "and do not diagnose from it."
        )
    sections.append(task_directive(path_type, first_turn=len(chat_history) == 0))
    return "\n\n".join(sections)


def compose_prompt(
    path_type: PathType,
    patient_info: Optional[PatientInfo],
    chat_history: Sequence[ChatTurn],
    latest_message: str,
    has_attachment: bool = False,
    history_limit: int = MAX_HISTORY_TURNS,
) -> str:
    """
    Assemble the full prompt: safety preamble, path structure (skipped for an
    unknown path) and the per-turn instructions, separated by blank lines.
    """
    blocks: List[str] = [SAFETY_PREAMBLE]
    structure = build_structure_block(path_type)
    if structure:
        blocks.append(structure)
    blocks.append(
        build_turn_block(
            path_type,
            patient_info or PatientInfo(),
            chat_history,
            latest_message,
            has_attachment=has_attachment,
            history_limit=history_limit,
        )
    )
    return "\n\n".join(blocks)
