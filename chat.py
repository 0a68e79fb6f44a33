#!/usr/bin/env python3
"""
Terminal version of the Medsafe intake wizard and chat.

Usage:
    uvicorn main:app          # in one terminal
    python chat.py            # in another
"""

import os

from dotenv import load_dotenv
load_dotenv()

from medsafe.dispatcher import API_URL, Attachment, ChatSession
from medsafe.intake import (
    ALCOHOL_LEVELS,
    EXERCISE_FREQUENCIES,
    FOOD_OPTIONS,
    SMOKING_STATUSES,
    STRESS_LEVELS,
    SYMPTOM_UNITS,
    AgeRestrictionError,
    FormStep,
    IntakeError,
    IntakeForm,
)
from medsafe.prompts import headings_for
from medsafe.renderer import render_message, to_text
from medsafe.schemas import PathType


def ask(question, default=""):
    answer = input(f"{question} [{default}]: ").strip()
    return answer or default


def ask_choice(question, choices, default):
    while True:
        answer = ask(f"{question} ({'/'.join(choices)})", default)
        if answer in choices:
            return answer
        print(f"Please pick one of: {', '.join(choices)}")


def ask_number(question, default, cast=int):
    while True:
        try:
            value = cast(ask(question, str(default)))
        except ValueError:
            print("Please enter a number.")
            continue
        if value >= 0:
            return value
        print("Please enter a number that is 0 or more.")


def fill_patient_info(form):
    form.update(
        symptoms=ask("What symptoms are you having?"),
        symptom_duration=ask_number("For how long", form.data["symptom_duration"]),
        symptom_unit=ask_choice("Unit", SYMPTOM_UNITS, form.data["symptom_unit"]),
        meals_per_day=ask_number("Meals per day", form.data["meals_per_day"]),
        water_intake=ask_number("Water per day in litres", form.data["water_intake"], float),
        last_meal=ask("What was your last meal?"),
    )
    foods = ask(f"Foods eaten today, comma separated ({', '.join(FOOD_OPTIONS)})")
    for food in (f.strip().capitalize() for f in foods.split(",") if f.strip()):
        if food in FOOD_OPTIONS:
            form.toggle_food(food)
    form.update(additional_info=ask("Anything else we should know?"))


def fill_lifestyle(form):
    form.update(
        exercise_frequency=ask_choice("Exercise frequency", EXERCISE_FREQUENCIES, form.data["exercise_frequency"]),
        sleep_hours=ask_number("Hours of sleep per night", form.data["sleep_hours"], float),
        stress_level=ask_choice("Stress level", STRESS_LEVELS, form.data["stress_level"]),
        smoking_status=ask_choice("Smoking status", SMOKING_STATUSES, form.data["smoking_status"]),
        alcohol_consumption=ask_choice("Alcohol consumption", ALCOHOL_LEVELS, form.data["alcohol_consumption"]),
    )


def print_bot(turn, headings):
    prefix = "⚠️  " if turn.emotion == "urgent" else ""
    print(f"\n🤖 Medsafe: {prefix}\n{to_text(render_message(turn.message, headings))}")


def main():
    print("=" * 70)
    print("🏥 Medsafe - Your Health Companion")
    print("=" * 70)
    print("General health information only. Not a diagnosis.")
    print("Type 'quit' to exit. Start a message with '/file <path>' to attach a file.")
    print("=" * 70)

    form = IntakeForm()
    try:
        form.confirm_age(ask("Are you 18 years of age or older? (y/n)", "n").lower().startswith("y"))
    except AgeRestrictionError as e:
        print(e)
        return

    fill_patient_info(form)
    form.select_path(ask_choice("Medicine information or lifestyle guidance?", ("medicine", "lifestyle"), "medicine"))
    if form.next() == FormStep.LIFESTYLE:
        fill_lifestyle(form)
        form.continue_to_chat()

    headings = headings_for(form.path or PathType.UNKNOWN)
    session = ChatSession(form.path, form.patient_info(), base_url=os.getenv("API_URL", API_URL))

    try:
        print_bot(session.start(), headings)
        while True:
            try:
                user_input = input("\n👤 You: ").strip()
            except (KeyboardInterrupt, EOFError):
                print("\n\n👋 Goodbye! Take care.")
                break

            if user_input.lower() in ("quit", "exit", "q"):
                print("\n👋 Goodbye! Take care.")
                break

            attachment = None
            if user_input.startswith("/file "):
                path, _, user_input = user_input[len("/file "):].partition(" ")
                try:
                    attachment = Attachment.from_path(path)
                except OSError as e:
                    print(f"❌ Could not read {path}: {e}")
                    continue

            turn = session.send(user_input, attachment)
            if turn is not None:
                print_bot(turn, headings)
    except IntakeError as e:
        print(f"❌ {e}")
    finally:
        session.close()


if __name__ == "__main__":
    main()
