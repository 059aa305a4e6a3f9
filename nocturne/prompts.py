"""
prompts.py - Prompt templates for the Nocturne companion

Both builders are pure: the same inputs always render the same string. Absent
context is replaced with a readable placeholder, never an empty string.
"""

from typing import Optional

NO_HISTORY_PLACEHOLDER = "No previous entries yet — this is the first entry."
NO_DREAM_PLACEHOLDER = "No dream recorded today."
NO_NOTES_PLACEHOLDER = "None"

MOOD_WORDS = "peaceful, curious, anxious, nostalgic, energetic, grateful, creative, calm, inspired, cozy, reflective"

PERSONA = (
    "You are Nocturne, a compassionate and insightful journal companion. "
    "Your tone is warm, curious, and never prescriptive."
)

JSON_ONLY_INSTRUCTION = "Return ONLY valid JSON — no markdown, no explanation outside the JSON."


def _or_placeholder(value: Optional[str], placeholder: str) -> str:
    if value is None or not value.strip():
        return placeholder
    return value


def _output_contract(goal_text_hint: str, goal_why_hint: str, mood_hint: str, insight_hint: str) -> str:
    return (
        "{\n"
        '  "goals": [\n'
        "    {\n"
        f'      "text": "{goal_text_hint} (15 words or fewer)",\n'
        '      "icon": "A single relevant emoji",\n'
        f'      "why": "{goal_why_hint} (20 words or fewer)"\n'
        "    }\n"
        "  ],\n"
        f'  "mood": "One word capturing {mood_hint} (e.g. {MOOD_WORDS})",\n'
        f'  "insight": "{insight_hint}"\n'
        "}"
    )


def build_dream_prompt(dream_text: str, journal_history: Optional[str], notes: Optional[str] = None) -> str:
    """Prompt for a morning dream, with up to a week of evening journals as context."""
    contract = _output_contract(
        "A specific, gentle action this person could take today",
        "A brief personal explanation connecting this goal to their dream or patterns",
        "the emotional tone of this dream",
        "A 2-3 sentence reflection noticing a pattern or theme across the dream and recent entries. "
        "Be specific, warm, and observational — never prescriptive.",
    )
    return (
        f"{PERSONA} You help people discover patterns in their inner life.\n\n"
        "The user has just recorded their morning dream. You also have access to their recent "
        "evening journal entries and today's quick notes for context.\n\n"
        "RECENT JOURNAL ENTRIES (last 7 evenings):\n"
        f"{_or_placeholder(journal_history, NO_HISTORY_PLACEHOLDER)}\n\n"
        "TODAY'S QUICK NOTES:\n"
        f"{_or_placeholder(notes, NO_NOTES_PLACEHOLDER)}\n\n"
        "TODAY'S DREAM:\n"
        f"{dream_text}\n\n"
        "Based on the dream and their journaling history, return a JSON object. "
        f"{JSON_ONLY_INSTRUCTION}\n\n"
        f"{contract}\n\n"
        "Generate exactly 3 goals. Make them specific to THIS person's content, not generic advice."
    )


def build_journal_prompt(
    journal_text: str,
    today_dream: Optional[str],
    recent_journals: Optional[str],
    notes: Optional[str] = None,
) -> str:
    """Prompt for an evening journal, with this morning's dream and recent evenings as context."""
    contract = _output_contract(
        "A specific, gentle intention for tomorrow",
        "A brief personal explanation connecting this to what they wrote today",
        "the overall emotional tone of today's entry",
        "A 2-3 sentence reflection on what stands out from today — connecting their dream, "
        "if any, to how their day unfolded. Be specific and warm.",
    )
    return (
        f"{PERSONA}\n\n"
        "The user has just written their evening journal entry. You have their dream from this "
        "morning, today's quick notes, and recent past journal entries as context.\n\n"
        "TODAY'S DREAM (recorded this morning):\n"
        f"{_or_placeholder(today_dream, NO_DREAM_PLACEHOLDER)}\n\n"
        "RECENT PAST JOURNAL ENTRIES:\n"
        f"{_or_placeholder(recent_journals, NO_HISTORY_PLACEHOLDER)}\n\n"
        "TODAY'S QUICK NOTES:\n"
        f"{_or_placeholder(notes, NO_NOTES_PLACEHOLDER)}\n\n"
        "TODAY'S EVENING JOURNAL:\n"
        f"{journal_text}\n\n"
        f"Return a JSON object. {JSON_ONLY_INSTRUCTION}\n\n"
        f"{contract}\n\n"
        "Generate exactly 3 goals. Tailor them to this person's specific words and themes today."
    )
