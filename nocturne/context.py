"""
context.py - Context gathering for dream and journal submissions

Collects the prior entries a prompt needs and renders them as text blocks.
Missing history is not an error: the corresponding field is None and the prompt
builder substitutes a readable placeholder. Store failures propagate.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .store import JournalStore

_logger = logging.getLogger(__name__)

DREAM_HISTORY_LIMIT = 7
JOURNAL_HISTORY_LIMIT = 3
ENTRY_SEPARATOR = "\n\n---\n\n"


@dataclass
class DreamContext:
    journal_history: Optional[str]
    notes: Optional[str]


@dataclass
class JournalContext:
    today_dream: Optional[str]
    recent_journals: Optional[str]
    notes: Optional[str]


def format_journal_history(entries: List[Dict[str, Any]], include_mood: bool = False) -> Optional[str]:
    """Render journal entries as `Date/Entry[/Mood]` blocks separated by `---`."""
    if not entries:
        return None
    blocks = []
    for entry in entries:
        block = f"Date: {entry.get('dateString', '')}\nEntry: {entry.get('text', '')}"
        if include_mood:
            block += f"\nMood: {entry.get('mood') or 'unspecified'}"
        blocks.append(block)
    return ENTRY_SEPARATOR.join(blocks)


def format_notes(notes: List[Dict[str, Any]]) -> Optional[str]:
    texts = [n.get("text") for n in notes]
    lines = [f"- {t.strip()}" for t in texts if isinstance(t, str) and t.strip()]
    return "\n".join(lines) or None


def gather_dream_context(
    store: JournalStore,
    user_id: str,
    date_string: str,
    quick_notes: Optional[str] = None,
) -> DreamContext:
    """
    Context for a morning dream: the last 7 evening journals (with mood) and
    today's notes. Inline `quick_notes` replace the notes query.
    """
    journals = store.recent_journals(user_id, limit=DREAM_HISTORY_LIMIT)

    if quick_notes and quick_notes.strip():
        notes = quick_notes.strip()
    else:
        notes = format_notes(store.notes_for_date(user_id, date_string))

    _logger.debug("Dream context for user %s: %d journals, notes=%s", user_id, len(journals), bool(notes))
    return DreamContext(
        journal_history=format_journal_history(journals, include_mood=True),
        notes=notes,
    )


def gather_journal_context(store: JournalStore, user_id: str, date_string: str) -> JournalContext:
    """
    Context for an evening journal: this morning's dream, the 3 journals
    before today, and today's notes.
    """
    dream = store.dream_for_date(user_id, date_string)
    journals = store.journals_before(user_id, date_string, limit=JOURNAL_HISTORY_LIMIT)
    notes = store.notes_for_date(user_id, date_string)

    _logger.debug(
        "Journal context for user %s on %s: dream=%s, %d journals, %d notes",
        user_id, date_string, bool(dream), len(journals), len(notes),
    )
    return JournalContext(
        today_dream=(dream or {}).get("text") or None,
        recent_journals=format_journal_history(journals),
        notes=format_notes(notes),
    )
