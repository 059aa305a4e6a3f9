"""Shared fixtures: an in-memory journal store and a scripted generation client.

The store double mirrors the query contract of `nocturne.store.JournalStore`
(ordering, limits, per-user scoping, all-or-nothing goal batches) without
touching Firestore.
"""

import itertools
import json
from typing import Any, Dict, List, Optional

import pytest

from nocturne.store import GOAL_SOURCE_AI


class FakeJournalStore:
    """In-memory stand-in for JournalStore."""

    def __init__(self):
        self.entries: Dict[str, List[Dict[str, Any]]] = {}
        self.goals: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.calls: List[str] = []
        self.fail_goal_batch = False
        self.fail_entry_update = False
        self.fail_reads = False
        self._ids = itertools.count(1)

    # -- seeding helpers
    def add_entry(self, user_id: str, **fields) -> str:
        entry_id = fields.pop("id", f"entry-{next(self._ids)}")
        self.entries.setdefault(user_id, []).append({"id": entry_id, **fields})
        return entry_id

    def entry(self, user_id: str, entry_id: str) -> Dict[str, Any]:
        return next(e for e in self.entries.get(user_id, []) if e["id"] == entry_id)

    def goals_for(self, user_id: str) -> List[Dict[str, Any]]:
        return list(self.goals.get(user_id, {}).values())

    def _read(self, name: str, user_id: str) -> List[Dict[str, Any]]:
        self.calls.append(name)
        if self.fail_reads:
            raise ConnectionError("firestore unavailable")
        return [dict(e) for e in self.entries.get(user_id, [])]

    # -- JournalStore interface
    def recent_journals(self, user_id: str, limit: int = 7):
        journals = [e for e in self._read("recent_journals", user_id) if e.get("type") == "journal"]
        journals.sort(key=lambda e: e.get("timestamp", 0), reverse=True)
        return journals[:limit]

    def journals_before(self, user_id: str, date_string: str, limit: int = 3):
        journals = [
            e for e in self._read("journals_before", user_id)
            if e.get("type") == "journal" and e.get("dateString", "") < date_string
        ]
        journals.sort(key=lambda e: e.get("dateString", ""), reverse=True)
        return journals[:limit]

    def dream_for_date(self, user_id: str, date_string: str) -> Optional[Dict[str, Any]]:
        dreams = [
            e for e in self._read("dream_for_date", user_id)
            if e.get("type") == "dream" and e.get("dateString") == date_string
        ]
        return dreams[0] if dreams else None

    def notes_for_date(self, user_id: str, date_string: str):
        notes = [
            e for e in self._read("notes_for_date", user_id)
            if e.get("type") == "note" and e.get("dateString") == date_string
        ]
        return sorted(notes, key=lambda e: str(e.get("timestamp") or ""))

    def update_entry_ai_result(self, user_id, entry_id, ai_result, mood):
        self.calls.append("update_entry_ai_result")
        if self.fail_entry_update:
            raise ConnectionError("update failed")
        entry = self.entry(user_id, entry_id)
        entry.update({"aiResult": ai_result, "mood": mood, "aiProcessedAt": "SERVER_TIMESTAMP"})

    def create_goals(self, user_id, goals):
        self.calls.append("create_goals")
        if self.fail_goal_batch:
            raise ConnectionError("batch commit failed")
        staged = {f"goal-{next(self._ids)}": {**g, "userId": user_id} for g in goals}
        self.goals.setdefault(user_id, {}).update(staged)
        return list(staged)

    def delete_ai_goals(self, user_id, date_string):
        self.calls.append("delete_ai_goals")
        user_goals = self.goals.get(user_id, {})
        doomed = [
            gid for gid, g in user_goals.items()
            if g.get("source") == GOAL_SOURCE_AI and g.get("dateString") == date_string
        ]
        for gid in doomed:
            del user_goals[gid]
        return len(doomed)


class ScriptedGenerator:
    """Generation client double returning canned text (or raising)."""

    def __init__(self, response: Any = None):
        self.response = response
        self.calls: List[Dict[str, Any]] = []

    async def generate(self, prompt_text: str, temperature: float) -> str:
        self.calls.append({"prompt": prompt_text, "temperature": temperature})
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


FLYING_RESULT = {
    "goals": [
        {"text": "Take a walk outside", "icon": "🚶", "why": "Flying suggested a need for freedom"},
        {"text": "Sketch the glass city", "icon": "🎨", "why": "Capture the image while it is vivid"},
        {"text": "Call a friend tonight", "icon": "📞", "why": "Share the lightness you felt"},
    ],
    "mood": "curious",
    "insight": "Your dream returns to open spaces. Recent evenings mention feeling boxed in.",
}


@pytest.fixture
def fake_store():
    return FakeJournalStore()


@pytest.fixture
def flying_result():
    return json.loads(json.dumps(FLYING_RESULT))


@pytest.fixture
def generator(flying_result):
    return ScriptedGenerator(json.dumps(flying_result))


@pytest.fixture
def fixed_today(monkeypatch):
    """Pin the server-local date used by the workflows."""
    today = "2026-10-19"
    monkeypatch.setattr("nocturne.workflows.today_date_string", lambda: today)
    return today


@pytest.fixture
def make_generator():
    return ScriptedGenerator
