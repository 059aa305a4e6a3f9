"""
store.py - Firestore access for journal entries and goals

All reads and writes are scoped to a single user document:

    users/{userId}/entries/{entryId}
    users/{userId}/goals/{goalId}

The store is a thin query layer: it returns plain dicts and never formats text
or decides policy. Multi-document writes go through one `WriteBatch` so they
commit all-or-nothing.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

_logger = logging.getLogger(__name__)

FIRESTORE_USERS_COLLECTION = "users"
FIRESTORE_ENTRIES_SUBCOLLECTION = "entries"
FIRESTORE_GOALS_SUBCOLLECTION = "goals"

ENTRY_TYPE_DREAM = "dream"
ENTRY_TYPE_JOURNAL = "journal"
ENTRY_TYPE_NOTE = "note"

GOAL_SOURCE_AI = "ai"


class JournalStore:
    """Per-user queries and writes over a Firestore client."""

    def __init__(self, client: firestore.Client):
        self._client = client

    # -------------------------
    # References
    # -------------------------
    def _user_ref(self, user_id: str):
        return self._client.collection(FIRESTORE_USERS_COLLECTION).document(user_id)

    def _entries(self, user_id: str):
        return self._user_ref(user_id).collection(FIRESTORE_ENTRIES_SUBCOLLECTION)

    def _goals(self, user_id: str):
        return self._user_ref(user_id).collection(FIRESTORE_GOALS_SUBCOLLECTION)

    @staticmethod
    def _to_dicts(docs: Iterable[Any]) -> List[Dict[str, Any]]:
        out = []
        for doc in docs:
            data = doc.to_dict() or {}
            data["id"] = doc.id
            out.append(data)
        return out

    # -------------------------
    # Entry queries
    # -------------------------
    def recent_journals(self, user_id: str, limit: int = 7) -> List[Dict[str, Any]]:
        """Most recent journal entries, newest `timestamp` first."""
        query = (
            self._entries(user_id)
            .where(filter=FieldFilter("type", "==", ENTRY_TYPE_JOURNAL))
            .order_by("timestamp", direction=firestore.Query.DESCENDING)
            .limit(limit)
        )
        return self._to_dicts(query.stream())

    def journals_before(self, user_id: str, date_string: str, limit: int = 3) -> List[Dict[str, Any]]:
        """Journal entries dated strictly before `date_string`, newest date first."""
        query = (
            self._entries(user_id)
            .where(filter=FieldFilter("type", "==", ENTRY_TYPE_JOURNAL))
            .where(filter=FieldFilter("dateString", "<", date_string))
            .order_by("dateString", direction=firestore.Query.DESCENDING)
            .limit(limit)
        )
        return self._to_dicts(query.stream())

    def dream_for_date(self, user_id: str, date_string: str) -> Optional[Dict[str, Any]]:
        """The first dream entry recorded for `date_string`, or None."""
        query = (
            self._entries(user_id)
            .where(filter=FieldFilter("type", "==", ENTRY_TYPE_DREAM))
            .where(filter=FieldFilter("dateString", "==", date_string))
            .limit(1)
        )
        docs = self._to_dicts(query.stream())
        return docs[0] if docs else None

    def notes_for_date(self, user_id: str, date_string: str) -> List[Dict[str, Any]]:
        """All note entries for `date_string`, oldest first."""
        query = (
            self._entries(user_id)
            .where(filter=FieldFilter("type", "==", ENTRY_TYPE_NOTE))
            .where(filter=FieldFilter("dateString", "==", date_string))
        )
        notes = self._to_dicts(query.stream())
        # Sorted here rather than in the query to avoid another composite index.
        return sorted(notes, key=lambda n: str(n.get("timestamp") or ""))

    # -------------------------
    # Writes
    # -------------------------
    def update_entry_ai_result(self, user_id: str, entry_id: str, ai_result: Dict[str, Any], mood: str) -> None:
        """Attach a generation result to an existing entry."""
        self._entries(user_id).document(entry_id).update({
            "aiResult": ai_result,
            "mood": mood,
            "aiProcessedAt": firestore.SERVER_TIMESTAMP,
        })

    def create_goals(self, user_id: str, goals: List[Dict[str, Any]]) -> List[str]:
        """
        Write all goal documents in one batch and return their ids.
        `createdAt` and `userId` are filled in here.
        """
        if not goals:
            return []
        batch = self._client.batch()
        goal_ids = []
        for goal in goals:
            goal_ref = self._goals(user_id).document()
            batch.set(goal_ref, {**goal, "userId": user_id, "createdAt": firestore.SERVER_TIMESTAMP})
            goal_ids.append(goal_ref.id)
        batch.commit()
        _logger.debug("Committed %d goals for user %s", len(goal_ids), user_id)
        return goal_ids

    def delete_ai_goals(self, user_id: str, date_string: str) -> int:
        """Delete every AI-sourced goal of `date_string` in one batch. Returns the count."""
        query = (
            self._goals(user_id)
            .where(filter=FieldFilter("source", "==", GOAL_SOURCE_AI))
            .where(filter=FieldFilter("dateString", "==", date_string))
        )
        docs = list(query.stream())
        if not docs:
            return 0
        batch = self._client.batch()
        for doc in docs:
            batch.delete(doc.reference)
        batch.commit()
        return len(docs)
