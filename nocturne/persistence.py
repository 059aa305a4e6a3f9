"""
persistence.py - Apply a parsed Generation Result to Firestore

Persistence is best-effort: the caller has already got a valid result, so a
failed entry update or goal batch is logged and reported in the returned
summary but never raised.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .store import GOAL_SOURCE_AI, JournalStore

_logger = logging.getLogger(__name__)

DEFAULT_MOOD = "peaceful"
DEFAULT_GOAL_ICON = "✨"


@dataclass
class PersistenceReport:
    entry_updated: bool = False
    goal_ids: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def build_ai_goals(result: Dict[str, Any], source_entry_id: Optional[str], date_string: str) -> List[Dict[str, Any]]:
    """Goal documents for every dict element of `result["goals"]`, in order."""
    goals = result.get("goals")
    if not isinstance(goals, list):
        return []

    documents = []
    for goal in goals:
        if not isinstance(goal, dict):
            _logger.warning("Skipping malformed goal from model output: %r", goal)
            continue
        documents.append({
            "text": goal.get("text"),
            "icon": goal.get("icon") or DEFAULT_GOAL_ICON,
            "why": goal.get("why") or "",
            "source": GOAL_SOURCE_AI,
            "sourceEntryId": source_entry_id or None,
            "completed": False,
            "dateString": date_string,
        })
    return documents


def persist_generation_result(
    store: JournalStore,
    user_id: str,
    entry_id: Optional[str],
    result: Dict[str, Any],
    date_string: str,
) -> PersistenceReport:
    """
    Attach `result` to the originating entry (if any) and write its goals as
    one atomic batch.
    """
    report = PersistenceReport()

    if entry_id:
        try:
            store.update_entry_ai_result(user_id, entry_id, result, result.get("mood") or DEFAULT_MOOD)
            report.entry_updated = True
        except Exception as e:
            _logger.exception("Failed to update entry %s for user %s: %s", entry_id, user_id, e)
            report.errors.append("entry_update")

    goals = build_ai_goals(result, entry_id, date_string)
    if goals:
        try:
            report.goal_ids = store.create_goals(user_id, goals)
            _logger.info("Saved %d AI goals for user %s on %s", len(report.goal_ids), user_id, date_string)
        except Exception as e:
            _logger.exception("Failed to save goals for user %s: %s", user_id, e)
            report.errors.append("goal_batch")

    return report
