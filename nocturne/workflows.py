"""
workflows.py - Dream and journal generation pipelines

Each request runs the same stages strictly in order:
    gather context -> build prompt -> generate -> parse -> persist

Errors from the first four stages propagate to the caller (the HTTP layer turns
them into a 500). Persistence failures are logged and the parsed result is
still returned.
"""

import logging
from typing import Any, Dict, Optional

from .context import gather_dream_context, gather_journal_context
from .gcp_clients import GenerationClient
from .parsing import ResponseParseError, parse_generation_result
from .persistence import persist_generation_result
from .prompts import build_dream_prompt, build_journal_prompt
from .store import JournalStore
from .utils import today_date_string

_logger = logging.getLogger(__name__)

DREAM_TEMPERATURE = 0.8
JOURNAL_TEMPERATURE = 0.75


async def _generate_and_parse(generator: GenerationClient, prompt: str, temperature: float) -> Dict[str, Any]:
    raw = await generator.generate(prompt, temperature=temperature)
    try:
        parsed = parse_generation_result(raw)
    except ResponseParseError as e:
        _logger.error("Model output was not valid JSON. Raw prefix: %s", e.raw_prefix)
        raise
    return parsed


def _persist(store: JournalStore, user_id: str, entry_id: Optional[str], result: Dict[str, Any], date_string: str) -> None:
    report = persist_generation_result(store, user_id, entry_id, result, date_string)
    if report.errors:
        _logger.warning(
            "Returning result for user %s with incomplete persistence (%s); entry_updated=%s, goals=%d",
            user_id, ", ".join(report.errors), report.entry_updated, len(report.goal_ids),
        )


async def generate_goal_from_dream(
    store: JournalStore,
    generator: GenerationClient,
    user_id: str,
    dream_text: str,
    entry_id: Optional[str] = None,
    refresh_goals: bool = False,
    quick_notes: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Turn a morning dream into today's goals, mood and insight.

    With `refresh_goals`, today's AI goals are deleted first so regenerating
    replaces the set instead of adding another one.
    """
    today = today_date_string()

    if refresh_goals:
        deleted = store.delete_ai_goals(user_id, today)
        _logger.info("Refresh requested: deleted %d AI goals for user %s on %s", deleted, user_id, today)

    context = gather_dream_context(store, user_id, today, quick_notes=quick_notes)
    prompt = build_dream_prompt(dream_text, context.journal_history, context.notes)
    result = await _generate_and_parse(generator, prompt, DREAM_TEMPERATURE)

    _persist(store, user_id, entry_id, result, today)
    return result


async def process_journal_entry(
    store: JournalStore,
    generator: GenerationClient,
    user_id: str,
    journal_text: str,
    entry_id: Optional[str] = None,
    date_string: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Reflect on an evening journal using this morning's dream and the recent
    evenings before it.
    """
    today = today_date_string()
    entry_date = date_string or today

    context = gather_journal_context(store, user_id, entry_date)
    prompt = build_journal_prompt(journal_text, context.today_dream, context.recent_journals, context.notes)
    result = await _generate_and_parse(generator, prompt, JOURNAL_TEMPERATURE)

    _persist(store, user_id, entry_id, result, today)
    return result
