"""
journal.py - HTTP endpoints for dream and evening journal submissions

Endpoints (POST, JSON in / JSON out):
- /generate-goal-from-dream: dreamText, userId [, entryId, refreshGoals, quickNotes]
- /process-journal-entry:    journalText, userId [, entryId, dateString]

Request validation is the first dependency of each endpoint, so a 400 is
returned before the Firestore or Vertex dependencies are even resolved. Every
later failure is logged and answered with a fixed 500 message so no model
output or internal detail reaches the caller.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .gcp_clients import GenerationClient, get_firestore_client
from .store import JournalStore
from . import workflows

_logger = logging.getLogger(__name__)
router = APIRouter()

INTERNAL_ERROR_DETAIL = "Internal server error"

DREAM_PATH = "/generate-goal-from-dream"
JOURNAL_PATH = "/process-journal-entry"
REQUIRED_FIELDS = {
    DREAM_PATH: ("dreamText", "userId"),
    JOURNAL_PATH: ("journalText", "userId"),
}

_journal_store: Optional[JournalStore] = None
_generation_client: Optional[GenerationClient] = None


# -------------------------
# Dependency helpers
# -------------------------
def get_journal_store() -> JournalStore:
    """
    FastAPI dependency returning the process-wide JournalStore.
    Raises HTTPException(500) if the Firestore client cannot be created.
    """
    global _journal_store
    if _journal_store is None:
        client = get_firestore_client()
        if not client:
            raise HTTPException(status_code=500, detail=INTERNAL_ERROR_DETAIL)
        _journal_store = JournalStore(client)
    return _journal_store


def get_generation_client() -> GenerationClient:
    """FastAPI dependency returning the process-wide GenerationClient."""
    global _generation_client
    if _generation_client is None:
        _generation_client = GenerationClient()
    return _generation_client


def _required_detail(fields) -> str:
    return f"{' and '.join(fields)} are required"


def _require_text(payload: Dict[str, Any], *fields: str) -> Dict[str, Any]:
    """Raise HTTPException(400) unless every field is a non-blank string."""
    for name in fields:
        value = payload.get(name)
        if not isinstance(value, str) or not value.strip():
            raise HTTPException(status_code=400, detail=_required_detail(fields))
    return payload


def _quick_notes_text(value: Any) -> Optional[str]:
    """Inline notes may arrive as one string or a list of strings."""
    if isinstance(value, list):
        value = "\n".join(f"- {v.strip()}" for v in value if isinstance(v, str) and v.strip())
    if isinstance(value, str) and value.strip():
        return value
    return None


def dream_request(payload: Any = Body(None)) -> Dict[str, Any]:
    # Arrays, scalars and null count as an empty object.
    return _require_text(payload if isinstance(payload, dict) else {}, *REQUIRED_FIELDS[DREAM_PATH])


def journal_request(payload: Any = Body(None)) -> Dict[str, Any]:
    return _require_text(payload if isinstance(payload, dict) else {}, *REQUIRED_FIELDS[JOURNAL_PATH])


async def request_validation_handler(request: Request, exc: RequestValidationError):
    """
    Exception handler for RequestValidationError.
    A body FastAPI cannot decode (e.g. malformed JSON) on the journal routes is
    answered like a missing field: 400 with the required-fields message, and the
    submitted input is not echoed back. Other routes keep FastAPI's 422.
    """
    fields = REQUIRED_FIELDS.get(request.url.path)
    if fields is None:
        return await request_validation_exception_handler(request, exc)
    _logger.info("Rejected undecodable body on %s", request.url.path)
    return JSONResponse(status_code=400, content={"detail": _required_detail(fields)})


# -------------------------
# Endpoints
# -------------------------
@router.post(DREAM_PATH)
async def generate_goal_from_dream(
    payload: Dict[str, Any] = Depends(dream_request),
    store: JournalStore = Depends(get_journal_store),
    generator: GenerationClient = Depends(get_generation_client),
):
    """
    Generate today's goals, mood and insight from a morning dream.
    Returns the parsed Generation Result.
    """
    user_id = payload["userId"]
    try:
        return await workflows.generate_goal_from_dream(
            store,
            generator,
            user_id=user_id,
            dream_text=payload["dreamText"],
            entry_id=payload.get("entryId") or None,
            refresh_goals=payload.get("refreshGoals") is True,
            quick_notes=_quick_notes_text(payload.get("quickNotes")),
        )
    except Exception as e:
        _logger.exception("generate-goal-from-dream failed for user %s: %s", user_id, e)
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR_DETAIL)


@router.post(JOURNAL_PATH)
async def process_journal_entry(
    payload: Dict[str, Any] = Depends(journal_request),
    store: JournalStore = Depends(get_journal_store),
    generator: GenerationClient = Depends(get_generation_client),
):
    """
    Reflect on an evening journal entry. `dateString` defaults to today.
    Returns the parsed Generation Result.
    """
    user_id = payload["userId"]
    try:
        return await workflows.process_journal_entry(
            store,
            generator,
            user_id=user_id,
            journal_text=payload["journalText"],
            entry_id=payload.get("entryId") or None,
            date_string=payload.get("dateString") or None,
        )
    except Exception as e:
        _logger.exception("process-journal-entry failed for user %s: %s", user_id, e)
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR_DETAIL)
