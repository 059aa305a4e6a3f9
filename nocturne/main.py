"""
main.py - FastAPI application entrypoint for the Nocturne journal backend

Purpose:
- Exposes the two submission endpoints (dream and evening journal) from
  `journal.router`, with CORS enabled for the browser frontend.
- Orchestration lives in `workflows.py`:
    gather context (Firestore) -> build prompt -> Vertex AI -> parse -> persist (Firestore)

Design/behavioral notes:
- Firestore and Vertex clients are created once per process and handed to the
  endpoints through FastAPI dependencies (see `journal.get_journal_store` and
  `journal.get_generation_client`).
- Handlers are stateless; nothing is shared between requests except Firestore.
"""

import os
import logging
from datetime import datetime

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from .gcp_clients import VERTEX_MODEL_NAME, init_vertex
from . import journal

# Configure logging (configurable via LOG_LEVEL env var)
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
_logger = logging.getLogger(__name__)

CORS_ALLOW_ORIGINS = [o.strip() for o in os.environ.get("CORS_ALLOW_ORIGINS", "*").split(",") if o.strip()]

app = FastAPI(title="Nocturne Journal Backend")
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)
app.add_exception_handler(RequestValidationError, journal.request_validation_handler)
app.include_router(journal.router)


# -------------------------
# Startup event
# -------------------------
@app.on_event("startup")
async def startup_event():
    """
    App startup hook:
    - Logs startup and attempts to initialize Vertex AI (best-effort; the
      generation client retries initialization on first use).
    """
    _logger.info("Nocturne journal backend starting up")
    try:
        init_vertex()
    except Exception as e:
        _logger.warning("Vertex init failed or unavailable: %s", e)


@app.get("/health")
async def health_check():
    """Liveness plus whether a Vertex model is configured."""
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "vertex_model": VERTEX_MODEL_NAME,
    }


# -------------------------
# Run with Uvicorn when executed directly
# -------------------------
if __name__ == "__main__":
    import uvicorn
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("nocturne.main:app", host="0.0.0.0", port=port)
