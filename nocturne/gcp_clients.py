"""
gcp_clients.py - Google Cloud + Vertex AI helpers for the Nocturne backend

This module wires the two external collaborators of the journal service:
1. Firestore (entries and goals, stored under each user document)
2. Vertex AI Generative Models (dream / journal reflections)

Main Features:
- Loads environment variables from a `.env` file if one is available.
- Exposes `get_firestore_client()` for Firestore database operations.
- Provides `GenerationClient`, a small object wrapping one Vertex model with a
  fixed output-size ceiling and a JSON response hint. It is constructed once
  and injected into the request handlers, so tests can swap in a double.

The generation client is a pass-through: it does not parse, validate or retry.
Whatever the model returns is handed back verbatim, or `GenerationError` is raised.
"""

import os
import logging
from typing import Optional

from dotenv import load_dotenv, find_dotenv
from google.cloud import firestore

import vertexai
from vertexai.generative_models import GenerationConfig, GenerativeModel

_logger = logging.getLogger(__name__)
_logger.addHandler(logging.NullHandler())

# --- Load environment variables on import ---
try:
    _env_path = find_dotenv(usecwd=True)
    if _env_path:
        load_dotenv(_env_path, override=False)
        _logger.debug("Loaded .env from %s", _env_path)
except Exception as e:
    _logger.warning("Error loading .env: %s", e)

# --- Environment Configurations (defaults provided) ---
GCP_PROJECT: Optional[str] = os.environ.get("GCP_PROJECT")
GCP_LOCATION: str = os.environ.get("GCP_LOCATION", "us-central1")
VERTEX_MODEL_NAME: str = os.environ.get("VERTEX_MODEL_NAME", "gemini-2.0-flash")
# Large enough for three goals plus a short insight without truncation.
MAX_OUTPUT_TOKENS: int = int(os.environ.get("GENERATION_MAX_OUTPUT_TOKENS", "1024"))

_logger.debug(
    "GCP_PROJECT=%s, GCP_LOCATION=%s, VERTEX_MODEL_NAME=%s, MAX_OUTPUT_TOKENS=%d",
    GCP_PROJECT,
    GCP_LOCATION,
    VERTEX_MODEL_NAME,
    MAX_OUTPUT_TOKENS,
)

_vertex_initialized = False


class GenerationError(RuntimeError):
    """The model call failed or produced no text."""


def init_vertex() -> None:
    """
    Initialize the Vertex AI SDK for this process.
    Safe to call multiple times; failures are raised to the caller.
    """
    global _vertex_initialized
    if _vertex_initialized:
        return

    _logger.info("Initializing Vertex AI: project=%s, location=%s", GCP_PROJECT, GCP_LOCATION)
    vertexai.init(project=GCP_PROJECT, location=GCP_LOCATION)
    _vertex_initialized = True
    _logger.info("Vertex AI initialized successfully")


class GenerationClient:
    """
    Thin wrapper over a Vertex `GenerativeModel`.

    Args:
        model_name: Vertex model id; defaults to VERTEX_MODEL_NAME.
        max_output_tokens: Output-size ceiling for every call.
    """

    def __init__(self, model_name: Optional[str] = None, max_output_tokens: int = MAX_OUTPUT_TOKENS):
        self.model_name = model_name or VERTEX_MODEL_NAME
        self.max_output_tokens = max_output_tokens
        self._model: Optional[GenerativeModel] = None

    def _get_model(self) -> GenerativeModel:
        if self._model is None:
            init_vertex()
            self._model = GenerativeModel(self.model_name)
        return self._model

    def generation_config(self, temperature: float) -> GenerationConfig:
        return GenerationConfig(
            temperature=temperature,
            max_output_tokens=self.max_output_tokens,
            response_mime_type="application/json",
        )

    async def generate(self, prompt_text: str, temperature: float) -> str:
        """
        Send one prompt to the model and return its raw text.

        Raises:
            GenerationError: on any provider failure, a safety block, or empty output.
        """
        try:
            model = self._get_model()
            response = await model.generate_content_async(
                prompt_text,
                generation_config=self.generation_config(temperature),
            )
        except Exception as e:
            raise GenerationError(f"Vertex AI generation failed: {e}") from e

        if not response.candidates:
            _logger.warning("Vertex AI response was blocked. Prompt Feedback: %s", response.prompt_feedback)
            raise GenerationError("Vertex AI returned no candidates")

        parts = response.candidates[0].content.parts
        text = "".join(part.text for part in parts if getattr(part, "text", None))
        if not text.strip():
            raise GenerationError("Vertex AI returned an empty response")
        return text


def get_firestore_client() -> Optional[firestore.Client]:
    """
    Initialize and return a Firestore client.

    Returns:
        Firestore client instance, or None on failure.
    """
    try:
        _logger.debug("Initializing Firestore client for project: %s", GCP_PROJECT)
        return firestore.Client(project=GCP_PROJECT)
    except Exception as e:
        _logger.exception("Firestore client initialization failed: %s", e)
        return None
