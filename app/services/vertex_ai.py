# app/services/vertex_ai.py
# Vertex AI / Gemini service wrapper
#
# One entry point used by the AI collaborators:
#   generate_json(prompt) -- strict-JSON completion, parsed
#
# Callers:
#   app/services/question_generator.py  (quiz questions)
#   app/services/cv_matching.py         (course suggestions from a CV)

import json
import re
from typing import Any

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger("vertex_ai")


class VertexAIError(RuntimeError):
    """Gemini could not be reached or returned unusable output."""


def _get_credentials():
    """
    Service-account credentials when a key path is configured,
    Application Default Credentials otherwise.
    """
    if settings.google_service_account_key_path:
        from google.oauth2 import service_account
        return service_account.Credentials.from_service_account_file(
            settings.google_service_account_key_path
        )

    import google.auth
    credentials, _project = google.auth.default()
    return credentials


def _get_model():
    if not settings.gcp_project_id:
        raise VertexAIError("GCP_PROJECT_ID is not configured.")

    import vertexai
    from vertexai.generative_models import GenerativeModel

    vertexai.init(
        project=settings.gcp_project_id,
        location=settings.vertex_ai_location,
        credentials=_get_credentials(),
    )
    return GenerativeModel(settings.gemini_model)


def _strip_code_fences(raw_text: str) -> str:
    raw_text = raw_text.strip()
    if raw_text.startswith("```"):
        raw_text = re.sub(r"^```[a-z]*\n?", "", raw_text)
        raw_text = re.sub(r"\n?```$", "", raw_text)
    return raw_text


def generate_json(prompt: str, temperature: float = 0.3) -> Any:
    """
    Run a prompt that must answer with a single JSON document.
    Raises VertexAIError on transport failure or invalid JSON.
    """
    try:
        model = _get_model()
        response = model.generate_content(
            prompt,
            generation_config={
                "temperature": temperature,
                "top_p": 0.8,
                "max_output_tokens": 4096,
                "response_mime_type": "application/json",
            },
        )
        raw_text = response.text
    except VertexAIError:
        raise
    except Exception as e:
        logger.warning(f"Gemini request failed: {e}")
        raise VertexAIError(str(e)) from e

    try:
        return json.loads(_strip_code_fences(raw_text))
    except json.JSONDecodeError as e:
        logger.warning("Gemini returned invalid JSON")
        raise VertexAIError("Model returned invalid JSON.") from e
