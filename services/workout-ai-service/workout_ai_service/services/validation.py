"""Two independent gates between model text and a trusted Workout.

``parse_model_output`` turns free text into a JSON object or raises
``UnparsableOutputError``. ``validate_workout`` accepts or rejects that object
as a whole and raises ``WorkoutValidationError``; it never repairs fields.
"""

from __future__ import annotations

import json
from typing import Any

import structlog
from pydantic import ValidationError

from ..exceptions import UnparsableOutputError, WorkoutValidationError
from ..schemas.workout import Workout

logger = structlog.get_logger(__name__)

PREVIEW_CHARS = 500


def _extract_json_object(text: str) -> str:
    # models wrap JSON in prose or ```json fences; keep the outermost object
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        return text[start : end + 1]
    return text


def parse_model_output(text: str | None) -> dict[str, Any]:
    if text is None or not text.strip():
        raise UnparsableOutputError("Empty model output")

    candidate = _extract_json_object(text.strip())
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as exc:
        logger.warning("unparsable_output", error=str(exc), preview=candidate[:PREVIEW_CHARS])
        raise UnparsableOutputError("Invalid JSON from AI", preview=candidate[:PREVIEW_CHARS]) from exc

    if not isinstance(parsed, dict):
        logger.warning("unparsable_output", error="not an object", preview=candidate[:PREVIEW_CHARS])
        raise UnparsableOutputError("AI output is not a JSON object", preview=candidate[:PREVIEW_CHARS])

    return parsed


def _reject(reason: str, candidate: Any) -> WorkoutValidationError:
    preview = json.dumps(candidate, default=str)[:PREVIEW_CHARS]
    logger.warning("invalid_workout", reason=reason, preview=preview)
    return WorkoutValidationError(f"Invalid workout structure from AI: {reason}", preview=preview)


def validate_workout(candidate: Any, *, require_rationale: bool = False) -> Workout:
    if not isinstance(candidate, dict):
        raise _reject("expected an object", candidate)

    title = candidate.get("title")
    if not isinstance(title, str) or not title.strip():
        raise _reject("missing required field 'title'", candidate)

    if "sections" not in candidate:
        raise _reject("missing required field 'sections'", candidate)
    sections = candidate["sections"]
    if not isinstance(sections, list):
        raise _reject("'sections' must be a list", candidate)

    total_exercises = 0
    for section in sections:
        if not isinstance(section, dict):
            raise _reject("every section must be an object", candidate)
        exercises = section.get("exercises")
        if not isinstance(exercises, list):
            raise _reject("every section needs an 'exercises' list", candidate)
        total_exercises += len(exercises)
    if total_exercises == 0:
        raise _reject("workout has no exercises", candidate)

    duration = candidate.get("duration_minutes")
    if duration is not None and (isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0):
        raise _reject("'duration_minutes' must be a positive integer", candidate)

    if require_rationale:
        rationale = candidate.get("rationale")
        if not isinstance(rationale, str) or not rationale.strip():
            raise _reject("missing required field 'rationale'", candidate)

    # calories are derived by the pipeline, never taken from the model
    payload = {key: value for key, value in candidate.items() if key != "estimated_calories"}
    try:
        return Workout.model_validate(payload)
    except ValidationError as exc:
        raise _reject(f"{exc.error_count()} field error(s): {exc.errors()[0]['msg']}", candidate) from exc
