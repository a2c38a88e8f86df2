"""AI question suggestions and complete-survey generation.

The AI endpoint speaks a wider type vocabulary than the draft. Every type it
returns goes through ``AI_TYPE_MAP``; anything unknown becomes a text question.
"""

import logging
import math
from typing import Any

from survey_builder.core.config import settings
from survey_builder.services.drafts.client import BackendClient
from survey_builder.services.drafts.exceptions import (
    BackendError,
    NetworkError,
    SuggestionError,
    ValidationError,
)
from survey_builder.services.drafts.models import (
    GeneratedQuestion,
    GeneratedSurvey,
    QuestionSuggestion,
    QuestionType,
    SurveyDraft,
)

logger = logging.getLogger(__name__)

AI_TYPE_MAP: dict[str, QuestionType] = {
    "multiple_choice": QuestionType.RADIO,
    "single_choice": QuestionType.RADIO,
    "radio": QuestionType.RADIO,
    "yes_no": QuestionType.RADIO,
    "boolean": QuestionType.RADIO,
    "checkbox": QuestionType.CHECKBOX,
    "multiple_select": QuestionType.CHECKBOX,
    "multi_select": QuestionType.CHECKBOX,
    "dropdown": QuestionType.SELECT,
    "select": QuestionType.SELECT,
    "rating": QuestionType.RATING,
    "scale": QuestionType.RATING,
    "text": QuestionType.TEXT,
    "short_text": QuestionType.TEXT,
    "textarea": QuestionType.TEXTAREA,
    "paragraph": QuestionType.TEXTAREA,
    "long_text": QuestionType.TEXTAREA,
    "date": QuestionType.DATE,
    "email": QuestionType.EMAIL,
    "phone": QuestionType.PHONE,
    "location": QuestionType.LOCATION,
    "name": QuestionType.NAME,
    "full_name": QuestionType.NAME,
}

_YES_NO_TYPES = frozenset({"yes_no", "boolean"})
YES_NO_OPTIONS = ["Yes", "No"]

_STATUS_MESSAGES = {
    400: "The survey context was rejected by the AI service.",
    401: "Authentication is required. Please sign in again.",
    404: "The AI service could not be found.",
    500: "The AI service is currently unavailable. Please try again later.",
}


def map_ai_type(raw_type: Any) -> QuestionType:
    key = str(raw_type or "").strip().lower()
    mapped = AI_TYPE_MAP.get(key)
    if mapped is None:
        if key:
            logger.warning("Unknown AI question type %r, using text", raw_type)
        return QuestionType.TEXT
    return mapped


def _options(raw_type: Any, raw_options: Any) -> list[str] | None:
    options = [str(opt) for opt in raw_options] if isinstance(raw_options, list) else []
    if not options and str(raw_type or "").strip().lower() in _YES_NO_TYPES:
        return list(YES_NO_OPTIONS)
    return options or None


def _clamp_confidence(value: Any) -> float:
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(confidence):
        return 0.0
    return max(0.0, min(1.0, confidence))


def parse_suggestion(raw: dict[str, Any]) -> QuestionSuggestion | None:
    """Build a suggestion from one AI record; records without text are dropped."""
    text = str(raw.get("question") or raw.get("questionsText") or raw.get("question_text") or "").strip()
    if not text:
        return None
    raw_type = raw.get("type") or raw.get("questionType") or raw.get("question_type")
    return QuestionSuggestion(
        question=text,
        type=map_ai_type(raw_type),
        options=_options(raw_type, raw.get("options") or raw.get("choices")),
        reasoning=str(raw.get("reasoning") or ""),
        confidence=_clamp_confidence(raw.get("confidence")),
    )


def suggestion_context(draft: SurveyDraft) -> dict[str, Any]:
    """Read-only snapshot of the draft sent to the AI endpoint."""
    return {
        "surveyTitle": draft.title,
        "surveyDescription": draft.description,
        "existingQuestions": [q.title for q in draft.questions if q.title.strip()],
        "category": draft.category,
    }


def validate_ai_description(description: str) -> str:
    """Return the trimmed description or raise ValidationError."""
    trimmed = description.strip()
    if not trimmed:
        raise ValidationError("Please enter a survey description.")
    if len(trimmed) < settings.AI_DESCRIPTION_MIN_LENGTH:
        raise ValidationError(
            f"The description must be at least {settings.AI_DESCRIPTION_MIN_LENGTH} characters."
        )
    if len(trimmed) > settings.AI_DESCRIPTION_MAX_LENGTH:
        raise ValidationError(
            f"The description can be at most {settings.AI_DESCRIPTION_MAX_LENGTH} characters."
        )
    return trimmed


def _to_suggestion_error(exc: BackendError) -> SuggestionError:
    if isinstance(exc, NetworkError):
        return SuggestionError("Connection error. Check your internet connection.")
    if exc.status_code == 400 and exc.message:
        return SuggestionError(exc.message, status_code=400)
    message = _STATUS_MESSAGES.get(exc.status_code, "An error occurred while contacting the AI service.")
    return SuggestionError(message, status_code=exc.status_code)


class SuggestionService:
    def __init__(self, client: BackendClient) -> None:
        self.client = client

    async def fetch_suggestions(self, draft: SurveyDraft) -> list[QuestionSuggestion]:
        """Ask the AI endpoint for question ideas. The draft is only read."""
        context = suggestion_context(draft)
        try:
            data = await self.client.generate_questions(context)
        except BackendError as exc:
            logger.error("AI suggestion request failed: %s", exc.message)
            raise _to_suggestion_error(exc) from exc

        records = data.get("suggestions") if isinstance(data, dict) else data
        if records is None:
            return []
        if not isinstance(records, list):
            raise SuggestionError("The AI service returned an unexpected response.")

        suggestions = [s for s in (parse_suggestion(r) for r in records if isinstance(r, dict)) if s is not None]
        logger.info("Received %d AI suggestions for %r", len(suggestions), draft.title)
        return suggestions

    async def generate_survey(self, description: str, language: str = "tr") -> GeneratedSurvey:
        """Generate a complete survey from a free-text description."""
        trimmed = validate_ai_description(description)
        try:
            data = await self.client.generate_complete_survey(trimmed, language)
            if isinstance(data, dict) and not data.get("questions") and data.get("id"):
                # Some backends store the survey and return only its id
                data = {**data, "questions": await self._questions_for(str(data["id"]))}
        except BackendError as exc:
            logger.error("AI survey generation failed: %s", exc.message)
            raise _to_suggestion_error(exc) from exc

        if not isinstance(data, dict):
            raise SuggestionError("The AI service returned an unexpected response.")
        return parse_generated_survey(data)

    async def _questions_for(self, survey_id: str) -> list[dict[str, Any]]:
        survey = await self.client.get_survey(survey_id)
        questions = survey.get("questions")
        return questions if isinstance(questions, list) else []


def parse_generated_survey(data: dict[str, Any]) -> GeneratedSurvey:
    questions = []
    for raw in data.get("questions") or []:
        if not isinstance(raw, dict):
            continue
        raw_type = raw.get("questionType") or raw.get("question_type") or raw.get("type")
        title = str(raw.get("questionsText") or raw.get("question_text") or raw.get("question") or raw.get("title") or "")
        questions.append(
            GeneratedQuestion(
                type=map_ai_type(raw_type),
                title=title.strip(),
                options=_options(raw_type, raw.get("choices") or raw.get("options")),
                required=bool(raw.get("required", False)),
            )
        )

    duration = data.get("estimatedDuration") or data.get("estimated_duration")
    if not isinstance(duration, int):
        duration = max(2, math.ceil(len(questions) * 0.5))

    return GeneratedSurvey(
        title=str(data.get("surveyName") or data.get("survey_title") or data.get("title") or "AI Generated Survey"),
        description=str(
            data.get("surveyDescription") or data.get("survey_description") or data.get("description") or ""
        ),
        category=str(data.get("category") or "General"),
        estimated_duration=duration,
        questions=questions,
    )
