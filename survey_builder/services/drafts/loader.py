"""Hydrate a draft from a survey already stored on the backend."""

import logging
import uuid
from typing import Any

from survey_builder.services.drafts.client import BackendClient, survey_owner
from survey_builder.services.drafts.models import (
    DEFAULT_MAX_RATING,
    DraftQuestion,
    QuestionType,
    RatingIcon,
    SurveyDraft,
    SurveyStatus,
    rating_scale,
)
from survey_builder.services.drafts.persistence import extract_question_id, extract_survey_id

logger = logging.getLogger(__name__)


def _question_type(raw: Any) -> QuestionType:
    try:
        return QuestionType(str(raw or "").strip().lower())
    except ValueError:
        logger.warning("Stored question has unknown type %r, editing it as text", raw)
        return QuestionType.TEXT


def _status(record: dict[str, Any]) -> SurveyStatus:
    try:
        return SurveyStatus(record.get("status"))
    except ValueError:
        return SurveyStatus.ACTIVE if record.get("isActive") else SurveyStatus.DRAFT


def question_from_record(record: dict[str, Any]) -> DraftQuestion:
    question_type = _question_type(record.get("questionType") or record.get("type"))
    choices = record.get("choices") or record.get("options")
    options = [str(choice) for choice in choices] if isinstance(choices, list) else None

    fields: dict[str, Any] = {}
    if question_type == QuestionType.RATING:
        max_rating = len(options) if options else DEFAULT_MAX_RATING
        fields = {
            "options": options or rating_scale(max_rating),
            "max_rating": max_rating,
            "rating_value": 0,
            "rating_icon": RatingIcon.STAR,
        }
    elif options is not None:
        fields = {"options": options}

    return DraftQuestion(
        local_id=f"r{uuid.uuid4().hex}",
        remote_id=extract_question_id(record),
        type=question_type,
        title=str(record.get("questionsText") or record.get("title") or ""),
        required=bool(record.get("required", False)),
        placeholder=record.get("placeholder"),
        description=record.get("description") or record.get("questionDescription"),
        **fields,
    )


async def load_draft(client: BackendClient, survey_id: str) -> SurveyDraft:
    """Fetch a survey and its questions and build an editable draft from them."""
    record = await client.get_survey(survey_id)
    questions = await client.get_questions_by_survey(survey_id)

    settings_raw = record.get("settings") if isinstance(record.get("settings"), dict) else {}
    draft = SurveyDraft(
        title=str(record.get("surveyName") or record.get("title") or ""),
        description=str(record.get("surveyDescription") or record.get("description") or ""),
        background_image=record.get("backgroundImage") or record.get("surveyBackgroundImage"),
        status=_status(record),
        category=str(record.get("category") or ""),
        tags=[str(tag) for tag in record.get("tags") or []],
        settings={
            "allow_anonymous": settings_raw.get("allowAnonymous", True),
            "show_progress_bar": settings_raw.get("showProgressBar", True),
            "allow_multiple_responses": settings_raw.get("allowMultipleResponses", False),
            "theme": settings_raw.get("theme", "light"),
        },
        questions=[question_from_record(q) for q in questions],
        survey_id=extract_survey_id(record) or survey_id,
        owner_id=survey_owner(record),
    )
    logger.info("Loaded survey %s for editing (%d questions)", draft.survey_id, len(draft.questions))
    return draft
