from typing import Any

from pydantic import BaseModel, Field

from survey_builder.services.drafts.models import (
    DraftQuestion,
    DraftSettings,
    GeneratedSurvey,
    QuestionSuggestion,
    QuestionType,
    RatingIcon,
    SurveyDraft,
    SurveyStatus,
)

# ---------------------------------------------------------------------------
# Builder session schemas
# ---------------------------------------------------------------------------


class SessionCreate(BaseModel):
    """Start a builder session. At most one source may be given."""

    template: str | None = Field(None, description="Template catalog key")
    from_handoff: bool = Field(False, description="Consume the AI generated survey handoff slot")
    survey_id: str | None = Field(None, description="Load a stored survey for editing")
    owner_id: str | None = None


class SessionResponse(BaseModel):
    session_id: str
    draft: SurveyDraft
    pending_suggestions: list[QuestionSuggestion]
    is_saving: bool


class DraftMetadataUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
    background_image: str | None = None
    status: SurveyStatus | None = None
    category: str | None = None
    tags: list[str] | None = None
    settings: DraftSettings | None = None
    owner_id: str | None = None


# ---------------------------------------------------------------------------
# Question schemas
# ---------------------------------------------------------------------------


class QuestionAdd(BaseModel):
    type: QuestionType


class QuestionUpdate(BaseModel):
    type: QuestionType | None = None
    title: str | None = None
    required: bool | None = None
    options: list[str] | None = None
    placeholder: str | None = None
    description: str | None = None
    max_rating: int | None = Field(None, ge=1)
    rating_value: int | None = Field(None, ge=0)
    rating_icon: RatingIcon | None = None


class QuestionMove(BaseModel):
    to_index: int = Field(..., ge=0)


class QuestionListResponse(BaseModel):
    items: list[DraftQuestion]
    total: int


# ---------------------------------------------------------------------------
# AI and survey schemas
# ---------------------------------------------------------------------------


class SurveyGenerateRequest(BaseModel):
    description: str
    language: str = "tr"


class SurveyGenerateResponse(BaseModel):
    survey: GeneratedSurvey
    handoff_key: str


class TemplateSummary(BaseModel):
    key: str
    name: str
    question_count: int


class SurveyListResponse(BaseModel):
    items: list[dict[str, Any]]
    total: int


class ErrorResponse(BaseModel):
    status: str = "error"
    error: str
    message: str
