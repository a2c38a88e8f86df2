"""Survey draft Pydantic models."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class QuestionType(str, Enum):
    TEXT = "text"
    TEXTAREA = "textarea"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    SELECT = "select"
    RATING = "rating"
    DATE = "date"
    LOCATION = "location"
    PHONE = "phone"
    EMAIL = "email"
    NAME = "name"


class SurveyStatus(str, Enum):
    ACTIVE = "active"
    DRAFT = "draft"
    ARCHIVED = "archived"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    CUSTOM = "custom"


class RatingIcon(str, Enum):
    STAR = "star"
    HEART = "heart"
    THUMB = "thumb"


# Types whose options are answer choices
CHOICE_TYPES = frozenset({QuestionType.RADIO, QuestionType.CHECKBOX, QuestionType.SELECT})

# Types seeded with an (empty) placeholder
FREE_TEXT_TYPES = frozenset(
    {
        QuestionType.TEXT,
        QuestionType.TEXTAREA,
        QuestionType.DATE,
        QuestionType.LOCATION,
        QuestionType.PHONE,
        QuestionType.EMAIL,
        QuestionType.NAME,
    }
)

DEFAULT_MAX_RATING = 5


def rating_scale(max_rating: int = DEFAULT_MAX_RATING) -> list[str]:
    """Rating options are the scale encoded as stringified integers."""
    return [str(i) for i in range(1, max_rating + 1)]


class DraftSettings(BaseModel):
    allow_anonymous: bool = True
    show_progress_bar: bool = True
    allow_multiple_responses: bool = False
    theme: Theme = Theme.LIGHT


class DraftQuestion(BaseModel):
    """A question inside a draft.

    ``local_id`` is the only stable key before persistence and is never sent
    to the backend. ``remote_id`` is set once the backend has stored the
    question; only it may appear in a server call.
    """

    local_id: str
    remote_id: str | None = None
    type: QuestionType
    title: str = ""
    required: bool = False
    options: list[str] | None = None
    placeholder: str | None = None
    description: str | None = None

    # Rating only
    max_rating: int | None = Field(None, ge=1)
    rating_value: int | None = Field(None, ge=0)
    rating_icon: RatingIcon | None = None

    model_config = {"validate_assignment": True}

    @property
    def is_persisted(self) -> bool:
        return self.remote_id is not None


class SurveyDraft(BaseModel):
    """One survey under construction. Question order is the answer order."""

    title: str = ""
    description: str = ""
    background_image: str | None = None
    status: SurveyStatus = SurveyStatus.DRAFT
    category: str = ""
    tags: list[str] = Field(default_factory=list)
    settings: DraftSettings = Field(default_factory=DraftSettings)
    questions: list[DraftQuestion] = Field(default_factory=list)

    # Backend identity; None until phase 1 of the first save succeeds
    survey_id: str | None = None
    owner_id: str | None = None

    # Remote ids of persisted questions deleted since the last save
    removed_remote_ids: list[str] = Field(default_factory=list)

    model_config = {"validate_assignment": True}

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, value: list[str]) -> list[str]:
        seen: dict[str, None] = {}
        for tag in value:
            tag = tag.strip()
            if tag:
                seen.setdefault(tag, None)
        return list(seen)

    @field_validator("owner_id", "survey_id", mode="before")
    @classmethod
    def _stringify_id(cls, value):
        if value is None or isinstance(value, str):
            return value
        return str(value)


class QuestionSuggestion(BaseModel):
    """A candidate question proposed by the AI endpoint."""

    question: str
    type: QuestionType = QuestionType.TEXT
    options: list[str] | None = None
    reasoning: str = ""
    confidence: float = Field(0.0, ge=0.0, le=1.0)

    model_config = {"frozen": True}


class GeneratedQuestion(BaseModel):
    type: QuestionType = QuestionType.TEXT
    title: str
    options: list[str] | None = None
    required: bool = False
    description: str | None = None
    placeholder: str | None = None


class GeneratedSurvey(BaseModel):
    """A complete survey proposed by the AI endpoint, before it becomes a draft."""

    title: str
    description: str = ""
    category: str = ""
    estimated_duration: int = 0
    questions: list[GeneratedQuestion] = Field(default_factory=list)


class SaveResult(BaseModel):
    """Outcome of a fully successful save."""

    survey_id: str
    question_ids: dict[str, str | None] = Field(
        default_factory=dict,
        description="Map of local id to remote question id (None when the backend returned no id)",
    )
    deleted_question_ids: list[str] = Field(default_factory=list)
    unidentified_question_ids: list[str] = Field(
        default_factory=list,
        description="Local ids of questions stored without an id in the response; a retry re-creates them",
    )
