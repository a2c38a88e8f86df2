"""Survey draft service: draft model, mutation API, two-phase save, AI suggestions.

Public API:
    - DraftEditor: In-memory mutation API over one SurveyDraft.
    - SurveyPersister: Two-phase save (survey, then questions) to the backend.
    - SuggestionService: AI question suggestions and complete-survey generation.
    - BackendClient: Async REST client for surveys, questions and AI endpoints.
    - BuilderSession / SessionRegistry: Editing sessions with a guarded save.
    - HandoffSlot: One-shot slot handing an AI generated survey to the builder.
    - load_draft: Hydrate a draft from a stored survey for editing.
    - templates: Starter survey catalog (get_template, match_template).
"""

from survey_builder.services.drafts.client import BackendClient
from survey_builder.services.drafts.editor import DraftEditor, type_defaults
from survey_builder.services.drafts.exceptions import (
    BackendError,
    HandoffError,
    NetworkError,
    PartialPersistenceError,
    QuestionCreateError,
    QuestionNotFoundError,
    SaveError,
    SaveInProgressError,
    ServerError,
    SuggestionError,
    SurveyBuilderError,
    SurveyCreateError,
    SurveyIdUnresolvedError,
    ValidationError,
    user_message,
)
from survey_builder.services.drafts.handoff import AI_GENERATED_SURVEY_KEY, HandoffSlot
from survey_builder.services.drafts.loader import load_draft
from survey_builder.services.drafts.models import (
    DraftQuestion,
    DraftSettings,
    GeneratedQuestion,
    GeneratedSurvey,
    QuestionSuggestion,
    QuestionType,
    RatingIcon,
    SaveResult,
    SurveyDraft,
    SurveyStatus,
    Theme,
)
from survey_builder.services.drafts.persistence import SurveyPersister
from survey_builder.services.drafts.session import (
    BuilderSession,
    SaveOutcome,
    SaveStatus,
    SessionRegistry,
)
from survey_builder.services.drafts.suggestions import SuggestionService, map_ai_type
from survey_builder.services.drafts.templates import get_template, list_templates, match_template

__all__ = [
    "AI_GENERATED_SURVEY_KEY",
    "BackendClient",
    "BackendError",
    "BuilderSession",
    "DraftEditor",
    "DraftQuestion",
    "DraftSettings",
    "GeneratedQuestion",
    "GeneratedSurvey",
    "HandoffError",
    "HandoffSlot",
    "NetworkError",
    "PartialPersistenceError",
    "QuestionCreateError",
    "QuestionNotFoundError",
    "QuestionSuggestion",
    "QuestionType",
    "RatingIcon",
    "SaveError",
    "SaveInProgressError",
    "SaveOutcome",
    "SaveResult",
    "SaveStatus",
    "ServerError",
    "SessionRegistry",
    "SuggestionError",
    "SuggestionService",
    "SurveyBuilderError",
    "SurveyCreateError",
    "SurveyDraft",
    "SurveyIdUnresolvedError",
    "SurveyPersister",
    "SurveyStatus",
    "Theme",
    "ValidationError",
    "get_template",
    "list_templates",
    "load_draft",
    "map_ai_type",
    "match_template",
    "type_defaults",
    "user_message",
]
