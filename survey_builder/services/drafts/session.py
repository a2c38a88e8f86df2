"""Builder sessions: one editing session per open builder.

A session owns its draft exclusively. Saves are guarded by an in-flight flag so
a second save cannot start while the first is running, and every save error is
turned into a SaveOutcome instead of propagating.
"""

import logging
import uuid
from enum import Enum

from pydantic import BaseModel, Field

from survey_builder.services.drafts.client import BackendClient
from survey_builder.services.drafts.editor import DraftEditor
from survey_builder.services.drafts.exceptions import (
    PartialPersistenceError,
    SaveInProgressError,
    SurveyBuilderError,
    user_message,
)
from survey_builder.services.drafts.models import DraftQuestion, QuestionSuggestion
from survey_builder.services.drafts.persistence import SurveyPersister
from survey_builder.services.drafts.suggestions import SuggestionService

logger = logging.getLogger(__name__)


class SaveStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class SaveOutcome(BaseModel):
    status: SaveStatus
    message: str
    error: str | None = Field(None, description="Exception class name when status is error")
    survey_id: str | None = None
    question_ids: dict[str, str | None] = Field(default_factory=dict)
    failed_question_ids: list[str] = Field(default_factory=list)
    unidentified_question_ids: list[str] = Field(default_factory=list)


class BuilderSession:
    def __init__(
        self,
        editor: DraftEditor,
        client: BackendClient,
        *,
        session_id: str | None = None,
        sequential: bool | None = None,
    ) -> None:
        self.session_id = session_id or uuid.uuid4().hex
        self.editor = editor
        self.persister = SurveyPersister(client, sequential=sequential)
        self.suggestions = SuggestionService(client)
        self._saving = False

    @property
    def is_saving(self) -> bool:
        return self._saving

    async def save(self) -> SaveOutcome:
        if self._saving:
            exc = SaveInProgressError()
            return SaveOutcome(status=SaveStatus.ERROR, message=exc.message, error=type(exc).__name__)

        self._saving = True
        try:
            result = await self.persister.save(self.editor.draft)
        except SurveyBuilderError as exc:
            logger.warning("Save failed for session %s: %s", self.session_id, exc.message)
            outcome = SaveOutcome(
                status=SaveStatus.ERROR,
                message=user_message(exc),
                error=type(exc).__name__,
                survey_id=self.editor.draft.survey_id,
            )
            if isinstance(exc, PartialPersistenceError):
                outcome.question_ids = dict(exc.saved)
                outcome.failed_question_ids = list(exc.failed) + exc.skipped
            return outcome
        finally:
            self._saving = False

        logger.info("Session %s saved survey %s", self.session_id, result.survey_id)
        return SaveOutcome(
            status=SaveStatus.SUCCESS,
            message="Survey saved",
            survey_id=result.survey_id,
            question_ids=result.question_ids,
            unidentified_question_ids=result.unidentified_question_ids,
        )

    async def refresh_suggestions(self) -> list[QuestionSuggestion]:
        """Fetch suggestions into the pending pool. On error the pool is kept."""
        suggestions = await self.suggestions.fetch_suggestions(self.editor.draft)
        self.editor.offer_suggestions(suggestions)
        return suggestions

    def merge_suggestion(self, index: int) -> DraftQuestion | None:
        pool = self.editor.pending_suggestions
        if not 0 <= index < len(pool):
            return None
        return self.editor.merge_ai_question(pool[index])


class SessionRegistry:
    """In-memory registry of open builder sessions."""

    def __init__(self, client: BackendClient) -> None:
        self.client = client
        self._sessions: dict[str, BuilderSession] = {}

    def open(self, editor: DraftEditor) -> BuilderSession:
        session = BuilderSession(editor, self.client)
        self._sessions[session.session_id] = session
        logger.info("Opened builder session %s", session.session_id)
        return session

    def get(self, session_id: str) -> BuilderSession | None:
        return self._sessions.get(session_id)

    def close(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)
