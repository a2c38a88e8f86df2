"""Two-phase save of a draft to the survey backend.

Phase 1 creates (or updates) the survey and yields its backend id. Phase 2
sends one request per question tagged with that id. Nothing spans both
phases: questions stored before a phase 2 failure stay stored.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from survey_builder.core.config import settings
from survey_builder.services.drafts.client import BackendClient
from survey_builder.services.drafts.exceptions import (
    BackendError,
    PartialPersistenceError,
    SurveyCreateError,
    SurveyIdUnresolvedError,
    ValidationError,
)
from survey_builder.services.drafts.models import (
    CHOICE_TYPES,
    DraftQuestion,
    SaveResult,
    SurveyDraft,
    SurveyStatus,
)

logger = logging.getLogger(__name__)

# Response fields that may carry the backend id, in priority order
SURVEY_ID_FIELDS = ("id", "surveyId", "_id")
QUESTION_ID_FIELDS = ("id", "questionId", "_id")


def _first_id(data: Any, fields: tuple[str, ...]) -> str | None:
    if not isinstance(data, dict):
        return None
    for field in fields:
        value = data.get(field)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def extract_survey_id(data: Any) -> str | None:
    return _first_id(data, SURVEY_ID_FIELDS)


def extract_question_id(data: Any) -> str | None:
    return _first_id(data, QUESTION_ID_FIELDS)


def validate_draft(draft: SurveyDraft) -> None:
    """Check save preconditions. Raises ValidationError before any network call."""
    if not draft.title.strip():
        raise ValidationError("Survey title is required")
    if not draft.questions:
        raise ValidationError("At least one question is required")

    for position, question in enumerate(draft.questions, start=1):
        if question.type in CHOICE_TYPES and not any(opt.strip() for opt in question.options or []):
            logger.warning(
                "Question %d (%s) is a %s question without any non-empty option",
                position,
                question.local_id,
                question.type.value,
            )


def resolve_question_text(question: DraftQuestion) -> str:
    """Title, else placeholder, else the configured default label."""
    title = question.title.strip()
    if title:
        return title
    placeholder = (question.placeholder or "").strip()
    if placeholder:
        return placeholder
    return settings.DEFAULT_QUESTION_TEXT


def survey_payload(draft: SurveyDraft) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "surveyName": draft.title.strip(),
        "surveyDescription": draft.description,
        "surveyTypeId": settings.DEFAULT_SURVEY_TYPE_ID,
        "isActive": draft.status == SurveyStatus.ACTIVE,
        "status": draft.status.value,
        "category": draft.category,
        "tags": list(draft.tags),
        "settings": {
            "allowAnonymous": draft.settings.allow_anonymous,
            "showProgressBar": draft.settings.show_progress_bar,
            "allowMultipleResponses": draft.settings.allow_multiple_responses,
            "theme": draft.settings.theme.value,
        },
        "backgroundImage": draft.background_image,
    }
    if draft.owner_id is not None:
        payload["usersId"] = draft.owner_id
    return payload


def question_payload(question: DraftQuestion, survey_id: str) -> dict[str, Any]:
    # questionType is the draft type string as-is; no backend type-id mapping
    return {
        "questionsText": resolve_question_text(question),
        "questionType": question.type.value,
        "choices": list(question.options or []),
        "surveysId": survey_id,
    }


class SurveyPersister:
    """Commits a draft to the backend and writes backend ids back into it.

    On any outcome the draft itself is kept, so a failed save can be retried.
    A retry after a partial failure only sends what is still missing: the
    survey id and the remote ids of stored questions were already recorded.
    A question the backend stored without returning an id cannot be told
    apart from an unsent one; it is listed in
    ``SaveResult.unidentified_question_ids`` and a retry creates it again.
    """

    def __init__(self, client: BackendClient, *, sequential: bool | None = None) -> None:
        self.client = client
        self.sequential = settings.QUESTION_SAVE_SEQUENTIAL if sequential is None else sequential

    async def save(self, draft: SurveyDraft) -> SaveResult:
        validate_draft(draft)
        survey_id = await self._persist_survey(draft)
        return await self._persist_questions(draft, survey_id)

    # ------------------------------------------------------------------
    # Phase 1
    # ------------------------------------------------------------------

    async def _persist_survey(self, draft: SurveyDraft) -> str:
        payload = survey_payload(draft)
        try:
            if draft.survey_id is None:
                response = await self.client.create_survey(payload)
                survey_id = extract_survey_id(response)
            else:
                response = await self.client.update_survey(draft.survey_id, payload)
                survey_id = extract_survey_id(response) or draft.survey_id
        except BackendError as exc:
            logger.error("Survey save failed for %r: %s", draft.title, exc.message)
            raise SurveyCreateError(exc) from exc

        if survey_id is None:
            logger.error("Survey create returned no id (fields tried: %s)", ", ".join(SURVEY_ID_FIELDS))
            raise SurveyIdUnresolvedError()

        draft.survey_id = survey_id
        logger.info("Survey %s stored, saving %d questions", survey_id, len(draft.questions))
        return survey_id

    # ------------------------------------------------------------------
    # Phase 2
    # ------------------------------------------------------------------

    async def _persist_questions(self, draft: SurveyDraft, survey_id: str) -> SaveResult:
        operations: list[tuple[str, Callable[[], Awaitable[str | None]]]] = []
        for question in list(draft.questions):
            operations.append((question.local_id, self._question_operation(question, survey_id)))
        deletions = list(draft.removed_remote_ids)
        for remote_id in deletions:
            operations.append((remote_id, self._delete_operation(remote_id)))

        if self.sequential:
            outcomes, skipped = await self._run_sequential(operations)
        else:
            outcomes, skipped = await self._run_concurrent(operations), []

        saved: dict[str, str | None] = {}
        deleted: list[str] = []
        failed: dict[str, BackendError] = {}
        for key, outcome in outcomes.items():
            if isinstance(outcome, BackendError):
                failed[key] = outcome
            elif key in deletions:
                deleted.append(key)
            else:
                saved[key] = outcome

        self._write_back(draft, saved, deleted)

        if failed:
            logger.error(
                "Survey %s: %d question requests failed, %d stored (no rollback)",
                survey_id,
                len(failed),
                len(saved),
            )
            raise PartialPersistenceError(survey_id, saved=saved, failed=failed, skipped=skipped)

        return SaveResult(
            survey_id=survey_id,
            question_ids=saved,
            deleted_question_ids=deleted,
            unidentified_question_ids=[local_id for local_id, remote_id in saved.items() if remote_id is None],
        )

    def _question_operation(self, question: DraftQuestion, survey_id: str) -> Callable[[], Awaitable[str | None]]:
        payload = question_payload(question, survey_id)

        async def create() -> str | None:
            response = await self.client.create_question(payload)
            remote_id = extract_question_id(response)
            if remote_id is None:
                logger.warning("Question %s stored without an id in the response", question.local_id)
            return remote_id

        async def update() -> str | None:
            await self.client.update_question(question.remote_id, payload)
            return question.remote_id

        return update if question.remote_id is not None else create

    def _delete_operation(self, remote_id: str) -> Callable[[], Awaitable[str | None]]:
        async def delete() -> str | None:
            await self.client.delete_question(remote_id)
            return remote_id

        return delete

    async def _run_concurrent(self, operations) -> dict[str, Any]:
        results = await asyncio.gather(*(operation() for _, operation in operations), return_exceptions=True)
        outcomes: dict[str, Any] = {}
        for (key, _), result in zip(operations, results):
            if isinstance(result, BaseException) and not isinstance(result, BackendError):
                raise result
            outcomes[key] = result
        return outcomes

    async def _run_sequential(self, operations) -> tuple[dict[str, Any], list[str]]:
        outcomes: dict[str, Any] = {}
        for index, (key, operation) in enumerate(operations):
            try:
                outcomes[key] = await operation()
            except BackendError as exc:
                outcomes[key] = exc
                return outcomes, [k for k, _ in operations[index + 1 :]]
        return outcomes, []

    @staticmethod
    def _write_back(draft: SurveyDraft, saved: dict[str, str | None], deleted: list[str]) -> None:
        present: set[str] = set()
        for question in draft.questions:
            present.add(question.local_id)
            remote_id = saved.get(question.local_id)
            if remote_id is not None:
                question.remote_id = remote_id

        removed = [rid for rid in draft.removed_remote_ids if rid not in deleted]
        # Questions deleted while their create was in flight exist remotely now
        for local_id, remote_id in saved.items():
            if local_id not in present and remote_id is not None and remote_id not in removed:
                logger.info("Question %s was deleted during save, queueing %s for removal", local_id, remote_id)
                removed.append(remote_id)
        draft.removed_remote_ids = removed
