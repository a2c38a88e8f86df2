"""Builder API: editing sessions over a survey draft, AI suggestions, save."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from survey_builder.core.dependencies import (
    get_backend_client,
    get_handoff_slot,
    get_registry,
    get_session_or_404,
)
from survey_builder.schemas.drafts import (
    DraftMetadataUpdate,
    QuestionAdd,
    QuestionListResponse,
    QuestionMove,
    QuestionUpdate,
    SessionCreate,
    SessionResponse,
)
from survey_builder.services.drafts import (
    BackendClient,
    BackendError,
    BuilderSession,
    DraftEditor,
    DraftQuestion,
    HandoffError,
    HandoffSlot,
    QuestionNotFoundError,
    QuestionSuggestion,
    SaveInProgressError,
    SaveOutcome,
    SaveStatus,
    SessionRegistry,
    SuggestionError,
    ValidationError,
    load_draft,
)
from survey_builder.services.drafts.templates import TemplateNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter()

_SAVE_ERROR_STATUS = {
    ValidationError.__name__: 422,
    SaveInProgressError.__name__: 409,
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _session_response(session: BuilderSession) -> SessionResponse:
    return SessionResponse(
        session_id=session.session_id,
        draft=session.editor.draft,
        pending_suggestions=list(session.editor.pending_suggestions),
        is_saving=session.is_saving,
    )


def _error_response(status_code: int, exc: Exception, message: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "error": type(exc).__name__, "message": message or str(exc)},
    )


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


@router.post("/", response_model=SessionResponse, status_code=201)
async def open_session(
    payload: SessionCreate,
    registry: SessionRegistry = Depends(get_registry),
    client: BackendClient = Depends(get_backend_client),
    slot: HandoffSlot = Depends(get_handoff_slot),
):
    sources = [payload.template is not None, payload.from_handoff, payload.survey_id is not None]
    if sum(sources) > 1:
        raise HTTPException(status_code=422, detail="Give at most one of template, from_handoff, survey_id")

    try:
        if payload.template is not None:
            editor = DraftEditor.from_template(payload.template)
        elif payload.from_handoff:
            editor = DraftEditor.from_handoff(slot)
        elif payload.survey_id is not None:
            editor = DraftEditor(await load_draft(client, payload.survey_id))
        else:
            editor = DraftEditor()
    except TemplateNotFoundError as exc:
        raise HTTPException(status_code=404, detail=f"Template '{exc.key}' not found") from exc
    except HandoffError as exc:
        return _error_response(422, exc, exc.message)
    except BackendError as exc:
        return _error_response(502, exc, exc.message)

    if payload.owner_id is not None:
        editor.set_metadata(owner_id=payload.owner_id)

    session = registry.open(editor)
    return _session_response(session)


@router.get("/{session_id}", response_model=SessionResponse)
def get_session(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    return _session_response(get_session_or_404(session_id, registry))


@router.patch("/{session_id}", response_model=SessionResponse)
def update_draft_metadata(
    session_id: str,
    payload: DraftMetadataUpdate,
    registry: SessionRegistry = Depends(get_registry),
):
    session = get_session_or_404(session_id, registry)
    update_data = payload.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=422, detail="No fields to update")
    try:
        session.editor.set_metadata(**update_data)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _session_response(session)


@router.delete("/{session_id}", status_code=204)
def close_session(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    session = get_session_or_404(session_id, registry)
    if session.is_saving:
        raise HTTPException(status_code=409, detail="Cannot close a session while it is saving")
    registry.close(session_id)


# ---------------------------------------------------------------------------
# Questions
# ---------------------------------------------------------------------------


@router.get("/{session_id}/questions", response_model=QuestionListResponse)
def list_questions(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    questions = get_session_or_404(session_id, registry).editor.questions
    return QuestionListResponse(items=questions, total=len(questions))


@router.post("/{session_id}/questions", response_model=DraftQuestion, status_code=201)
def add_question(session_id: str, payload: QuestionAdd, registry: SessionRegistry = Depends(get_registry)):
    return get_session_or_404(session_id, registry).editor.add_question(payload.type)


@router.patch("/{session_id}/questions/{local_id}", response_model=DraftQuestion)
def update_question(
    session_id: str,
    local_id: str,
    payload: QuestionUpdate,
    registry: SessionRegistry = Depends(get_registry),
):
    session = get_session_or_404(session_id, registry)
    update_data = payload.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=422, detail="No fields to update")
    try:
        return session.editor.update_question(local_id, **update_data)
    except QuestionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.delete("/{session_id}/questions/{local_id}", status_code=204)
def delete_question(session_id: str, local_id: str, registry: SessionRegistry = Depends(get_registry)):
    session = get_session_or_404(session_id, registry)
    try:
        session.editor.delete_question(local_id)
    except QuestionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc


@router.post("/{session_id}/questions/{local_id}/duplicate", response_model=DraftQuestion, status_code=201)
def duplicate_question(session_id: str, local_id: str, registry: SessionRegistry = Depends(get_registry)):
    session = get_session_or_404(session_id, registry)
    try:
        return session.editor.duplicate_question(local_id)
    except QuestionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc


@router.post("/{session_id}/questions/{local_id}/move", response_model=QuestionListResponse)
def move_question(
    session_id: str,
    local_id: str,
    payload: QuestionMove,
    registry: SessionRegistry = Depends(get_registry),
):
    session = get_session_or_404(session_id, registry)
    try:
        questions = session.editor.move_question(local_id, payload.to_index)
    except QuestionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc
    except IndexError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return QuestionListResponse(items=questions, total=len(questions))


# ---------------------------------------------------------------------------
# AI suggestions
# ---------------------------------------------------------------------------


@router.post("/{session_id}/suggestions", response_model=list[QuestionSuggestion])
async def fetch_suggestions(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    session = get_session_or_404(session_id, registry)
    try:
        return await session.refresh_suggestions()
    except SuggestionError as exc:
        return _error_response(502, exc, exc.message)


@router.post("/{session_id}/suggestions/{index}/merge", response_model=DraftQuestion, status_code=201)
def merge_suggestion(session_id: str, index: int, registry: SessionRegistry = Depends(get_registry)):
    session = get_session_or_404(session_id, registry)
    question = session.merge_suggestion(index)
    if question is None:
        raise HTTPException(status_code=404, detail="Suggestion not found in pending pool")
    return question


# ---------------------------------------------------------------------------
# Save
# ---------------------------------------------------------------------------


@router.post("/{session_id}/save", response_model=SaveOutcome)
async def save_draft(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    session = get_session_or_404(session_id, registry)
    outcome = await session.save()
    if outcome.status == SaveStatus.SUCCESS:
        return outcome
    return JSONResponse(
        status_code=_SAVE_ERROR_STATUS.get(outcome.error, 502),
        content=outcome.model_dump(mode="json"),
    )
