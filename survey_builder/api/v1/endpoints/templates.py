"""Starter templates and AI complete-survey generation."""

from fastapi import APIRouter, Depends, HTTPException

from survey_builder.core.dependencies import get_backend_client, get_handoff_slot
from survey_builder.schemas.drafts import SurveyGenerateRequest, SurveyGenerateResponse, TemplateSummary
from survey_builder.services.drafts import (
    BackendClient,
    GeneratedSurvey,
    HandoffSlot,
    SuggestionError,
    SuggestionService,
    ValidationError,
    list_templates,
    match_template,
)

router = APIRouter()


@router.get("/", response_model=list[TemplateSummary])
def get_templates():
    return [
        TemplateSummary(key=t.key, name=t.name, question_count=len(t.survey.questions)) for t in list_templates()
    ]


@router.get("/match", response_model=TemplateSummary)
def match(prompt: str):
    template = match_template(prompt)
    return TemplateSummary(key=template.key, name=template.name, question_count=len(template.survey.questions))


@router.post("/generate", response_model=SurveyGenerateResponse, status_code=201)
async def generate_survey(
    payload: SurveyGenerateRequest,
    client: BackendClient = Depends(get_backend_client),
    slot: HandoffSlot = Depends(get_handoff_slot),
):
    """Generate a survey with AI and leave it in the handoff slot for the builder."""
    try:
        survey: GeneratedSurvey = await SuggestionService(client).generate_survey(
            payload.description, payload.language
        )
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.message) from exc
    except SuggestionError as exc:
        raise HTTPException(status_code=502, detail=exc.message) from exc

    slot.put_generated_survey(survey)
    return SurveyGenerateResponse(survey=survey, handoff_key=slot.key)
