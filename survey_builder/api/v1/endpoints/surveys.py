"""Saved survey management: listing and deletion against the backend."""

from fastapi import APIRouter, Depends, HTTPException, Query

from survey_builder.core.dependencies import get_backend_client
from survey_builder.schemas.drafts import SurveyListResponse
from survey_builder.services.drafts import BackendClient, BackendError, ServerError, SurveyStatus

router = APIRouter()


def _raise_backend(exc: BackendError) -> None:
    if isinstance(exc, ServerError) and exc.status_code == 404:
        raise HTTPException(status_code=404, detail="Survey not found") from exc
    raise HTTPException(status_code=502, detail=exc.message) from exc


@router.get("/", response_model=SurveyListResponse)
async def list_surveys(
    user_id: str | None = Query(None),
    status: SurveyStatus | None = Query(None),
    category: str | None = Query(None),
    client: BackendClient = Depends(get_backend_client),
):
    try:
        if user_id is not None:
            items = await client.list_surveys_for_user(user_id)
        elif status is not None:
            items = await client.list_surveys_by_status(status.value)
        elif category is not None:
            items = await client.list_surveys_by_category(category)
        else:
            items = await client.list_surveys()
    except BackendError as exc:
        _raise_backend(exc)

    return SurveyListResponse(items=items, total=len(items))


@router.get("/{survey_id}")
async def get_survey(survey_id: str, client: BackendClient = Depends(get_backend_client)):
    try:
        return await client.get_survey(survey_id)
    except BackendError as exc:
        _raise_backend(exc)


@router.delete("/{survey_id}", status_code=204)
async def delete_survey(survey_id: str, client: BackendClient = Depends(get_backend_client)):
    try:
        await client.delete_survey(survey_id)
    except BackendError as exc:
        _raise_backend(exc)
