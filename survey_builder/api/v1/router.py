from fastapi import APIRouter

from survey_builder.api.v1.endpoints import drafts, surveys, templates

api_v1_router = APIRouter()

api_v1_router.include_router(drafts.router, prefix="/drafts", tags=["drafts"])
api_v1_router.include_router(surveys.router, prefix="/surveys", tags=["surveys"])
api_v1_router.include_router(templates.router, prefix="/templates", tags=["templates"])
