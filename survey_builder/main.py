import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from survey_builder.api.v1.router import api_v1_router
from survey_builder.core.config import settings
from survey_builder.services.drafts import BackendClient, SessionRegistry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    backend_client = BackendClient()
    app.state.backend_client = backend_client
    app.state.session_registry = SessionRegistry(backend_client)

    logger.info("Survey backend client initialized (base_url=%s)", backend_client.base_url)

    yield

    logger.info("Shutting down builder sessions (%d open)...", len(app.state.session_registry))
    await backend_client.aclose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_v1_router, prefix=settings.API_V1_PREFIX)


@app.get("/health")
def health_check():
    return {"status": "healthy"}
