from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "Survey Builder"
    API_V1_PREFIX: str = "/api/v1"
    DEBUG: bool = False

    CORS_ORIGINS: list[str] = ["http://localhost:5173"]

    # Remote survey backend (surveys, questions, AI endpoints)
    API_BASE_URL: str = "http://localhost:5000/api"
    HTTP_TIMEOUT_SECONDS: float = 10.0
    AI_TIMEOUT_SECONDS: float = 60.0

    # Sent as surveyTypeId on survey create
    DEFAULT_SURVEY_TYPE_ID: int = 1

    # Draft editing
    DEFAULT_QUESTION_TEXT: str = "Untitled question"
    COPY_SUFFIX: str = " (Kopya)"

    # Phase 2 of a save: fan out question creates concurrently (default) or
    # send them one by one in draft order.
    QUESTION_SAVE_SEQUENTIAL: bool = False

    # One-shot handoff slot for AI generated drafts
    HANDOFF_DIR: str = ".handoff"

    # AI survey description bounds
    AI_DESCRIPTION_MIN_LENGTH: int = 10
    AI_DESCRIPTION_MAX_LENGTH: int = 500

    model_config = {"env_file": ".env", "case_sensitive": True}


settings = Settings()
