"""Survey builder exceptions."""

GENERIC_SAVE_MESSAGE = "The survey could not be saved. Please try again."


class SurveyBuilderError(Exception):
    """Base exception for all survey builder operations."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(SurveyBuilderError):
    """Raised when a draft fails local checks. No network call has been made."""


class QuestionNotFoundError(SurveyBuilderError):
    """Raised when a mutation targets a local id that is not in the draft."""

    def __init__(self, local_id: str) -> None:
        self.local_id = local_id
        super().__init__(f"Question '{local_id}' not found in draft")


class SaveInProgressError(SurveyBuilderError):
    """Raised when a save is requested while another one is still running."""

    def __init__(self) -> None:
        super().__init__("A save is already in progress")


# ---------------------------------------------------------------------------
# Backend transport errors
# ---------------------------------------------------------------------------


class BackendError(SurveyBuilderError):
    """Base exception for calls to the remote survey backend."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class NetworkError(BackendError):
    """Raised when the request never produced an HTTP response."""


class ServerError(BackendError):
    """Raised when the backend answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message, status_code=status_code)


# ---------------------------------------------------------------------------
# Save protocol errors
# ---------------------------------------------------------------------------


class SaveError(SurveyBuilderError):
    """Base exception for failures of the two-phase save."""


class SurveyCreateError(SaveError):
    """Raised when phase 1 (survey create/update) fails."""

    def __init__(self, cause: BackendError) -> None:
        self.cause = cause
        self.status_code = cause.status_code
        super().__init__(cause.message)


class SurveyIdUnresolvedError(SaveError):
    """Raised when phase 1 succeeded but the response carried no survey id."""

    def __init__(self) -> None:
        super().__init__("Survey id could not be obtained, questions were not saved")


class QuestionCreateError(SaveError):
    """Raised when one or more phase 2 question requests failed."""


class PartialPersistenceError(QuestionCreateError):
    """Phase 1 succeeded, phase 2 partially failed. Nothing is rolled back.

    ``saved`` maps local ids to the remote ids the backend accepted,
    ``failed`` maps local ids (remote ids for deletions) to the error each
    request raised, ``skipped`` lists local ids never sent because a
    sequential save stopped early.
    """

    def __init__(
        self,
        survey_id: str,
        saved: dict[str, str | None],
        failed: dict[str, BackendError],
        skipped: list[str] | None = None,
    ) -> None:
        self.survey_id = survey_id
        self.saved = saved
        self.failed = failed
        self.skipped = list(skipped or [])
        first = next(iter(failed.values()))
        total = len(saved) + len(failed) + len(self.skipped)
        super().__init__(
            f"Survey {survey_id} was saved but {total - len(saved)} of {total} "
            f"question changes were not stored: {first.message}"
        )


# ---------------------------------------------------------------------------
# AI and handoff errors
# ---------------------------------------------------------------------------


class SuggestionError(SurveyBuilderError):
    """Raised when the AI endpoint fails or returns an unusable payload."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class HandoffError(SurveyBuilderError):
    """Raised when the handoff slot holds a payload that cannot be read."""


def user_message(exc: Exception) -> str:
    """Best-effort user-facing text for an error caught at the save boundary."""
    if isinstance(exc, SurveyBuilderError) and exc.message:
        return exc.message
    return GENERIC_SAVE_MESSAGE
