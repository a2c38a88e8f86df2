"""Async REST client for the remote survey backend (surveys, questions, AI)."""

import logging
from typing import Any

import httpx

from survey_builder.core.config import settings
from survey_builder.services.drafts.exceptions import BackendError, NetworkError, ServerError

logger = logging.getLogger(__name__)

# Owner fields seen on survey records, in lookup order
_OWNER_FIELDS = ("UsersId", "users_id", "usersId", "userId", "user_id", "createdBy", "ownerId")


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "detail", "title", "error"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    text = response.text.strip()
    if text and len(text) <= 300:
        return text
    return f"Backend returned HTTP {response.status_code}"


def survey_owner(record: dict[str, Any]) -> str | None:
    for key in _OWNER_FIELDS:
        value = record.get(key)
        if value is not None and value != "":
            return str(value)
    user = record.get("user")
    if isinstance(user, dict) and user.get("id") is not None:
        return str(user["id"])
    return None


class BackendClient:
    """Thin wrapper over ``httpx.AsyncClient`` that maps failures to BackendError.

    Transport failures raise NetworkError, non-2xx answers raise ServerError
    with the message the backend put in its body when there is one.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS,
            transport=transport,
            headers={"Accept": "application/json", **(headers or {})},
        )

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.RequestError as exc:
            logger.error("%s %s failed: %s", method, path, exc)
            raise NetworkError(f"Could not reach the survey backend: {exc}") from exc

        if response.is_error:
            message = _error_message(response)
            logger.error("%s %s returned %d: %s", method, path, response.status_code, message)
            raise ServerError(response.status_code, message)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ServerError(response.status_code, "Backend returned a non-JSON body") from exc

    # ------------------------------------------------------------------
    # Surveys
    # ------------------------------------------------------------------

    async def create_survey(self, payload: dict[str, Any]) -> dict[str, Any]:
        data = await self.request("POST", "/Surveys", json=payload)
        return data if isinstance(data, dict) else {}

    async def get_survey(self, survey_id: str) -> dict[str, Any]:
        data = await self.request("GET", f"/Surveys/{survey_id}")
        if not isinstance(data, dict):
            raise ServerError(200, f"Unexpected survey payload for {survey_id}")
        return data

    async def update_survey(self, survey_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        data = await self.request("PUT", f"/Surveys/{survey_id}", json=payload)
        return data if isinstance(data, dict) else {}

    async def delete_survey(self, survey_id: str) -> None:
        await self.request("DELETE", f"/Surveys/{survey_id}")

    async def list_surveys(self) -> list[dict[str, Any]]:
        data = await self.request("GET", "/Surveys/get-all")
        return data if isinstance(data, list) else []

    async def list_surveys_by_status(self, status: str) -> list[dict[str, Any]]:
        data = await self.request("GET", f"/Survey/get-by-status/{status}")
        return data if isinstance(data, list) else []

    async def list_surveys_by_category(self, category: str) -> list[dict[str, Any]]:
        data = await self.request("GET", f"/Survey/get-by-category/{category}")
        return data if isinstance(data, list) else []

    async def list_surveys_for_user(self, user_id: str | int) -> list[dict[str, Any]]:
        """List a user's surveys, tolerating the several routes backends expose.

        Each known route is tried in turn; the first one answering with a list
        wins. When none does, every survey is fetched and filtered on the
        owner field client-side.
        """
        user_id = str(user_id)
        attempts: list[tuple[str, dict[str, str] | None]] = [
            (f"/Surveys/get-by-user/{user_id}", None),
            (f"/Surveys/by-user/{user_id}", None),
            (f"/Survey/get-by-user/{user_id}", None),
            (f"/Survey/by-user/{user_id}", None),
            ("/Surveys/get-all", {"users_id": user_id}),
            ("/Surveys/get-all", {"usersId": user_id}),
            ("/Surveys/get-all", {"userId": user_id}),
        ]
        for attempt, (path, params) in enumerate(attempts, start=1):
            try:
                data = await self.request("GET", path, params=params)
            except BackendError as exc:
                logger.debug("User survey lookup attempt %d (%s) failed: %s", attempt, path, exc)
                continue
            if isinstance(data, list):
                logger.info("User survey lookup succeeded on attempt %d (%d surveys)", attempt, len(data))
                return data

        logger.warning("All user survey routes failed for %s, filtering get-all client-side", user_id)
        return [record for record in await self.list_surveys() if survey_owner(record) == user_id]

    # ------------------------------------------------------------------
    # Questions
    # ------------------------------------------------------------------

    async def create_question(self, payload: dict[str, Any]) -> dict[str, Any]:
        # Some backends read surveys_id instead of surveysId; send both
        body = {**payload, "surveys_id": payload.get("surveysId")}
        data = await self.request("POST", "/Questions", json=body)
        return data if isinstance(data, dict) else {}

    async def get_questions_by_survey(self, survey_id: str) -> list[dict[str, Any]]:
        data = await self.request("GET", f"/Questions/by-survey/{survey_id}")
        if isinstance(data, list):
            return data
        return [data] if isinstance(data, dict) else []

    async def update_question(self, question_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        data = await self.request("PUT", f"/Questions/{question_id}", json=payload)
        return data if isinstance(data, dict) else {}

    async def delete_question(self, question_id: str) -> None:
        await self.request("DELETE", f"/Questions/{question_id}")

    # ------------------------------------------------------------------
    # AI
    # ------------------------------------------------------------------

    async def generate_questions(self, context: dict[str, Any]) -> Any:
        return await self.request(
            "POST", "/AI/generate-questions", json=context, timeout=settings.AI_TIMEOUT_SECONDS
        )

    async def generate_complete_survey(self, description: str, language: str) -> Any:
        return await self.request(
            "POST",
            "/AI/generate-complete-survey",
            json={"description": description, "language": language},
            timeout=settings.AI_TIMEOUT_SECONDS,
        )
