"""One-shot handoff slot between the AI generation screen and the builder.

The slot is a single JSON file. ``take()`` claims it with an atomic rename
before reading, so a payload is delivered to at most one reader and is gone
afterwards.
"""

import json
import logging
import os
import uuid
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from survey_builder.core.config import settings
from survey_builder.services.drafts.exceptions import HandoffError
from survey_builder.services.drafts.models import GeneratedSurvey

logger = logging.getLogger(__name__)

AI_GENERATED_SURVEY_KEY = "aiGeneratedSurvey"


class HandoffSlot:
    def __init__(self, directory: str | Path | None = None, key: str = AI_GENERATED_SURVEY_KEY) -> None:
        self.directory = Path(directory if directory is not None else settings.HANDOFF_DIR)
        self.key = key

    @property
    def path(self) -> Path:
        return self.directory / f"{self.key}.json"

    def put(self, payload: dict[str, Any]) -> None:
        """Store ``payload``, replacing anything left in the slot."""
        self.directory.mkdir(parents=True, exist_ok=True)
        tmp = self.directory / f".{self.key}.{uuid.uuid4().hex}.tmp"
        tmp.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp, self.path)
        logger.debug("Handoff slot %s filled", self.key)

    def take(self) -> dict[str, Any] | None:
        """Return the stored payload and delete it, or None if the slot is empty."""
        claimed = self.directory / f".{self.key}.{uuid.uuid4().hex}.claimed"
        try:
            os.replace(self.path, claimed)
        except FileNotFoundError:
            return None
        try:
            raw = claimed.read_text(encoding="utf-8")
        finally:
            claimed.unlink(missing_ok=True)

        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise HandoffError(f"Handoff slot '{self.key}' held invalid JSON") from exc
        if not isinstance(payload, dict):
            raise HandoffError(f"Handoff slot '{self.key}' held a non-object payload")
        logger.debug("Handoff slot %s consumed", self.key)
        return payload

    def put_generated_survey(self, survey: GeneratedSurvey) -> None:
        self.put(survey.model_dump(mode="json"))

    def take_generated_survey(self) -> GeneratedSurvey | None:
        payload = self.take()
        if payload is None:
            return None
        try:
            return GeneratedSurvey.model_validate(payload)
        except PydanticValidationError as exc:
            raise HandoffError(f"Handoff slot '{self.key}' held an invalid survey: {exc}") from exc
