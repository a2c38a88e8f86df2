"""Draft editor: the in-memory mutation API for one survey under construction.

Every operation is synchronous and order-preserving; nothing here touches the
network. Question identity is a client-minted ``local_id`` that stays stable for
the lifetime of the editor and is never handed out twice.
"""

import itertools
import logging
import time
from typing import Any

from survey_builder.core.config import settings
from survey_builder.services.drafts.exceptions import QuestionNotFoundError
from survey_builder.services.drafts.handoff import HandoffSlot
from survey_builder.services.drafts.models import (
    CHOICE_TYPES,
    DEFAULT_MAX_RATING,
    FREE_TEXT_TYPES,
    DraftQuestion,
    GeneratedSurvey,
    QuestionSuggestion,
    QuestionType,
    RatingIcon,
    SurveyDraft,
    rating_scale,
)
from survey_builder.services.drafts.templates import get_template

logger = logging.getLogger(__name__)

_PROTECTED_FIELDS = frozenset({"local_id", "remote_id"})
_EDITABLE_FIELDS = frozenset(DraftQuestion.model_fields) - _PROTECTED_FIELDS
_METADATA_FIELDS = frozenset(
    {"title", "description", "background_image", "status", "category", "tags", "settings", "owner_id"}
)


def type_defaults(question_type: QuestionType) -> dict[str, Any]:
    """Field values a freshly added question of ``question_type`` starts with."""
    question_type = QuestionType(question_type)
    if question_type in CHOICE_TYPES:
        return {"options": ["", ""], "placeholder": None}
    if question_type == QuestionType.RATING:
        return {
            "options": rating_scale(DEFAULT_MAX_RATING),
            "max_rating": DEFAULT_MAX_RATING,
            "rating_value": 0,
            "rating_icon": RatingIcon.STAR,
            "placeholder": None,
        }
    if question_type in FREE_TEXT_TYPES:
        return {"options": None, "placeholder": ""}
    return {}


class DraftEditor:
    """Holds the authoritative draft plus the pool of pending AI suggestions."""

    def __init__(self, draft: SurveyDraft | None = None, *, copy_suffix: str | None = None) -> None:
        self._draft = draft if draft is not None else SurveyDraft()
        self._copy_suffix = settings.COPY_SUFFIX if copy_suffix is None else copy_suffix
        self._counter = itertools.count(1)
        self._issued: set[str] = {q.local_id for q in self._draft.questions}
        self._suggestions: list[QuestionSuggestion] = []

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_generated(cls, generated: GeneratedSurvey, **kwargs) -> "DraftEditor":
        """Start a draft from an AI generated survey or a template entry."""
        editor = cls(
            SurveyDraft(
                title=generated.title,
                description=generated.description,
                category=generated.category,
            ),
            **kwargs,
        )
        for item in generated.questions:
            question = editor.add_question(item.type)
            overrides = item.model_dump(exclude={"type"}, exclude_none=True)
            if question.type == QuestionType.RATING:
                overrides.pop("options", None)
            editor.update_question(question.local_id, **overrides)
        return editor

    @classmethod
    def from_template(cls, key: str, **kwargs) -> "DraftEditor":
        return cls.from_generated(get_template(key).survey, **kwargs)

    @classmethod
    def from_handoff(cls, slot: HandoffSlot, **kwargs) -> "DraftEditor":
        """Consume the one-shot handoff slot. Empty slot gives an empty draft."""
        generated = slot.take_generated_survey()
        if generated is None:
            return cls(**kwargs)
        logger.info("Hydrating draft from handoff slot (%d questions)", len(generated.questions))
        return cls.from_generated(generated, **kwargs)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def draft(self) -> SurveyDraft:
        return self._draft

    @property
    def questions(self) -> list[DraftQuestion]:
        return self._draft.questions

    @property
    def pending_suggestions(self) -> tuple[QuestionSuggestion, ...]:
        return tuple(self._suggestions)

    def get_question(self, local_id: str) -> DraftQuestion:
        return self._draft.questions[self._index_of(local_id)]

    def _index_of(self, local_id: str) -> int:
        for index, question in enumerate(self._draft.questions):
            if question.local_id == local_id:
                return index
        raise QuestionNotFoundError(local_id)

    def _mint_id(self) -> str:
        while True:
            local_id = f"q{time.time_ns()}-{next(self._counter)}"
            if local_id not in self._issued:
                self._issued.add(local_id)
                return local_id

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def set_metadata(self, **fields: Any) -> SurveyDraft:
        """Validate ``fields`` together, then apply them to the draft in place.

        The draft object is never replaced: a save in flight holds it and
        writes the backend ids back onto it.
        """
        unknown = set(fields) - _METADATA_FIELDS
        if unknown:
            raise ValueError(f"Unknown draft fields: {', '.join(sorted(unknown))}")
        data = self._draft.model_dump(exclude={"questions"})
        data.update(fields)
        validated = SurveyDraft.model_validate(data)
        for name in fields:
            setattr(self._draft, name, getattr(validated, name))
        return self._draft

    # ------------------------------------------------------------------
    # Question mutations
    # ------------------------------------------------------------------

    def add_question(self, question_type: QuestionType | str) -> DraftQuestion:
        question_type = QuestionType(question_type)
        question = DraftQuestion(
            local_id=self._mint_id(),
            type=question_type,
            required=False,
            **type_defaults(question_type),
        )
        self._draft.questions.append(question)
        return question

    def update_question(self, local_id: str, **fields: Any) -> DraftQuestion:
        """Merge ``fields`` into a question. Identity fields cannot change.

        Changing ``type`` re-seeds that type's defaults for any field not
        given explicitly.
        """
        protected = set(fields) & _PROTECTED_FIELDS
        if protected:
            raise ValueError(f"Question identity cannot be changed: {', '.join(sorted(protected))}")
        unknown = set(fields) - _EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown question fields: {', '.join(sorted(unknown))}")

        index = self._index_of(local_id)
        current = self._draft.questions[index]
        data = current.model_dump()
        if "type" in fields and QuestionType(fields["type"]) != current.type:
            data.update({"options": None, "max_rating": None, "rating_value": None, "rating_icon": None})
            data.update(type_defaults(fields["type"]))
        data.update(fields)

        updated = DraftQuestion.model_validate(data)
        self._draft.questions[index] = updated
        return updated

    def delete_question(self, local_id: str) -> DraftQuestion:
        index = self._index_of(local_id)
        removed = self._draft.questions.pop(index)
        if removed.remote_id is not None:
            self._draft.removed_remote_ids.append(removed.remote_id)
        return removed

    def duplicate_question(self, local_id: str) -> DraftQuestion:
        """Clone a question to the end of the draft under a new local id."""
        source = self.get_question(local_id)
        clone = source.model_copy(
            deep=True,
            update={
                "local_id": self._mint_id(),
                "remote_id": None,
                "title": f"{source.title}{self._copy_suffix}",
            },
        )
        self._draft.questions.append(clone)
        return clone

    def reorder_questions(self, from_index: int, to_index: int) -> list[DraftQuestion]:
        questions = self._draft.questions
        size = len(questions)
        if not 0 <= from_index < size or not 0 <= to_index < size:
            raise IndexError(f"Question index out of range (0..{size - 1})")
        question = questions.pop(from_index)
        questions.insert(to_index, question)
        return questions

    def move_question(self, local_id: str, to_index: int) -> list[DraftQuestion]:
        return self.reorder_questions(self._index_of(local_id), to_index)

    # ------------------------------------------------------------------
    # AI suggestions
    # ------------------------------------------------------------------

    def offer_suggestions(self, suggestions: list[QuestionSuggestion]) -> None:
        """Replace the pending suggestion pool."""
        self._suggestions = list(suggestions)

    def discard_suggestion(self, suggestion: QuestionSuggestion) -> bool:
        try:
            self._suggestions.remove(suggestion)
        except ValueError:
            return False
        return True

    def merge_ai_question(self, suggestion: QuestionSuggestion) -> DraftQuestion | None:
        """Append a pending suggestion as a question and drop it from the pool.

        A suggestion that is not in the pool (already merged, never offered)
        leaves the draft untouched and returns None.
        """
        if suggestion not in self._suggestions:
            logger.debug("Ignoring suggestion not in pending pool: %r", suggestion.question)
            return None

        question = self.add_question(suggestion.type)
        fields: dict[str, Any] = {"title": suggestion.question, "description": suggestion.reasoning}
        if question.type in CHOICE_TYPES and suggestion.options:
            fields["options"] = list(suggestion.options)
        merged = self.update_question(question.local_id, **fields)
        self._suggestions.remove(suggestion)
        return merged
