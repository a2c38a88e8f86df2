"""Tests for the builder, survey and template HTTP endpoints."""

import httpx
import pytest

from survey_builder.services.drafts import GeneratedQuestion, GeneratedSurvey, QuestionType

DRAFTS = "/api/v1/drafts"


def _open(client, **payload):
    response = client.post(f"{DRAFTS}/", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def _add(client, session_id, question_type="text"):
    response = client.post(f"{DRAFTS}/{session_id}/questions", json={"type": question_type})
    assert response.status_code == 201, response.text
    return response.json()


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


class TestSessions:
    def test_open_empty_session(self, client, registry):
        data = _open(client)

        assert data["draft"]["title"] == ""
        assert data["draft"]["questions"] == []
        assert data["is_saving"] is False
        assert registry.get(data["session_id"]) is not None

    def test_open_from_template(self, client):
        data = _open(client, template="event_registration", owner_id="12")
        assert data["draft"]["title"] == "Event Registration"
        assert data["draft"]["owner_id"] == "12"
        assert data["draft"]["questions"]

    def test_unknown_template(self, client):
        response = client.post(f"{DRAFTS}/", json={"template": "nope"})
        assert response.status_code == 404

    def test_conflicting_sources(self, client):
        response = client.post(f"{DRAFTS}/", json={"template": "general", "from_handoff": True})
        assert response.status_code == 422

    def test_open_from_handoff(self, client, handoff_slot):
        handoff_slot.put_generated_survey(
            GeneratedSurvey(
                title="Coffee Shop Feedback",
                questions=[GeneratedQuestion(type=QuestionType.RATING, title="Rate the coffee")],
            )
        )

        first = _open(client, from_handoff=True)
        second = _open(client, from_handoff=True)

        assert first["draft"]["title"] == "Coffee Shop Feedback"
        assert second["draft"]["questions"] == []

    def test_corrupt_handoff(self, client, handoff_slot):
        handoff_slot.put({"questions": "nope"})
        response = client.post(f"{DRAFTS}/", json={"from_handoff": True})
        assert response.status_code == 422
        assert response.json()["error"] == "HandoffError"

    def test_open_stored_survey(self, client, backend):
        backend.on("GET", "/Surveys/5", (200, {"id": 5, "surveyName": "Stored"}))
        backend.on("GET", "/Questions/by-survey/5", (200, [{"id": 50, "questionsText": "Q", "questionType": "email"}]))

        data = _open(client, survey_id="5")

        assert data["draft"]["survey_id"] == "5"
        assert data["draft"]["questions"][0]["remote_id"] == "50"

    def test_open_stored_survey_backend_down(self, client, backend):
        backend.on("GET", "/Surveys/5", (500, {"message": "db down"}))
        response = client.post(f"{DRAFTS}/", json={"survey_id": "5"})
        assert response.status_code == 502
        assert response.json() == {"status": "error", "error": "ServerError", "message": "db down"}

    def test_update_metadata(self, client):
        session_id = _open(client)["session_id"]
        response = client.patch(f"{DRAFTS}/{session_id}", json={"title": "Customer Satisfaction", "status": "active"})

        assert response.status_code == 200
        assert response.json()["draft"]["title"] == "Customer Satisfaction"
        assert response.json()["draft"]["status"] == "active"

    def test_update_metadata_empty_body(self, client):
        session_id = _open(client)["session_id"]
        assert client.patch(f"{DRAFTS}/{session_id}", json={}).status_code == 422

    @pytest.mark.parametrize("field", ["title", "status", "tags"])
    def test_update_metadata_null_rejected(self, client, field):
        session_id = _open(client)["session_id"]
        client.patch(f"{DRAFTS}/{session_id}", json={"title": "Customer Satisfaction"})

        response = client.patch(f"{DRAFTS}/{session_id}", json={field: None})

        assert response.status_code == 422
        draft = client.get(f"{DRAFTS}/{session_id}").json()["draft"]
        assert draft["title"] == "Customer Satisfaction"
        assert draft["status"] == "draft"

    def test_unknown_session(self, client):
        assert client.get(f"{DRAFTS}/missing").status_code == 404

    def test_close_session(self, client):
        session_id = _open(client)["session_id"]
        assert client.delete(f"{DRAFTS}/{session_id}").status_code == 204
        assert client.get(f"{DRAFTS}/{session_id}").status_code == 404


# ---------------------------------------------------------------------------
# Questions
# ---------------------------------------------------------------------------


class TestQuestions:
    def test_add_rating_defaults(self, client):
        session_id = _open(client)["session_id"]
        question = _add(client, session_id, "rating")

        assert question["options"] == ["1", "2", "3", "4", "5"]
        assert question["max_rating"] == 5
        assert question["rating_icon"] == "star"
        assert question["required"] is False

    def test_add_invalid_type(self, client):
        session_id = _open(client)["session_id"]
        response = client.post(f"{DRAFTS}/{session_id}/questions", json={"type": "slider"})
        assert response.status_code == 422

    def test_update_question(self, client):
        session_id = _open(client)["session_id"]
        local_id = _add(client, session_id)["local_id"]

        response = client.patch(f"{DRAFTS}/{session_id}/questions/{local_id}", json={"title": "Age", "required": True})

        assert response.status_code == 200
        assert response.json()["title"] == "Age"
        assert response.json()["local_id"] == local_id

    def test_update_unknown_question(self, client):
        session_id = _open(client)["session_id"]
        response = client.patch(f"{DRAFTS}/{session_id}/questions/nope", json={"title": "x"})
        assert response.status_code == 404

    def test_duplicate_and_list(self, client):
        session_id = _open(client)["session_id"]
        local_id = _add(client, session_id)["local_id"]
        client.patch(f"{DRAFTS}/{session_id}/questions/{local_id}", json={"title": "Age"})
        _add(client, session_id, "radio")

        copy = client.post(f"{DRAFTS}/{session_id}/questions/{local_id}/duplicate").json()
        listing = client.get(f"{DRAFTS}/{session_id}/questions").json()

        assert copy["title"] == "Age (Kopya)"
        assert listing["total"] == 3
        assert listing["items"][-1]["local_id"] == copy["local_id"]

    def test_move_question(self, client):
        session_id = _open(client)["session_id"]
        ids = [_add(client, session_id)["local_id"] for _ in range(3)]

        response = client.post(f"{DRAFTS}/{session_id}/questions/{ids[2]}/move", json={"to_index": 0})

        assert [q["local_id"] for q in response.json()["items"]] == [ids[2], ids[0], ids[1]]

    def test_move_out_of_range(self, client):
        session_id = _open(client)["session_id"]
        local_id = _add(client, session_id)["local_id"]
        response = client.post(f"{DRAFTS}/{session_id}/questions/{local_id}/move", json={"to_index": 4})
        assert response.status_code == 422

    def test_delete_question(self, client):
        session_id = _open(client)["session_id"]
        local_id = _add(client, session_id)["local_id"]

        assert client.delete(f"{DRAFTS}/{session_id}/questions/{local_id}").status_code == 204
        assert client.delete(f"{DRAFTS}/{session_id}/questions/{local_id}").status_code == 404


# ---------------------------------------------------------------------------
# Suggestions
# ---------------------------------------------------------------------------


class TestSuggestions:
    def test_fetch_and_merge(self, client, backend):
        backend.on(
            "POST",
            "/AI/generate-questions",
            (200, {"suggestions": [{"question": "Rate our service", "type": "rating", "reasoning": "Signal"}]}),
        )
        session_id = _open(client)["session_id"]

        suggestions = client.post(f"{DRAFTS}/{session_id}/suggestions").json()
        merged = client.post(f"{DRAFTS}/{session_id}/suggestions/0/merge")
        again = client.post(f"{DRAFTS}/{session_id}/suggestions/0/merge")

        assert suggestions[0]["type"] == "rating"
        assert merged.status_code == 201
        assert merged.json()["description"] == "Signal"
        assert again.status_code == 404
        assert client.get(f"{DRAFTS}/{session_id}").json()["pending_suggestions"] == []

    def test_fetch_failure(self, client, backend):
        backend.on("POST", "/AI/generate-questions", (500, {"message": "down"}))
        session_id = _open(client)["session_id"]

        response = client.post(f"{DRAFTS}/{session_id}/suggestions")

        assert response.status_code == 502
        assert response.json()["error"] == "SuggestionError"


# ---------------------------------------------------------------------------
# Save
# ---------------------------------------------------------------------------


class TestSave:
    def test_save_success(self, client, backend):
        backend.on("POST", "/Surveys", (201, {"id": "srv_1"}))
        backend.on("POST", "/Questions", (201, {"id": "qq"}))
        session_id = _open(client, template="general")["session_id"]

        response = client.post(f"{DRAFTS}/{session_id}/save")

        assert response.status_code == 200
        assert response.json()["status"] == "success"
        assert response.json()["survey_id"] == "srv_1"
        draft = client.get(f"{DRAFTS}/{session_id}").json()["draft"]
        assert draft["survey_id"] == "srv_1"
        assert all(q["remote_id"] == "qq" for q in draft["questions"])

    def test_save_validation_error(self, client, backend):
        session_id = _open(client)["session_id"]

        response = client.post(f"{DRAFTS}/{session_id}/save")

        assert response.status_code == 422
        assert response.json()["error"] == "ValidationError"
        assert backend.requests == []

    def test_save_partial_failure(self, client, backend):
        backend.on("POST", "/Surveys", (201, {"id": "srv_1"}))
        calls = {"n": 0}

        def questions(request: httpx.Request) -> httpx.Response:
            calls["n"] += 1
            if calls["n"] == 2:
                return httpx.Response(500, json={"message": "boom"})
            return httpx.Response(201, json={"id": f"qq_{calls['n']}"})

        backend.on("POST", "/Questions", questions)
        session_id = _open(client)["session_id"]
        client.patch(f"{DRAFTS}/{session_id}", json={"title": "Customer Satisfaction"})
        _add(client, session_id)
        _add(client, session_id)

        response = client.post(f"{DRAFTS}/{session_id}/save")

        assert response.status_code == 502
        body = response.json()
        assert body["error"] == "PartialPersistenceError"
        assert body["survey_id"] == "srv_1"
        assert len(body["failed_question_ids"]) == 1


# ---------------------------------------------------------------------------
# Stored surveys
# ---------------------------------------------------------------------------


class TestSurveys:
    def test_list_all(self, client, backend):
        backend.on("GET", "/Surveys/get-all", (200, [{"id": 1}, {"id": 2}]))
        response = client.get("/api/v1/surveys/")
        assert response.json() == {"items": [{"id": 1}, {"id": 2}], "total": 2}

    def test_list_by_status(self, client, backend):
        backend.on("GET", "/Survey/get-by-status/draft", (200, [{"id": 3}]))
        assert client.get("/api/v1/surveys/", params={"status": "draft"}).json()["total"] == 1

    def test_list_for_user(self, client, backend):
        backend.on("GET", "/Surveys/get-by-user/9", (200, [{"id": 4}]))
        assert client.get("/api/v1/surveys/", params={"user_id": "9"}).json()["items"] == [{"id": 4}]

    def test_get_missing_survey(self, client):
        assert client.get("/api/v1/surveys/77").status_code == 404

    def test_backend_failure(self, client, backend):
        backend.on("GET", "/Surveys/get-all", (500, {"message": "db down"}))
        response = client.get("/api/v1/surveys/")
        assert response.status_code == 502
        assert response.json()["detail"] == "db down"

    def test_delete(self, client, backend):
        backend.on("DELETE", "/Surveys/3", lambda request: httpx.Response(204))
        assert client.delete("/api/v1/surveys/3").status_code == 204


# ---------------------------------------------------------------------------
# Templates and AI generation
# ---------------------------------------------------------------------------


class TestTemplatesAPI:
    def test_list_templates(self, client):
        data = client.get("/api/v1/templates/").json()
        assert {t["key"] for t in data} >= {"customer_satisfaction", "general"}
        assert all(t["question_count"] > 0 for t in data)

    def test_match_takes_first_catalog_hit(self, client):
        response = client.get("/api/v1/templates/match", params={"prompt": "Training course feedback"})
        assert response.json()["key"] == "product_feedback"

    def test_generate_fills_handoff_slot(self, client, backend, handoff_slot):
        backend.on(
            "POST",
            "/AI/generate-complete-survey",
            (200, {"surveyName": "Remote Work", "questions": [{"questionsText": "Days at home?", "questionType": "text"}]}),
        )

        response = client.post("/api/v1/templates/generate", json={"description": "A survey about remote work"})

        assert response.status_code == 201
        assert response.json()["handoff_key"] == "aiGeneratedSurvey"
        assert handoff_slot.take_generated_survey().title == "Remote Work"

    def test_generate_short_description(self, client, backend):
        response = client.post("/api/v1/templates/generate", json={"description": "short"})
        assert response.status_code == 422
        assert backend.requests == []

    def test_generate_backend_failure(self, client, backend):
        backend.on("POST", "/AI/generate-complete-survey", (500, {}))
        response = client.post("/api/v1/templates/generate", json={"description": "A survey about remote work"})
        assert response.status_code == 502
