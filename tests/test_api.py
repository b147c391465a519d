"""Tests for the HTTP API using FastAPI's TestClient."""

import pytest
from fastapi.testclient import TestClient

from soulfit.chains.body_composition_chain import BodyCompositionClient
from soulfit.chains.posture_chain import PostureAnalysisClient
from soulfit.chains.program_chain import ProgramGenerator
from soulfit.dependencies import (
    get_body_composition_client,
    get_posture_client,
    get_program_generator,
    get_sessions,
)
from soulfit.main import app
from soulfit.wizard.store import SessionRegistry

from fakes import (
    analysis_payload,
    exercise_payload,
    extraction_payload,
    findings_payload,
    make_llm,
    program_payload,
)

PNG = ("photo.png", b"\x89PNG fake", "image/png")
POSTURE_FILES = {
    "frontImage": PNG,
    "backImage": PNG,
    "sideImage": PNG,
    "bendDownImage": PNG,
}


@pytest.fixture
def client():
    app.dependency_overrides.clear()
    sessions = SessionRegistry()
    app.dependency_overrides[get_sessions] = lambda: sessions
    yield TestClient(app)
    app.dependency_overrides.clear()


def _use(dependency, instance):
    app.dependency_overrides[dependency] = lambda: instance


def _generator(*replies):
    return ProgramGenerator(
        llm=make_llm(*replies),
        strategy="two_phase",
        require_equipment=True,
        reject_unresolved=False,
        phase_delay=0,
    )


def _program_body(**overrides):
    body = {
        "postureAnalysis": "Side View Analysis:\n- Shoulder Posture: rounded",
        "recommendations": ["Strengthen middle trapezius and rhomboids"],
        "healthAssessment": {"bodyCompositionReport": {"height": 172, "weight": 64.3}},
        "userGoals": {"primaryGoal": "flexibility", "experienceLevel": "beginner"},
        "selectedEquipment": ["Mat", "Reformer"],
    }
    body.update(overrides)
    return body


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestAnalyzePosture:
    def test_success(self, client):
        _use(get_posture_client, PostureAnalysisClient(llm=make_llm(findings_payload(head="forward"))))

        response = client.post("/analyze-posture", files=POSTURE_FILES)

        assert response.status_code == 200
        data = response.json()
        assert data["analysis"].startswith("Front/Back View Analysis:")
        assert data["recommendations"][0] == "Focus on cervical spine alignment exercises"
        assert "degraded" not in data

    def test_three_images(self, client):
        llm = make_llm(findings_payload())
        _use(get_posture_client, PostureAnalysisClient(llm=llm))
        files = {k: v for k, v in POSTURE_FILES.items() if k != "sideImage"}

        response = client.post("/analyze-posture", files=files)

        assert response.status_code == 400
        assert response.json()["error"] == "Please provide all 4 posture images"
        llm.ainvoke.assert_not_called()

    def test_service_failure(self, client):
        _use(get_posture_client, PostureAnalysisClient(llm=make_llm(RuntimeError("upstream 502"))))

        response = client.post("/analyze-posture", files=POSTURE_FILES)

        assert response.status_code == 500
        assert response.json() == {
            "error": "Failed to analyze posture images",
            "details": "upstream 502",
        }


class TestExtractBodyComposition:
    def test_success(self, client):
        _use(get_body_composition_client, BodyCompositionClient(llm=make_llm(extraction_payload())))

        response = client.post("/extract-body-composition", files={"reportImage": PNG})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["height"] == 172
        assert body["data"]["weight"] == 64.3
        assert body["data"]["skeletalMuscleMass"] == 24.8

    def test_missing_image(self, client):
        _use(get_body_composition_client, BodyCompositionClient(llm=make_llm()))

        response = client.post("/extract-body-composition", data={"note": "no file"})

        assert response.status_code == 400
        assert response.json()["error"] == "Please provide a body composition report image"

    def test_unparseable_reply(self, client):
        _use(get_body_composition_client, BodyCompositionClient(llm=make_llm("not json")))

        response = client.post("/extract-body-composition", files={"reportImage": PNG})

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to extract data from body composition report"


class TestGenerateProgram:
    def test_success(self, client):
        _use(get_program_generator, _generator(analysis_payload(), program_payload()))

        response = client.post("/generate-program", json=_program_body())

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"].startswith("program_")
        assert data["totalExercises"] == 4
        assert len(data["mainWorkout"]) == 2
        assert data["comprehensive_analysis"]["priority_areas"]["immediate_focus"] == ["scapular stability"]

    def test_request_more(self, client):
        _use(get_program_generator, _generator({"main_workout": [exercise_payload("Saw")]}))

        response = client.post("/generate-program", json=_program_body(requestMoreExercises=True))

        assert response.status_code == 200
        body = response.json()
        assert [e["name"] for e in body["data"]["mainWorkout"]] == ["Saw"]

    def test_no_equipment(self, client):
        generator = _generator()
        _use(get_program_generator, generator)

        response = client.post("/generate-program", json=_program_body(selectedEquipment=[]))

        assert response.status_code == 400
        assert response.json() == {"error": "Please select at least one piece of equipment"}
        generator.llm.ainvoke.assert_not_called()

    def test_design_failure_reports_phase(self, client):
        draft = program_payload()
        draft["warmUp"][0]["reasoning"] = ""
        _use(get_program_generator, _generator(analysis_payload(), draft))

        response = client.post("/generate-program", json=_program_body())

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Failed to generate Pilates program"
        assert body["phase"] == "Phase 2 Design"

    def test_malformed_body(self, client):
        _use(get_program_generator, _generator())

        response = client.post("/generate-program", json={"selectedEquipment": "Mat"})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request"


class TestWizardSessions:
    def test_unknown_session(self, client):
        response = client.get("/wizard/sessions/missing")
        assert response.status_code == 404
        assert response.json() == {"error": "Session not found", "details": "missing"}

    def test_delete_unknown_session(self, client):
        response = client.delete("/wizard/sessions/missing")
        assert response.status_code == 404
        assert response.json() == {"error": "Session not found", "details": "missing"}

    def test_create_and_delete(self, client):
        created = client.post("/wizard/sessions")
        assert created.status_code == 201
        session_id = created.json()["sessionId"]
        assert created.json()["state"]["currentStep"] == 1

        assert client.delete(f"/wizard/sessions/{session_id}").status_code == 200
        assert client.get(f"/wizard/sessions/{session_id}").status_code == 404

    def test_advance_blocked_until_images_uploaded(self, client):
        session_id = client.post("/wizard/sessions").json()["sessionId"]

        blocked = client.post(f"/wizard/sessions/{session_id}/advance")
        assert blocked.status_code == 409
        assert "front image is required" in blocked.json()["details"]

        uploaded = client.post(f"/wizard/sessions/{session_id}/posture/images", files=POSTURE_FILES)
        assert uploaded.json()["canAdvance"] is True

        advanced = client.post(f"/wizard/sessions/{session_id}/advance")
        assert advanced.status_code == 200
        assert advanced.json()["state"]["currentStep"] == 2

        retreated = client.post(f"/wizard/sessions/{session_id}/retreat")
        assert retreated.json()["state"]["currentStep"] == 1

    def test_full_flow(self, client):
        _use(get_posture_client, PostureAnalysisClient(llm=make_llm(findings_payload(shoulders="rounded"))))
        _use(get_body_composition_client, BodyCompositionClient(llm=make_llm(extraction_payload())))
        _use(
            get_program_generator,
            _generator(
                analysis_payload(),
                program_payload(),
                {"main_workout": [exercise_payload("Saw")]},
            ),
        )
        base = f"/wizard/sessions/{client.post('/wizard/sessions').json()['sessionId']}"

        client.post(f"{base}/posture/images", files=POSTURE_FILES)
        analyzed = client.post(f"{base}/posture/analyze").json()["state"]
        assert "Stretch chest muscles and anterior deltoids" in analyzed["postureSubmission"]["recommendations"]

        health = client.post(f"{base}/health/extract", files={"reportImage": PNG}).json()["state"]
        assert health["healthAssessment"]["extractedFromImage"] is True
        assert health["healthAssessment"]["bodyCompositionReport"]["height"] == 172

        goals = client.patch(f"{base}/goals", json={"primaryGoal": "strength"}).json()["state"]
        assert goals["userGoals"]["primaryGoal"] == "strength"
        assert goals["userGoals"]["experienceLevel"] == "beginner"

        client.put(f"{base}/equipment", json={"equipment": ["Mat", "Reformer"]})
        for _ in range(4):
            assert client.post(f"{base}/advance").status_code == 200

        program = client.post(f"{base}/program").json()["state"]["generatedProgram"]
        assert program["totalExercises"] == 4

        extended = client.post(f"{base}/program/more").json()["state"]["generatedProgram"]
        assert extended["totalExercises"] == 5
        assert extended["mainWorkout"][-1]["name"] == "Saw"

        exported = client.get(f"{base}/export")
        assert exported.status_code == 200
        assert exported.headers["content-disposition"].startswith('attachment; filename="soulfit-program-')
        rows = exported.json()["exercises"]
        assert [(r["no"], r["exercise"]) for r in rows] == [
            (1, "Pilates Breathing"),
            (2, "Rowing Back"),
            (3, "Swan Prep"),
            (4, "Child's Pose"),
            (5, "Saw"),
        ]

        reset = client.post(f"{base}/reset").json()["state"]
        assert reset["currentStep"] == 1
        assert reset["generatedProgram"] is None

    def test_unknown_equipment(self, client):
        session_id = client.post("/wizard/sessions").json()["sessionId"]
        response = client.put(f"/wizard/sessions/{session_id}/equipment", json={"equipment": ["Treadmill"]})
        assert response.status_code == 400
        assert response.json()["details"] == "Treadmill"

    def test_export_without_program(self, client):
        session_id = client.post("/wizard/sessions").json()["sessionId"]
        assert client.get(f"/wizard/sessions/{session_id}/export").status_code == 400
