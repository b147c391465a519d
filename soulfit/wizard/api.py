"""FastAPI router for wizard sessions.

Mount this router in the main app:
    from soulfit.wizard.api import router as wizard_router
    app.include_router(wizard_router, prefix="/wizard")
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..chains.body_composition_chain import BodyCompositionClient
from ..chains.posture_chain import PostureAnalysisClient
from ..chains.program_chain import ProgramGenerator
from ..dependencies import (
    get_body_composition_client,
    get_posture_client,
    get_program_generator,
    get_sessions,
)
from ..errors import SessionNotFound, ValidationError
from ..services.export import build_snapshot, snapshot_filename
from ..uploads import posture_images_from_form, report_image_from_form
from .state import GoalsUpdate, HealthUpdate, PostureUpdate
from .store import SessionRegistry, WizardStore

router = APIRouter(tags=["wizard"])


# --- Request models ---


class EquipmentSelection(BaseModel):
    equipment: list[str]


# --- Helpers ---


def _store(session_id: str, sessions: SessionRegistry = Depends(get_sessions)) -> WizardStore:
    store = sessions.get(session_id)
    if store is None:
        raise SessionNotFound(details=session_id)
    return store


def _state(store: WizardStore) -> dict:
    return {
        "sessionId": store.session_id,
        "canAdvance": store.can_advance(),
        "state": store.state.model_dump(mode="json", by_alias=True),
    }


# --- Session lifecycle ---


@router.post("/sessions", status_code=201)
async def create_session(sessions: SessionRegistry = Depends(get_sessions)):
    return _state(sessions.create())


@router.get("/sessions/{session_id}")
async def get_session(store: WizardStore = Depends(_store)):
    return _state(store)


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str, sessions: SessionRegistry = Depends(get_sessions)):
    if not sessions.delete(session_id):
        raise SessionNotFound(details=session_id)
    return {"status": "deleted", "sessionId": session_id}


@router.post("/sessions/{session_id}/reset")
async def reset_session(store: WizardStore = Depends(_store)):
    store.reset()
    return _state(store)


# --- Navigation ---


@router.post("/sessions/{session_id}/advance")
async def advance(store: WizardStore = Depends(_store)):
    blockers = store.try_advance()
    if blockers:
        return JSONResponse(
            status_code=409,
            content={"error": "Cannot advance from this step", "details": "; ".join(blockers)},
        )
    return _state(store)


@router.post("/sessions/{session_id}/retreat")
async def retreat(store: WizardStore = Depends(_store)):
    store.retreat()
    return _state(store)


# --- Step data ---


@router.patch("/sessions/{session_id}/posture")
async def update_posture(update: PostureUpdate, store: WizardStore = Depends(_store)):
    store.update_posture(update)
    return _state(store)


@router.post("/sessions/{session_id}/posture/images")
async def upload_posture_images(request: Request, store: WizardStore = Depends(_store)):
    form = await request.form()
    images = await posture_images_from_form(form, require_all=False)
    store.update_posture({f"{role}_image": image for role, image in images.items()})
    return _state(store)


@router.post("/sessions/{session_id}/posture/analyze")
async def analyze_posture(
    store: WizardStore = Depends(_store),
    client: PostureAnalysisClient = Depends(get_posture_client),
):
    await store.analyze_posture(client)
    return _state(store)


@router.patch("/sessions/{session_id}/health")
async def update_health(update: HealthUpdate, store: WizardStore = Depends(_store)):
    store.update_health(update)
    return _state(store)


@router.post("/sessions/{session_id}/health/extract")
async def extract_report(
    request: Request,
    store: WizardStore = Depends(_store),
    client: BodyCompositionClient = Depends(get_body_composition_client),
):
    form = await request.form()
    report_image = await report_image_from_form(form)
    await store.extract_report(client, report_image)
    return _state(store)


@router.patch("/sessions/{session_id}/goals")
async def update_goals(update: GoalsUpdate, store: WizardStore = Depends(_store)):
    store.update_goals(update)
    return _state(store)


@router.put("/sessions/{session_id}/equipment")
async def update_equipment(selection: EquipmentSelection, store: WizardStore = Depends(_store)):
    store.update_equipment(selection.equipment)
    return _state(store)


# --- Program ---


@router.post("/sessions/{session_id}/program")
async def generate_program(
    store: WizardStore = Depends(_store),
    generator: ProgramGenerator = Depends(get_program_generator),
):
    await store.generate_program(generator)
    return _state(store)


@router.post("/sessions/{session_id}/program/more")
async def generate_more(
    store: WizardStore = Depends(_store),
    generator: ProgramGenerator = Depends(get_program_generator),
):
    await store.generate_more(generator)
    return _state(store)


@router.get("/sessions/{session_id}/export")
async def export_program(store: WizardStore = Depends(_store)):
    program = store.state.generated_program
    if program is None:
        raise ValidationError("No program to export")
    return JSONResponse(
        content=build_snapshot(program, store.state.program_rows),
        headers={"Content-Disposition": f'attachment; filename="{snapshot_filename()}"'},
    )
