from __future__ import annotations

import logging

from . import config

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .chains.body_composition_chain import BodyCompositionClient
from .chains.posture_chain import PostureAnalysisClient
from .chains.program_chain import ProgramGenerator
from .dependencies import get_body_composition_client, get_posture_client, get_program_generator
from .errors import NoExercisesAvailable, SessionNotFound, SoulFitError, ValidationError
from .schemas.program import GenerateProgramRequest
from .uploads import posture_images_from_form, report_image_from_form
from .wizard.api import router as wizard_router

logger = logging.getLogger(__name__)

app = FastAPI(
    title="SoulFit AI API",
    description="Posture analysis, body-composition extraction and Pilates program generation",
    version=__version__,
)
app.include_router(wizard_router, prefix="/wizard")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o for o in [*config.CORS_ORIGINS, config.FRONTEND_URL] if o],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================
# Error handling
# ============================================


@app.exception_handler(SoulFitError)
async def soulfit_error_handler(request: Request, exc: SoulFitError):
    if isinstance(exc, SessionNotFound):
        return JSONResponse(status_code=404, content=exc.to_payload())
    if isinstance(exc, (ValidationError, NoExercisesAvailable)):
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=400, content=exc.to_payload())
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": "Invalid request", "details": details})


# ============================================
# Endpoints
# ============================================


@app.get("/health")
async def health():
    return {"status": "ok", "config": config.get_config()}


@app.post("/analyze-posture")
async def analyze_posture(
    request: Request,
    client: PostureAnalysisClient = Depends(get_posture_client),
):
    """Analyze four posture photos sent as ``frontImage``, ``backImage``,
    ``sideImage`` and ``bendDownImage`` multipart parts."""
    form = await request.form()
    images = await posture_images_from_form(form)
    result = await client.analyze(images)
    return result.model_dump(by_alias=True)


@app.post("/extract-body-composition")
async def extract_body_composition(
    request: Request,
    client: BodyCompositionClient = Depends(get_body_composition_client),
):
    form = await request.form()
    report_image = await report_image_from_form(form)
    report = await client.extract(report_image)
    return {"success": True, "data": report.model_dump(by_alias=True, exclude_none=True)}


@app.post("/generate-program")
async def generate_program(
    body: GenerateProgramRequest,
    generator: ProgramGenerator = Depends(get_program_generator),
):
    if body.request_more_exercises:
        exercises = await generator.generate_more(body)
        return {
            "success": True,
            "data": {"mainWorkout": [e.model_dump(by_alias=True) for e in exercises]},
        }

    program = await generator.generate(body)
    return {"success": True, "data": program.model_dump(mode="json", by_alias=True)}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("soulfit.main:app", host=config.API_HOST, port=config.API_PORT, reload=True)
