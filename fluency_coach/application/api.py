"""FastAPI application entry point."""

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from ..domain.entities import FocusArea
from ..domain.exceptions import ExerciseNotFound
from ..infrastructure.local_exercise_provider import LocalExerciseProvider
from .config import settings
from .controller import FluencyCoachController

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Create FastAPI app instance
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize the catalog once from configuration
if settings.exercise_catalog_path:
    exercise_provider = LocalExerciseProvider.from_json_file(settings.exercise_catalog_path)
else:
    exercise_provider = LocalExerciseProvider()

# Initialize controller with injected dependencies
controller = FluencyCoachController(
    exercise_provider=exercise_provider,
    settings=settings,
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return controller.get_health_status()


@app.get("/exercises")
async def get_exercises(
    focus_area: Optional[FocusArea] = Query(None, description="Only list exercises with this focus area"),
):
    """List practice exercises.

    Args:
        focus_area: Optional focus area filter.

    Returns:
        The exercises without their targets.
    """
    return {"exercises": controller.list_exercises(focus_area)}


@app.get("/exercises/{exercise_id}")
async def get_exercise(exercise_id: str):
    """Get one exercise including its ordered targets."""
    try:
        return controller.get_exercise(exercise_id)
    except ExerciseNotFound as e:
        raise HTTPException(status_code=404, detail=e.message)


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """
    WebSocket endpoint for practice sessions.

    Connection lifecycle:
    1. Client connects
    2. Client sends session.start with an exercise_id
    3. Server responds with session.started and a progress snapshot
    4. Client streams audio (audio.frame JSON or binary PCM) and transcripts
    5. Server emits feedback and progress, then session.completed or session.aborted
    6. Further session.start messages begin a new session on the same connection

    Audio format for binary frames:
    - PCM16LE
    - Mono
    - 16 kHz sample rate
    """
    await websocket.accept()
    await controller.handle_websocket_connection(websocket)
