"""Run the Fluency Coach FastAPI application with uvicorn."""

import uvicorn

from fluency_coach.application.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "fluency_coach.application.api:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
