"""HTTP endpoints for the three generation calls.

Each endpoint accepts the camelCase request body of the generation contract
and returns the normalized response with status 200. Any failure, whether
from the generator, JSON extraction or a malformed request body, yields
status 500 with ``{"error": ..., "message": ...}``; recovering with a
fallback is left to the client.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, FastAPI
from fastapi.responses import JSONResponse

from ..generation.service import GenerationService

logger = logging.getLogger(__name__)


def _error(error: str, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": error, "message": str(exc)})


def create_router(service: GenerationService) -> APIRouter:
    """Build the ``/api`` router bound to ``service``."""
    router = APIRouter(prefix="/api")

    @router.post("/generate-scenario")
    def generate_scenario(body: Dict[str, Any]):
        """Generate the next life scenario."""
        try:
            scenario = service.generate_scenario(
                int(body["currentAge"]),
                body["stats"],
                body.get("previousChoices") or [],
                body.get("timelineContext") or "",
            )
        except Exception as exc:
            logger.warning("Generate scenario error: %s", exc)
            return _error("Failed to generate scenario", exc)
        return {"scenario": scenario}

    @router.post("/process-choice")
    def process_choice(body: Dict[str, Any]):
        """Resolve the outcome of a choice."""
        try:
            outcome = service.process_choice(
                body["choice"],
                int(body["currentAge"]),
                body["stats"],
                body.get("timelineContext") or "",
            )
        except Exception as exc:
            logger.warning("Process choice error: %s", exc)
            return _error("Failed to process choice", exc)
        return {"outcome": outcome}

    @router.post("/generate-insights")
    def generate_insights(body: Dict[str, Any]):
        """Summarize a completed life."""
        try:
            insights = service.generate_insights(
                body.get("timeline") or [],
                body["finalStats"],
                body.get("choices") or [],
            )
        except Exception as exc:
            logger.warning("Generate insights error: %s", exc)
            return _error("Failed to generate insights", exc)
        return insights

    return router


def create_app(service: Optional[GenerationService] = None) -> FastAPI:
    """FastAPI application serving the generation endpoints.

    Without an explicit service, one backed by ``OpenAITextGenerator`` is used.
    """
    if service is None:
        from ..generation.client import OpenAITextGenerator

        service = GenerationService(OpenAITextGenerator())
    app = FastAPI(title="Future You generation API")
    app.include_router(create_router(service))
    return app
