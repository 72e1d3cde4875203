"""HTTP API for query result conversion using FastAPI."""
from typing import Any, Dict, Optional
from fastapi import Body, FastAPI, HTTPException, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel
import logging
import time

from promconv.engine import NormalizerEngine

logger = logging.getLogger(__name__)


class RenderRequest(BaseModel):
    """Request to render a named or inline template."""
    name: Optional[str] = None
    template: Optional[str] = None
    data: Any = None


class LogLevelRequest(BaseModel):
    """Request to change log level."""
    level: str


class ConversionAPI:
    """FastAPI application exposing the normalizer."""

    def __init__(self, engine: NormalizerEngine):
        """
        Initialize the API.

        Args:
            engine: Normalizer engine shared by all requests
        """
        self.engine = engine
        self.app = FastAPI(title="Query Result Normalizer API")
        self._setup_routes()

    def _setup_routes(self):
        """Setup API routes."""

        @self.app.get("/healthz")
        async def healthz():
            """Health check endpoint."""
            return {"status": "healthy", "timestamp": time.time()}

        @self.app.post("/convert")
        async def convert_result(payload: Dict[str, Any] = Body(...)):
            """Convert a query response into observations."""
            result_type, observations = self.engine.normalize(payload)
            items = []
            for obs in observations:
                item = obs.to_dict()
                item["readable_value"] = obs.readable_value()
                items.append(item)
            return {
                "result_type": result_type,
                "count": len(items),
                "observations": items,
            }

        @self.app.post("/render")
        async def render(request: RenderRequest):
            """Render a configured template by name, or an inline template."""
            renderer = self.engine.renderer
            if request.name and request.template is None:
                if request.name not in renderer.templates:
                    raise HTTPException(
                        status_code=404,
                        detail=f"Template '{request.name}' not found. "
                               f"Available templates: {sorted(renderer.templates)}"
                    )
                return {"output": renderer.render_named(request.name, request.data)}

            if request.template is None:
                raise HTTPException(status_code=400, detail="Either name or template is required")

            output = renderer.render(request.name or "inline", request.template, request.data)
            return {"output": output}

        @self.app.post("/control/loglevel")
        async def set_log_level(request: LogLevelRequest):
            """Change log level at runtime."""
            level = request.level.upper()

            if level not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
                raise HTTPException(
                    status_code=400,
                    detail=f"Invalid log level: {level}"
                )

            logging.getLogger().setLevel(getattr(logging, level))
            logger.info(f"Log level changed to: {level}")

            return {
                "status": "log_level_changed",
                "level": level,
                "timestamp": time.time()
            }

        @self.app.get("/metrics")
        async def metrics():
            """Self-metrics in Prometheus exposition format."""
            if self.engine.self_metrics is None:
                raise HTTPException(status_code=404, detail="Self-metrics are disabled")
            return Response(
                content=generate_latest(self.engine.self_metrics.registry),
                media_type=CONTENT_TYPE_LATEST
            )

    def run(self, host: str = "0.0.0.0", port: int = 8081):
        """Run the API server."""
        import uvicorn
        uvicorn.run(self.app, host=host, port=port, log_level="info")
