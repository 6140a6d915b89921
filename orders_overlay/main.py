"""
FastAPI server for the orders overlay.
Lets the web order editor ask what syntax help to show for each keystroke.
"""

import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from orders_overlay import config
from orders_overlay.commands.registry import CommandRegistry
from orders_overlay.commands.validator import load_command_file
from orders_overlay.overlay.service import OverlayService
from orders_overlay.telemetry import OverlayTelemetry

logger = logging.getLogger(__name__)


class OverlayRequest(BaseModel):
    """Editor state at one keystroke or cursor move."""
    text: str = ""
    cursor: int = 0


class FilterRequest(BaseModel):
    text: str = ""
    cursor: int = 0
    search: str = ""


def build_registry(telemetry: OverlayTelemetry) -> CommandRegistry:
    """Registry from OVERLAY_COMMANDS_FILE if set, else the built-in table."""
    if config.COMMANDS_FILE:
        path = config.COMMANDS_FILE
        logger.info(f"Loading command definitions from {path}")
        return CommandRegistry(source=lambda: load_command_file(path), telemetry=telemetry)
    return CommandRegistry(telemetry=telemetry)


def create_app(service: OverlayService = None) -> FastAPI:
    """Build the API around one overlay pipeline."""
    if service is None:
        telemetry = OverlayTelemetry(logger=logging.getLogger("orders_overlay"))
        service = OverlayService(build_registry(telemetry), telemetry=telemetry)

    app = FastAPI(title="Star Empires Orders Overlay API")
    app.state.overlay = service

    # Allow the web order editor to connect
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.post("/overlay")
    def evaluate_overlay(request: OverlayRequest):
        """Context and content for the editor's current text and cursor."""
        context, content = service.evaluate(request.text, request.cursor)
        return {"context": context.to_dict(), "content": content.to_dict()}

    @app.post("/overlay/filter")
    def filter_overlay(request: FilterRequest):
        """Same as /overlay, narrowed to items containing a search term."""
        context, content = service.evaluate(request.text, request.cursor)
        filtered = service.generator.filter_content(content, request.search)
        return {"context": context.to_dict(), "content": filtered.to_dict()}

    @app.get("/commands")
    def list_commands():
        """All command definitions grouped by category, in display order."""
        grouped = service.registry.get_by_category()
        return {
            "count": sum(len(commands) for commands in grouped.values()),
            "categories": {
                category.value: [command.to_dict() for command in commands]
                for category, commands in grouped.items()
            },
        }

    @app.get("/commands/{name}")
    def get_command(name: str):
        """One command definition; 404 carries "did you mean" suggestions."""
        definition = service.registry.get(name)
        if definition is None:
            raise HTTPException(
                status_code=404,
                detail={
                    "error": f"Unknown command: {name}",
                    "suggestions": service.registry.suggest(name),
                },
            )
        return definition.to_dict()

    @app.get("/status")
    def get_status():
        """Registry health, cache sizes and telemetry counters."""
        return service.status()

    @app.get("/logs")
    def get_logs(level: str = None):
        """Buffered telemetry entries, optionally for one level."""
        telemetry = service.telemetry
        entries = telemetry.get_logs_by_level(level) if level else telemetry.get_session_logs()
        return {"session_id": telemetry.session_id, "logs": [entry.to_dict() for entry in entries]}

    @app.post("/recover")
    def recover():
        """Reload the command table and drop every cache."""
        healthy = service.registry.attempt_recovery()
        service.clear_caches()
        return {"healthy": healthy, "registry": service.registry.get_service_status().to_dict()}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    print("=" * 60)
    print("STAR EMPIRES ORDERS OVERLAY - Server Starting")
    print("=" * 60)
    print(f"Commands: {len(app.state.overlay.registry.get_all())}")
    print(f"Command file: {config.COMMANDS_FILE or 'built-in table'}")
    print(f"[*] Server: http://{config.HOST}:{config.PORT}")
    print(f"[*] API Docs: http://{config.HOST}:{config.PORT}/docs")
    print("=" * 60)

    uvicorn.run(app, host=config.HOST, port=config.PORT)
