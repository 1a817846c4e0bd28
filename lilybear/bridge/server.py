"""
FastAPI ingestion endpoint for the relay bridge.

Other processes (the chat bot, scripts, the CLI) POST whispers here and they
are published on the local bus. The app is built around an explicitly passed
bus so several isolated instances can coexist, e.g. in tests.
"""

from datetime import datetime
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, Field

from lilybear import __version__
from lilybear.bus.events import WhisperMessage
from lilybear.bus.whisper import WhisperBus
from lilybear.commands.dispatcher import CommandDispatcher, parse_command_path
from lilybear.errors import CommandNotFound, ParseError

_WHISPER_FIELDS = ("from", "to", "message")


class WhisperPayload(BaseModel):
    """Body of POST /osc. Fields are optional here and checked by hand for a 400."""

    sender: Any = Field(None, alias="from")
    to: Any = None
    message: Any = None


class CommandPayload(BaseModel):
    """Body of POST /commands."""

    command: str
    sender: str = Field("external", alias="from")
    text: str = ""


def _missing_fields(payload: WhisperPayload) -> list[str]:
    values = {"from": payload.sender, "to": payload.to, "message": payload.message}
    return [k for k in _WHISPER_FIELDS if not isinstance(values[k], str) or not values[k].strip()]


def create_app(
    bus: WhisperBus,
    dispatcher: CommandDispatcher | None = None,
) -> FastAPI:
    """Build the HTTP app publishing onto `bus`."""
    app = FastAPI(
        title="lilybear relay",
        version=__version__,
        description="Inject whispers into the council bus from other processes",
    )
    app.state.bus = bus
    app.state.dispatcher = dispatcher

    @app.exception_handler(RequestValidationError)
    async def _bad_request(_request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": "Malformed request body"})

    @app.post("/osc")
    async def ingest_whisper(payload: WhisperPayload) -> dict[str, Any]:
        missing = _missing_fields(payload)
        if missing:
            logger.warning("Rejected whisper: missing {}", ", ".join(missing))
            raise HTTPException(status_code=400, detail=f"Missing fields: {', '.join(missing)}")

        msg = WhisperMessage(sender=payload.sender, to=payload.to, body=payload.message)
        delivered = bus.publish(msg)
        return {"status": "ok", "delivered": delivered}

    @app.post("/commands", status_code=202)
    async def run_command(payload: CommandPayload) -> dict[str, Any]:
        if dispatcher is None:
            raise HTTPException(status_code=404, detail="No command surface configured")

        path = parse_command_path(payload.command)
        try:
            ack = await dispatcher.dispatch(path, text=payload.text, sender=payload.sender)
        except CommandNotFound as e:
            raise HTTPException(status_code=404, detail=str(e)) from e
        except ParseError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        return {"status": "accepted", "message": ack}

    @app.get("/health")
    async def health_check() -> dict[str, Any]:
        return {
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
            "subscribers": bus.registry.names(),
        }

    @app.get("/")
    async def root() -> dict[str, Any]:
        return {
            "name": "lilybear",
            "version": __version__,
            "endpoints": {
                "whisper": "POST /osc",
                "commands": "POST /commands",
                "health": "GET /health",
            },
        }

    return app
