import asyncio
import logging
import os
from contextlib import asynccontextmanager, suppress
from typing import Any, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from prompt_wizard.backend import Backend
from prompt_wizard.errors import WizardError
from prompt_wizard.session_store import build_session_store

logger = logging.getLogger("prompt_wizard")

SWEEP_INTERVAL_SECONDS = float(os.getenv("WIZARD_SWEEP_INTERVAL_SECONDS", "300"))

STATUS_BY_ERROR = {
    "ValidationError": 400,
    "InvalidStateError": 400,
    "SessionBusyError": 409,
    "GatewayError": 502,
    "ParseError": 502,
    "GenerationFailure": 502,
    "SynthesisFailure": 502,
    "ConfigurationError": 500,
}


class Event(BaseModel):
    type: str
    session_id: str
    payload: Optional[Any] = None


class GenerateRequest(BaseModel):
    prompt: str


def _status_for(response_data: dict) -> int:
    if response_data.get("status") != "error":
        return 200
    return STATUS_BY_ERROR.get(response_data.get("error_type", ""), 400)


def create_app(backend: Optional[Backend] = None) -> FastAPI:
    backend = backend or Backend(build_session_store())

    async def _sweep_loop() -> None:
        while True:
            await asyncio.sleep(SWEEP_INTERVAL_SECONDS)
            await asyncio.to_thread(backend.sweep)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        task = asyncio.create_task(_sweep_loop())
        try:
            yield
        finally:
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task

    app = FastAPI(lifespan=lifespan)
    app.state.backend = backend

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Allow all origins for dev
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.post("/events")
    def send_event(event: Event):
        payload = event.payload if isinstance(event.payload, dict) else {}
        response_data = backend.process(event.type, event.session_id, payload)
        return JSONResponse(status_code=_status_for(response_data), content=response_data)

    @app.get("/session")
    def get_session(session_id: str):
        response_data = backend.process("load_session", session_id)
        return JSONResponse(status_code=_status_for(response_data), content=response_data)

    @app.post("/generate")
    def generate(request: GenerateRequest):
        try:
            return backend.handle_generate({"prompt": request.prompt})
        except WizardError as e:
            logger.info(f"[generate] {type(e).__name__}: {e.message}")
            raise HTTPException(status_code=STATUS_BY_ERROR.get(type(e).__name__, 500), detail=e.message)

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
