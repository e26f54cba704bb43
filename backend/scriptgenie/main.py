import json
import logging
import sys
from typing import Any, Optional, Type, TypeVar

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, get_settings
from .models import GenerateRequest, ScriptRequest, VoiceRequest
from .services.ai_service import AIProcessor
from .services.file_service import OUTPUTS_URL_PREFIX
from .services.payment_service import PaymentProcessor

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(
    settings: Optional[Settings] = None,
    ai_processor: Optional[AIProcessor] = None,
    payment_processor: Optional[PaymentProcessor] = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    ai_processor = ai_processor or AIProcessor(settings)
    payment_processor = payment_processor or PaymentProcessor(settings)
    output_dir = ai_processor.file_processor.output_dir

    app = FastAPI(title="ScriptGenie Pro")

    # CORS setup
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def limit_body_size(request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > settings.MAX_BODY_BYTES:
            return JSONResponse(status_code=413, content={"ok": False, "error": "Payload too large"})
        return await call_next(request)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"ok": False, "error": exc.detail})

    async def read_payload(request: Request, model: Type[ModelT]) -> ModelT:
        """Parse a JSON body into model; a missing or null body counts as an empty object."""
        body = b""
        async for chunk in request.stream():
            body += chunk
            if len(body) > settings.MAX_BODY_BYTES:
                raise HTTPException(status_code=413, detail="Payload too large")

        data: Any = {}
        if body.strip():
            try:
                data = json.loads(body)
            except ValueError:
                raise HTTPException(status_code=400, detail="Invalid request body")
        try:
            return model.model_validate({} if data is None else data)
        except ValidationError:
            raise HTTPException(status_code=400, detail="Invalid request body")

    @app.get("/api/health")
    async def health():
        return {"ok": True, "demo": settings.DEMO_MODE}

    @app.post("/api/generate-script")
    async def generate_script(request: Request):
        payload = await read_payload(request, ScriptRequest)
        outcome = await ai_processor.generate_script(payload)
        return outcome.envelope()

    @app.post("/api/generate-voice")
    async def generate_voice(request: Request):
        payload = await read_payload(request, VoiceRequest)
        voice = await ai_processor.generate_voiceover(payload.text, payload.language, payload.voice)
        return {"ok": True, "url": voice.url}

    @app.post("/api/generate")
    async def generate(request: Request):
        """Script, then a voiceover of the full script.

        If the voice step fails the script is discarded; nothing partial is returned.
        """
        # The gate comes before the body is read or validated
        if not settings.DEMO_MODE:
            raise HTTPException(status_code=403, detail="Payment required (CIH/CMI). DEMO_MODE=false")
        payload = await read_payload(request, GenerateRequest)

        try:
            outcome = await ai_processor.generate_script(payload.script_request())
            if not outcome.ok:
                return JSONResponse(status_code=400, content=outcome.envelope())

            script_text = outcome.data.get("script")
            if not isinstance(script_text, str):
                script_text = ""
            voice = await ai_processor.generate_voiceover(script_text, payload.language, payload.voice)
        except HTTPException:
            raise
        except Exception:
            logger.exception("generate (combined) error")
            raise HTTPException(status_code=500, detail="Server error")

        return {"ok": True, "data": {**outcome.data, "audio_url": voice.url}}

    @app.post("/api/payment/checkout")
    async def payment_checkout():
        status = payment_processor.checkout_status()
        return {"ok": False, **status.model_dump(exclude_none=True)}

    @app.get("/")
    async def index():
        return FileResponse(settings.PUBLIC_DIR / "index.html")

    app.mount(OUTPUTS_URL_PREFIX, StaticFiles(directory=output_dir), name="outputs")
    app.mount("/", StaticFiles(directory=settings.PUBLIC_DIR), name="public")

    return app


def run() -> None:
    try:
        settings = get_settings()
    except ValidationError as e:
        configure_logging()
        missing = ", ".join(".".join(map(str, err["loc"])) for err in e.errors())
        logger.error("Invalid configuration (%s). Put the API keys in .env", missing)
        sys.exit(1)

    app = create_app(settings)
    logger.info(
        "ScriptGenie Pro server running on http://localhost:%s (DEMO_MODE=%s)",
        settings.PORT, settings.DEMO_MODE,
    )
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())
