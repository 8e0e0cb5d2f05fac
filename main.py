import json
import logging
from typing import Any, Dict, Optional

import pydantic
from fastapi import APIRouter, Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Settings, load_settings
from errors import MethodNotAllowed, ProviderError, RelayError, ServerConfigurationError, ValidationError
from gateway import Gateway, MetaGateway
from payload import build_event
from schemas import InboundEvent

EVENTS_PATH = "/api/meta-capi"
LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

router = APIRouter()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_gateway(request: Request) -> Gateway:
    return request.app.state.gateway


async def parse_event(request: Request) -> InboundEvent:
    raw = await request.body()
    try:
        body = json.loads(raw) if raw.strip() else {}
    except ValueError:
        raise ValidationError("Invalid JSON body")
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    if not body.get("event_name"):
        raise ValidationError("event_name is required")
    try:
        return InboundEvent.model_validate(body)
    except pydantic.ValidationError as e:
        logging.warning("Rejected event body: %s", e.errors(include_input=False))
        raise ValidationError("Invalid request body")


def success_content(event_name: str, result: Any) -> Dict[str, Any]:
    content: Dict[str, Any] = {"success": True, "event_name": event_name}
    if isinstance(result, dict):
        for key in ("events_received", "fbtrace_id"):
            if result.get(key) is not None:
                content[key] = result[key]
    return content


@router.options(EVENTS_PATH)
def preflight():
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post(EVENTS_PATH)
async def meta_capi(
    request: Request,
    settings: Settings = Depends(get_settings),
    gateway: Gateway = Depends(get_gateway),
):
    """
    Hashes the caller's identity fields and forwards the event to the Meta
    Conversions API. IP and User-Agent are always taken from the request.
    """
    if not settings.configured:
        logging.error("META_ACCESS_TOKEN not configured")
        raise ServerConfigurationError()

    event = await parse_event(request)
    peer = request.client.host if request.client else None

    try:
        meta_event = build_event(event, request.headers, peer)
        logging.debug("Built Meta CAPI event: %s", meta_event)
        outcome = await run_in_threadpool(gateway.send, meta_event)
    except Exception as e:
        logging.exception("Meta CAPI error for %s event", event.event_name)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "message": str(e)},
        )

    if not outcome.ok:
        logging.error("Meta CAPI error (status %s): %s", outcome.status_code, outcome.body)
        raise ProviderError(outcome.status_code, outcome.body)

    logging.info("Meta CAPI: %s event sent successfully %s", event.event_name, outcome.body)
    return success_content(event.event_name, outcome.body)


@router.get("/health-check")
def health_check(settings: Settings = Depends(get_settings)):
    return {"status": "ok", "configured": settings.configured}


async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 405:
        content = MethodNotAllowed().to_content()
    else:
        content = {"error": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


def create_app(settings: Optional[Settings] = None, gateway: Optional[Gateway] = None) -> FastAPI:
    settings = settings or load_settings()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

    app = FastAPI(title="Meta CAPI relay")
    app.state.settings = settings
    app.state.gateway = gateway or MetaGateway(settings)
    app.add_exception_handler(RelayError, relay_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.include_router(router)
    return app


app = create_app()
