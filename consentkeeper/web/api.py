from __future__ import annotations

import json
from typing import Any, Dict, Optional, Type, TypeVar

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

import consentkeeper
from consentkeeper.core.error_reporter import ErrorReporter
from consentkeeper.core.errors import ConsentKeeperError, ValidationError, http_status_for
from consentkeeper.core.events import EventLogger
from consentkeeper.core.users import UserService
from consentkeeper.web.middleware import RequestContextMiddleware
from consentkeeper.web.models import (
    ConsentUpdateRequest,
    CreateUserRequest,
    CreateUserResponse,
    DeleteUserResponse,
    HealthResponse,
)

M = TypeVar("M", bound=BaseModel)


def _trace_id(request: Request) -> str:
    return getattr(getattr(request, "state", None), "trace_id", "web")


def _requester(request: Request) -> Optional[str]:
    return getattr(getattr(request, "state", None), "requester", None)


def _is_json(request: Request) -> bool:
    ctype = request.headers.get("content-type", "").split(";")[0].strip().lower()
    return ctype == "application/json" or ctype.endswith("+json")


async def _json_object(request: Request) -> Dict[str, Any]:
    """
    Non-JSON content types, an empty body or a non-object JSON value read as {}.
    Malformed JSON is a 400.
    """
    if not _is_json(request):
        return {}
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        obj = json.loads(raw)
    except ValueError as e:
        raise ValidationError("invalid_json", "Request body is not valid JSON.", error=str(e)) from e
    return obj if isinstance(obj, dict) else {}


async def _parse_body(request: Request, model: Type[M]) -> M:
    body = await _json_object(request)
    try:
        return model.model_validate(body)
    except PydanticValidationError as e:
        raise ValidationError("invalid_request", "Invalid request.", errors=[err.get("msg", "") for err in e.errors()]) from e


def create_app(
    service: UserService,
    *,
    logger,
    event_logger: Optional[EventLogger] = None,
    error_reporter: Optional[ErrorReporter] = None,
    allowed_origins: list[str] | None = None,
    access_log: bool = True,
) -> FastAPI:
    app = FastAPI(title="consentkeeper", version=consentkeeper.__version__)
    reporter = error_reporter or ErrorReporter()

    if allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allowed_origins,
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    app.middleware("http")(RequestContextMiddleware(logger=logger, event_logger=event_logger, access_log=access_log))

    @app.exception_handler(ConsentKeeperError)
    async def consentkeeper_error_handler(request: Request, exc: ConsentKeeperError):
        code = http_status_for(exc)
        if code >= 500:
            reporter.write_error(exc, trace_id=_trace_id(request), subsystem="web", internal_exc=exc)
            if logger is not None:
                logger.error(f"{request.method} {request.url.path} failed: {exc.code} {exc.context}")
        return JSONResponse(status_code=code, content={"error": exc.code})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": "invalid_request"})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        err = reporter.report_exception(exc, trace_id=_trace_id(request), subsystem="web", context={"path": request.url.path})
        if logger is not None:
            logger.error(f"{request.method} {request.url.path} failed: {exc!r}")
        return JSONResponse(status_code=500, content={"error": err.code})

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return {"status": "ok"}

    @app.post("/users", status_code=201, response_model=CreateUserResponse)
    async def create_user(request: Request):
        req = await _parse_body(request, CreateUserRequest)
        user_id = service.create_user(
            name=req.name,
            email=req.email,
            data=req.data,
            consent=req.consent,
            requester=_requester(request),
        )
        return {"id": user_id}

    @app.get("/users")
    async def list_users():
        return service.list_users()

    @app.get("/users/{user_id}")
    async def get_user(user_id: str):
        return service.get_user(user_id).to_public()

    @app.get("/users/{user_id}/export")
    async def export_user(user_id: str, request: Request):
        return service.export_user(user_id, requester=_requester(request))

    @app.delete("/users/{user_id}", response_model=DeleteUserResponse)
    async def delete_user(user_id: str, request: Request):
        return service.delete_user(user_id, requester=_requester(request))

    @app.post("/users/{user_id}/consent")
    async def update_consent(user_id: str, request: Request):
        req = await _parse_body(request, ConsentUpdateRequest)
        return service.update_consent(user_id, req.consent, requester=_requester(request))

    return app
