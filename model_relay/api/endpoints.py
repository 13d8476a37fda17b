from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from model_relay.api.services.error_handling import ErrorResponseBuilder
from model_relay.core.config import get_config
from model_relay.core.exceptions import InvalidInput, RegistryUnavailable
from model_relay.core.logging import conversation_logger
from model_relay.core.orchestrator import Orchestrator, build_orchestrator

router = APIRouter()


def get_orchestrator(request: Request) -> Orchestrator:
    """Orchestrator shared by the application, created on first use."""
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        orchestrator = build_orchestrator(get_config())
        request.app.state.orchestrator = orchestrator
    return orchestrator


def _parse_body(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise InvalidInput("Request body must be a JSON object")
    if not isinstance(payload.get("messages"), list):
        raise InvalidInput("Missing messages array")

    for field in ("feature", "model"):
        value = payload.get(field)
        if value is not None and not isinstance(value, str):
            raise InvalidInput(f"{field} must be a string")
    tools = payload.get("tools")
    if tools is not None and not isinstance(tools, list):
        raise InvalidInput("tools must be an array")
    return payload


@router.post("/api/ai")
async def ai_completion(
    http_request: Request,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> Response:
    """Route one chat completion across the configured models."""
    try:
        payload = await http_request.json()
    except ValueError:
        return ErrorResponseBuilder.invalid_input("Invalid JSON body")

    try:
        body = _parse_body(payload)
        result = await orchestrator.dispatch(
            body["messages"],
            feature=body.get("feature"),
            preferred_model=body.get("model"),
            tools=body.get("tools"),
        )
    except Exception as e:
        conversation_logger.warning(f"Dispatch failed: {type(e).__name__}: {e}")
        return ErrorResponseBuilder.from_exception(e)

    return JSONResponse(status_code=200, content={"result": result})


@router.options("/api/ai")
async def ai_completion_options() -> Response:
    """Bare OPTIONS requests succeed; CORS pre-flights are answered by the middleware."""
    return Response(status_code=200)


@router.api_route("/api/ai", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def ai_completion_method_not_allowed() -> JSONResponse:
    return ErrorResponseBuilder.method_not_allowed()


@router.get("/health")
async def health_check(
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> JSONResponse:
    """Health check endpoint"""
    content: dict[str, Any] = {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "fallback_configured": orchestrator.fallback is not None,
    }
    try:
        models = await orchestrator.accessor.store.list_models()
    except RegistryUnavailable as e:
        content["status"] = "degraded"
        content["registry"] = {"reachable": False, "error": e.message}
    else:
        content["registry"] = {
            "reachable": True,
            "models": len(models),
            "enabled": sum(1 for m in models if m.enabled),
        }
    return JSONResponse(status_code=200, content=content)
