import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from model_relay import __version__
from model_relay.api.endpoints import router as api_router
from model_relay.core.config import get_config
from model_relay.core.logging import configure_root_logging

CORS_ALLOWED_METHODS = ["GET", "OPTIONS", "PATCH", "DELETE", "POST", "PUT"]
CORS_ALLOWED_HEADERS = [
    "X-CSRF-Token",
    "X-Requested-With",
    "Accept",
    "Accept-Version",
    "Content-Length",
    "Content-MD5",
    "Content-Type",
    "Date",
    "X-Api-Version",
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    orchestrator = getattr(app.state, "orchestrator", None)
    if orchestrator is not None:
        await orchestrator.aclose()
        app.state.orchestrator = None


def create_app() -> FastAPI:
    application = FastAPI(title="Model Relay", version=__version__, lifespan=lifespan)
    # Credentialed requests from any origin: the origin is echoed back instead of "*"
    application.add_middleware(
        CORSMiddleware,
        allow_origin_regex=".*",
        allow_credentials=True,
        allow_methods=CORS_ALLOWED_METHODS,
        allow_headers=CORS_ALLOWED_HEADERS,
    )
    application.include_router(api_router)
    return application


app = create_app()


def main() -> None:
    if len(sys.argv) > 1 and sys.argv[1] == "--help":
        print(f"Model Relay v{__version__}")
        print("")
        print("Usage: python -m model_relay.main")
        print("       or: relay start")
        print("")
        print("Optional environment variables:")
        print("  REGISTRY_PATH - JSON model registry (default: ~/.config/model-relay/registry.json)")
        print("  CALL_LOG_PATH - JSON-lines call log (default: log through the logger)")
        print("  FALLBACK_API_KEYS - Comma-separated keys used when the registry is unavailable")
        print("  HOST - Server host (default: 0.0.0.0)")
        print("  PORT - Server port (default: 8082)")
        print("  LOG_LEVEL - Logging level (default: INFO)")
        print("  REQUEST_TIMEOUT - Per-attempt timeout in seconds (default: 90)")
        print("")
        print("For more options, use the relay CLI:")
        print("  relay models list - Show the routing table")
        print("  relay ask PROMPT  - Send a one-off prompt")
        sys.exit(0)

    cfg = get_config()
    log_level = configure_root_logging(cfg.log_level).lower()

    print(f"Model Relay v{__version__}")
    print(f"   Registry       : {cfg.registry_path}")
    print(f"   Call log       : {cfg.call_log_path or 'logger'}")
    print(f"   Request Timeout: {cfg.request_timeout}s")
    print(f"   Fallback       : {'Enabled' if cfg.fallback_api_keys else 'Disabled'}")
    print(f"   Server: {cfg.host}:{cfg.port}")
    print("")

    uvicorn.run(
        "model_relay.main:app",
        host=cfg.host,
        port=cfg.port,
        log_level=log_level,
        access_log=log_level == "debug",
        reload=False,
    )


if __name__ == "__main__":
    main()
