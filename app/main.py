import logging
import time
from datetime import datetime, timezone
from http import HTTPStatus

import socketio
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.core.dependencies import get_auth_service, get_realtime_gateway
from app.core.exceptions import GatewayError
from app.database.group_store import GroupStore
from app.database.supabase_client import SupabaseClient, get_supabase
from app.modules.groups import routes as groups_routes
from app.modules.groups.service import GroupService
from app.modules.members import routes as members_routes
from app.modules.ranking import routes as ranking_routes
from app.modules.realtime.gateway import RealtimeGateway
from app.modules.realtime.namespace import GroupsNamespace

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

_started_at = time.monotonic()

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit],
    enabled=settings.rate_limit_enabled,
)
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(GatewayError)
async def gateway_exception_handler(request: Request, exc: GatewayError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        content = {"error": "Not Found", "message": f"Route {request.url.path} not found"}
    else:
        content = {"error": HTTPStatus(exc.status_code).phrase, "message": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    problems = [f"{err['loc'][-1]}: {err['msg']}" for err in exc.errors()]
    return JSONResponse(status_code=400, content={"error": "Bad Request", "message": "; ".join(problems)})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    message = "Internal server error" if settings.is_production else str(exc)
    return JSONResponse(status_code=500, content={"error": "Internal Server Error", "message": message})


app.add_middleware(SlowAPIMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include module routes
app.include_router(groups_routes.router, prefix="/api")
app.include_router(members_routes.router, prefix="/api")
app.include_router(ranking_routes.router, prefix="/api")

# Realtime channel: the registry lives on this gateway for the life of the process
realtime_gateway = RealtimeGateway(
    auth_service_factory=get_auth_service,
    group_service_factory=lambda: GroupService(GroupStore(get_supabase())),
)
app.state.realtime_gateway = realtime_gateway

sio = socketio.AsyncServer(async_mode="asgi", cors_allowed_origins=settings.get_cors_origins_list())
sio.register_namespace(GroupsNamespace(realtime_gateway))
socket_app = socketio.ASGIApp(sio, other_asgi_app=app)


@app.on_event("startup")
async def startup_event():
    logger.info("Application startup")
    if not settings.api_key:
        logger.warning("API_KEY is not set; every authenticated call will be rejected")
    await SupabaseClient.connect()


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutdown")
    SupabaseClient.reset_client()


@app.get("/")
@limiter.exempt
async def root():
    return {"message": f"Welcome to {settings.app_name}", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - _started_at, 3),
    }


@app.get("/ready")
@limiter.exempt
async def ready():
    """Readiness probe; a missing store only means synthetic data is served."""
    return {"status": "ready", "store": "connected" if SupabaseClient.is_connected() else "fallback"}


@app.get("/api/status")
async def status(gateway: RealtimeGateway = Depends(get_realtime_gateway)):
    return {
        "status": "online",
        "version": settings.app_version,
        "activeConnections": gateway.active_connections,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
