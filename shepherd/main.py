from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from timing_asgi import TimingMiddleware, TimingClient  # type: ignore
from timing_asgi.integrations import StarletteScopeToName  # type: ignore

from shepherd.core import config
from shepherd.core.database.engine import init_db
from shepherd.core.exceptions import ShepherdError
from shepherd.features.activity.routes import router as activity_router
from shepherd.features.audit.routes import router as audit_router
from shepherd.features.growth.routes import router as promotion_router
from shepherd.features.members.routes import router as member_router
from shepherd.features.navigation.routes import router as navigation_router
from shepherd.features.permissions.routes import router as permission_router
from shepherd.features.roles.repository import load_base_role_table
from shepherd.features.roles.routes import router as role_router
from shepherd.limiter import limiter
from shepherd.utils import get_logger


log = get_logger(__name__)
log.info("Initializing server")
app = FastAPI(
    title="Shepherd Backend",
    description="Role-based access control and member growth promotions for church organizations",
    version="0.1.0",
    docs_url="/docs" if config.ENABLE_DOCS else None,
    redoc_url="/redoc" if config.ENABLE_DOCS else None,
    openapi_url="/openapi.json" if config.ENABLE_DOCS else None
)
app.state.limiter = limiter


class PrintTimings(TimingClient):
    def timing(self, metric_name, timing, tags):
        log.debug(dict(route=metric_name.removeprefix("main.shepherd.features."), timing=timing, tags=tags))


app.add_middleware(TimingMiddleware, client=PrintTimings(), metric_namer=StarletteScopeToName("main", app))

if config.ENABLE_DOCS:
    log.warning("Docs enabled")
if config.ALLOW_ORIGIN:
    log.warning("Setting allow origin to %s", config.ALLOW_ORIGIN)
    origins = [config.ALLOW_ORIGIN]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_request: Request, exc: RequestValidationError):
    errors = dict()
    for error in exc.errors():
        if "loc" not in error or "msg" not in error:
            continue
        key = error["loc"][-1]
        if key == "__root__":
            key = "root"
        errors[key] = error["msg"]
    log.info("Request validation error %s", errors)
    return JSONResponse(status_code=400, content=jsonable_encoder(errors))


@app.exception_handler(ShepherdError)
async def shepherd_error_handler(_request: Request, exc: ShepherdError):
    if exc.status_code >= 500:
        log.error("%s: %s", type(exc).__name__, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RateLimitExceeded)
def rate_limit_exceeded_handler(_request: Request, _exc: RateLimitExceeded) -> Response:
    return JSONResponse({"error": "You are going too fast"}, status_code=429)


@app.on_event("startup")
async def startup():
    """Initialize database and role table on application startup."""
    log.info("Initializing database...")
    await init_db()
    log.info("Database initialized successfully")
    app.state.role_table = load_base_role_table()


@app.get("/")
async def root():
    """Root endpoint - API health check."""
    return {
        "message": "Shepherd Backend API",
        "version": "0.1.0",
        "status": "online",
        "docs": "/docs" if config.ENABLE_DOCS else None,
        "authentication": {
            "info": "Protected endpoints require Bearer token in Authorization header",
            "protected_endpoints": [
                "/members/*", "/permissions/*", "/navigation/*", "/roles/*",
                "/promotions/*", "/audit/*", "/activity/*"
            ],
            "public_endpoints": ["/", "/health"]
        },
        "features": {
            "permissions": "Role ladder with per-module grants and a single root role",
            "navigation": "Role-scoped feature list",
            "promotions": "Growth metrics and threshold-based promotion recommendations",
            "audit": "Append-only history of role changes",
            "activity": "Attendance and ministry activity recording"
        }
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


# Include routers
app.include_router(member_router, prefix="/members", tags=["members"])
app.include_router(permission_router, prefix="/permissions", tags=["permissions"])
app.include_router(navigation_router, prefix="/navigation", tags=["navigation"])
app.include_router(role_router, prefix="/roles", tags=["roles"])
app.include_router(promotion_router, prefix="/promotions", tags=["promotions"])
app.include_router(audit_router, prefix="/audit", tags=["audit"])
app.include_router(activity_router, prefix="/activity", tags=["activity"])
