"""FastAPI application entrypoint. No business logic; only wiring, middleware and error mapping."""

from dotenv import load_dotenv

load_dotenv()

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from guardroster.api.route_guard import RouteGuardMiddleware
from guardroster.api.v1 import router as v1_router
from guardroster.core.config import settings
from guardroster.core.errors import InvalidInput, ServiceError

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Guard Roster API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Added first so CORS (added last) stays the outermost layer.
app.add_middleware(
    RouteGuardMiddleware,
    admin_prefixes=settings.ADMIN_PATH_PREFIXES,
    authenticated_prefixes=settings.AUTHENTICATED_PATH_PREFIXES,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.APP_ENV == "dev" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ServiceError)
async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
    """Render typed service errors with their stable status code."""
    if exc.status_code >= 500:
        logger.error(
            "Request failed",
            extra={"path": request.url.path, "error": exc.code, "reason": exc.message[:200]},
        )
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies and parameters become invalid_input (400) naming the fields."""
    fields: list[str] = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        name = ".".join(loc) or "body"
        if name not in fields:
            fields.append(name)
    error = InvalidInput("Missing or invalid fields: " + ", ".join(fields) + ".", fields=fields)
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


app.include_router(v1_router, prefix=settings.API_V1_PREFIX)


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": "Guard Roster API"}
