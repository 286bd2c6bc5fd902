import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rentshare.core.config import settings
from rentshare.core.errors import BookingConflictError, BookingError
from rentshare.db.base import Base
from rentshare.db.session import engine
from rentshare.api.routers import (
    auth as auth_router,
    users as users_router,
    items as items_router,
    bookings as bookings_router,
    reviews as reviews_router,
    notifications as notifications_router,
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------
# Startup
# ---------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database tables ready")
    yield
    await engine.dispose()


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

# ---------------------------
# CORS
# ---------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------
# Error handlers
# ---------------------------
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info("validation error for %s: %s", request.url.path, exc.errors())
    missing = any(e.get("type") == "missing" for e in exc.errors())
    return JSONResponse(
        status_code=400,
        content={
            "error": "Missing required fields" if missing else "Invalid request",
            "details": [
                {"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in exc.errors()
            ],
        },
    )


@app.exception_handler(BookingError)
async def booking_exception_handler(request: Request, exc: BookingError):
    content = {"error": exc.message}
    if isinstance(exc, BookingConflictError):
        content["conflictDates"] = exc.conflict_dates
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("unexpected error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# ---------------------------
# Routers
# ---------------------------
app.include_router(auth_router.router, prefix="/api/auth", tags=["auth"])
app.include_router(users_router.router, prefix="/api/users", tags=["users"])
app.include_router(items_router.router, prefix="/api/items", tags=["items"])
app.include_router(bookings_router.router, prefix="/api", tags=["bookings"])
app.include_router(reviews_router.router, prefix="/api", tags=["reviews"])
app.include_router(notifications_router.router, prefix="/api/notifications", tags=["notifications"])


# ---------------------------
# Health check
# ---------------------------
@app.get("/ping")
async def ping():
    return {"status": "ok"}


# ---------------------------
# Run
# ---------------------------
if __name__ == "__main__":
    uvicorn.run("rentshare.main:app", host="0.0.0.0", port=8000, reload=True)
