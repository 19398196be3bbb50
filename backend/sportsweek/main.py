import logging
import os

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sportsweek.database import init_db
from sportsweek.routes import (
    brackets,
    fixtures,
    moderator,
    moderators,
    registrations,
    sports,
    teams,
    tournaments,
)

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

APP_NAME = "Sports Week API"

app = FastAPI(title=APP_NAME)

_cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_extra = os.getenv("CORS_ORIGINS", "")
if _extra:
    _cors_origins.extend(o.strip() for o in _extra.split(",") if o.strip())

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Malformed payloads are client errors: 400 with field-level details
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request data", "details": jsonable_encoder(exc.errors())},
    )


# Include routers
app.include_router(sports.router, prefix="/api", tags=["sports"])
app.include_router(teams.router, prefix="/api", tags=["teams"])
app.include_router(tournaments.router, prefix="/api", tags=["tournaments"])
app.include_router(brackets.router, prefix="/api", tags=["brackets"])
app.include_router(fixtures.router, prefix="/api", tags=["fixtures"])

# Moderator console (live scoring, incidents, winners)
app.include_router(moderator.router, prefix="/api", tags=["moderator"])
app.include_router(moderators.router, prefix="/api", tags=["moderators"])

app.include_router(registrations.router, prefix="/api", tags=["registrations"])


@app.on_event("startup")
def on_startup():
    init_db()  # Use centralized init_db() which imports models and creates tables
    logger.info("%s started with %d routes", APP_NAME, len(app.routes))


@app.get("/api/health")
def health_check():
    return {"app_name": APP_NAME, "status": "healthy"}
