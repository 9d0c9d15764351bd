import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from app.core.config import settings
from app.database.db import Base, engine
from app.models import categories, compilations, events, participation, users  # noqa: F401  registers tables
from app.routes import admin_events, private_events, requests
from app.routes import categories as category_routes
from app.routes import compilations as compilation_routes
from app.routes import events as event_routes
from app.routes import users as user_routes
from app.services.exceptions import DomainError, ErrorKind

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create all tables (in production, use migrations such as Alembic)
    Base.metadata.create_all(bind=engine)
    yield


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# Configure CORS
origins = [
    "*"
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.kind.value, "message": exc.message},
    )


@app.exception_handler(OperationalError)
async def storage_error_handler(request: Request, exc: OperationalError):
    logger.error(f"{request.method} {request.url.path} storage failure: {exc}")
    return JSONResponse(
        status_code=503,
        content={"error": ErrorKind.STORAGE_UNAVAILABLE.value, "message": "Storage is temporarily unavailable."},
    )


# Include the routers
app.include_router(user_routes.router)
app.include_router(category_routes.admin_router)
app.include_router(category_routes.router)
app.include_router(admin_events.router)
app.include_router(private_events.router)
app.include_router(requests.router)
app.include_router(event_routes.router)
app.include_router(compilation_routes.admin_router)
app.include_router(compilation_routes.router)
