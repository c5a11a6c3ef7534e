import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .routers import health, tickets, comments, categories, me, users
from .models.user import Base
from .db import engine, SessionLocal
from .core.config import settings as config
from .core.errors import HelpdeskError
from .core.logging import setup_logging
from .core.seed import seed_categories
from .core.settings import settings

import helpdesk.models.ticket  # noqa: F401
import helpdesk.models.comment  # noqa: F401
import helpdesk.models.event  # noqa: F401
import helpdesk.models.category  # noqa: F401

setup_logging(config.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Helpdesk API")


@app.exception_handler(HelpdeskError)
async def helpdesk_error_handler(request: Request, exc: HelpdeskError):
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)


@app.on_event("startup")
def on_startup():
    if settings.AUTO_DB_BOOTSTRAP:
        # Create tables in dev if missing.
        Base.metadata.create_all(bind=engine)
        with SessionLocal() as session:
            seed_categories(session)


app.include_router(health.router)
app.include_router(tickets.router)
app.include_router(comments.router)
app.include_router(categories.router)
app.include_router(me.router)
app.include_router(users.router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
