from coursemarket.core.env import load_env
load_env()

from coursemarket.core.config import settings
from coursemarket.core.logging import configure_logging, get_logger
configure_logging(settings.LOG_LEVEL)

import time
import datetime
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from sqlalchemy.orm import Session

from coursemarket.core.responses import register_exception_handlers
from coursemarket.db.base import Base
from coursemarket.db.deps import get_db
from coursemarket.db.session import engine
from coursemarket.integrations.paystack import close_paystack_client
from coursemarket.middleware.logging import logging_middleware
import coursemarket.models  # noqa: F401  registers every mapped class

from coursemarket.modules.auth.routes import router as auth_router
from coursemarket.modules.users.routes import router as users_router
from coursemarket.modules.categories.routes import router as categories_router
from coursemarket.modules.enrollments.routes import router as enrollments_router
from coursemarket.modules.courses.routes import router as courses_router
from coursemarket.modules.payments.routes import router as payments_router

logger = get_logger(__name__)

# Record process start time for uptime reporting
_START_TIME = time.time()


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    logger.info("fastapi process started", app=settings.APP_NAME)
    yield
    await close_paystack_client()
    logger.info("fastapi process stopping")


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
register_exception_handlers(app)
app.middleware("http")(logging_middleware)

# enrollments first: /courses/enrollments/me must not reach /courses/{course_id}
api_router = APIRouter()
api_router.include_router(auth_router)
api_router.include_router(users_router)
api_router.include_router(categories_router)
api_router.include_router(enrollments_router)
api_router.include_router(courses_router)
api_router.include_router(payments_router)

app.include_router(api_router, prefix="/api")

if settings.USE_DUMMY_S3:
    # locally stored uploads are served by the API itself
    app.mount(
        settings.MEDIA_BASE_URL,
        StaticFiles(directory=settings.S3_STORAGE_PATH, check_dir=False),
        name="media",
    )


@app.get("/health")
async def health():
    """Simple health endpoint returning status, uptime, and timestamp."""
    uptime = time.time() - _START_TIME
    payload = {
        "status": "ok",
        "uptime_seconds": round(uptime, 2),
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
    }
    return JSONResponse(content=payload)


@app.get("/db/health")
def db_health(db: Session = Depends(get_db)):
    db.execute(text("SELECT 1"))
    return {"db": "ok"}
