import logging

from fastapi import FastAPI
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.orm import Session

from tubequiz.api.videos import router as videos_router
from tubequiz.core.config import settings
from tubequiz.core.log_config import setup_logging
from tubequiz.db.session import get_db

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="TubeQuiz API", version="0.1.0")
app.include_router(videos_router)


class HealthResponse(BaseModel):
    ok: bool
    service: str
    version: str
    db_ok: bool


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    # lightweight DB check
    db_ok = False
    db: Session | None = None
    try:
        db = next(get_db())
        db.execute(text("SELECT 1"))
        db_ok = True
    except Exception as e:
        logger.warning("Health check DB ping failed: %s", e)
        db_ok = False
    finally:
        if db is not None:
            db.close()

    return HealthResponse(ok=True, service="api", version=app.version, db_ok=db_ok)
