import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.exc import OperationalError

from cookbook.core.config import settings
from cookbook.core.database import Base, engine
# register all models with Base before create_all
import cookbook.models.user  # noqa: F401
import cookbook.models.calorie  # noqa: F401
from cookbook.api.health import router as health_router
from cookbook.api.auth import router as auth_router
from cookbook.api.calories import router as calories_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


async def wait_for_db(engine, retries=10, delay=1):
    for i in range(retries):
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database ready")
            return
        except (OperationalError, OSError):
            logger.warning("Database not ready, retry %d/%d", i + 1, retries)
            await asyncio.sleep(delay)
    raise RuntimeError("Database not ready after retries")

@asynccontextmanager
async def lifespan(app: FastAPI):
    await wait_for_db(engine)
    yield
    await engine.dispose()

app = FastAPI(title="Cookbook Calorie API", lifespan=lifespan)
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(calories_router)
