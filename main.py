import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import analytics
import auth
import progress
from config import Settings
from database import make_engine, make_sessionmaker, init_db
from errors import register_error_handlers
from schemas import HealthResponse

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("QuizProgress")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    if settings.uses_insecure_secret:
        logger.warning("JWT_SECRET is not set, using the insecure development secret")
    await init_db(app.state.engine)
    logger.info("Quiz Progress Backend started, API at http://%s:%s/api", settings.host, settings.port)
    yield
    await app.state.engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()

    app = FastAPI(lifespan=lifespan, title="Quiz Progress Backend")
    app.state.settings = settings
    app.state.engine = make_engine(settings.database_url, echo=settings.sql_echo)
    app.state.new_session = make_sessionmaker(app.state.engine)
    app.state.pwd_context = auth.make_password_context(settings.bcrypt_rounds)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    @app.get("/api/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(status="OK", message="Quiz Progress Backend is running")

    app.include_router(auth.router)
    app.include_router(progress.router)
    app.include_router(analytics.router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=app.state.settings.host, port=app.state.settings.port)
