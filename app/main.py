import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.errors import register_exception_handlers
from app.api.routes import api_router
from app.core.config import settings

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    logging.basicConfig(level=logging.INFO)
    app = FastAPI(
        title=settings.app_name,
        description="Weather lookups and Gemini-backed activity suggestions for the chat front end.",
    )
    # Browsers reject credentials with a wildcard origin.
    cors_origins = settings.cors_origins
    allow_creds = cors_origins != "*"
    if cors_origins == "*":
        cors_origins = ["*"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=allow_creds,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(api_router)

    logger.info("OPENWEATHER_API_KEY: %s", "set" if settings.openweather_api_key else "missing")
    logger.info("GEMINI_API_KEY: %s", "set" if settings.gemini_api_key else "missing")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.port)
