import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from foodrag.api.routes import router as api_router
from foodrag.config import Settings, public_settings, settings as default_settings, setup_logging
from foodrag.providers import ProviderRegistry

logger = setup_logging()


def create_app(registry: ProviderRegistry | None = None, settings: Settings | None = None) -> FastAPI:
    settings = settings or (registry.settings if registry else default_settings)
    app = FastAPI(title="Food RAG")
    app.state.registry = registry or ProviderRegistry(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error", extra={"path": request.url.path})
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    app.include_router(api_router)

    logger.info("Application starting")
    logger.info("Loaded settings: %s", public_settings(settings))
    return app


app = create_app()
