from fastapi import FastAPI

from qurbani.api.routes import router as shares_router
from qurbani.config.settings import Settings


def create_app() -> FastAPI:
    settings = Settings()
    app = FastAPI(title=settings.app_name)
    app.include_router(shares_router)

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {"status": "ok", "service": settings.app_name}

    return app


app = create_app()
