import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from config import Settings, get_settings
from database import Database, connect, get_db
from errors import register_exception_handlers
from github import GithubClient
from routers import auth, posts, profile, users
from security import TokenService

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None,
               github: Optional[GithubClient] = None) -> FastAPI:
    """Build the API; collaborators not passed in are created at startup"""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_db = database is None
        owns_github = github is None
        app.state.db = database or connect(settings.database_url, settings.database_name)
        app.state.github = github or GithubClient(
            base_url=settings.github_api_url,
            client_id=settings.github_client_id,
            client_secret=settings.github_secret,
        )
        logger.info("[STARTUP] API ready")
        try:
            yield
        finally:
            if owns_github:
                app.state.github.close()
            if owns_db:
                app.state.db.close()
            logger.info("[SHUTDOWN] API stopped")

    app = FastAPI(title="DevConnector API", lifespan=lifespan)
    app.state.settings = settings
    app.state.tokens = TokenService(
        settings.jwt_secret,
        expires_seconds=settings.jwt_expires_seconds,
        algorithm=settings.jwt_algorithm,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(users.router)
    app.include_router(auth.router)
    app.include_router(profile.router)
    app.include_router(posts.router)

    @app.get("/")
    def read_root():
        return {"message": "API running"}

    @app.get("/health")
    def health(db: Database = Depends(get_db)):
        try:
            collections = sorted(db.list_collection_names())
        except PyMongoError as e:
            logger.warning(f"[HEALTH] Database check failed: {e}")
            return JSONResponse(status_code=503, content={"status": "unavailable", "database": db.name})
        return {"status": "ok", "database": db.name, "collections": collections}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
