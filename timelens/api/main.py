import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from timelens.config.manager import ConfigManager
from timelens.database.connection import DatabaseManager
from timelens.nlp.classifier import get_classifier
from timelens.services.event_service import EventValidationError, NotFoundError

from .routes import router

logger = logging.getLogger(__name__)

# Local dashboard dev servers
origins = [
    "http://localhost:3000",
    "http://localhost:5000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5000",
    "http://127.0.0.1:5173",
]


def configure_logging(config: ConfigManager):
    logging.basicConfig(
        level=getattr(logging, config.get('development.log_level', 'INFO'), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(config: Optional[ConfigManager] = None,
               db_manager: Optional[DatabaseManager] = None,
               classifier=None) -> FastAPI:
    """Build the API with its shared services attached to app.state"""
    config = config or ConfigManager()
    configure_logging(config)

    app = FastAPI(title="TimeLens API")
    app.state.config = config
    app.state.db_manager = db_manager or DatabaseManager(config.get('app.database_url'))
    app.state.classifier = classifier or get_classifier(config)

    app.add_middleware(
        SessionMiddleware,
        secret_key=config.get('session.secret_key'),
        max_age=config.get('session.max_age'),
        https_only=False,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(EventValidationError)
    async def validation_handler(request: Request, exc: EventValidationError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.info(f"Rejected request to {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler"""
        logger.error(f"Error processing request {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    app.include_router(router)
    logger.info("TimeLens API initialized")
    return app


if __name__ == "__main__":
    import uvicorn
    settings = ConfigManager()
    logger.info("Starting FastAPI application with uvicorn...")
    uvicorn.run(
        "timelens.api.main:create_app",
        factory=True,
        host=settings.get('server.host'),
        port=settings.get('server.port'),
        log_level=settings.get('development.log_level', 'INFO').lower(),
    )
