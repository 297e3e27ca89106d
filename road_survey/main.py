import logging
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from road_survey.config import Settings, settings as default_settings
from road_survey.database import create_db_engine, create_session_factory, init_db
from road_survey.routers import auth, photos, profile
from road_survey.services.email_services import Mailer
from road_survey.services.storage_service import BlobStorage
from road_survey.utils.response import create_response, handle_exception

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings = default_settings,
    blob_storage: BlobStorage | None = None,
    mailer: Mailer | None = None,
) -> FastAPI:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title=settings.PROJECT_NAME)

    # Collaborators live on app.state and are reached through dependencies
    engine = create_db_engine(settings.DATABASE_URL)
    init_db(engine)
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.blob_storage = blob_storage or BlobStorage.from_settings(settings)
    app.state.mailer = mailer or Mailer.from_settings(settings)

    # CORS for SPA / mobile access
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        # Locations only; raw inputs may contain passwords
        fields = [".".join(str(part) for part in error["loc"]) for error in exc.errors()]
        logger.info("Rejected %s %s: %s", request.method, request.url.path, fields)
        return create_response("Invalid request body", None, status.HTTP_400_BAD_REQUEST)

    app.include_router(auth.router)
    app.include_router(profile.router)
    app.include_router(photos.router)

    @app.get("/")
    def home():
        try:
            return create_response(
                message="Road survey API running",
                data={"service": "road-survey-backend"},
                status_code=status.HTTP_200_OK
            )
        except Exception as exc:
            return handle_exception(exc)

    # Serve the web client when it is deployed alongside the API
    if settings.STATIC_DIR and Path(settings.STATIC_DIR).is_dir():
        app.mount("/static", StaticFiles(directory=settings.STATIC_DIR), name="static")

    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run("road_survey.main:app", host=default_settings.HOST, port=default_settings.PORT)
