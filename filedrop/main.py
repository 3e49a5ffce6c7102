from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
import uvicorn

from filedrop.shared.config import Settings, settings as default_settings
from filedrop.shared.db import make_engine, make_session_factory, ensure_sqlite_parent, init_db
from filedrop.shared.errors import FileDropError
from filedrop.shared.logging_config import setup_logging, logger
from filedrop.files.api import router as files_router
from filedrop.files.storage import UploadDirectory

TAGS_METADATA = [
    {"name": "Files", "description": "Upload, list and delete files"},
    {"name": "Health", "description": "Service health"},
]

def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="FileDrop",
        version="0.1.0",
        description="Upload files, list them with download URLs, delete them.",
        openapi_tags=TAGS_METADATA,
    )
    app.state.settings = settings
    app.state.engine = make_engine(settings.DB_URL)
    app.state.session_factory = make_session_factory(app.state.engine)
    app.state.uploads = UploadDirectory(settings.UPLOAD_DIR)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(FileDropError)
    async def _filedrop_error(request: Request, exc: FileDropError):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content={"message": "Internal server error"})

    @app.on_event("startup")
    def _startup():
        root = app.state.uploads.ensure()
        ensure_sqlite_parent(settings.DB_URL)
        init_db(app.state.engine)
        logger.info(f"Serving uploads from {root.resolve()} at {settings.STATIC_PREFIX}")

    @app.on_event("shutdown")
    def _shutdown():
        app.state.engine.dispose()

    @app.get("/healthz", tags=["Health"])
    def healthz():
        return {"ok": True}

    app.include_router(files_router)
    # directory is created on startup, after the mount is declared
    app.mount(
        settings.STATIC_PREFIX,
        StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
        name="uploads",
    )
    return app

app = create_app()

def run():
    uvicorn.run(app, host=default_settings.HOST, port=default_settings.PORT)

if __name__ == "__main__":
    run()
