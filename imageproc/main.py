import sys
import time
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, Response
from fastapi.staticfiles import StaticFiles
from loguru import logger

from imageproc.config import Settings, settings
from imageproc.routes.health import router as health_router
from imageproc.routes.process import router as process_router
from imageproc.routes.upload import router as upload_router


def _configure_logging(app_settings: Settings) -> None:
    logger.configure(patcher=lambda record: record["extra"].setdefault("request_id", "-"))
    logger.remove()
    logger.add(
        sys.stderr,
        level=app_settings.log_level.upper(),
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | req={extra[request_id]} | {name}:{function}:{line} | {message}",
    )


def create_app(app_settings: Settings | None = None) -> FastAPI:
    app_settings = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        _configure_logging(app_settings)
        app_settings.ensure_directories()
        logger.info(
            "Starting app app_name={} upload_dir={} processed_dir={} log_level={}",
            app_settings.app_name,
            app_settings.upload_dir,
            app_settings.processed_dir,
            app_settings.log_level,
        )
        yield
        logger.info("Shutting down app app_name={}", app_settings.app_name)

    app = FastAPI(title=app_settings.app_name, debug=app_settings.debug, lifespan=lifespan)
    app.state.settings = app_settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(upload_router)
    app.include_router(process_router)

    @app.middleware("http")
    async def add_request_context(request: Request, call_next) -> Response:
        request_id = request.headers.get("x-request-id", str(uuid4()))
        with logger.contextualize(request_id=request_id):
            start = time.perf_counter()
            logger.info("Request start method={} path={}", request.method, request.url.path)
            try:
                response = await call_next(request)
            except Exception:
                logger.exception("Request failed method={} path={}", request.method, request.url.path)
                raise
            duration_ms = (time.perf_counter() - start) * 1000
            logger.info(
                "Request finish method={} path={} status={} duration_ms={:.2f}",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
            )
        response.headers["X-Request-ID"] = request_id
        return response

    @app.get("/", include_in_schema=False)
    async def index() -> FileResponse:
        landing_page = app_settings.static_path / "index.html"
        if not landing_page.is_file():
            raise HTTPException(status_code=404, detail="Landing page not found")
        return FileResponse(landing_page)

    app.mount("/uploads", StaticFiles(directory=app_settings.upload_dir, check_dir=False), name="uploads")
    app.mount("/processed", StaticFiles(directory=app_settings.processed_dir, check_dir=False), name="processed")
    app.mount("/static", StaticFiles(directory=app_settings.static_dir, check_dir=False), name="static")

    return app


app = create_app()
