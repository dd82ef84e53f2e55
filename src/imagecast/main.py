"""FastAPI application entry point."""

import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.errors import ApiError, api_error_handler
from .config import AppConfig, load_config
from .dependencies import include_routers
from .logging import configure_logging

logger = logging.getLogger(__name__)


def create_app(config: AppConfig | None = None) -> FastAPI:
    """Build FastAPI instance with configured dependencies."""
    cfg = config or load_config()
    configure_logging(cfg.log_level)
    app = FastAPI(title="imagecast")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ApiError, api_error_handler)  # type: ignore[arg-type]
    include_routers(app, cfg)
    logger.info(
        "app.configured",
        extra={"upload_dir": str(cfg.upload_dir.resolve()), "port": cfg.port},
    )
    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn on the configured port."""
    config: AppConfig = app.state.config
    uvicorn.run(app, host=config.host, port=config.port)


if __name__ == "__main__":
    run()
