from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from transcriber.api.health import router as health_router
from transcriber.config import Settings, load_settings
from transcriber.errors import ConfigError
from transcriber.runtime import Runtime, build_runtime

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(settings: Settings) -> None:
    root = logging.getLogger()
    root.setLevel(settings.log_level.upper())
    formatter = logging.Formatter(fmt=LOG_FORMAT)
    if not any(type(h) is logging.StreamHandler for h in root.handlers):
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        root.addHandler(console)
    if settings.log_file is not None and not any(isinstance(h, RotatingFileHandler) for h in root.handlers):
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(str(settings.log_file), maxBytes=5_000_000, backupCount=2)
        handler.setFormatter(formatter)
        root.addHandler(handler)


def create_app(settings: Optional[Settings] = None, runtime: Optional[Runtime] = None) -> FastAPI:
    if runtime is None:
        runtime = build_runtime(settings or load_settings())

    app = FastAPI(title="Matrix Transcriber", version="0.1.0")
    app.state.runtime = runtime

    @app.on_event("startup")
    async def _startup() -> None:
        await runtime.start()

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        await runtime.stop()

    app.include_router(health_router)

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):  # type: ignore[override]
        logging.getLogger("transcriber").exception("Unhandled exception")
        return JSONResponse(status_code=500, content={"error": str(exc)})

    return app


def main(argv: Optional[list[str]] = None) -> int:
    import argparse
    import uvicorn

    parser = argparse.ArgumentParser(description="Matrix voice message transcription bot")
    parser.add_argument("--host", default=None, help="Host to bind to (overrides HOST)")
    parser.add_argument("--port", type=int, default=None, help="Port to bind to (overrides PORT)")
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except ConfigError as e:
        logging.basicConfig(level=logging.ERROR, format=LOG_FORMAT)
        logging.getLogger("transcriber").error("%s", e)
        return 1

    configure_logging(settings)
    app = create_app(settings)
    host = args.host or settings.host
    port = args.port or settings.port
    logging.getLogger("transcriber").info("Server is running on port %s", port)
    uvicorn.run(app, host=host, port=port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
