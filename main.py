# main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from time import perf_counter
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from config import get_settings
from adapters.entry.http.views.safe_view import register_error_handlers, router as safe_router
from core.use_cases.safe_usecase import SafeUseCase

logger = logging.getLogger("safe_api")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or "INFO").upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan context.

    Builds the shared SafeUseCase once (unless a test already put one on
    app.state) so all requests reuse one AsyncWeb3 client and one immutable
    wallet template config.
    """
    configure_logging(get_settings().LOG_LEVEL)
    if getattr(app.state, "safe_use_case", None) is None:
        app.state.safe_use_case = SafeUseCase.from_settings()
    await app.state.safe_use_case.log_chain_info()
    yield


def create_app(use_case: Optional[SafeUseCase] = None) -> FastAPI:
    """
    Application factory for the Safe wallet API.
    """
    app = FastAPI(
        title="Safe Wallet API",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.safe_use_case = use_case

    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def access_log(request: Request, call_next):
        t0 = perf_counter()
        response = await call_next(request)
        logger.info(
            "%s %s -> %s (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            (perf_counter() - t0) * 1000.0,
        )
        return response

    @app.get("/health", tags=["health"])
    async def health():
        return {"status": "ok"}

    register_error_handlers(app)
    app.include_router(safe_router)

    return app


app = create_app()


def run() -> None:
    s = get_settings()
    uvicorn.run(app, host=s.ADDRESS, port=s.PORT)


if __name__ == "__main__":
    run()
