"""FastAPI アプリケーションの組み立てを担当するモジュール。"""

from __future__ import annotations

from fastapi import FastAPI

from . import __version__
from .core.middleware import request_id_middleware
from .core.settings import load_settings
from .features.mailgun_webhook_post.router_mailgun_webhook_post import (
    router as mailgun_router,
)


def create_app() -> FastAPI:
    """コア設定や共通ミドルウェアを組み込んだ FastAPI アプリを返す。"""

    settings = load_settings()
    app = FastAPI(title="magsli", version=__version__)
    app.state.settings = settings  # type: ignore[attr-defined]
    app.middleware("http")(request_id_middleware)

    @app.get("/healthz", tags=["health"])
    def healthz() -> dict[str, str]:
        return {"status": "ok", "env": settings.app_env, "version": __version__}

    app.include_router(mailgun_router)

    return app
