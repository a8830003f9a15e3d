"""ローカル/ Lambda エントリポイント。"""

from __future__ import annotations

import logging
import os
from typing import Any

import uvicorn
from mangum import Mangum

from . import __version__
from .app import create_app
from .core.logging import log_event
from .core.settings import load_settings

app = create_app()
_handler = Mangum(app)


def lambda_handler(event: dict[str, Any], context: Any) -> Any:
    """AWS Lambda から呼び出されるエントリポイント"""
    return _handler(event, context)


def run_local() -> None:
    """`magsli-api` 用のローカル実行関数。証明書が設定されていれば HTTPS で待ち受ける。"""

    logging.basicConfig(level=logging.INFO, format="%(message)s")
    settings = load_settings()
    log_event(
        message="magsli を起動します。",
        version=__version__,
        host=settings.host,
        port=settings.port,
        ssl=settings.use_ssl,
    )
    uvicorn.run(
        "magsli.main:app",
        host=settings.host,
        port=settings.port,
        ssl_certfile=settings.ssl_cert_file,
        ssl_keyfile=settings.ssl_key_file,
    )


if os.getenv("RUN_LOCAL") == "1":
    run_local()
