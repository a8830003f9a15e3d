"""JSONロギングの共通ヘルパー。"""

from __future__ import annotations

import json
import logging
import traceback
from typing import Any

_LOGGER = logging.getLogger("magsli")


def log_request(
    *, method: str, path: str, status: int, request_id: str, latency_ms: int
) -> None:
    payload = {
        "level": "INFO",
        "method": method,
        "path": path,
        "status": status,
        "request_id": request_id,
        "latency_ms": latency_ms,
    }
    _LOGGER.info(json.dumps(payload, ensure_ascii=False))


def log_event(*, message: str, level: int = logging.INFO, **fields: Any) -> None:
    """パイプラインの処理結果を1行の JSON で出力する。"""

    payload: dict[str, Any] = {"level": logging.getLevelName(level), "message": message}
    payload.update(fields)
    _LOGGER.log(level, json.dumps(payload, ensure_ascii=False, default=str))


def log_error(*, message: str, error: Any, **fields: Any) -> None:
    payload: dict[str, Any] = {
        "level": "ERROR",
        "message": message,
        "error_json": _to_error_json(error),
    }
    payload.update(fields)
    if isinstance(error, BaseException):
        payload["traceback"] = "".join(traceback.format_exception(error)).rstrip()
    _LOGGER.error(json.dumps(payload, ensure_ascii=False, default=str))


def _to_error_json(error: Any) -> str:
    if isinstance(error, (dict, list)):
        return json.dumps(error, ensure_ascii=False)
    return json.dumps({"message": str(error)}, ensure_ascii=False)
