"""Slack Incoming Webhook の通知クライアント。"""

from __future__ import annotations

from typing import Any

import httpx

from magsli.clients.http_client import create_async_client


class SlackApiError(RuntimeError):
    """Slack への送信失敗を表す例外。通信エラー時は status_code が None。"""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


async def post_message(
    *,
    webhook_url: str,
    payload: dict[str, Any],
    timeout: httpx.Timeout | None = None,
) -> None:
    """Incoming Webhook へメッセージを1回だけ POST する。"""

    try:
        async with create_async_client(timeout=timeout) as client:
            response = await client.post(webhook_url, json=payload)
    except httpx.TimeoutException as exc:
        raise SlackApiError("Slack への送信がタイムアウトしました。") from exc
    except httpx.HTTPError as exc:
        raise SlackApiError(f"Slack への送信に失敗しました: {exc}") from exc

    if response.is_success:
        return

    raise SlackApiError(_build_error_message(response), response.status_code)


def _build_error_message(response: httpx.Response) -> str:
    # Incoming Webhook はエラー内容をプレーンテキストで返す (例: "invalid_payload")
    detail = response.text.strip()
    if detail:
        return f"Slack 呼び出しが失敗しました (Status: {response.status_code}): {detail}"
    return f"Slack 呼び出しが失敗しました (Status: {response.status_code})"
