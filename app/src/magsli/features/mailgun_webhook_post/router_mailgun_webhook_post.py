"""MailGun Webhook 受信エンドポイント。"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException

from magsli.core.settings import Settings
from magsli.features.mailgun_webhook_post.usecase_mailgun_webhook_post import (
    relay_event,
)
from magsli.shared.mailgun.events import EventDecodeError, read_form_fields

router = APIRouter(tags=["mailgun"])


async def get_settings(request: Request) -> Settings:
    return request.app.state.settings  # type: ignore[attr-defined]


async def _read_fields(request: Request) -> dict[str, str]:
    try:
        form = await request.form()
    except (HTTPException, MultiPartException, ValueError) as exc:
        raise EventDecodeError("リクエストボディをフォームとして解釈できません。") from exc
    return read_form_fields(form)


@router.post("/", response_class=Response)
@router.post("/mailgun/webhook", response_class=Response)
async def mailgun_webhook(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> Response:
    """結果に関わらず空の 200 を返す。

    クエリ文字列の値も読み、同じキーはボディの値を優先する。
    """

    form_error: EventDecodeError | None = None
    try:
        body_fields = await _read_fields(request)
    except EventDecodeError as exc:
        body_fields, form_error = {}, exc
    fields = {**read_form_fields(request.query_params), **body_fields}

    await relay_event(
        fields,
        settings=settings,
        form_error=form_error,
        request_id=getattr(request.state, "request_id", None),
    )
    return Response(status_code=200)
