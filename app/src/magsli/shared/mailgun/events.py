"""MailGun Webhook のフォーム値を EventRecord へ変換する。"""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import ValidationError

from magsli.core.models import EventRecord
from magsli.shared.mailgun.headers import extract_subject
from magsli.shared.schemas.mailgun import MailgunEventForm

# https://documentation.mailgun.com/en/latest/user_manual.html#tracking-bounces
BOUNCED = "bounced"
# https://documentation.mailgun.com/en/latest/user_manual.html#tracking-failures
DROPPED = "dropped"


class EventDecodeError(ValueError):
    """Webhook のリクエストボディを解釈できないことを表す例外。"""


def read_form_fields(form: Any) -> dict[str, str]:
    """フォームを `{キー: 最初の値}` の辞書へ平坦化する。

    `multi_items()` を持つ Starlette の FormData と、値がリストの
    `parse_qs` 形式の辞書のどちらも受け付ける。ファイル部分は無視する。
    """

    if hasattr(form, "multi_items"):
        items = form.multi_items()
    elif isinstance(form, Mapping):
        items = [
            (key, value)
            for key, values in form.items()
            for value in (values if isinstance(values, (list, tuple)) else [values])
        ]
    else:
        raise EventDecodeError(f"フォームとして解釈できません: {type(form).__name__}")

    fields: dict[str, str] = {}
    for key, value in items:
        if not isinstance(value, str) or key in fields:
            continue
        fields[key] = value
    return fields


def decode_event(fields: Mapping[str, Any]) -> EventRecord:
    """フォーム値から EventRecord を組み立てる。未知のイベント種別も受け付ける。"""

    try:
        form = MailgunEventForm.model_validate(dict(fields))
    except ValidationError as exc:
        raise EventDecodeError("イベントのフォーム値が不正です。") from exc

    base: dict[str, str] = {
        "event_type": form.event,
        "domain": form.domain,
        "recipient": form.recipient,
        "message_id": form.message_id,
        # ヘッダ自体が無い場合は空のままにして、空レコード判定を妨げない
        "subject": extract_subject(form.message_headers) if form.message_headers else "",
    }

    if form.event == BOUNCED:
        return EventRecord(**base, smtp_code=form.code, smtp_error=form.error)
    if form.event == DROPPED:
        return EventRecord(
            **base,
            reason=form.reason,
            esp_code=form.code,
            description=form.description,
        )
    return EventRecord(**base)
