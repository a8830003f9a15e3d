"""MailGun のイベントを Slack へ中継するユースケース。"""

from __future__ import annotations

from typing import Mapping

import httpx

from magsli.clients import slack_client
from magsli.core.logging import log_error, log_event
from magsli.core.models import EventRecord
from magsli.core.settings import Settings
from magsli.features.mailgun_webhook_post.schemas_mailgun_webhook_post import RelayStatus
from magsli.shared.mailgun.events import BOUNCED, DROPPED, EventDecodeError, decode_event
from magsli.shared.mailgun.signature import verify_signature
from magsli.shared.schemas.mailgun import MailgunSignatureForm
from magsli.shared.slack.message import SlackMessage


async def relay_event(
    fields: Mapping[str, str],
    *,
    settings: Settings,
    form_error: EventDecodeError | None = None,
    request_id: str | None = None,
) -> RelayStatus:
    """署名検証 → デコード → メッセージ組み立て → Slack 送信を行う。

    失敗はすべてこのリクエスト内で完結させ、呼び出し元へは結果の種別のみ返す。
    """

    signature = MailgunSignatureForm.model_validate(dict(fields))
    valid = verify_signature(
        settings.mailgun_api_key,
        signature.timestamp,
        signature.token,
        signature.signature,
    )
    if not valid:
        # 署名不一致はログに残さない
        return "REJECTED"

    record = EventRecord()
    decode_error: EventDecodeError | None = form_error
    if decode_error is None:
        try:
            record = decode_event(fields)
        except EventDecodeError as exc:
            decode_error = exc

    if decode_error is not None or record.is_empty:
        log_error(
            message="MailGun のメッセージをデコードできませんでした。",
            error=decode_error or "empty event",
            request_id=request_id,
        )
        return "UNDECODABLE"

    message = build_slack_message(record)

    try:
        await slack_client.post_message(
            webhook_url=settings.slack_webhook_url,
            payload=message.to_payload(),
            timeout=httpx.Timeout(settings.slack_timeout_seconds),
        )
    except slack_client.SlackApiError as exc:
        log_error(
            message="Slack へメッセージを送信できませんでした。",
            error=exc,
            status_code=exc.status_code,
            request_id=request_id,
        )
        return "SEND_FAILED"

    log_event(
        message="Slack へ中継しました。",
        request_id=request_id,
        event=record.event_type,
        domain=record.domain,
    )
    return "SENT"


def build_slack_message(record: EventRecord) -> SlackMessage:
    """EventRecord から Slack 通知メッセージを組み立てる。"""

    message = SlackMessage(text=f"MailGun message for domain: {record.domain}")

    if record.is_error_event:
        message.add_error("Event", record.event_type, True)
    else:
        message.add_data("Event", record.event_type, True)

    message.add_data("Message ID", record.message_id, False)
    message.add_data("Recipient", record.recipient, True)
    message.add_data("Subject", record.subject, True)

    if record.event_type == BOUNCED:
        message.add_error("SMTP Code", record.smtp_code, True)
        message.add_error("SMTP Error", record.smtp_error, False)
    elif record.event_type == DROPPED:
        message.add_error("Reason", record.reason, True)
        message.add_error("ESP Code", record.esp_code, True)
        message.add_error("Description", record.description, False)

    return message
