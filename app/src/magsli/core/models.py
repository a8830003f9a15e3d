"""ユースケース間で共有するデータモデル。"""

from __future__ import annotations

from dataclasses import dataclass, fields

ERROR_EVENT_TYPES = frozenset({"bounced", "dropped", "failed", "rejected"})


@dataclass(slots=True, frozen=True)
class EventRecord:
    """MailGun の Webhook から取り出したイベント情報。"""

    event_type: str = ""
    domain: str = ""
    recipient: str = ""
    message_id: str = ""
    subject: str = ""

    # bounced
    smtp_code: str = ""
    smtp_error: str = ""

    # dropped
    reason: str = ""
    esp_code: str = ""
    description: str = ""

    @property
    def is_empty(self) -> bool:
        """全項目が空ならデコード失敗とみなす。"""
        return all(getattr(self, f.name) == "" for f in fields(self))

    @property
    def is_error_event(self) -> bool:
        return is_error_event(self.event_type)


def is_error_event(event_type: str) -> bool:
    """エラーとして扱うイベント種別かどうかを判定する。"""
    return event_type in ERROR_EVENT_TYPES
