"""Slack Incoming Webhook に送るメッセージのモデル。

添付 (attachment) は一部のフィールドのみ実装している。
https://api.slack.com/docs/attachments
"""

from __future__ import annotations

from dataclasses import dataclass, field

DATA_ATTACHMENT = "Data"
ERROR_ATTACHMENT = "Errors"

DEFAULT_USERNAME = "magsli"
DEFAULT_ICON = ":moyai:"
ALERT_ICON = ":rotating_light:"
# 'good' / 'warning' / 'danger' または16進カラー
ALERT_COLOR = "danger"


@dataclass(slots=True)
class SlackField:
    title: str
    value: str
    short: bool  # 横並びで表示できる長さかどうか

    def to_payload(self) -> dict[str, object]:
        return {"title": self.title, "value": self.value, "short": self.short}


@dataclass(slots=True)
class SlackAttachment:
    """カテゴリ名を fallback に持つ添付。"""

    fallback: str
    color: str = ""
    fields: list[SlackField] = field(default_factory=list)

    def to_payload(self) -> dict[str, object]:
        body: dict[str, object] = {"fallback": self.fallback, "color": self.color}
        if self.fields:
            body["fields"] = [f.to_payload() for f in self.fields]
        return body


@dataclass(slots=True)
class SlackMessage:
    text: str
    username: str = DEFAULT_USERNAME
    icon_emoji: str = DEFAULT_ICON
    attachments: list[SlackAttachment] = field(default_factory=list)
    _attachment_index: dict[str, int] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def add_data(self, title: str, value: str, short: bool) -> None:
        """`Data` 添付にフィールドを追加する。"""
        self._add_field(DATA_ATTACHMENT, title, value, short)

    def add_error(self, title: str, value: str, short: bool) -> None:
        """`Errors` 添付にフィールドを追加し、メッセージをエラー表示にする。"""

        attachment = self._add_field(ERROR_ATTACHMENT, title, value, short)
        if attachment is None:
            return
        attachment.color = ALERT_COLOR
        self.icon_emoji = ALERT_ICON

    def attachment(self, name: str) -> SlackAttachment | None:
        index = self._attachment_index.get(name)
        if index is None:
            return None
        return self.attachments[index]

    def _add_field(
        self, name: str, title: str, value: str, short: bool
    ) -> SlackAttachment | None:
        # 値が空のフィールドは追加しない
        if value == "":
            return None
        attachment = self._find_or_create_attachment(name)
        attachment.fields.append(SlackField(title=title, value=value, short=short))
        return attachment

    def _find_or_create_attachment(self, name: str) -> SlackAttachment:
        existing = self.attachment(name)
        if existing is not None:
            return existing
        attachment = SlackAttachment(fallback=name)
        self._attachment_index[name] = len(self.attachments)
        self.attachments.append(attachment)
        return attachment

    def to_payload(self) -> dict[str, object]:
        """Incoming Webhook に POST する JSON ボディを返す。"""

        body: dict[str, object] = {
            "username": self.username,
            "text": self.text,
            "icon_emoji": self.icon_emoji,
        }
        if self.attachments:
            body["attachments"] = [a.to_payload() for a in self.attachments]
        return body
