"""MailGun Webhook のフォーム値スキーマ。"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class MailgunSignatureForm(BaseModel):
    """署名検証に使う3項目。"""

    timestamp: str = ""
    token: str = ""
    signature: str = ""

    model_config = ConfigDict(extra="ignore", frozen=True)


class MailgunEventForm(BaseModel):
    """イベント本体の項目。`code` は bounced では SMTP コード、dropped では ESP コード。"""

    event: str = ""
    domain: str = ""
    recipient: str = ""
    message_id: str = Field(default="", alias="Message-Id")
    message_headers: str = Field(default="", alias="message-headers")
    code: str = ""
    error: str = ""
    reason: str = ""
    description: str = ""

    model_config = ConfigDict(extra="ignore", frozen=True)
