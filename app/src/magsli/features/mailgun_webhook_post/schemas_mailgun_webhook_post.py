"""MailGun Webhook 受信エンドポイントのスキーマ。"""

from __future__ import annotations

from typing import Literal

RelayStatus = Literal["REJECTED", "UNDECODABLE", "SEND_FAILED", "SENT"]
