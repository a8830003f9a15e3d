"""MailGun Webhook の署名検証。

MailGun は `timestamp` と `token` を連結した文字列に対する HMAC-SHA256 を
`signature` として送ってくる。鍵は MailGun の API キー。
https://documentation.mailgun.com/en/latest/user_manual.html#webhooks
"""

from __future__ import annotations

import binascii
import hashlib
import hmac


class InvalidSignatureError(ValueError):
    """署名が16進文字列として解釈できないことを表す例外。"""


def compute_signature(secret_key: str, timestamp: str, token: str) -> bytes:
    """`timestamp` + `token` に対する HMAC-SHA256 ダイジェストを返す。"""

    mac = hmac.new(secret_key.encode("utf-8"), digestmod=hashlib.sha256)
    mac.update(timestamp.encode("utf-8"))
    mac.update(token.encode("utf-8"))
    return mac.digest()


def decode_signature(signature: str) -> bytes:
    try:
        return binascii.unhexlify(signature)
    except ValueError as exc:
        raise InvalidSignatureError("署名を16進文字列としてデコードできません。") from exc


def check_signature(
    secret_key: str, timestamp: str, token: str, signature: str
) -> tuple[bool, InvalidSignatureError | None]:
    """署名を検証し、(結果, デコードエラー) を返す。

    単純な不一致は `(False, None)`、16進として不正な署名のみ
    `(False, InvalidSignatureError)` になる。
    """

    expected = compute_signature(secret_key, timestamp, token)
    try:
        provided = decode_signature(signature)
    except InvalidSignatureError as exc:
        return False, exc

    if len(provided) != len(expected):
        return False, None

    # タイミング攻撃を避けるため定数時間で比較する
    return hmac.compare_digest(provided, expected), None


def verify_signature(secret_key: str, timestamp: str, token: str, signature: str) -> bool:
    """MailGun から届いたリクエストかどうかを返す。例外は送出しない。"""

    valid, _ = check_signature(secret_key, timestamp, token, signature)
    return valid
