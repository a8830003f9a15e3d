from __future__ import annotations

import hashlib
import hmac
import os

os.environ.setdefault("MAGSLI_MAILGUN_API_KEY", "key-test-mailgun")
os.environ.setdefault("MAGSLI_SLACK_WEBHOOK_URL", "https://hooks.slack.test/services/T000/B000/XXXX")

import pytest

from magsli.core import settings as core_settings

TEST_API_KEY = "key-test-mailgun"
TEST_WEBHOOK_URL = "https://hooks.slack.test/services/T000/B000/XXXX"


@pytest.fixture(autouse=True)
def basic_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """アプリ初期化に必要な環境変数をテスト時にセットする。"""

    monkeypatch.setenv("MAGSLI_MAILGUN_API_KEY", TEST_API_KEY)
    monkeypatch.setenv("MAGSLI_SLACK_WEBHOOK_URL", TEST_WEBHOOK_URL)
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.delenv("MAGSLI_SERVER_SSL_CERT_FILE", raising=False)
    monkeypatch.delenv("MAGSLI_SERVER_SSL_KEY_FILE", raising=False)
    monkeypatch.delenv("MAGSLI_SLACK_TIMEOUT_SECONDS", raising=False)
    core_settings.load_settings.cache_clear()


def _sign(timestamp: str, token: str, key: str = TEST_API_KEY) -> str:
    return hmac.new(
        key.encode("utf-8"), (timestamp + token).encode("utf-8"), hashlib.sha256
    ).hexdigest()


@pytest.fixture
def signed_fields() -> dict[str, str]:
    timestamp = "1529006854"
    token = "a8ce0edb2dd8301dee6c2405235584e45aa91d1e9f979f3de0"
    return {"timestamp": timestamp, "token": token, "signature": _sign(timestamp, token)}


@pytest.fixture
def make_signature():
    """MailGun と同じ方式で署名を作る関数を返す。"""

    return _sign
