"""MailGun Webhook エンドポイントのテスト。"""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from magsli.app import create_app

POST_MESSAGE = (
    "magsli.features.mailgun_webhook_post.usecase_mailgun_webhook_post"
    ".slack_client.post_message"
)

HEADERS = json.dumps(
    [
        ["X-Mailgun-Sending-Ip", "198.61.254.60"],
        ["Received", "by luna.mailgun.net with HTTP"],
        ["Message-Id", "<20180615200734.1.DA5B98F7C7BA3CFC@mg.example.com>"],
        ["Subject", "Test bounces webhook"],
    ]
)


@pytest.mark.parametrize("path", ["/", "/mailgun/webhook"])
def test_bouncedをSlackへ中継する(path: str, signed_fields: dict[str, str]) -> None:
    form = {
        **signed_fields,
        "event": "bounced",
        "domain": "mg.example.com",
        "recipient": "alice@example.com",
        "Message-Id": "<20180615200734.1.DA5B98F7C7BA3CFC@mg.example.com>",
        "message-headers": HEADERS,
        "code": "550",
        "error": "5.1.1 The email account that you tried to reach does not exist.",
    }

    with patch(POST_MESSAGE, new_callable=AsyncMock) as mock_post:
        client = TestClient(create_app())
        res = client.post(path, data=form)

    assert res.status_code == 200
    assert res.content == b""
    mock_post.assert_awaited_once()
    payload = mock_post.call_args.kwargs["payload"]
    assert payload["icon_emoji"] == ":rotating_light:"
    assert payload["text"] == "MailGun message for domain: mg.example.com"
    errors, data = payload["attachments"]
    assert errors["fallback"] == "Errors"
    assert errors["color"] == "danger"
    assert [f["title"] for f in errors["fields"]] == ["Event", "SMTP Code", "SMTP Error"]
    assert data["fallback"] == "Data"
    assert {f["title"]: f["value"] for f in data["fields"]}["Subject"] == "Test bounces webhook"


def test_multipartのフォームも受け付ける(signed_fields: dict[str, str]) -> None:
    form = {**signed_fields, "event": "delivered", "recipient": "alice@example.com"}

    with patch(POST_MESSAGE, new_callable=AsyncMock) as mock_post:
        client = TestClient(create_app())
        res = client.post(
            "/",
            data=form,
            files={"attachment-1": ("a.txt", b"hello", "text/plain")},
        )

    assert res.status_code == 200
    mock_post.assert_awaited_once()


def test_署名が不正でも200を返し送信しない(signed_fields: dict[str, str]) -> None:
    form = {**signed_fields, "token": "tampered", "event": "delivered"}

    with patch(POST_MESSAGE, new_callable=AsyncMock) as mock_post:
        client = TestClient(create_app())
        res = client.post("/", data=form)

    assert res.status_code == 200
    assert res.content == b""
    mock_post.assert_not_awaited()


def test_署名の無い解析できないボディは破棄する() -> None:
    with patch(POST_MESSAGE, new_callable=AsyncMock) as mock_post:
        client = TestClient(create_app())
        res = client.post(
            "/",
            content=b"not a multipart body",
            headers={"Content-Type": "multipart/form-data"},
        )

    assert res.status_code == 200
    mock_post.assert_not_awaited()


def test_クエリの署名付きで解析できないボディはデコード失敗を記録する(
    signed_fields: dict[str, str], caplog: pytest.LogCaptureFixture
) -> None:
    with patch(POST_MESSAGE, new_callable=AsyncMock) as mock_post:
        client = TestClient(create_app())
        with caplog.at_level("ERROR", logger="magsli"):
            res = client.post(
                "/",
                params=signed_fields,
                content=b"not a multipart body",
                headers={"Content-Type": "multipart/form-data"},
            )

    assert res.status_code == 200
    mock_post.assert_not_awaited()
    assert "デコード" in caplog.text


def test_クエリとボディの両方にある値はボディを優先する(
    signed_fields: dict[str, str]
) -> None:
    params = {**signed_fields, "event": "opened", "domain": "query.example.com"}
    form = {"event": "delivered", "domain": "mg.example.com"}

    with patch(POST_MESSAGE, new_callable=AsyncMock) as mock_post:
        client = TestClient(create_app())
        res = client.post("/", params=params, data=form)

    assert res.status_code == 200
    payload = mock_post.call_args.kwargs["payload"]
    assert payload["text"] == "MailGun message for domain: mg.example.com"
    fields = {f["title"]: f["value"] for f in payload["attachments"][0]["fields"]}
    assert fields["Event"] == "delivered"


def test_深く入れ子のヘッダでも200を返し件名はプレースホルダになる(
    signed_fields: dict[str, str]
) -> None:
    form = {**signed_fields, "event": "delivered", "message-headers": "[" * 100000}

    with patch(POST_MESSAGE, new_callable=AsyncMock) as mock_post:
        client = TestClient(create_app(), raise_server_exceptions=False)
        res = client.post("/", data=form)

    assert res.status_code == 200
    payload = mock_post.call_args.kwargs["payload"]
    fields = {f["title"]: f["value"] for f in payload["attachments"][0]["fields"]}
    assert fields["Subject"] == "<could not get subject>"


def test_送信に失敗しても200を返す(signed_fields: dict[str, str]) -> None:
    from magsli.clients.slack_client import SlackApiError

    form = {**signed_fields, "event": "delivered", "recipient": "alice@example.com"}

    with patch(POST_MESSAGE, new_callable=AsyncMock, side_effect=SlackApiError("boom")):
        client = TestClient(create_app())
        res = client.post("/", data=form)

    assert res.status_code == 200
    assert "X-Request-Id" in res.headers
