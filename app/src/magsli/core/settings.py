"""アプリ全体で共有する設定読み込みロジック。"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable

import boto3
from botocore.exceptions import ClientError
from dotenv import load_dotenv


_DEFAULT_REGION = "ap-northeast-1"
_DEFAULT_HOST = "0.0.0.0"
_DEFAULT_PORT = 8080
_DEFAULT_SLACK_TIMEOUT_SECONDS = 1.0
_DEFAULT_SSM_PREFIX = "/magsli/prod"
_LOCAL_ENV = "local"


@dataclass(slots=True, frozen=True)
class Settings:
    """環境非依存で参照できる設定値の集合。"""

    app_env: str
    region: str
    mailgun_api_key: str
    slack_webhook_url: str
    slack_timeout_seconds: float = _DEFAULT_SLACK_TIMEOUT_SECONDS
    host: str = _DEFAULT_HOST
    port: int = _DEFAULT_PORT
    ssl_cert_file: str | None = None
    ssl_key_file: str | None = None
    ssm_path_prefix: str | None = None

    @property
    def is_local(self) -> bool:
        return self.app_env == _LOCAL_ENV

    @property
    def use_ssl(self) -> bool:
        return bool(self.ssl_cert_file and self.ssl_key_file)


def _get_required_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise ValueError(f"環境変数 {name} が未設定です。")
    return value


def _get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"環境変数 {name} は数値である必要があります。") from exc


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"環境変数 {name} は整数である必要があります。") from exc


def _load_ssl_files() -> tuple[str | None, str | None]:
    cert_file = os.getenv("MAGSLI_SERVER_SSL_CERT_FILE") or None
    key_file = os.getenv("MAGSLI_SERVER_SSL_KEY_FILE") or None
    # 証明書と秘密鍵は両方揃っているか、両方未設定のどちらか
    if bool(cert_file) != bool(key_file):
        raise ValueError("SSL 証明書と秘密鍵の指定の組み合わせが不正です。")
    return cert_file, key_file


def _fetch_ssm_parameters(
    region: str, names: Iterable[str], prefix: str
) -> dict[str, str]:
    name_list = [f"{prefix}/{name}" for name in names]
    client = boto3.client("ssm", region_name=region)
    try:
        resp = client.get_parameters(Names=name_list, WithDecryption=True)
    except ClientError as exc:  # pragma: no cover - boto3 例外ラップ
        raise RuntimeError("SSM パラメータ取得に失敗しました。") from exc

    found = {item["Name"]: item["Value"] for item in resp.get("Parameters", [])}
    missing = {name for name in name_list if name not in found}
    if missing:
        raise ValueError(f"SSM パラメータ未設定: {', '.join(sorted(missing))}")
    return found


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """環境に応じて `.env` または SSM から設定を構築する。"""

    load_dotenv()
    app_env = os.getenv("APP_ENV", _LOCAL_ENV)
    region = os.getenv("REGION", _DEFAULT_REGION)
    ssl_cert_file, ssl_key_file = _load_ssl_files()
    common = {
        "app_env": app_env,
        "region": region,
        "slack_timeout_seconds": _get_float_env(
            "MAGSLI_SLACK_TIMEOUT_SECONDS", _DEFAULT_SLACK_TIMEOUT_SECONDS
        ),
        "host": os.getenv("APP_HOST", _DEFAULT_HOST),
        "port": _get_int_env("APP_PORT", _DEFAULT_PORT),
        "ssl_cert_file": ssl_cert_file,
        "ssl_key_file": ssl_key_file,
    }

    if app_env == _LOCAL_ENV:
        return Settings(
            mailgun_api_key=_get_required_env("MAGSLI_MAILGUN_API_KEY"),
            slack_webhook_url=_get_required_env("MAGSLI_SLACK_WEBHOOK_URL"),
            ssm_path_prefix=None,
            **common,
        )

    prefix = os.getenv("SSM_PATH_PREFIX", _DEFAULT_SSM_PREFIX)
    required_keys = ["mailgun/api_key", "slack/webhook_url"]
    values = _fetch_ssm_parameters(region=region, names=required_keys, prefix=prefix)

    def from_ssm(key: str) -> str:
        return values[f"{prefix}/{key}"]

    return Settings(
        mailgun_api_key=from_ssm("mailgun/api_key"),
        slack_webhook_url=from_ssm("slack/webhook_url"),
        ssm_path_prefix=prefix,
        **common,
    )
