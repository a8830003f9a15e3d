"""MailGun の `message-headers` から値を取り出すヘルパー。

`message-headers` は元メールの MIME ヘッダを順序を保ったまま JSON 文字列に
したもので、辞書ではなく `[ヘッダ名, 値]` の配列の配列になっている。

    [["Received", "..."], ["Date", "..."], ["From", "..."], ["Subject", "Test"]]
"""

from __future__ import annotations

import json
from typing import Any

SUBJECT_HEADER = "Subject"
SUBJECT_PLACEHOLDER = "<could not get subject>"

# MailGun が送ってくるヘッダでは Subject は通常4番目に来る
_SUBJECT_INDEX = 3


def _load_header_pairs(raw_headers: str) -> list[Any]:
    try:
        parsed = json.loads(raw_headers)
    except (json.JSONDecodeError, TypeError, RecursionError):
        return []
    if not isinstance(parsed, list):
        return []
    return parsed


def _pair_value(pair: Any, name: str) -> str | None:
    if not isinstance(pair, list) or len(pair) < 2:
        return None
    key, value = pair[0], pair[1]
    if key != name or not isinstance(value, str):
        return None
    return value


def _find_value(pairs: list[Any], name: str) -> str | None:
    for pair in pairs:
        value = _pair_value(pair, name)
        if value is not None:
            return value
    return None


def extract_subject(raw_headers: str) -> str:
    """件名を返す。取り出せない場合はプレースホルダを返し、例外は送出しない。"""

    pairs = _load_header_pairs(raw_headers)
    if len(pairs) > _SUBJECT_INDEX:
        value = _pair_value(pairs[_SUBJECT_INDEX], SUBJECT_HEADER)
        if value is not None:
            return value

    value = _find_value(pairs, SUBJECT_HEADER)
    if value is None:
        return SUBJECT_PLACEHOLDER
    return value
