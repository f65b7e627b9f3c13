"""图片与 prompt 记录的匹配

文件名与 prompt 标签里都嵌有章节坐标（如 ``scene_chap_1_2.png`` 与
``"A hides || Chap 1_2"``），两者坐标完全相等即视为同一场景。
"""
from __future__ import annotations

import re
from typing import Iterable, NamedTuple

from qcstudio.schemas.review import PromptRecord

PROMPT_DELIMITER = "||"

_CHAPTER_RE = re.compile(r"chap[_\s]*(\d+)[_\s]+(\d+)", re.IGNORECASE)
_COMPRESSED_RE = re.compile(r"_compressed", re.IGNORECASE)
_EXTENSION_RE = re.compile(r"\.(png|jpg|jpeg|webp)$", re.IGNORECASE)


class ChapterIdentifier(NamedTuple):
    major: int
    minor: int


def normalize_file_name(name: str) -> str:
    """去掉 _compressed 标记和图片扩展名"""
    cleaned = _COMPRESSED_RE.sub("", name)
    return _EXTENSION_RE.sub("", cleaned)


def extract_identifier(text: str | None) -> ChapterIdentifier | None:
    """从任意字符串中提取第一个章节坐标，找不到返回 None（不是错误）

    坐标按整数比较：``chap_01_2`` 与 ``Chap 1_2`` 视为同一场景。
    注意不是按数字字符串比较，前导零不影响匹配。
    """
    if not text:
        return None
    match = _CHAPTER_RE.search(text)
    if match is None:
        return None
    return ChapterIdentifier(int(match.group(1)), int(match.group(2)))


def extract_file_identifier(file_name: str) -> ChapterIdentifier | None:
    return extract_identifier(normalize_file_name(file_name))


def split_label(raw_label: str) -> tuple[str, str] | None:
    """拆分 ``"<prompt> || <chapter tag>"``，没有分隔符返回 None"""
    if PROMPT_DELIMITER not in raw_label:
        return None
    prompt_text, _, chapter_tag = raw_label.partition(PROMPT_DELIMITER)
    return prompt_text.strip(), chapter_tag.strip()


def match_prompt(file_name: str, records: Iterable[PromptRecord]) -> str | None:
    """按输入顺序线性扫描，返回第一个章节坐标相同的 prompt 文本"""
    target = extract_file_identifier(file_name)
    if target is None:
        return None

    for record in records:
        parts = split_label(record.output_ai)
        if parts is None:
            continue
        prompt_text, chapter_tag = parts
        if extract_identifier(chapter_tag) == target:
            return prompt_text
    return None
