"""本地媒体存储

导入的图片和以 base64 返回的重新生成结果都写入 static 目录，
对外使用 /static/... 形式的 URL。
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
import re
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)

STATIC_PREFIX = "/static/"
UPLOADS_DIR = "uploads"
REGENERATED_DIR = "regenerated"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def is_local_file(url: str | None) -> bool:
    """判断 URL 是否指向本地文件"""
    if not url:
        return False
    return url.startswith(STATIC_PREFIX)


def _safe_name(file_name: str) -> str:
    name = Path(file_name).name
    return _UNSAFE_CHARS.sub("_", name) or "image"


class MediaStorage:
    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    def ensure_dirs(self) -> None:
        for sub in (UPLOADS_DIR, REGENERATED_DIR):
            (self.root / sub).mkdir(parents=True, exist_ok=True)

    def local_path(self, url: str | None) -> Path | None:
        """/static/uploads/xxx.png -> <root>/uploads/xxx.png"""
        if not url or not is_local_file(url):
            return None
        relative = url[len(STATIC_PREFIX):]
        path = (self.root / relative).resolve()
        # 拒绝跳出 static 目录的路径
        if self.root.resolve() not in path.parents:
            return None
        return path

    def _write(self, sub: str, name: str, data: bytes) -> str:
        directory = self.root / sub
        directory.mkdir(parents=True, exist_ok=True)
        (directory / name).write_bytes(data)
        return f"{STATIC_PREFIX}{sub}/{name}"

    def save_upload(self, file_name: str, data: bytes) -> str:
        """保存导入的原图，文件名加前缀避免同名覆盖"""
        name = f"{uuid.uuid4().hex[:8]}_{_safe_name(file_name)}"
        url = self._write(UPLOADS_DIR, name, data)
        logger.debug(f"Stored upload {file_name} -> {url}")
        return url

    def save_base64_image(self, encoded: str, suffix: str = ".png") -> str:
        """保存生成服务以 base64 返回的图片（支持 data URL）"""
        if encoded.startswith("data:"):
            _, _, encoded = encoded.partition(",")
        try:
            data = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError(f"Invalid base64 image payload: {exc}") from exc
        return self._write(REGENERATED_DIR, f"{uuid.uuid4().hex}{suffix}", data)

    def read_bytes(self, url: str | None) -> bytes | None:
        path = self.local_path(url)
        if path is None or not path.exists():
            return None
        return path.read_bytes()

    def delete(self, url: str | None) -> bool:
        path = self.local_path(url)
        if not path:
            logger.debug(f"Not a local file, skipping: {url}")
            return False
        if not path.exists():
            logger.debug(f"File not found, skipping: {path}")
            return False
        try:
            os.remove(path)
            logger.info(f"Deleted file: {path}")
            return True
        except OSError as e:
            logger.warning(f"Failed to delete file {path}: {e}")
            return False
