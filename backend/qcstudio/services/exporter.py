"""导出已通过审核的图片（ZIP + manifest.json）"""
from __future__ import annotations

import io
import json
import logging
import zipfile
from pathlib import PurePosixPath

from qcstudio.exceptions import NoApprovedItemsError
from qcstudio.services.ledger import ReviewItem, ReviewLedger
from qcstudio.services.media_storage import MediaStorage

logger = logging.getLogger(__name__)

MANIFEST_NAME = "manifest.json"


def _archive_name(item: ReviewItem, used: set[str]) -> str:
    name = PurePosixPath(item.file_name).name or f"{item.id}.png"
    if name in used:
        name = f"{item.id}_{name}"
    used.add(name)
    return name


def build_manifest(items: list[ReviewItem]) -> list[dict]:
    return [
        {
            "id": item.id,
            "file_name": item.file_name,
            "prompt": item.prompt,
            "source_url": item.source_url,
        }
        for item in items
    ]


def export_approved(ledger: ReviewLedger, storage: MediaStorage) -> bytes:
    """打包所有 approved 图片；远程 URL 的图片只出现在 manifest 中"""
    approved = ledger.approved_items()
    if not approved:
        raise NoApprovedItemsError("No approved images to download.")

    manifest = build_manifest(approved)
    used: set[str] = set()
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for item, entry in zip(approved, manifest):
            data = storage.read_bytes(item.source_url)
            if data is None:
                entry["archived_as"] = None
                continue
            name = _archive_name(item, used)
            archive.writestr(f"images/{name}", data)
            entry["archived_as"] = f"images/{name}"
        archive.writestr(MANIFEST_NAME, json.dumps(manifest, ensure_ascii=False, indent=2))

    logger.info(f"Exported {len(approved)} approved images ({len(used)} files archived)")
    return buffer.getvalue()
