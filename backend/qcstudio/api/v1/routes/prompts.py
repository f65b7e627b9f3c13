from __future__ import annotations

import logging

from fastapi import APIRouter, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from qcstudio.api.deps import ExtractionDep, ReviewSessionDep, SessionDep, SettingsDep, WsManagerDep
from qcstudio.config import Settings
from qcstudio.schemas.review import PromptDatasetRead, PromptLoadResponse, PromptRecord
from qcstudio.services.config_service import ConfigService
from qcstudio.services.extraction import ExtractionService
from qcstudio.services.prompt_dataset import parse_prompt_dataset
from qcstudio.services.review_session import ReviewSession
from qcstudio.ws.manager import ConnectionManager

router = APIRouter()
logger = logging.getLogger(__name__)


async def _load(
    records: list[PromptRecord],
    review: ReviewSession,
    ws: ConnectionManager,
    source: str,
) -> PromptLoadResponse:
    rematched = review.ledger.load_prompt_dataset(records)
    await ws.send_event(
        {
            "type": "prompts_loaded",
            "data": {"count": len(records), "rematched": rematched, "source": source},
        }
    )
    return PromptLoadResponse(loaded=len(records), rematched=rematched)


@router.get("", response_model=PromptDatasetRead)
async def get_prompt_dataset(review: ReviewSession = ReviewSessionDep):
    records = review.ledger.prompt_records
    return PromptDatasetRead(count=len(records), records=records)


@router.post("", response_model=PromptLoadResponse)
async def upload_prompt_dataset(
    file: UploadFile = File(...),
    review: ReviewSession = ReviewSessionDep,
    ws: ConnectionManager = WsManagerDep,
):
    """上传 prompt JSON；解析失败时整体拒绝，当前数据集保持不变"""
    raw = await file.read()
    records = parse_prompt_dataset(raw)
    return await _load(records, review, ws, source=file.filename or "upload")


@router.post("/extract", response_model=PromptLoadResponse)
async def extract_prompt_dataset(
    file: UploadFile = File(...),
    session: AsyncSession = SessionDep,
    settings: Settings = SettingsDep,
    review: ReviewSession = ReviewSessionDep,
    extraction: ExtractionService = ExtractionDep,
    ws: ConnectionManager = WsManagerDep,
):
    """把 DOCX 剧本交给外部解析服务，并直接加载返回的图片 prompt"""
    review.ledger.view = "extraction"
    backend_url, _ = await ConfigService(session).get_backend_url(settings)
    content = await file.read()
    result = await extraction.extract(backend_url, file.filename or "screenplay.docx", content)
    return await _load(result.images, review, ws, source="extraction")
