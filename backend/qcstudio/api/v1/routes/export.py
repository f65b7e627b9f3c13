from __future__ import annotations

from datetime import datetime, UTC

from fastapi import APIRouter
from fastapi.responses import Response

from qcstudio.api.deps import ReviewSessionDep, StorageDep
from qcstudio.services.exporter import export_approved
from qcstudio.services.media_storage import MediaStorage
from qcstudio.services.review_session import ReviewSession

router = APIRouter()


@router.get("/approved")
async def download_approved(
    review: ReviewSession = ReviewSessionDep,
    storage: MediaStorage = StorageDep,
):
    archive = export_approved(review.ledger, storage)
    stamp = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
    return Response(
        content=archive,
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="approved_{stamp}.zip"'},
    )
