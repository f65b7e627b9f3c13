from fastapi import APIRouter

from qcstudio.api.v1.routes.compare import router as compare_router
from qcstudio.api.v1.routes.config import router as config_router
from qcstudio.api.v1.routes.export import router as export_router
from qcstudio.api.v1.routes.items import router as items_router
from qcstudio.api.v1.routes.outfits import router as outfits_router
from qcstudio.api.v1.routes.prompts import router as prompts_router
from qcstudio.api.v1.routes.review import router as review_router

api_router = APIRouter()
api_router.include_router(items_router, prefix="/items", tags=["items"])
api_router.include_router(review_router, prefix="/review", tags=["review"])
api_router.include_router(prompts_router, prefix="/prompts", tags=["prompts"])
api_router.include_router(outfits_router, prefix="/outfits", tags=["outfits"])
api_router.include_router(compare_router, prefix="/compare", tags=["compare"])
api_router.include_router(export_router, prefix="/export", tags=["export"])
api_router.include_router(config_router, prefix="/config", tags=["config"])
